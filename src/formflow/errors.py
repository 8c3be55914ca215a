"""Exception hierarchy for formflow.

Runtime evaluation never raises for structurally valid input; these are
reserved for invalid shapes, bad edits, unreadable documents and config.
"""


class FormflowError(Exception):
    """Base class for all formflow errors."""


class FieldDefinitionError(FormflowError, ValueError):
    """Raised when a field is constructed with attributes illegal for its kind."""


class FlowEditError(FormflowError):
    """Raised when an edit operation cannot be applied to a flow."""


class FlowFormatError(FormflowError):
    """Raised when a saved flow document cannot be decoded."""


class ExpressionParseError(FormflowError):
    """Raised when a navigation expression string is malformed."""


class ConfigError(FormflowError):
    """Raised when a settings file cannot be read."""
