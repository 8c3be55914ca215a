"""Backends for formflow output generation (navigation expressions, DOT).

``dot_generator`` depends on ``formflow.navigation`` and is imported
directly as ``formflow.backends.dot_generator``.
"""

from .expression_renderer import quote_literal, render_expression

__all__ = ["quote_literal", "render_expression"]
