"""
formflow — Form Schema Compiler & Conditional Navigation Engine

Turns a declarative multi-page form (a Flow of Steps made of typed Fields)
into machine-consumable artifacts, and evaluates visibility and page
navigation against live answers.

ARCHITECTURAL GUARANTEE:
------------------------
Everything in this package is a pure function of its inputs:
    - the Flow / Step / Field model (never mutated)
    - an optional live answer record
    - an optional external template context

No rendering, no persistence backend, no UI state.
"""

from formflow.model import (
    CONTINUE,
    END,
    SKIP,
    CheckboxField,
    Condition,
    Field,
    FieldKind,
    FileField,
    Flow,
    NavigationRule,
    RadioField,
    ReadonlyField,
    SelectField,
    Step,
    TextareaField,
    TextField,
    TitleField,
)
from formflow.compiler import compile_step, export_flow
from formflow.evaluator import advance, is_visible, next_step, validate_step
from formflow.navigation import build_expression
from formflow.synthesizer import synthesize
from formflow.templates import resolve_template

__version__ = "0.1.0"

__all__ = [
    "CONTINUE",
    "END",
    "SKIP",
    "CheckboxField",
    "Condition",
    "Field",
    "FieldKind",
    "FileField",
    "Flow",
    "NavigationRule",
    "RadioField",
    "ReadonlyField",
    "SelectField",
    "Step",
    "TextareaField",
    "TextField",
    "TitleField",
    "advance",
    "build_expression",
    "compile_step",
    "export_flow",
    "is_visible",
    "next_step",
    "resolve_template",
    "synthesize",
    "validate_step",
]
