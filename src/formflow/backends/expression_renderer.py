"""
Portable rendering of navigation decision expressions.

Produces the ``nextFlowDeterminationExpression`` string embedded in each
step's action descriptor. The syntax is a JavaScript-style chained ternary
over a ``formData`` object holding the live answers:

    formData.color === 'Red' ? 'Page 2' : 'continue'
    formData.tags.includes('a') ? 'X' : formData.tags.includes('b') ? 'Y' : 'continue'

Rendering is deterministic: the same AST always yields the same string.
"""

import re

from formflow.expressions import (
    AnswerReference,
    Comparison,
    ComparisonOperator,
    Conditional,
    Expression,
    Literal,
)

ANSWERS_NAME = "formData"

_IDENTIFIER_RE = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*")


def quote_literal(value: str) -> str:
    """Single-quote a string, escaping backslashes first, then quotes."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def render_answer_reference(ref: AnswerReference) -> str:
    if _IDENTIFIER_RE.fullmatch(ref.field_id):
        return f"{ANSWERS_NAME}.{ref.field_id}"
    return f"{ANSWERS_NAME}[{quote_literal(ref.field_id)}]"


def render_expression(expr: Expression) -> str:
    """
    Convert a decision expression to its portable string.

    Raises:
        TypeError: for node types that have no portable form
    """
    if isinstance(expr, Literal):
        return quote_literal(expr.value)

    if isinstance(expr, Comparison):
        answer = render_answer_reference(expr.answer)
        value = quote_literal(expr.value.value)
        if expr.operator == ComparisonOperator.INCLUDES:
            return f"{answer}.includes({value})"
        return f"{answer} === {value}"

    if isinstance(expr, Conditional):
        test = render_expression(expr.test)
        then = render_expression(expr.then)
        otherwise = render_expression(expr.otherwise)
        return f"{test} ? {then} : {otherwise}"

    if isinstance(expr, AnswerReference):
        return render_answer_reference(expr)

    raise TypeError(f"Unsupported Expression type: {type(expr)}")
