"""
Native execution of navigation decision expressions.

Walks the AST from formflow.expressions against a live answer record and
returns the selected target (a step name or a navigation sentinel).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from formflow.expressions import (
    AnswerReference,
    Comparison,
    ComparisonOperator,
    Conditional,
    Expression,
    Literal,
)


def _test(comparison: Comparison, answers: Mapping) -> bool:
    answer: Any = answers.get(comparison.answer.field_id)
    expected = comparison.value.value

    if comparison.operator == ComparisonOperator.INCLUDES:
        # A non-sequence answer selects nothing.
        if isinstance(answer, (list, tuple)):
            return expected in answer
        return False

    return isinstance(answer, str) and answer == expected


def evaluate(expr: Expression, answers: Mapping) -> Any:
    """
    Evaluate ``expr`` against ``answers``.

    Args:
        expr: Decision expression (Literal or Conditional chain)
        answers: Mapping of field id to answer

    Returns:
        The value of the selected Literal
    """
    if isinstance(expr, Literal):
        return expr.value
    if isinstance(expr, Conditional):
        branch = expr.then if _test(expr.test, answers) else expr.otherwise
        return evaluate(branch, answers)
    if isinstance(expr, Comparison):
        return _test(expr, answers)
    if isinstance(expr, AnswerReference):
        return answers.get(expr.field_id)
    raise TypeError(f"Unsupported Expression type: {type(expr)}")
