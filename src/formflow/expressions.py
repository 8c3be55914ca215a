"""
Expression System for Navigation Decisions

A navigation rule is compiled into a small Abstract Syntax Tree before it
is either rendered as a portable string or executed natively.

This ensures:
    - One decision table, two renderings that cannot diverge
    - Language independence of the model
    - Testability of both renderings against each other

ARCHITECTURAL RULE:
    No evaluation logic here (see formflow.interpreter).
    No string rendering here (see formflow.backends.expression_renderer).
"""

from abc import ABC
from dataclasses import dataclass
from enum import Enum


class Expression(ABC):
    """
    Base class for all decision AST nodes.

    Structure only. It does NOT evaluate or print itself.
    """
    pass


@dataclass(frozen=True)
class AnswerReference(Expression):
    """
    References the live answer of a field.

    Properties:
        field_id: Driver field identifier

    IMPORTANT:
        This object does NOT check that the field exists.
        The navigation builder only emits references to resolved fields.
    """

    field_id: str


@dataclass(frozen=True)
class Literal(Expression):
    """
    A string constant: a condition value or a target step name.

    Examples:
        - "Red"
        - "Page 2"
        - "continue"
    """

    value: str


class ComparisonOperator(Enum):
    """
    Tests a driver answer can be put to.

    Keep this minimal: navigation is restricted to equality and membership
    tests against a single field's answer.
    """

    EQUALS = "==="
    INCLUDES = "includes"


@dataclass(frozen=True)
class Comparison(Expression):
    """
    Tests a field answer against a literal.

    Example:
        formData.color === 'Red'

    Becomes:
        Comparison(
            operator=ComparisonOperator.EQUALS,
            answer=AnswerReference("color"),
            value=Literal("Red"),
        )
    """

    operator: ComparisonOperator
    answer: AnswerReference
    value: Literal


@dataclass(frozen=True)
class Conditional(Expression):
    """
    ``test ? then : otherwise``.

    A rule with several conditions is a right-nested chain of these,
    so the first listed condition is tested first.
    """

    test: Comparison
    then: Expression
    otherwise: Expression
