"""
Navigation rule compilation.

``decision_expression`` is the single place where a NavigationRule is
turned into decision logic. Both consumers go through it:

    build_expression  -> render the AST as a portable string
    select_target     -> interpret the AST against live answers

so the exported expression and the in-process decision cannot drift apart.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import List, Optional, Sequence

from formflow.backends.expression_renderer import render_expression
from formflow.expressions import (
    AnswerReference,
    Comparison,
    ComparisonOperator,
    Conditional,
    Expression,
    Literal,
)
from formflow.interpreter import evaluate
from formflow.model import CONTINUE, END, SKIP, CheckboxField, Field, Flow, NavigationRule

logger = logging.getLogger(__name__)


def resolve_driver(rule: Optional[NavigationRule], fields: Sequence[Field]) -> Optional[Field]:
    """
    Return the driver field of ``rule``, or None when the rule is inert.

    A rule is inert when it is absent, has no conditions, or its field id
    does not resolve to a field in ``fields`` (e.g. the field was deleted).
    """
    if rule is None or not rule.field_id or not rule.conditions:
        return None
    for f in fields:
        if f.id == rule.field_id:
            return f
    logger.debug("Navigation driver %r not found; rule ignored", rule.field_id)
    return None


def decision_expression(rule: Optional[NavigationRule], fields: Sequence[Field]) -> Expression:
    """
    Compile ``rule`` into a decision expression.

    Checkbox drivers test membership, every other kind tests equality.
    Conditions are chained in listed order; the innermost fallback is the
    rule's default step name (or CONTINUE).
    """
    driver = resolve_driver(rule, fields)
    if driver is None:
        return Literal(CONTINUE)

    operator = (
        ComparisonOperator.INCLUDES
        if isinstance(driver, CheckboxField)
        else ComparisonOperator.EQUALS
    )
    answer = AnswerReference(driver.id)

    expr: Expression = Literal(rule.fallback)
    for condition in reversed(rule.conditions):
        expr = Conditional(
            test=Comparison(operator=operator, answer=answer, value=Literal(condition.value)),
            then=Literal(condition.next_step_name),
            otherwise=expr,
        )
    return expr


def build_expression(rule: Optional[NavigationRule], fields: Sequence[Field]) -> str:
    """Portable ``nextFlowDeterminationExpression`` for ``rule``."""
    return render_expression(decision_expression(rule, fields))


def select_target(rule: Optional[NavigationRule], fields: Sequence[Field], answers: Mapping) -> str:
    """Target name (step name or sentinel) the rule picks for ``answers``."""
    return evaluate(decision_expression(rule, fields), answers)


def rule_targets(rule: Optional[NavigationRule], fields: Sequence[Field]) -> List[str]:
    """Every target a rule can yield, in condition order, fallback last."""
    if resolve_driver(rule, fields) is None:
        return [CONTINUE]
    targets = [c.next_step_name for c in rule.conditions]
    targets.append(rule.fallback)
    return targets


@dataclass(frozen=True)
class StepTransition:
    """
    A possible move from one step to another.

    Properties:
        from_index: Origin step
        to_index: Destination step, None when the target ends the form
            (END, or CONTINUE from the last step) or names no step
        target: The raw target string from the rule
        label: Human-readable condition ("color === Red", "default", ...)
    """

    from_index: int
    to_index: Optional[int]
    target: str
    label: str = ""

    @property
    def is_missing_target(self) -> bool:
        return self.to_index is None and self.target not in (CONTINUE, END, SKIP)


def _target_index(target: str, flow: Flow, from_index: int) -> Optional[int]:
    last = len(flow.steps) - 1
    if target == CONTINUE:
        return from_index + 1 if from_index < last else None
    if target == END:
        return None
    if target == SKIP:
        return last
    return flow.step_index(target)


def step_transitions(flow: Flow) -> List[StepTransition]:
    """
    Enumerate every navigation edge of ``flow``.

    Steps without an effective rule get a single "continue" edge.
    """
    transitions: List[StepTransition] = []
    for i, step in enumerate(flow.steps):
        rule = step.navigation_rule
        driver = resolve_driver(rule, step.fields)
        if driver is None:
            transitions.append(StepTransition(i, _target_index(CONTINUE, flow, i), CONTINUE))
            continue

        verb = "includes" if isinstance(driver, CheckboxField) else "==="
        for condition in rule.conditions:
            target = condition.next_step_name
            transitions.append(
                StepTransition(
                    i,
                    _target_index(target, flow, i),
                    target,
                    label=f"{driver.id} {verb} {condition.value}",
                )
            )
        transitions.append(
            StepTransition(i, _target_index(rule.fallback, flow, i), rule.fallback, label="default")
        )
    return transitions
