"""
Visibility & Navigation Evaluator

Runtime decisions over (step, live answers, external context):
    - which fields are visible (dependency resolution)
    - which required answers are missing
    - where "Continue" leads

IMPORTANT: Nothing here raises for structurally valid input. Problems come
back as values: lists of messages, or one of the NavigationOutcome types.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Sequence, Union

from formflow.config import DEFAULT_SETTINGS, CompilerSettings
from formflow.model import (
    CONTINUE,
    END,
    SKIP,
    CheckboxField,
    Field,
    FileDescriptor,
    FileField,
    Step,
)
from formflow.navigation import resolve_driver, select_target
from formflow.synthesizer import is_missing
from formflow.templates import resolve_template

logger = logging.getLogger(__name__)


# =========================================================================
# VISIBILITY
# =========================================================================


def is_visible(f: Field, step: Step, answers: Mapping) -> bool:
    """
    Decide whether ``f`` is shown given the live ``answers``.

    A field without a complete ``depends_on``/``show_when`` pair is always
    visible. A dangling dependency fails closed.
    """
    if not f.depends_on or not f.show_when:
        return True

    driver = step.get_field(f.depends_on)
    if driver is None:
        return False

    value = answers.get(f.depends_on)
    if value is None or value == "":
        return False

    if isinstance(driver, CheckboxField):
        return isinstance(value, (list, tuple)) and f.show_when in value

    return value == f.show_when


def visible_fields(step: Step, answers: Mapping) -> List[Field]:
    return [f for f in step.fields if is_visible(f, step, answers)]


# =========================================================================
# VALIDATION
# =========================================================================


def validate_step(step: Step, answers: Mapping) -> List[str]:
    """
    Missing-answer messages for every required, visible, non-title field.

    Hidden fields are exempt from the required check.
    """
    errors: List[str] = []
    for f in step.fields:
        if not f.is_answerable() or not f.is_required():
            continue
        if not is_visible(f, step, answers):
            continue
        if is_missing(answers.get(f.id)):
            errors.append(f'"{f.title}" is required')
    return errors


# =========================================================================
# NAVIGATION
# =========================================================================


class NavigationOutcome:
    """Base class for the result of a navigation attempt."""

    @property
    def step_index(self) -> Optional[int]:
        """Index of the step to show next, if navigation moves somewhere."""
        return None


@dataclass(frozen=True)
class Continue(NavigationOutcome):
    next_index: int

    @property
    def step_index(self) -> Optional[int]:
        return self.next_index


@dataclass(frozen=True)
class Complete(NavigationOutcome):
    """The form is finished."""


@dataclass(frozen=True)
class Ended(NavigationOutcome):
    """The rule chose to end the form early."""


@dataclass(frozen=True)
class SkippedToLast(NavigationOutcome):
    last_index: int

    @property
    def step_index(self) -> Optional[int]:
        return self.last_index


@dataclass(frozen=True)
class JumpTo(NavigationOutcome):
    index: int
    step_name: str = ""

    @property
    def step_index(self) -> Optional[int]:
        return self.index


@dataclass(frozen=True)
class TargetNotFound(NavigationOutcome):
    """The rule names a step that does not exist. Navigation does not occur."""

    name: str


@dataclass(frozen=True)
class Blocked(NavigationOutcome):
    """Navigation was not attempted because answers are missing."""

    errors: List[str] = field(default_factory=list)


def resolve_target(target: str, steps: Sequence[Step], current_index: int) -> NavigationOutcome:
    """Translate a rule target (step name or sentinel) into an outcome."""
    last = len(steps) - 1
    if target == CONTINUE:
        if current_index < last:
            return Continue(current_index + 1)
        return Complete()
    if target == END:
        return Ended()
    if target == SKIP:
        return SkippedToLast(last)

    for i, step in enumerate(steps):
        if step.name == target:
            return JumpTo(i, step.name)
    logger.debug("Navigation target %r not found", target)
    return TargetNotFound(target)


def next_step(
    step: Step,
    answers: Mapping,
    steps: Sequence[Step],
    current_index: int,
) -> NavigationOutcome:
    """
    Compute where navigation leads from ``step``.

    Uses the same decision expression that is exported as
    ``nextFlowDeterminationExpression``. An inert rule (absent, no
    conditions, driver field gone) behaves as CONTINUE. A missing driver
    answer returns Blocked rather than guessing.
    """
    driver = resolve_driver(step.navigation_rule, step.fields)
    if driver is None:
        return resolve_target(CONTINUE, steps, current_index)

    if is_missing(answers.get(driver.id)):
        return Blocked([f'"{driver.title}" is required'])

    target = select_target(step.navigation_rule, step.fields, answers)
    logger.debug("Step %s: %s=%r -> %s", step.name, driver.id, answers.get(driver.id), target)
    return resolve_target(target, steps, current_index)


def advance(
    step: Step,
    answers: Mapping,
    steps: Sequence[Step],
    current_index: int,
) -> NavigationOutcome:
    """Validate first; only navigate when nothing required is missing."""
    errors = validate_step(step, answers)
    if errors:
        return Blocked(errors)
    return next_step(step, answers, steps, current_index)


def describe_navigation(step: Step, answers: Mapping) -> str:
    """
    One-line explanation of where the current answers lead.

    The target shown is the one ``next_step`` would take: a rule without
    conditions is inert, so it reports "continue" even when it names a
    default step.
    """
    rule = step.navigation_rule
    if rule is None:
        return "Continue to next page"

    value = answers.get(rule.field_id)
    if value is None or value == "":
        return "No value selected"

    if step.get_field(rule.field_id) is None:
        return "Navigation field not found"

    target = select_target(rule, step.fields, answers)
    shown = ", ".join(value) if isinstance(value, (list, tuple)) else value
    return f'"{shown}" -> "{target}"'


# =========================================================================
# DISPLAY AND UPLOADS
# =========================================================================


def display_value(f: Field, answers: Mapping, context: Optional[Mapping] = None) -> Any:
    """Live answer if present, else the default with templates resolved."""
    if f.id in answers:
        return answers[f.id]
    return resolve_template(getattr(f, "default_value", None), context)


FileLike = Union[FileDescriptor, Mapping]


def _descriptor(item: FileLike) -> FileDescriptor:
    if isinstance(item, FileDescriptor):
        return item
    return FileDescriptor.from_mapping(item)


def _type_accepted(mime: str, patterns: Iterable[str]) -> bool:
    for pattern in patterns:
        if pattern == "*/*":
            return True
        if pattern.endswith("/*"):
            if mime.startswith(pattern[:-1]):
                return True
        elif mime == pattern:
            return True
    return False


def check_upload(
    f: FileField,
    files: Sequence[FileLike],
    settings: CompilerSettings = DEFAULT_SETTINGS,
) -> List[str]:
    """
    Check files against the field's size limit and accepted types.

    Returns:
        Error messages; empty when every file is acceptable
    """
    descriptors = [_descriptor(item) for item in files]
    limit = (f.max_file_size or settings.default_max_file_size_mb) * 1024 * 1024

    oversized = [d.name for d in descriptors if d.size > limit]
    if oversized:
        return [f"Files too large: {', '.join(oversized)}"]

    if f.accepted_file_types:
        invalid = [d.name for d in descriptors if not _type_accepted(d.type, f.accepted_file_types)]
        if invalid:
            return [f"Invalid file types: {', '.join(invalid)}"]
    return []


def upload_answer(f: FileField, files: Sequence[FileLike]) -> Any:
    """Shape uploaded files into the field's answer: a list when ``multiple``, else the first file."""
    descriptors = [_descriptor(item).to_dict() for item in files]
    if f.multiple:
        return descriptors
    return descriptors[0] if descriptors else None
