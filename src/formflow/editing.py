"""
Copy-on-write edit operations over a Flow.

Every operation takes the current Flow and returns a new one; the input is
never modified, which keeps undo/redo a matter of holding on to old values.

Edits preserve the model invariants:
    - field ids stay unique within a step
    - changing a field's kind resets its default to the new kind's shape
      and drops attributes the new kind does not have
    - deleting a field removes the navigation rule it drove and clears
      dependencies that pointed at it
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Any, Dict, Iterable, Optional, Union

from formflow.errors import FlowEditError
from formflow.model import (
    CHOICE_KINDS,
    ChoiceField,
    Field,
    FieldKind,
    Flow,
    InputField,
    NavigationRule,
    Step,
    TextareaField,
    TextField,
    field_from_kind,
)

logger = logging.getLogger(__name__)

PLACEHOLDER_OPTIONS = ("Option 1", "Option 2", "Option 3")

DEFAULT_TITLES: Dict[FieldKind, str] = {
    FieldKind.TITLE: "Section Title",
    FieldKind.TEXT: "Text Input",
    FieldKind.TEXTAREA: "Long Text",
    FieldKind.SELECT: "Select from List",
    FieldKind.RADIO: "Choose Option",
    FieldKind.CHECKBOX: "Select Multiple",
    FieldKind.FILE: "Upload Files",
    FieldKind.READONLY: "Read-only Text",
}

_ID_SUFFIXES: Dict[FieldKind, str] = {
    FieldKind.RADIO: "Choice",
    FieldKind.SELECT: "Selection",
    FieldKind.CHECKBOX: "Options",
    FieldKind.FILE: "Files",
    FieldKind.TEXT: "Input",
    FieldKind.TEXTAREA: "Text",
}


# =========================================================================
# FLOWS AND STEPS
# =========================================================================


def default_step(number: int) -> Step:
    return Step(
        id=f"step{number}",
        name=f"Page {number}",
        description="First page description" if number == 1 else f"Page {number} description",
        action_name=f"submitPage{number}",
        summary_check_expression="true",
    )


def new_flow(name: str = "New Form Flow") -> Flow:
    """A fresh flow holding one default step."""
    return Flow(name=name, steps=(default_step(1),))


def _check_step_index(flow: Flow, index: int) -> None:
    if not 0 <= index < len(flow.steps):
        raise FlowEditError(f"No step at index {index}")


def _with_step(flow: Flow, index: int, step: Step) -> Flow:
    steps = list(flow.steps)
    steps[index] = step
    return replace(flow, steps=tuple(steps))


def add_step(flow: Flow) -> Flow:
    """Append a default step, numbered past any existing stepN / Page N."""
    ids = {s.id for s in flow.steps}
    names = {s.name for s in flow.steps}
    number = len(flow.steps) + 1
    while f"step{number}" in ids or f"Page {number}" in names:
        number += 1
    step = default_step(number)
    logger.debug("Adding step %s", step.name)
    return replace(flow, steps=flow.steps + (step,))


def delete_step(flow: Flow, index: int) -> Flow:
    _check_step_index(flow, index)
    if len(flow.steps) <= 1:
        raise FlowEditError("Cannot delete the last page")
    steps = flow.steps[:index] + flow.steps[index + 1:]
    return replace(flow, steps=steps)


def update_step(flow: Flow, index: int, **changes: Any) -> Flow:
    """Replace step attributes (name, description, action_name, ...)."""
    _check_step_index(flow, index)
    if "fields" in changes:
        raise FlowEditError("Use the field operations to change fields")
    try:
        step = replace(flow.steps[index], **changes)
    except TypeError as e:
        raise FlowEditError(str(e)) from e
    return _with_step(flow, index, step)


def set_navigation_rule(flow: Flow, index: int, rule: Optional[NavigationRule]) -> Flow:
    """Attach ``rule`` to a step, or remove its rule when ``rule`` is None."""
    _check_step_index(flow, index)
    return _with_step(flow, index, replace(flow.steps[index], navigation_rule=rule))


# =========================================================================
# FIELDS
# =========================================================================


def generate_field_id(title: str, kind: Union[FieldKind, str], existing_ids: Iterable[str] = ()) -> str:
    """
    camelCase id derived from ``title``, unique among ``existing_ids``.

    "Upload Site Photos!" -> "uploadSitePhotos"
    """
    kind = FieldKind(kind)
    words = re.sub(r"[^a-zA-Z0-9\s]", "", title).split()
    base = "".join(
        w.lower() if i == 0 else w[:1].upper() + w[1:].lower() for i, w in enumerate(words)
    )
    if not base:
        base = f"{kind.value}Field{_ID_SUFFIXES.get(kind, '')}"

    taken = set(existing_ids)
    candidate, n = base, 2
    while candidate in taken:
        candidate = f"{base}{n}"
        n += 1
    return candidate


def new_field(kind: Union[FieldKind, str], existing_ids: Iterable[str] = ()) -> Field:
    """A field of ``kind`` carrying the builder's starting attributes."""
    kind = FieldKind(kind)
    title = DEFAULT_TITLES[kind]
    attrs: Dict[str, Any] = {"id": generate_field_id(title, kind, existing_ids), "title": title}
    if kind in (FieldKind.TEXT, FieldKind.TEXTAREA):
        attrs["placeholder"] = "Enter value"
    if kind in CHOICE_KINDS:
        attrs["options"] = PLACEHOLDER_OPTIONS
    if kind == FieldKind.FILE:
        attrs.update(accepted_file_types=("image/*",), max_file_size=10, multiple=False, capture_mode="none")
    return field_from_kind(kind, **attrs)


def _field_position(step: Step, field_id: str) -> int:
    for i, f in enumerate(step.fields):
        if f.id == field_id:
            return i
    raise FlowEditError(f"Field {field_id!r} not found in step {step.name!r}")


def add_field(flow: Flow, step_index: int, f: Field, position: Optional[int] = None) -> Flow:
    """Insert ``f`` into a step (appended unless ``position`` is given)."""
    _check_step_index(flow, step_index)
    step = flow.steps[step_index]
    if step.get_field(f.id) is not None:
        raise FlowEditError(f"Field id {f.id!r} already exists in step {step.name!r}")
    fields = list(step.fields)
    fields.insert(len(fields) if position is None else position, f)
    logger.debug("Adding field %s to step %s", f.id, step.name)
    return _with_step(flow, step_index, replace(step, fields=tuple(fields)))


def change_field_kind(f: Field, kind: Union[FieldKind, str]) -> Field:
    """
    Convert ``f`` to another kind.

    Shared attributes carry over; the default resets to the new kind's
    empty shape; choice kinds keep existing options or get placeholders.
    """
    kind = FieldKind(kind)
    if kind == f.kind:
        return f

    attrs: Dict[str, Any] = {
        "id": f.id,
        "title": f.title,
        "depends_on": f.depends_on,
        "show_when": f.show_when,
    }
    if kind not in (FieldKind.TITLE, FieldKind.READONLY) and isinstance(f, InputField):
        attrs["required"] = f.required
        attrs["read_only"] = f.read_only
    if kind in (FieldKind.TEXT, FieldKind.TEXTAREA) and isinstance(f, (TextField, TextareaField)):
        attrs["placeholder"] = f.placeholder
    if kind in CHOICE_KINDS:
        attrs["options"] = f.options if isinstance(f, ChoiceField) and f.options else PLACEHOLDER_OPTIONS
    if kind == FieldKind.FILE:
        attrs.update(accepted_file_types=("image/*",), max_file_size=10)
    return field_from_kind(kind, **attrs)


def update_field(flow: Flow, step_index: int, field_id: str, **changes: Any) -> Flow:
    """
    Apply attribute changes to one field.

    A ``kind`` entry converts the field first (see change_field_kind);
    the remaining changes must be legal for the resulting kind.
    """
    _check_step_index(flow, step_index)
    step = flow.steps[step_index]
    position = _field_position(step, field_id)
    f = step.fields[position]

    if "kind" in changes:
        f = change_field_kind(f, changes.pop("kind"))

    new_id = changes.get("id", field_id)
    if new_id != field_id and step.get_field(new_id) is not None:
        raise FlowEditError(f"Field id {new_id!r} already exists in step {step.name!r}")

    try:
        f = replace(f, **changes)
    except TypeError as e:
        raise FlowEditError(f"Invalid change for {f.kind.value} field {field_id!r}: {e}") from e

    fields = list(step.fields)
    fields[position] = f
    rule = step.navigation_rule
    if new_id != field_id:
        # keep dependants and the navigation rule pointing at the renamed field
        fields = [
            replace(other, depends_on=new_id) if other.depends_on == field_id else other
            for other in fields
        ]
        if rule is not None and rule.field_id == field_id:
            rule = replace(rule, field_id=new_id)

    logger.debug("Updated field %s in step %s", field_id, step.name)
    return _with_step(flow, step_index, replace(step, fields=tuple(fields), navigation_rule=rule))


def delete_field(flow: Flow, step_index: int, field_id: str) -> Flow:
    """Remove a field, its navigation rule and any dependencies on it."""
    _check_step_index(flow, step_index)
    step = flow.steps[step_index]
    _field_position(step, field_id)

    fields = []
    for f in step.fields:
        if f.id == field_id:
            continue
        if f.depends_on == field_id:
            f = replace(f, depends_on=None, show_when=None)
        fields.append(f)

    rule = step.navigation_rule
    if rule is not None and rule.field_id == field_id:
        rule = None

    logger.debug("Deleted field %s from step %s", field_id, step.name)
    return _with_step(flow, step_index, replace(step, fields=tuple(fields), navigation_rule=rule))


def move_field(flow: Flow, step_index: int, from_index: int, to_index: int) -> Flow:
    _check_step_index(flow, step_index)
    step = flow.steps[step_index]
    if not (0 <= from_index < len(step.fields) and 0 <= to_index < len(step.fields)):
        raise FlowEditError(f"Cannot move field {from_index} -> {to_index} in step {step.name!r}")
    fields = list(step.fields)
    moved = fields.pop(from_index)
    fields.insert(to_index, moved)
    return _with_step(flow, step_index, replace(step, fields=tuple(fields)))
