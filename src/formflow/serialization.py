"""
Serialization helpers for formflow objects (Flow, Step, Field, NavigationRule).

Provides lossless JSON/YAML round-trip via an intermediate dict representation
using the saved-flow key names (camelCase). Only attributes legal for a field's
kind are written; attributes illegal for the kind are ignored on load.
"""
from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from formflow.errors import FieldDefinitionError, FlowFormatError
from formflow.model import (
    ChoiceField,
    Condition,
    Field,
    FieldKind,
    FileDescriptor,
    FileField,
    Flow,
    InputField,
    NavigationRule,
    ReadonlyField,
    Step,
    TextareaField,
    TextField,
    field_from_kind,
)


def _plain(value: Any) -> Any:
    if isinstance(value, FileDescriptor):
        return value.to_dict()
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, tuple):
        return [_plain(v) for v in value]
    return value


def field_to_dict(f: Field) -> Dict[str, Any]:
    d: Dict[str, Any] = {"id": f.id, "type": f.kind.value, "title": f.title}
    if isinstance(f, InputField):
        d["required"] = f.required
        d["readOnly"] = f.read_only
    if isinstance(f, (InputField, ReadonlyField)) and f.default_value is not None:
        d["defaultValue"] = _plain(f.default_value)
    if isinstance(f, (TextField, TextareaField)) and f.placeholder is not None:
        d["placeholder"] = f.placeholder
    if isinstance(f, ChoiceField):
        d["options"] = list(f.options)
    if isinstance(f, FileField):
        d["acceptedFileTypes"] = list(f.accepted_file_types)
        if f.max_file_size is not None:
            d["maxFileSize"] = f.max_file_size
        d["multiple"] = f.multiple
        d["captureMode"] = f.capture_mode
    if f.depends_on:
        d["dependsOn"] = f.depends_on
    if f.show_when is not None:
        d["showWhen"] = f.show_when
    return d


def field_from_dict(d: Dict[str, Any]) -> Field:
    kind = FieldKind(d["type"])
    attrs: Dict[str, Any] = {
        "id": d["id"],
        "title": d.get("title", ""),
        "depends_on": d.get("dependsOn") or None,
        "show_when": d.get("showWhen"),
    }
    if kind not in (FieldKind.TITLE, FieldKind.READONLY):
        attrs["required"] = bool(d.get("required", False))
        attrs["read_only"] = bool(d.get("readOnly", False))
    if kind != FieldKind.TITLE:
        attrs["default_value"] = d.get("defaultValue")
    if kind in (FieldKind.TEXT, FieldKind.TEXTAREA):
        attrs["placeholder"] = d.get("placeholder")
    if kind in (FieldKind.SELECT, FieldKind.RADIO, FieldKind.CHECKBOX):
        attrs["options"] = d.get("options") or []
    if kind == FieldKind.FILE:
        attrs["accepted_file_types"] = d.get("acceptedFileTypes") or []
        attrs["max_file_size"] = d.get("maxFileSize")
        attrs["multiple"] = bool(d.get("multiple", False))
        attrs["capture_mode"] = d.get("captureMode") or "none"
    return field_from_kind(kind, **attrs)


def rule_to_dict(r: NavigationRule | None) -> Dict[str, Any] | None:
    if r is None:
        return None
    d: Dict[str, Any] = {
        "fieldId": r.field_id,
        "conditions": [{"value": c.value, "nextStepName": c.next_step_name} for c in r.conditions],
    }
    if r.default_step_name:
        d["defaultStepName"] = r.default_step_name
    return d


def rule_from_dict(d: Dict[str, Any] | None) -> NavigationRule | None:
    if d is None:
        return None
    return NavigationRule(
        field_id=d.get("fieldId", ""),
        conditions=[Condition(value=c["value"], next_step_name=c["nextStepName"]) for c in d.get("conditions", [])],
        default_step_name=d.get("defaultStepName") or None,
    )


def step_to_dict(s: Step) -> Dict[str, Any]:
    d = {
        "id": s.id,
        "name": s.name,
        "description": s.description,
        "fields": [field_to_dict(f) for f in s.fields],
        "actionName": s.action_name,
        "summaryCheckExpression": s.summary_check_expression,
    }
    if s.navigation_rule is not None:
        d["navigationRule"] = rule_to_dict(s.navigation_rule)
    return d


def step_from_dict(d: Dict[str, Any]) -> Step:
    return Step(
        id=d["id"],
        name=d.get("name", ""),
        description=d.get("description", ""),
        fields=[field_from_dict(f) for f in d.get("fields", [])],
        action_name=d.get("actionName", ""),
        summary_check_expression=d.get("summaryCheckExpression") or "true",
        navigation_rule=rule_from_dict(d.get("navigationRule")),
    )


def flow_to_dict(f: Flow) -> Dict[str, Any]:
    return {
        "id": f.id,
        "name": f.name,
        "description": f.description,
        "steps": [step_to_dict(s) for s in f.steps],
        "created_at": f.created_at,
        "updated_at": f.updated_at,
    }


def flow_from_dict(d: Dict[str, Any]) -> Flow:
    """
    Build a Flow from its saved-document dict.

    Raises:
        FlowFormatError: missing keys, unknown field kinds or invalid field shapes
    """
    if not isinstance(d, Mapping):
        raise FlowFormatError("Flow document must be a mapping")
    try:
        return Flow(
            id=d.get("id"),
            name=d.get("name", ""),
            description=d.get("description", ""),
            steps=[step_from_dict(s) for s in d.get("steps", [])],
            created_at=d.get("created_at"),
            updated_at=d.get("updated_at"),
        )
    except (KeyError, TypeError, ValueError) as e:
        # FieldDefinitionError is a ValueError
        kind = "invalid field" if isinstance(e, FieldDefinitionError) else "malformed document"
        raise FlowFormatError(f"Cannot load flow ({kind}): {e}") from e


def flow_to_json(f: Flow) -> str:
    return json.dumps(flow_to_dict(f), indent=2)


def flow_from_json(s: str) -> Flow:
    try:
        d = json.loads(s)
    except json.JSONDecodeError as e:
        raise FlowFormatError(f"Invalid JSON: {e}") from e
    return flow_from_dict(d)


def flow_to_yaml(f: Flow) -> str:
    return yaml.safe_dump(flow_to_dict(f), sort_keys=False)


def flow_from_yaml(s: str) -> Flow:
    try:
        d = yaml.safe_load(s)
    except yaml.YAMLError as e:
        raise FlowFormatError(f"Invalid YAML: {e}") from e
    return flow_from_dict(d)


def _is_yaml(path: Path) -> bool:
    return path.suffix.lower() in (".yaml", ".yml")


def load_flow(path: Union[str, Path]) -> Flow:
    """Read a flow file; ``.yaml``/``.yml`` is parsed as YAML, anything else as JSON."""
    path = Path(path)
    text = path.read_text()
    return flow_from_yaml(text) if _is_yaml(path) else flow_from_json(text)


def save_flow(f: Flow, path: Union[str, Path]) -> None:
    path = Path(path)
    path.write_text(flow_to_yaml(f) if _is_yaml(path) else flow_to_json(f))
