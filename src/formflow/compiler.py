"""
Schema Compiler

Converts a Step into the four artifacts consumed by export and integration
tooling:

    jsonSchema    data-validation schema (one property per answerable field)
    uiSchema      presentation schema (widget directives, ordering, submit label)
    formData      synthesized default answer record
    actionSchema  action descriptor with the portable navigation expression

Title fields are skipped in every artifact. A step with no fields compiles
to empty schemas, not an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from formflow.analyzer import lint_step
from formflow.config import DEFAULT_SETTINGS, CompilerSettings
from formflow.model import (
    CheckboxField,
    ChoiceField,
    Field,
    FieldKind,
    FileField,
    Flow,
    RadioField,
    ReadonlyField,
    SelectField,
    Step,
    TextareaField,
)
from formflow.navigation import build_expression
from formflow.synthesizer import default_answer, synthesize

logger = logging.getLogger(__name__)

DEFAULT_WIDGETS: Dict[FieldKind, str] = {
    FieldKind.TEXT: "text",
    FieldKind.TEXTAREA: "textarea",
    FieldKind.SELECT: "select",
    FieldKind.RADIO: "radio",
    FieldKind.CHECKBOX: "checkboxes",
    FieldKind.FILE: "file",
    FieldKind.READONLY: "textarea",
}


@dataclass(frozen=True)
class CompiledStep:
    """Compile result for one step."""

    data_schema: Dict[str, Any]
    presentation_schema: Dict[str, Any]
    form_data: Dict[str, Any]
    action_descriptor: Dict[str, str]
    total_fields: int = 0
    required_fields: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "jsonSchema": self.data_schema,
            "uiSchema": self.presentation_schema,
            "formData": self.form_data,
            "actionSchema": self.action_descriptor,
        }

    def to_output(self) -> Dict[str, Any]:
        """``to_dict`` plus field statistics."""
        output = self.to_dict()
        output["totalFields"] = self.total_fields
        output["requiredFields"] = self.required_fields
        return output


def format_size(megabytes: float) -> str:
    return f"{megabytes:g}MB"


def _enum_options(options) -> List[Dict[str, str]]:
    return [{"value": opt, "label": opt} for opt in options]


def _property(f: Field, settings: CompilerSettings) -> Dict[str, Any]:
    prop: Dict[str, Any] = {"title": f.title, "type": "string"}

    if isinstance(f, CheckboxField):
        prop["type"] = "array"
        prop["items"] = {"type": "string", "enum": list(f.options)}
        prop["uniqueItems"] = True
    elif isinstance(f, (RadioField, SelectField)):
        prop["enum"] = list(f.options)
    elif isinstance(f, FileField):
        size = f.max_file_size or settings.default_max_file_size_mb
        prop["format"] = "data-url"
        prop["description"] = f"Max size: {format_size(size)}"

    if getattr(f, "default_value", None) is not None and not isinstance(f, ReadonlyField):
        prop["default"] = default_answer(f)

    if f.is_read_only():
        prop["readOnly"] = True

    return prop


def build_data_schema(step: Step, settings: CompilerSettings = DEFAULT_SETTINGS) -> Dict[str, Any]:
    """Object schema with one property per non-title field, in field order."""
    schema: Dict[str, Any] = {
        "type": "object",
        "description": step.description,
        "properties": {},
        "required": [],
    }
    for f in step.fields:
        if not f.is_answerable():
            continue
        schema["properties"][f.id] = _property(f, settings)
        if f.is_required():
            schema["required"].append(f.id)
    return schema


def _widget(f: Field, settings: CompilerSettings) -> Dict[str, Any]:
    ui: Dict[str, Any] = {"ui:widget": DEFAULT_WIDGETS.get(f.kind, "text")}

    placeholder = getattr(f, "placeholder", None)
    if placeholder:
        ui["ui:placeholder"] = placeholder

    if f.is_read_only():
        ui["ui:readonly"] = True

    if isinstance(f, SelectField):
        ui["ui:options"] = {
            "enumOptions": [{"value": "", "label": settings.select_placeholder}]
            + _enum_options(f.options),
        }
    elif isinstance(f, ChoiceField):
        # radio and checkbox groups
        ui["ui:options"] = {"inline": False, "enumOptions": _enum_options(f.options)}
    elif isinstance(f, TextareaField):
        ui["ui:options"] = {"rows": settings.textarea_rows}
    elif isinstance(f, FileField):
        ui["ui:options"] = {
            "accept": ",".join(f.accepted_file_types) or "*/*",
            "multiple": f.multiple,
        }
    return ui


def build_presentation_schema(step: Step, settings: CompilerSettings = DEFAULT_SETTINGS) -> Dict[str, Any]:
    """Widget directive per non-title field plus ``ui:order`` and the submit button."""
    ui_schema: Dict[str, Any] = {
        "ui:order": [],
        "ui:submitButtonOptions": {"submitText": settings.submit_text, "norender": False},
    }
    for f in step.fields:
        if not f.is_answerable():
            continue
        ui_schema[f.id] = _widget(f, settings)
        ui_schema["ui:order"].append(f.id)
    return ui_schema


def build_action_descriptor(step: Step) -> Dict[str, str]:
    return {
        "actionName": step.action_name,
        "summaryCheckExpression": step.summary_check_expression or "true",
        "nextFlowDeterminationExpression": build_expression(step.navigation_rule, step.fields),
    }


def compile_step(step: Step, settings: CompilerSettings = DEFAULT_SETTINGS) -> CompiledStep:
    """
    Compile ``step`` into its schema artifacts.

    Args:
        step: Page to compile (not modified)
        settings: Labels, row counts and size defaults

    Returns:
        CompiledStep
    """
    logger.debug("Compiling step %s (%d fields)", step.name, len(step.fields))
    return CompiledStep(
        data_schema=build_data_schema(step, settings),
        presentation_schema=build_presentation_schema(step, settings),
        form_data=synthesize(step.fields),
        action_descriptor=build_action_descriptor(step),
        total_fields=len(step.fields),
        required_fields=sum(1 for f in step.fields if f.is_required()),
    )


def export_flow(
    flow: Flow,
    created: Optional[datetime] = None,
    settings: CompilerSettings = DEFAULT_SETTINGS,
) -> Dict[str, Any]:
    """
    Export the whole flow as one JSON-serializable document.

    Every step is compiled on its own. ``fieldTypes`` lists the distinct
    kinds used across the flow, sorted for stable output.
    """
    created = created or datetime.now(timezone.utc)
    steps = []
    for order, step in enumerate(flow.steps, start=1):
        for problem in lint_step(step, settings):
            logger.warning("Exporting %s with authoring error: %s", step.name, problem)
        steps.append(
            {
                "id": step.id,
                "name": step.name,
                "description": step.description,
                "order": order,
                "schemas": compile_step(step, settings).to_dict(),
            }
        )

    all_fields = [f for step in flow.steps for f in step.fields]
    logger.debug("Exported flow %s: %d steps, %d fields", flow.name, len(steps), len(all_fields))
    return {
        "name": flow.name,
        "description": flow.description or f"Form with {len(flow.steps)} pages",
        "version": settings.export_version,
        "created": created.isoformat(),
        "steps": steps,
        "metadata": {
            "totalSteps": len(flow.steps),
            "totalFields": len(all_fields),
            "fieldTypes": sorted({f.kind.value for f in all_fields}),
        },
    }
