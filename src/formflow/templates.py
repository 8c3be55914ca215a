"""
Template references.

A field default such as ``#client.name`` is not a literal: it names a path
into an external context tree supplied by the caller at render time.

Resolution never fails loudly. When the path cannot be walked, or lands on
nothing, the original template string comes back unchanged so a form never
shows a blank where a value was expected. Callers tell "still a template"
from "resolved" with ``is_template``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

TEMPLATE_SIGIL = "#"

TEMPLATE_SUGGESTIONS: List[str] = [
    "#workorder.scopeOfWork",
    "#workorder.clientDescription",
    "#workorder.priority",
    "#workorder.location",
    "#client.name",
    "#client.email",
    "#client.phone",
    "#technician.name",
    "#technician.id",
    "#technician.trade",
]


def is_template(value: Any) -> bool:
    """True when ``value`` is a string carrying the template sigil."""
    return isinstance(value, str) and value.startswith(TEMPLATE_SIGIL)


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, list, tuple, dict)) and len(value) == 0:
        return True
    return False


def resolve_template(value: Any, context: Mapping | None) -> Any:
    """
    Resolve a template reference against ``context``.

    Args:
        value: Any field value; only sigil-prefixed strings are touched
        context: Nested mappings and lists, e.g. {"client": {"name": "..."}};
            a numeric key indexes into a list

    Returns:
        The value found at the dotted path, or ``value`` unchanged when it
        is not a template, the path is broken, or the target is empty.
    """
    if not is_template(value):
        return value

    result: Any = context
    for key in value[len(TEMPLATE_SIGIL):].split("."):
        if isinstance(result, Mapping) and key in result:
            result = result[key]
        elif isinstance(result, (list, tuple)) and key.isdecimal() and int(key) < len(result):
            result = result[int(key)]
        else:
            logger.debug("Template %s left unresolved at key %r", value, key)
            return value

    if _is_empty(result):
        return value
    return result


def sample_context() -> Dict[str, Dict[str, str]]:
    """Preview data covering every entry in TEMPLATE_SUGGESTIONS."""
    return {
        "workorder": {
            "scopeOfWork": "Sample work order description",
            "clientDescription": "Sample client description",
            "priority": "High",
            "location": "Sample location",
        },
        "client": {
            "name": "John Doe",
            "email": "john.doe@example.com",
            "phone": "(555) 123-4567",
        },
        "technician": {
            "name": "Jane Smith",
            "id": "TECH001",
            "trade": "Electrician",
        },
    }
