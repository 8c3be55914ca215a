"""
Default answer synthesis.

Builds the initial answer record for a page: one entry per answerable
field, holding its default or the empty value of its kind's shape.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, Iterable

from formflow.model import CheckboxField, Field, FileDescriptor, FileField


def empty_value(f: Field) -> Any:
    """Kind-appropriate empty answer: [] for checkbox and multi-file, None for single file, "" otherwise."""
    if isinstance(f, CheckboxField):
        return []
    if isinstance(f, FileField):
        return [] if f.multiple else None
    return ""


def _plain(value: Any) -> Any:
    # Answer records are JSON-shaped: tuples become lists, descriptors become dicts.
    if isinstance(value, FileDescriptor):
        return value.to_dict()
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, tuple):
        return [_plain(v) for v in value]
    return value


def default_answer(f: Field) -> Any:
    if getattr(f, "default_value", None) is not None:
        return _plain(f.default_value)
    return empty_value(f)


def synthesize(fields: Iterable[Field]) -> Dict[str, Any]:
    """
    Produce the initial answer record for ``fields``.

    Title fields are skipped. An explicit default always wins over the
    empty value, including template references (resolved at render time).
    """
    return {f.id: default_answer(f) for f in fields if f.is_answerable()}


def is_missing(value: Any) -> bool:
    """True for unset, None, empty string and empty sequence answers."""
    if value is None:
        return True
    if isinstance(value, str) and value == "":
        return True
    if isinstance(value, (list, tuple)) and len(value) == 0:
        return True
    return False
