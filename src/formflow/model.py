"""
Core Form Model Objects

Defines the fundamental data structures of a form flow:
    - Fields (one variant per kind, each carrying only its legal attributes)
    - Conditions and NavigationRules (page branching)
    - Steps (pages)
    - Flows (root container)

ARCHITECTURAL RULE:
    These objects:
        - Know nothing about schemas, widgets or expression strings
        - Are immutable (edits produce new objects, see formflow.editing)
        - Are fully serializable
        - Represent structure, not behavior

The kind-to-default-value-shape invariant is enforced at construction,
so a field with a checkbox kind can never hold a scalar default.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Tuple, Type, Union

from formflow.errors import FieldDefinitionError
from formflow.templates import is_template

# Navigation sentinels
CONTINUE = "continue"
END = "end"
SKIP = "skip"


class FieldKind(Enum):
    """The closed set of field kinds a form can contain."""

    TITLE = "title"
    TEXT = "text"
    TEXTAREA = "textarea"
    SELECT = "select"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    FILE = "file"
    READONLY = "readonly"


CHOICE_KINDS = frozenset({FieldKind.SELECT, FieldKind.RADIO, FieldKind.CHECKBOX})


@dataclass(frozen=True)
class FileDescriptor:
    """
    Metadata for one uploaded file.

    Properties:
        name: Original file name
        size: Size in bytes
        type: MIME type reported by the client (e.g. "image/png")
        url: Where the content can be fetched (data URL or object URL)
    """

    name: str
    size: int
    type: str = ""
    url: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "size": self.size, "type": self.type, "url": self.url}

    @classmethod
    def from_mapping(cls, data: Mapping) -> "FileDescriptor":
        return cls(
            name=str(data.get("name", "")),
            size=int(data.get("size", 0) or 0),
            type=str(data.get("type", "")),
            url=str(data.get("url", "")),
        )


def _check_string_default(field_id: str, value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    raise FieldDefinitionError(
        f"Field {field_id!r}: default value must be a string, got {type(value).__name__}"
    )


@dataclass(frozen=True)
class Field:
    """
    Base class for all field variants.

    Properties:
        id:
            Stable identifier, unique within its step
        title:
            Display label
        depends_on:
            Optional id of another field in the same step (the driver)
        show_when:
            Driver answer that makes this field visible

    Subclasses set ``kind`` as a class constant.
    """

    kind: ClassVar[FieldKind]

    id: str
    title: str = ""
    depends_on: Optional[str] = None
    show_when: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id:
            raise FieldDefinitionError("Field id must be a non-empty string")

    def is_required(self) -> bool:
        return False

    def is_read_only(self) -> bool:
        return False

    def is_answerable(self) -> bool:
        """Whether the field contributes an entry to the answer record."""
        return True


@dataclass(frozen=True)
class TitleField(Field):
    """Section heading. Purely decorative: never compiled, never answered."""

    kind: ClassVar[FieldKind] = FieldKind.TITLE

    def is_answerable(self) -> bool:
        return False


@dataclass(frozen=True)
class ReadonlyField(Field):
    """Display-only text, typically a template reference such as ``#workorder.location``."""

    kind: ClassVar[FieldKind] = FieldKind.READONLY

    default_value: Optional[str] = None

    def __post_init__(self) -> None:
        super().__post_init__()
        _check_string_default(self.id, self.default_value)

    def is_read_only(self) -> bool:
        return True


@dataclass(frozen=True)
class InputField(Field):
    """
    Base for fields that collect an answer.

    Properties:
        required: Whether an answer is mandatory while the field is visible
        read_only: Rendered but not editable
        default_value: Literal in the kind's data shape, or a template reference
    """

    required: bool = False
    read_only: bool = False
    default_value: Any = None

    def __post_init__(self) -> None:
        super().__post_init__()
        _check_string_default(self.id, self.default_value)

    def is_required(self) -> bool:
        return self.required

    def is_read_only(self) -> bool:
        return self.read_only


@dataclass(frozen=True)
class TextField(InputField):
    kind: ClassVar[FieldKind] = FieldKind.TEXT

    placeholder: Optional[str] = None


@dataclass(frozen=True)
class TextareaField(InputField):
    kind: ClassVar[FieldKind] = FieldKind.TEXTAREA

    placeholder: Optional[str] = None


@dataclass(frozen=True)
class ChoiceField(InputField):
    """
    Base for fields answered from a fixed option list.

    ``options`` may be empty at construction; the authoring lint reports it.
    """

    options: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "options", tuple(self.options))
        super().__post_init__()


@dataclass(frozen=True)
class SelectField(ChoiceField):
    kind: ClassVar[FieldKind] = FieldKind.SELECT


@dataclass(frozen=True)
class RadioField(ChoiceField):
    kind: ClassVar[FieldKind] = FieldKind.RADIO


@dataclass(frozen=True)
class CheckboxField(ChoiceField):
    """Multi-select. Answers and defaults are sequences of option strings."""

    kind: ClassVar[FieldKind] = FieldKind.CHECKBOX

    def __post_init__(self) -> None:
        object.__setattr__(self, "options", tuple(self.options))
        Field.__post_init__(self)
        value = self.default_value
        if value is None or is_template(value):
            return
        if isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
            object.__setattr__(self, "default_value", tuple(value))
            return
        raise FieldDefinitionError(
            f"Field {self.id!r}: checkbox default must be a sequence of strings"
        )


@dataclass(frozen=True)
class FileField(InputField):
    """
    File upload.

    Properties:
        accepted_file_types: MIME patterns; "image/*" style wildcards allowed
        max_file_size: Limit in megabytes (None means the configured default)
        multiple: Whether the answer is a sequence of files
        capture_mode: Camera hint for mobile clients ("user", "environment", "none")
    """

    kind: ClassVar[FieldKind] = FieldKind.FILE

    accepted_file_types: Tuple[str, ...] = ()
    max_file_size: Optional[float] = None
    multiple: bool = False
    capture_mode: str = "none"

    def __post_init__(self) -> None:
        object.__setattr__(self, "accepted_file_types", tuple(self.accepted_file_types))
        Field.__post_init__(self)
        value = self.default_value
        if value is None or is_template(value):
            return
        if not self.multiple:
            if isinstance(value, (Mapping, FileDescriptor)):
                return
            raise FieldDefinitionError(
                f"Field {self.id!r}: single-file default must be one file descriptor"
            )
        if isinstance(value, (list, tuple)) and all(
            isinstance(v, (Mapping, FileDescriptor)) for v in value
        ):
            object.__setattr__(self, "default_value", tuple(value))
            return
        raise FieldDefinitionError(
            f"Field {self.id!r}: multiple-file default must be a sequence of file descriptors"
        )


FIELD_CLASSES: Dict[FieldKind, Type[Field]] = {
    FieldKind.TITLE: TitleField,
    FieldKind.TEXT: TextField,
    FieldKind.TEXTAREA: TextareaField,
    FieldKind.SELECT: SelectField,
    FieldKind.RADIO: RadioField,
    FieldKind.CHECKBOX: CheckboxField,
    FieldKind.FILE: FileField,
    FieldKind.READONLY: ReadonlyField,
}


def field_from_kind(kind: Union[FieldKind, str], **attrs: Any) -> Field:
    """
    Construct the variant for ``kind``.

    Raises:
        FieldDefinitionError: unknown kind, or attributes illegal for it
    """
    try:
        field_kind = FieldKind(kind)
    except ValueError:
        raise FieldDefinitionError(f"Unknown field kind: {kind!r}") from None
    cls = FIELD_CLASSES[field_kind]
    try:
        return cls(**attrs)
    except TypeError as e:
        raise FieldDefinitionError(f"Invalid attributes for {field_kind.value} field: {e}") from e


@dataclass(frozen=True)
class Condition:
    """One branch of a navigation rule: answer ``value`` leads to ``next_step_name``."""

    value: str
    next_step_name: str


@dataclass(frozen=True)
class NavigationRule:
    """
    Branching rule read from one driver field.

    Properties:
        field_id:
            Driver field in the same step (radio, select or checkbox ideally)
        conditions:
            Ordered branches; the first match wins
        default_step_name:
            Fallback target; None means CONTINUE

    Targets are step names or one of the sentinels CONTINUE, END, SKIP.
    """

    field_id: str
    conditions: Tuple[Condition, ...] = ()
    default_step_name: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "conditions", tuple(self.conditions))

    @property
    def fallback(self) -> str:
        return self.default_step_name or CONTINUE


@dataclass(frozen=True)
class Step:
    """
    One page of the flow.

    Properties:
        id: Stable identifier
        name: Unique across the flow; navigation targets refer to it
        description: Shown above the page and copied into the data schema
        fields: Ordered fields (presentation and compile order)
        action_name: Label of the submit action in the surrounding system
        summary_check_expression: Opaque passthrough, "true" by default
        navigation_rule: Optional branching rule
    """

    id: str
    name: str
    description: str = ""
    fields: Tuple[Field, ...] = ()
    action_name: str = ""
    summary_check_expression: str = "true"
    navigation_rule: Optional[NavigationRule] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))

    def get_field(self, field_id: str) -> Optional[Field]:
        """
        Retrieve a field by id.

        Returns:
            Field object or None if not found
        """
        for f in self.fields:
            if f.id == field_id:
                return f
        return None

    @property
    def field_ids(self) -> Tuple[str, ...]:
        return tuple(f.id for f in self.fields)


@dataclass(frozen=True)
class Flow:
    """
    Root container for a multi-page form.

    Everything exported (schemas, expressions, diagrams) is derivable
    from this object alone. A flow is only ever snapshotted whole.
    """

    name: str = "New Form Flow"
    description: str = ""
    steps: Tuple[Step, ...] = field(default_factory=tuple)
    id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "steps", tuple(self.steps))

    def get_step_by_name(self, name: str) -> Optional[Step]:
        for step in self.steps:
            if step.name == name:
                return step
        return None

    def step_index(self, name: str) -> Optional[int]:
        """Index of the first step called ``name``, or None."""
        for i, step in enumerate(self.steps):
            if step.name == name:
                return i
        return None
