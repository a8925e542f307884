"""Pydantic models for form elements and form definitions.

Models are frozen: every edit produces a new instance, which is what lets
the history manager hold snapshots by reference. Wire names are camelCase
(the persisted JSON shape); Python attributes are snake_case.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .lib import (
    Align,
    ElementKind,
    LabelPosition,
    PositionType,
    Size,
    ValueType,
    WidthPreset,
    WidthUnit,
    default_style,
    get_kind_meta,
    resolve_kind,
)

FieldValue = str | int | float | bool | None

_MODEL_CONFIG = ConfigDict(
    frozen=True,
    populate_by_name=True,
    alias_generator=to_camel,
    extra="ignore",
)


def new_element_id() -> str:
    """Generate a fresh opaque element id."""
    return str(uuid4())


def _now() -> datetime:
    return datetime.now(UTC)


class ElementStyle(BaseModel):
    """Named style attributes; None means "use the kind default"."""

    model_config = _MODEL_CONFIG

    width: str | None = None
    background_color: str | None = None
    text_color: str | None = None
    border_width: str | None = None
    border_style: str | None = None
    border_color: str | None = None
    border_radius: str | None = None
    padding: str | None = None
    padding_x: str | None = None
    padding_y: str | None = None
    margin_x: str | None = None
    margin_y: str | None = None
    font_size: str | None = None
    font_weight: str | None = None
    line_height: str | None = None
    letter_spacing: str | None = None
    opacity: str | None = None
    shadow: str | None = None


class ElementPosition(BaseModel):
    """Logical placement of an element.

    ``x``/``y`` only matter in free layout. The three hide flags are
    independent: hiding on mobile says nothing about tablet or desktop.
    """

    model_config = _MODEL_CONFIG

    x: float = 0
    y: float = 0
    type: PositionType = PositionType.STATIC
    top: str = "auto"
    right: str = "auto"
    bottom: str = "auto"
    left: str = "auto"
    z_index: int = 0
    align: Align = Align.LEFT
    grid_column: str = "auto"
    grid_row: str = "auto"
    hide_mobile: bool = False
    hide_tablet: bool = False
    hide_desktop: bool = False


class FormElement(BaseModel):
    """One placed item in a form definition.

    Attributes:
        id: Opaque unique identifier, stable for the element's lifetime.
        kind: Element kind (wire name ``type``).
        content: Label or text content.
        options: Ordered choices for choice kinds.
        default_value: Initial value; also the value validated when the
            caller supplies none.
        custom_validation: Restricted rule expression, never raw code.
        locked: Editor flag; locked elements reject positional and
            structural changes.
        hidden: Editor flag; hidden elements are skipped by validation.
    """

    model_config = _MODEL_CONFIG

    id: str = Field(default_factory=new_element_id)
    kind: ElementKind = Field(..., alias="type")

    # Content
    content: str = ""
    placeholder: str = ""
    help_text: str = ""
    options: tuple[str, ...] = ()
    default_value: FieldValue = ""

    # Validation constraints
    required: bool = False
    min_length: int | None = Field(default=None, ge=0)
    max_length: int | None = Field(default=None, ge=0)
    pattern: str | None = None
    min: float | None = None
    max: float | None = None
    step: float | None = None
    rows: int | None = Field(default=None, ge=1)
    custom_validation: str | None = None
    validate_on_blur: bool = True
    validate_on_change: bool = False

    # Presentation
    style: ElementStyle = Field(default_factory=ElementStyle)
    position: ElementPosition = Field(default_factory=ElementPosition)
    width: WidthPreset = WidthPreset.FULL
    custom_width: str = ""
    custom_width_unit: WidthUnit = WidthUnit.PX
    size: Size = Size.DEFAULT
    label_position: LabelPosition = LabelPosition.TOP
    text_align: Align = Align.LEFT
    custom_class: str = ""

    # Editor flags
    locked: bool = False
    hidden: bool = False

    @field_validator("kind", mode="before")
    @classmethod
    def _resolve_kind(cls, value: Any) -> ElementKind:
        return resolve_kind(value)

    @property
    def label(self) -> str:
        """Human-readable name used in messages and expression contexts."""
        return self.content or self.kind.value


class FormDefinition(BaseModel):
    """The aggregate root: an ordered list of elements plus metadata.

    List order is the render and tab order; no index field is stored.
    """

    model_config = _MODEL_CONFIG

    id: str = Field(default_factory=new_element_id)
    name: str = "Untitled form"
    description: str = ""
    elements: tuple[FormElement, ...] = ()
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    @model_validator(mode="after")
    def _check_unique_ids(self) -> FormDefinition:
        seen: set[str] = set()
        for element in self.elements:
            if element.id in seen:
                raise ValueError(f"Duplicate element ID: {element.id}")
            seen.add(element.id)
        return self

    @classmethod
    def create(cls, name: str = "Untitled form", description: str = "") -> FormDefinition:
        """Factory method for an empty definition with a generated ID."""
        return cls(name=name, description=description)

    @property
    def ids(self) -> list[str]:
        """Element ids in list order."""
        return [element.id for element in self.elements]

    def index_of(self, element_id: str) -> int | None:
        """Position of an element in the list, or None when absent."""
        for index, element in enumerate(self.elements):
            if element.id == element_id:
                return index
        return None

    def get(self, element_id: str) -> FormElement | None:
        """Look up an element by id."""
        index = self.index_of(element_id)
        return None if index is None else self.elements[index]

    def with_elements(self, elements: list[FormElement] | tuple[FormElement, ...]) -> FormDefinition:
        """New snapshot with a replaced element list and a fresh updatedAt."""
        return self.model_validate(
            {
                **self.model_dump(exclude={"elements"}),
                "elements": tuple(elements),
                "updated_at": _now(),
            }
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self, indent: int | None = 2) -> str:
        """Serialize to the persisted JSON shape."""
        return self.model_dump_json(by_alias=True, indent=indent)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FormDefinition:
        """Load from a JSON-compatible dict.

        Raises:
            UnknownKindError: If any element carries an unknown kind.
        """
        for element in data.get("elements", ()):
            if isinstance(element, dict):
                resolve_kind(element.get("type", element.get("kind")))
        return cls.model_validate(data)

    @classmethod
    def from_json(cls, text: str) -> FormDefinition:
        """Load from the persisted JSON shape."""
        return cls.from_dict(json.loads(text))


def create_default(kind: ElementKind | str, **overrides: Any) -> FormElement:
    """Create a fully-populated element of the given kind.

    Every style attribute is filled from the kind's default table, choice
    kinds get their default options, and the default value matches the
    kind's value type.

    Args:
        kind: Kind member, wire name or alias.
        **overrides: Field values applied on top of the defaults.

    Returns:
        New FormElement with a fresh id.

    Raises:
        UnknownKindError: If the kind is not registered.
    """
    resolved = resolve_kind(kind)
    meta = get_kind_meta(resolved)
    default_value: FieldValue = (
        False if meta.capabilities.value_type is ValueType.BOOLEAN else ""
    )
    fields: dict[str, Any] = {
        "id": new_element_id(),
        "kind": resolved,
        "content": meta.default_content,
        "options": meta.default_options,
        "default_value": default_value,
        "rows": meta.default_rows,
        "style": ElementStyle.model_validate(default_style(resolved)),
        "position": ElementPosition(),
    }
    fields.update(overrides)
    return FormElement.model_validate(fields)


def export_json_schema() -> dict[str, Any]:
    """Export the FormDefinition JSON Schema (camelCase wire names)."""
    return FormDefinition.model_json_schema(by_alias=True)


__all__ = [
    "FieldValue",
    "ElementStyle",
    "ElementPosition",
    "FormElement",
    "FormDefinition",
    "new_element_id",
    "create_default",
    "export_json_schema",
]
