"""Schema module - element model for form definitions.

This module provides:
- The closed element kind set with rich per-kind metadata
- Default content, options and style tables
- Frozen pydantic models for elements and definitions
- JSON Schema export for persistence collaborators

Example usage:
    >>> from formengine.schema import ElementKind, create_default
    >>> element = create_default(ElementKind.TEXT)
    >>> element.style.width
    '100%'
"""

from .lib import (
    DEFAULT_STYLE,
    KIND_ALIASES,
    KIND_REGISTRY,
    WIDTH_PRESETS,
    Align,
    ElementKind,
    KindCapabilities,
    KindCategory,
    KindMeta,
    LabelPosition,
    PositionType,
    Size,
    ValueType,
    WidthPreset,
    WidthUnit,
    declared_width,
    default_style,
    get_capabilities,
    get_kind_meta,
    get_kinds_by_category,
    resolve_kind,
    resolve_style,
)
from .models import (
    ElementPosition,
    ElementStyle,
    FieldValue,
    FormDefinition,
    FormElement,
    create_default,
    export_json_schema,
    new_element_id,
)

__all__ = [
    # Enums
    "Align",
    "ElementKind",
    "KindCategory",
    "LabelPosition",
    "PositionType",
    "Size",
    "ValueType",
    "WidthPreset",
    "WidthUnit",
    # Metadata
    "KindCapabilities",
    "KindMeta",
    "KIND_REGISTRY",
    "KIND_ALIASES",
    "DEFAULT_STYLE",
    "WIDTH_PRESETS",
    # Lookup functions
    "get_kind_meta",
    "get_capabilities",
    "get_kinds_by_category",
    "resolve_kind",
    # Defaults
    "default_style",
    "resolve_style",
    "declared_width",
    # Models
    "FieldValue",
    "ElementStyle",
    "ElementPosition",
    "FormElement",
    "FormDefinition",
    "create_default",
    "new_element_id",
    "export_json_schema",
]
