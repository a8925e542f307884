"""Authoritative element kind registry for form definitions.

This module is the single source of truth for what each element kind is
and how it behaves when created. It provides:
- The closed set of element kinds and their categories
- Per-kind capability flags (what constraints and values are meaningful)
- Default content, options and style tables
- Kind resolution from wire names and aliases

Unknown kinds are rejected with UnknownKindError; there is no generic
placeholder kind.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from formengine.errors import UnknownKindError

if TYPE_CHECKING:
    from .models import FormElement


class KindCategory(str, Enum):
    """High-level element groupings."""

    LAYOUT = "layout"
    INPUT = "input"
    WIDGET = "widget"


class ValueType(str, Enum):
    """Shape of the value an input element collects.

    - TEXT: free text (str)
    - NUMBER: int/float, or a numeric string as delivered by form inputs
    - BOOLEAN: checked state (bool)
    - CHOICE: one of the element's options (str)
    - DATE: ISO-8601 calendar date (str)
    - NONE: the element collects no value
    """

    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    CHOICE = "choice"
    DATE = "date"
    NONE = "none"


class ElementKind(str, Enum):
    """Closed set of element kinds a form definition may contain."""

    # Layout
    HEADING = "heading"
    TITLE = "title"
    SUBTITLE = "subtitle"
    PARAGRAPH = "paragraph"
    DIVIDER = "divider"
    SEPARATOR = "separator"
    SPACER = "spacer"

    # Inputs
    TEXT = "text"
    INPUT = "input"
    NUMBER = "number"
    TEXTAREA = "textarea"
    DATE = "date"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    SELECT = "select"
    BUTTON = "button"

    # UI widgets
    ACCORDION = "accordion"
    ALERT = "alert"
    ALERT_DIALOG = "alert-dialog"
    ASPECT_RATIO = "aspect-ratio"
    AVATAR = "avatar"
    BADGE = "badge"
    BREADCRUMB = "breadcrumb"
    CALENDAR = "calendar"
    CARD = "card"
    CAROUSEL = "carousel"
    CHART = "chart"
    COLLAPSIBLE = "collapsible"
    COMBOBOX = "combobox"
    COMMAND = "command"
    CONTEXT_MENU = "context-menu"
    DATA_TABLE = "data-table"
    DATE_PICKER = "date-picker"
    DIALOG = "dialog"
    DRAWER = "drawer"
    DROPDOWN_MENU = "dropdown-menu"


class PositionType(str, Enum):
    """CSS-like positioning hint."""

    STATIC = "static"
    RELATIVE = "relative"
    ABSOLUTE = "absolute"
    FIXED = "fixed"


class Align(str, Enum):
    """Horizontal alignment of an element or its text."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    JUSTIFY = "justify"


class WidthPreset(str, Enum):
    """Named width setting of an element."""

    FULL = "full"
    MEDIUM = "medium"
    SMALL = "small"
    TINY = "tiny"
    CUSTOM = "custom"


class WidthUnit(str, Enum):
    """Unit of a custom width."""

    PX = "px"
    PERCENT = "%"
    REM = "rem"
    EM = "em"


class Size(str, Enum):
    """Control size scale."""

    XS = "xs"
    SMALL = "small"
    DEFAULT = "default"
    LARGE = "large"
    XL = "xl"


class LabelPosition(str, Enum):
    """Where an input's label is placed relative to the control."""

    TOP = "top"
    LEFT = "left"
    RIGHT = "right"
    BOTTOM = "bottom"
    HIDDEN = "hidden"


@dataclass(frozen=True)
class KindCapabilities:
    """Which optional fields are meaningful for a kind."""

    value_type: ValueType = ValueType.NONE
    text_constraints: bool = False
    numeric_constraints: bool = False
    has_options: bool = False
    has_rows: bool = False
    has_placeholder: bool = False

    @property
    def accepts_input(self) -> bool:
        """True when the kind collects a user value."""
        return self.value_type is not ValueType.NONE


@dataclass(frozen=True)
class KindMeta:
    """Registry entry for an element kind."""

    kind: ElementKind
    category: KindCategory
    description: str
    default_content: str = ""
    capabilities: KindCapabilities = field(default_factory=KindCapabilities)
    default_options: tuple[str, ...] = ()
    default_rows: int | None = None
    style: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert metadata to dictionary for listings and schema export."""
        caps = self.capabilities
        return {
            "type": self.kind.value,
            "category": self.category.value,
            "description": self.description,
            "defaultContent": self.default_content,
            "valueType": caps.value_type.value,
            "acceptsInput": caps.accepts_input,
            "textConstraints": caps.text_constraints,
            "numericConstraints": caps.numeric_constraints,
            "hasOptions": caps.has_options,
        }


# Fallback for every style attribute; kind tables override individual keys.
DEFAULT_STYLE: dict[str, str] = {
    "width": "100%",
    "backgroundColor": "transparent",
    "textColor": "inherit",
    "borderWidth": "0px",
    "borderStyle": "none",
    "borderColor": "transparent",
    "borderRadius": "0.375rem",
    "padding": "0.5rem",
    "paddingX": "0",
    "paddingY": "0",
    "marginX": "0",
    "marginY": "0",
    "fontSize": "1rem",
    "fontWeight": "normal",
    "lineHeight": "1.5",
    "letterSpacing": "normal",
    "opacity": "1",
    "shadow": "none",
}

WIDTH_PRESETS: dict[WidthPreset, str] = {
    WidthPreset.FULL: "100%",
    WidthPreset.MEDIUM: "75%",
    WidthPreset.SMALL: "50%",
    WidthPreset.TINY: "25%",
}

_STATIC = KindCapabilities()
_TEXT_INPUT = KindCapabilities(
    value_type=ValueType.TEXT, text_constraints=True, has_placeholder=True
)
_TEXTAREA = KindCapabilities(
    value_type=ValueType.TEXT,
    text_constraints=True,
    has_rows=True,
    has_placeholder=True,
)
_NUMBER_INPUT = KindCapabilities(
    value_type=ValueType.NUMBER, numeric_constraints=True, has_placeholder=True
)
_DATE_INPUT = KindCapabilities(value_type=ValueType.DATE, has_placeholder=True)
_BOOLEAN_INPUT = KindCapabilities(value_type=ValueType.BOOLEAN)
_CHOICE_INPUT = KindCapabilities(value_type=ValueType.CHOICE, has_options=True)
_SELECT_INPUT = KindCapabilities(
    value_type=ValueType.CHOICE, has_options=True, has_placeholder=True
)

_DEFAULT_OPTIONS = ("Option 1", "Option 2", "Option 3")

_HEADING_STYLE = {"fontSize": "1.5rem", "fontWeight": "bold"}
_RULE_STYLE = {
    "borderWidth": "1px",
    "borderStyle": "solid",
    "borderColor": "#e5e7eb",
    "padding": "0",
}


KIND_REGISTRY: dict[ElementKind, KindMeta] = {
    # === LAYOUT ===
    ElementKind.HEADING: KindMeta(
        kind=ElementKind.HEADING,
        category=KindCategory.LAYOUT,
        description="Section heading text",
        default_content="Heading",
        style=_HEADING_STYLE,
    ),
    ElementKind.TITLE: KindMeta(
        kind=ElementKind.TITLE,
        category=KindCategory.LAYOUT,
        description="Form title displayed at the top of the form",
        default_content="Form Title",
        style={"fontSize": "2rem", "fontWeight": "bold"},
    ),
    ElementKind.SUBTITLE: KindMeta(
        kind=ElementKind.SUBTITLE,
        category=KindCategory.LAYOUT,
        description="Secondary title below the form title",
        default_content="Subtitle",
        style={"fontSize": "1.25rem", "fontWeight": "medium"},
    ),
    ElementKind.PARAGRAPH: KindMeta(
        kind=ElementKind.PARAGRAPH,
        category=KindCategory.LAYOUT,
        description="Block of explanatory body text",
        default_content="This is a paragraph of text.",
    ),
    ElementKind.DIVIDER: KindMeta(
        kind=ElementKind.DIVIDER,
        category=KindCategory.LAYOUT,
        description="Horizontal rule between sections",
        style=_RULE_STYLE,
    ),
    ElementKind.SEPARATOR: KindMeta(
        kind=ElementKind.SEPARATOR,
        category=KindCategory.LAYOUT,
        description="Thin visual separator between related content",
        style=_RULE_STYLE,
    ),
    ElementKind.SPACER: KindMeta(
        kind=ElementKind.SPACER,
        category=KindCategory.LAYOUT,
        description="Empty vertical space",
        style={"padding": "1rem"},
    ),
    # === INPUTS ===
    ElementKind.TEXT: KindMeta(
        kind=ElementKind.TEXT,
        category=KindCategory.INPUT,
        description="Single-line text field",
        default_content="Text Field",
        capabilities=_TEXT_INPUT,
    ),
    ElementKind.INPUT: KindMeta(
        kind=ElementKind.INPUT,
        category=KindCategory.INPUT,
        description="Generic labelled text input",
        default_content="Label",
        capabilities=_TEXT_INPUT,
    ),
    ElementKind.NUMBER: KindMeta(
        kind=ElementKind.NUMBER,
        category=KindCategory.INPUT,
        description="Numeric input with optional range and step",
        default_content="Number",
        capabilities=_NUMBER_INPUT,
    ),
    ElementKind.TEXTAREA: KindMeta(
        kind=ElementKind.TEXTAREA,
        category=KindCategory.INPUT,
        description="Multi-line text field",
        default_content="Text Area Label",
        capabilities=_TEXTAREA,
        default_rows=3,
    ),
    ElementKind.DATE: KindMeta(
        kind=ElementKind.DATE,
        category=KindCategory.INPUT,
        description="Calendar date input",
        default_content="Date",
        capabilities=_DATE_INPUT,
    ),
    ElementKind.CHECKBOX: KindMeta(
        kind=ElementKind.CHECKBOX,
        category=KindCategory.INPUT,
        description="Binary checked/unchecked toggle",
        default_content="Checkbox Label",
        capabilities=_BOOLEAN_INPUT,
    ),
    ElementKind.RADIO: KindMeta(
        kind=ElementKind.RADIO,
        category=KindCategory.INPUT,
        description="Single choice from mutually exclusive options",
        default_content="Radio Button",
        capabilities=_CHOICE_INPUT,
        default_options=_DEFAULT_OPTIONS,
    ),
    ElementKind.SELECT: KindMeta(
        kind=ElementKind.SELECT,
        category=KindCategory.INPUT,
        description="Dropdown selector for a single option",
        default_content="Select Option",
        capabilities=_SELECT_INPUT,
        default_options=_DEFAULT_OPTIONS,
    ),
    ElementKind.BUTTON: KindMeta(
        kind=ElementKind.BUTTON,
        category=KindCategory.INPUT,
        description="Clickable action such as submit or reset",
        default_content="Button",
        style={
            "width": "auto",
            "backgroundColor": "#0f172a",
            "textColor": "#ffffff",
            "fontWeight": "medium",
        },
    ),
    # === UI WIDGETS ===
    ElementKind.ACCORDION: KindMeta(
        kind=ElementKind.ACCORDION,
        category=KindCategory.WIDGET,
        description="Vertically stacked collapsible sections",
        default_content="Accordion Section",
    ),
    ElementKind.ALERT: KindMeta(
        kind=ElementKind.ALERT,
        category=KindCategory.WIDGET,
        description="Inline callout for important messages",
        default_content="Alert message",
        style={"borderWidth": "1px", "borderStyle": "solid"},
    ),
    ElementKind.ALERT_DIALOG: KindMeta(
        kind=ElementKind.ALERT_DIALOG,
        category=KindCategory.WIDGET,
        description="Modal dialog requiring confirmation",
        default_content="Are you sure?",
    ),
    ElementKind.ASPECT_RATIO: KindMeta(
        kind=ElementKind.ASPECT_RATIO,
        category=KindCategory.WIDGET,
        description="Box that keeps content at a fixed ratio",
    ),
    ElementKind.AVATAR: KindMeta(
        kind=ElementKind.AVATAR,
        category=KindCategory.WIDGET,
        description="User image with initials fallback",
        default_content="AB",
        style={"width": "40px", "borderRadius": "9999px"},
    ),
    ElementKind.BADGE: KindMeta(
        kind=ElementKind.BADGE,
        category=KindCategory.WIDGET,
        description="Small status label",
        default_content="Badge",
        style={"width": "auto", "fontSize": "0.75rem"},
    ),
    ElementKind.BREADCRUMB: KindMeta(
        kind=ElementKind.BREADCRUMB,
        category=KindCategory.WIDGET,
        description="Hierarchical navigation trail",
        default_content="Home / Forms",
    ),
    ElementKind.CALENDAR: KindMeta(
        kind=ElementKind.CALENDAR,
        category=KindCategory.WIDGET,
        description="Month calendar display",
    ),
    ElementKind.CARD: KindMeta(
        kind=ElementKind.CARD,
        category=KindCategory.WIDGET,
        description="Bordered content container",
        default_content="Card Title",
        style={"borderWidth": "1px", "borderStyle": "solid", "shadow": "sm"},
    ),
    ElementKind.CAROUSEL: KindMeta(
        kind=ElementKind.CAROUSEL,
        category=KindCategory.WIDGET,
        description="Horizontally sliding content panels",
    ),
    ElementKind.CHART: KindMeta(
        kind=ElementKind.CHART,
        category=KindCategory.WIDGET,
        description="Data visualization placeholder",
        default_content="Chart",
    ),
    ElementKind.COLLAPSIBLE: KindMeta(
        kind=ElementKind.COLLAPSIBLE,
        category=KindCategory.WIDGET,
        description="Panel that expands and collapses",
        default_content="Show more",
    ),
    ElementKind.COMBOBOX: KindMeta(
        kind=ElementKind.COMBOBOX,
        category=KindCategory.WIDGET,
        description="Searchable option picker",
        default_content="Select...",
        default_options=_DEFAULT_OPTIONS,
    ),
    ElementKind.COMMAND: KindMeta(
        kind=ElementKind.COMMAND,
        category=KindCategory.WIDGET,
        description="Command palette menu",
        default_content="Type a command...",
    ),
    ElementKind.CONTEXT_MENU: KindMeta(
        kind=ElementKind.CONTEXT_MENU,
        category=KindCategory.WIDGET,
        description="Right-click action menu",
        default_content="Right click here",
    ),
    ElementKind.DATA_TABLE: KindMeta(
        kind=ElementKind.DATA_TABLE,
        category=KindCategory.WIDGET,
        description="Tabular data display",
    ),
    ElementKind.DATE_PICKER: KindMeta(
        kind=ElementKind.DATE_PICKER,
        category=KindCategory.WIDGET,
        description="Popover calendar date picker",
        default_content="Pick a date",
    ),
    ElementKind.DIALOG: KindMeta(
        kind=ElementKind.DIALOG,
        category=KindCategory.WIDGET,
        description="Modal dialog window",
        default_content="Open dialog",
    ),
    ElementKind.DRAWER: KindMeta(
        kind=ElementKind.DRAWER,
        category=KindCategory.WIDGET,
        description="Panel sliding in from a screen edge",
        default_content="Open drawer",
    ),
    ElementKind.DROPDOWN_MENU: KindMeta(
        kind=ElementKind.DROPDOWN_MENU,
        category=KindCategory.WIDGET,
        description="Menu of actions behind a trigger",
        default_content="Open menu",
        default_options=_DEFAULT_OPTIONS,
    ),
}

KIND_ALIASES: dict[str, ElementKind] = {
    "h1": ElementKind.TITLE,
    "h2": ElementKind.HEADING,
    "p": ElementKind.PARAGRAPH,
    "hr": ElementKind.DIVIDER,
    "textfield": ElementKind.TEXT,
    "text_input": ElementKind.TEXT,
    "multiline": ElementKind.TEXTAREA,
    "numeric": ElementKind.NUMBER,
    "dropdown": ElementKind.SELECT,
    "radio_button": ElementKind.RADIO,
    "checkmark": ElementKind.CHECKBOX,
    "submit": ElementKind.BUTTON,
}


def get_kind_meta(kind: ElementKind | str) -> KindMeta:
    """Get registry metadata for a kind.

    Args:
        kind: Kind member or wire name.

    Returns:
        KindMeta for the kind.

    Raises:
        UnknownKindError: If the kind is not registered.
    """
    return KIND_REGISTRY[resolve_kind(kind)]


def get_capabilities(kind: ElementKind | str) -> KindCapabilities:
    """Get the capability flags for a kind."""
    return get_kind_meta(kind).capabilities


def get_kinds_by_category(category: KindCategory) -> list[ElementKind]:
    """Get all kinds in a category, in registry order."""
    return [meta.kind for meta in KIND_REGISTRY.values() if meta.category == category]


def resolve_kind(value: ElementKind | str) -> ElementKind:
    """Resolve a kind member, wire name or alias to its ElementKind.

    Args:
        value: Kind to resolve (wire names and aliases are case-insensitive).

    Returns:
        The canonical ElementKind.

    Raises:
        UnknownKindError: If the value names no known kind.
    """
    if isinstance(value, ElementKind):
        return value
    if not isinstance(value, str):
        raise UnknownKindError(value)

    normalized = value.lower().strip()
    try:
        return ElementKind(normalized)
    except ValueError:
        pass

    alias = KIND_ALIASES.get(normalized) or KIND_ALIASES.get(
        normalized.replace("-", "_")
    )
    if alias is None:
        raise UnknownKindError(value)
    return alias


def default_style(kind: ElementKind | str) -> dict[str, str]:
    """Full default style table for a kind (fallbacks plus kind overrides)."""
    return {**DEFAULT_STYLE, **get_kind_meta(kind).style}


def resolve_style(element: FormElement) -> dict[str, str]:
    """Resolve an element's effective style.

    Every attribute that is unset on the element falls back to the kind's
    default table, so the result never contains missing or None values.

    Args:
        element: Element to resolve.

    Returns:
        Mapping of camelCase style attribute to value.
    """
    resolved = default_style(element.kind)
    overrides = element.style.model_dump(by_alias=True, exclude_none=True)
    resolved.update(overrides)
    return resolved


def declared_width(element: FormElement) -> str:
    """The width an element declares for itself.

    Resolution: custom preset with a value > named preset > style width.
    """
    preset = element.width
    if preset == WidthPreset.CUSTOM and element.custom_width:
        return f"{element.custom_width}{element.custom_width_unit.value}"
    if preset not in (WidthPreset.FULL, WidthPreset.CUSTOM):
        return WIDTH_PRESETS[preset]
    return element.style.width or default_style(element.kind)["width"]


__all__ = [
    # Enums
    "KindCategory",
    "ValueType",
    "ElementKind",
    "PositionType",
    "Align",
    "WidthPreset",
    "WidthUnit",
    "Size",
    "LabelPosition",
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
]
