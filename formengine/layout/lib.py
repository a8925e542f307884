"""Layout resolution for form elements.

Turns an element's stored position and width settings into renderer-facing
geometry for one layout mode and one breakpoint. Resolution is pure: the
element store never calls into this module, and nothing here mutates a
definition.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from formengine.config import EnvVar, get_environment
from formengine.schema import FormDefinition, FormElement, declared_width

logger = logging.getLogger(__name__)

FULL_WIDTH = "100%"


class LayoutMode(str, Enum):
    """Canvas arrangement of elements."""

    FREE = "free"  # Absolute x/y from each element's position
    GRID = "grid"  # Cells on a fixed column grid
    COLUMNS = "columns"  # Wrapping flow using each element's declared width
    ROWS = "rows"  # One full-width element per row


class Breakpoint(str, Enum):
    """Responsive viewport classes."""

    MOBILE = "mobile"
    TABLET = "tablet"
    DESKTOP = "desktop"


_HIDE_FLAGS = {
    Breakpoint.MOBILE: "hide_mobile",
    Breakpoint.TABLET: "hide_tablet",
    Breakpoint.DESKTOP: "hide_desktop",
}


@dataclass(frozen=True)
class ResolvedGeometry:
    """Where and how wide an element renders.

    Attributes:
        element_id: Element the geometry belongs to.
        x: Horizontal offset in free layout; None in flow modes.
        y: Vertical offset in free layout; None in flow modes.
        width: CSS-like width string.
        visible: False when hidden at the resolved breakpoint.
        order: Position in the flow (list order).
        z_index: Stacking order.
        span: Grid columns covered (grid mode only).
    """

    element_id: str
    x: float | None
    y: float | None
    width: str
    visible: bool
    order: int
    z_index: int = 0
    span: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the renderer wire shape (camelCase)."""
        return {
            "elementId": self.element_id,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "visible": self.visible,
            "order": self.order,
            "zIndex": self.z_index,
            "span": self.span,
        }


def is_visible(element: FormElement, breakpoint: Breakpoint | str) -> bool:
    """Check the hide flag of exactly this breakpoint.

    Flags do not cascade: hiding on mobile leaves tablet and desktop alone.
    """
    flag = _HIDE_FLAGS[Breakpoint(breakpoint)]
    return not getattr(element.position, flag)


_SPAN_ONLY = re.compile(r"^span\s+(\d+)$")
_LINE_RANGE = re.compile(r"^(-?\d+)\s*/\s*(?:(-?\d+)|span\s+(\d+))$")


def grid_span(grid_column: str, columns: int) -> int:
    """Number of grid columns a ``gridColumn`` hint covers.

    Understands ``"a/b"`` (covers ``b - a``), ``"a / span n"`` and
    ``"span n"``. Anything else, ``"auto"`` included, is a full row.
    The result is clamped to ``1..columns``.
    """
    hint = (grid_column or "").strip().lower()

    span: int | None = None
    if match := _SPAN_ONLY.match(hint):
        span = int(match.group(1))
    elif match := _LINE_RANGE.match(hint):
        if match.group(3) is not None:
            span = int(match.group(3))
        else:
            span = int(match.group(2)) - int(match.group(1))

    if span is None or span <= 0:
        if hint not in ("", "auto"):
            logger.debug(f"Unrecognized gridColumn {grid_column!r}, using full row")
        return columns
    return min(span, columns)


def _span_width(span: int, columns: int) -> str:
    return f"{span / columns * 100:g}%"


def resolve_geometry(
    element: FormElement,
    mode: LayoutMode | str,
    breakpoint: Breakpoint | str,
    order: int = 0,
    columns: int | None = None,
) -> ResolvedGeometry:
    """Resolve one element's geometry.

    Args:
        element: Element to place.
        mode: Layout mode.
        breakpoint: Target breakpoint.
        order: Position of the element in list order.
        columns: Grid column count; defaults to configuration.

    Returns:
        ResolvedGeometry for the element.
    """
    mode = LayoutMode(mode)
    position = element.position
    visible = is_visible(element, breakpoint)

    if mode == LayoutMode.FREE:
        return ResolvedGeometry(
            element_id=element.id,
            x=position.x,
            y=position.y,
            width=declared_width(element),
            visible=visible,
            order=order,
            z_index=position.z_index,
        )

    if mode == LayoutMode.GRID:
        columns = columns if columns is not None else get_environment(EnvVar.GRID_COLUMNS)
        span = grid_span(position.grid_column, columns)
        return ResolvedGeometry(
            element_id=element.id,
            x=None,
            y=None,
            width=_span_width(span, columns),
            visible=visible,
            order=order,
            z_index=position.z_index,
            span=span,
        )

    width = declared_width(element) if mode == LayoutMode.COLUMNS else FULL_WIDTH
    return ResolvedGeometry(
        element_id=element.id,
        x=None,
        y=None,
        width=width,
        visible=visible,
        order=order,
        z_index=position.z_index,
    )


def resolve_layout(
    definition: FormDefinition,
    mode: LayoutMode | str,
    breakpoint: Breakpoint | str,
    columns: int | None = None,
) -> list[ResolvedGeometry]:
    """Resolve every element of a definition, in list order."""
    return [
        resolve_geometry(element, mode, breakpoint, order=index, columns=columns)
        for index, element in enumerate(definition.elements)
    ]


__all__ = [
    "FULL_WIDTH",
    "LayoutMode",
    "Breakpoint",
    "ResolvedGeometry",
    "is_visible",
    "grid_span",
    "resolve_geometry",
    "resolve_layout",
]
