"""Layout module - geometry for free, grid, columns and rows layouts.

Example usage:
    >>> from formengine.layout import resolve_geometry
    >>> from formengine.schema import create_default
    >>> geometry = resolve_geometry(create_default("text"), "rows", "desktop")
    >>> geometry.width
    '100%'
"""

from formengine.schema import resolve_style

from .lib import (
    FULL_WIDTH,
    Breakpoint,
    LayoutMode,
    ResolvedGeometry,
    grid_span,
    is_visible,
    resolve_geometry,
    resolve_layout,
)

__all__ = [
    # Enums
    "LayoutMode",
    "Breakpoint",
    # Types
    "ResolvedGeometry",
    "FULL_WIDTH",
    # Resolution
    "resolve_geometry",
    "resolve_layout",
    "resolve_style",
    "grid_span",
    "is_visible",
]
