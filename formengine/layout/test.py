"""Unit tests for layout resolution."""

import pytest

from formengine.schema import FormDefinition, WidthPreset, create_default

from .lib import (
    Breakpoint,
    LayoutMode,
    ResolvedGeometry,
    grid_span,
    is_visible,
    resolve_geometry,
    resolve_layout,
)


def _element(**overrides):
    return create_default("text", **overrides)


class TestFreeLayout:
    """Tests for absolute positioning."""

    @pytest.mark.unit
    def test_uses_stored_coordinates(self):
        element = _element(position={"x": 10, "y": 20, "zIndex": 3})
        geometry = resolve_geometry(element, LayoutMode.FREE, Breakpoint.DESKTOP)
        assert geometry.x == 10
        assert geometry.y == 20
        assert geometry.z_index == 3
        assert geometry.width == "100%"

    @pytest.mark.unit
    def test_width_preset(self):
        element = _element(width=WidthPreset.SMALL)
        assert resolve_geometry(element, "free", "desktop").width == "50%"

    @pytest.mark.unit
    def test_custom_width(self):
        element = _element(width="custom", custom_width="320", custom_width_unit="px")
        assert resolve_geometry(element, "free", "desktop").width == "320px"


class TestFlowLayouts:
    """Tests for rows and columns modes."""

    @pytest.mark.unit
    def test_rows_are_full_width(self):
        element = _element(width=WidthPreset.TINY, position={"x": 50, "y": 60})
        geometry = resolve_geometry(element, LayoutMode.ROWS, Breakpoint.DESKTOP, order=2)
        assert geometry.x is None
        assert geometry.y is None
        assert geometry.width == "100%"
        assert geometry.order == 2

    @pytest.mark.unit
    def test_columns_use_declared_width(self):
        element = _element(width=WidthPreset.MEDIUM)
        geometry = resolve_geometry(element, LayoutMode.COLUMNS, Breakpoint.TABLET)
        assert geometry.x is None
        assert geometry.width == "75%"


class TestGridLayout:
    """Tests for grid cell spans."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("hint", "expected"),
        [
            ("1/7", 6),
            ("1 / 13", 12),
            ("span 3", 3),
            ("2 / span 4", 4),
            ("auto", 12),
            ("", 12),
            ("7/1", 12),
            ("wide", 12),
            ("1/40", 12),
        ],
    )
    def test_grid_span(self, hint, expected):
        assert grid_span(hint, 12) == expected

    @pytest.mark.unit
    def test_half_row(self):
        element = _element(position={"gridColumn": "1/7"})
        geometry = resolve_geometry(element, LayoutMode.GRID, Breakpoint.DESKTOP)
        assert geometry.span == 6
        assert geometry.width == "50%"
        assert geometry.x is None

    @pytest.mark.unit
    def test_default_full_row(self):
        geometry = resolve_geometry(_element(), LayoutMode.GRID, Breakpoint.DESKTOP)
        assert geometry.span == 12
        assert geometry.width == "100%"

    @pytest.mark.unit
    def test_explicit_column_count(self):
        element = _element(position={"gridColumn": "1/7"})
        geometry = resolve_geometry(element, "grid", "desktop", columns=24)
        assert geometry.width == "25%"

    @pytest.mark.unit
    def test_column_count_from_environment(self, monkeypatch):
        monkeypatch.setenv("FORMENGINE_GRID_COLUMNS", "6")
        element = _element(position={"gridColumn": "1/4"})
        assert resolve_geometry(element, "grid", "desktop").width == "50%"


class TestVisibility:
    """Tests for per-breakpoint hide flags."""

    @pytest.mark.unit
    def test_flags_do_not_cascade(self):
        element = _element(position={"hideMobile": True})
        assert not is_visible(element, Breakpoint.MOBILE)
        assert is_visible(element, Breakpoint.TABLET)
        assert is_visible(element, Breakpoint.DESKTOP)

    @pytest.mark.unit
    def test_desktop_only_hidden(self):
        element = _element(position={"hideDesktop": True})
        assert is_visible(element, "mobile")
        assert not resolve_geometry(element, "rows", "desktop").visible

    @pytest.mark.unit
    def test_unknown_breakpoint_rejected(self):
        with pytest.raises(ValueError):
            is_visible(_element(), "watch")


class TestResolveLayout:
    """Tests for whole-definition resolution."""

    @pytest.mark.unit
    def test_list_order(self):
        elements = [_element(), create_default("heading"), create_default("number")]
        definition = FormDefinition().with_elements(elements)
        resolved = resolve_layout(definition, "rows", "mobile")
        assert [geometry.element_id for geometry in resolved] == definition.ids
        assert [geometry.order for geometry in resolved] == [0, 1, 2]

    @pytest.mark.unit
    def test_to_dict(self):
        geometry = ResolvedGeometry("a", None, None, "100%", True, 0, z_index=2)
        data = geometry.to_dict()
        assert data["elementId"] == "a"
        assert data["zIndex"] == 2
        assert data["x"] is None
