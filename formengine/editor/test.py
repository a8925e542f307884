"""Tests for the editor session."""

import logging

import pytest
from pydantic import ValidationError

from formengine.errors import (
    DefinitionConfigError,
    ElementLockedError,
    ElementNotFoundError,
    InvalidExpressionError,
    UnknownKindError,
)
from formengine.layout import LayoutMode
from formengine.validation import equals_rule

from .lib import EditorSession
from .models import DragMoveEvent, ReorderEvent


@pytest.fixture
def session():
    return EditorSession(layout_mode="free", history_depth=100)


def _drag(session, element_id, dx, dy):
    return session.on_drag_move({"elementId": element_id, "deltaX": dx, "deltaY": dy})


class TestStructuralEdits:
    """Tests for one-commit-per-edit behaviour."""

    @pytest.mark.unit
    def test_each_edit_commits_once(self, session):
        field = session.add("text")
        assert len(session.history) == 2
        session.update(field.id, {"content": "Name"})
        copy = session.duplicate(field.id)
        session.reorder(0, 1)
        session.delete(copy.id)
        assert len(session.history) == 6

    @pytest.mark.unit
    def test_undo_after_adds(self, session):
        first = session.add("text")
        session.add("number")
        session.add("date")
        snapshot = session.undo()
        assert [e.kind.value for e in snapshot.elements] == ["text", "number"]
        assert session.definition.elements[0] == first

    @pytest.mark.unit
    def test_redo_restores_deep_equal_snapshot(self, session):
        session.add("text")
        after = session.add("checkbox")
        before = session.definition
        session.undo()
        assert session.redo() == before
        assert session.definition.elements[-1] == after

    @pytest.mark.unit
    def test_out_of_bounds_undo_returns_none(self, session):
        assert session.undo() is None
        assert session.redo() is None

    @pytest.mark.unit
    def test_duplicate_returns_copy(self, session):
        field = session.add("text", content="Email")
        copy = session.duplicate(field.id)
        assert copy.content == "Email (copy)"
        assert session.definition.ids == [field.id, copy.id]

    @pytest.mark.unit
    def test_noop_reorder_does_not_commit(self, session):
        session.add("text")
        session.reorder(0, 0)
        assert len(session.history) == 2

    @pytest.mark.unit
    def test_reorder_event(self, session):
        a, b, c = session.add("text"), session.add("number"), session.add("date")
        session.on_reorder({"elementId": a.id, "overElementId": c.id})
        assert session.definition.ids == [b.id, c.id, a.id]
        session.on_reorder(ReorderEvent(element_id=c.id, over_element_id=b.id))
        assert session.definition.ids == [c.id, b.id, a.id]

    @pytest.mark.unit
    def test_refusals_are_logged(self, session, caplog):
        field = session.add("text", locked=True)
        with caplog.at_level(logging.WARNING, logger="formengine.editor"):
            with pytest.raises(ElementLockedError):
                session.delete(field.id)
        assert "Refused delete" in caplog.text
        assert len(session.history) == 2

    @pytest.mark.unit
    def test_missing_element(self, session):
        with pytest.raises(ElementNotFoundError):
            session.update("missing", {"content": "x"})

    @pytest.mark.unit
    def test_version_advances_on_visible_changes(self, session):
        field = session.add("text")
        assert session.version == 1
        session.undo()
        session.redo()
        assert session.version == 3
        _drag(session, field.id, 1, 1)
        assert session.version == 3
        session.drag_end(field.id)
        assert session.version == 4


class TestDragTransactions:
    """Tests for folding drags into single snapshots."""

    @pytest.mark.unit
    def test_fifty_moves_one_entry(self, session):
        field = session.add("text")
        depth = len(session.history)
        for _ in range(50):
            _drag(session, field.id, 1, 2)
        assert len(session.history) == depth
        assert session.preview.get(field.id).position.x == 50
        assert session.definition.get(field.id).position.x == 0

        session.drag_end({"elementId": field.id})
        assert len(session.history) == depth + 1
        assert session.definition.get(field.id).position.y == 100
        assert session.dragging is None

    @pytest.mark.unit
    def test_drag_end_without_drag(self, session):
        assert session.drag_end() is None

    @pytest.mark.unit
    def test_structural_op_commits_pending_drag(self, session):
        field = session.add("text")
        for _ in range(3):
            _drag(session, field.id, 10, 0)
        session.add("number")
        assert len(session.history) == 4
        session.undo()
        assert session.definition.get(field.id).position.x == 30

    @pytest.mark.unit
    def test_undo_mid_drag_commits_then_undoes(self, session):
        field = session.add("text")
        _drag(session, field.id, 10, 10)
        session.undo()
        assert session.definition.get(field.id).position.x == 0
        assert session.preview.get(field.id).position.x == 0
        session.redo()
        assert session.definition.get(field.id).position.x == 10

    @pytest.mark.unit
    def test_deleting_dragged_element_discards_drag(self, session):
        field = session.add("text")
        _drag(session, field.id, 10, 10)
        session.delete(field.id)
        assert len(session.history) == 3
        session.undo()
        assert session.definition.get(field.id).position.x == 0

    @pytest.mark.unit
    def test_switching_drag_target_commits_previous(self, session):
        a, b = session.add("text"), session.add("number")
        _drag(session, a.id, 5, 0)
        session.on_drag_move(DragMoveEvent(element_id=b.id, delta_x=0, delta_y=5))
        assert session.definition.get(a.id).position.x == 5
        assert session.dragging == b.id

    @pytest.mark.unit
    def test_cancel_drag(self, session):
        field = session.add("text")
        _drag(session, field.id, 10, 10)
        session.cancel_drag()
        assert session.preview.get(field.id).position.x == 0
        assert len(session.history) == 2

    @pytest.mark.unit
    def test_locked_element_cannot_be_dragged(self, session):
        field = session.add("text", locked=True)
        with pytest.raises(ElementLockedError):
            _drag(session, field.id, 1, 1)
        assert session.dragging is None

    @pytest.mark.unit
    def test_malformed_event(self, session):
        with pytest.raises(ValidationError):
            session.on_drag_move({"deltaX": 1})


class TestValidation:
    """Tests for session validation and result tracking."""

    @pytest.mark.unit
    def test_required_then_filled(self, session):
        field = session.add("text", required=True)
        assert session.validate(field.id)[field.id].message == "required"
        assert not session.is_submit_valid()
        session.set_value(field.id, "Jane")
        assert session.is_submit_valid()

    @pytest.mark.unit
    def test_custom_rule_flips_to_valid(self, session):
        field = session.add("text", custom_validation="value == 'ok'")
        session.set_value(field.id, "no")
        assert session.validate()[field.id].message == "Custom validation failed"
        session.set_value(field.id, "ok")
        assert session.validate()[field.id].valid
        assert session.get_validation(field.id).valid

    @pytest.mark.unit
    def test_blur_and_change_triggers(self, session):
        on_blur = session.add("text", required=True)
        on_change = session.add("text", required=True, validate_on_change=True)
        assert session.set_value(on_blur.id, "") is None
        assert session.blur(on_blur.id).message == "required"
        assert session.set_value(on_change.id, "").message == "required"

    @pytest.mark.unit
    def test_blur_disabled(self, session):
        field = session.add("text", required=True, validate_on_blur=False)
        assert session.blur(field.id) is None
        assert session.get_validation(field.id) is None

    @pytest.mark.unit
    def test_results_cached_per_version_and_values(self, session):
        calls = []

        def evaluator(source, value, fields):
            calls.append(value)
            return True

        session = EditorSession(evaluator=evaluator)
        field = session.add("text", custom_validation="value")
        session.set_value(field.id, "a")
        session.validate()
        session.validate()
        session.validate(field.id)
        assert calls == ["a"]
        session.set_value(field.id, "b")
        session.validate()
        assert calls == ["a", "b"]
        session.update(field.id, {"placeholder": "x"})
        session.validate()
        assert calls == ["a", "b", "b"]

    @pytest.mark.unit
    def test_cross_field_rules(self, session):
        password, confirm = session.add("text"), session.add("text")
        session.add_rule(equals_rule(confirm.id, password.id))
        session.set_value(password.id, "a")
        session.set_value(confirm.id, "b")
        assert session.validate()[confirm.id].rule == "equals"
        session.set_value(confirm.id, "a")
        assert session.is_submit_valid()

    @pytest.mark.unit
    def test_delete_drops_results_and_values(self, session):
        field = session.add("text", required=True)
        session.set_value(field.id, "x")
        session.validate()
        session.delete(field.id)
        assert session.get_validation(field.id) is None
        assert field.id not in session.values

    @pytest.mark.unit
    def test_unknown_target(self, session):
        with pytest.raises(ElementNotFoundError):
            session.validate("missing")


class TestAsyncValidation:
    """Tests for off-thread validation and stale result handling."""

    @pytest.mark.asyncio
    async def test_results_applied_when_current(self, session):
        field = session.add("text", required=True)
        results = await session.validate_async()
        assert results[field.id].message == "required"
        assert session.get_validation(field.id) == results[field.id]

    @pytest.mark.asyncio
    async def test_delete_discards_pending_results(self, session):
        field = session.add("text", required=True)
        pending = session.validate_async(field.id)
        session.delete(field.id)
        assert await pending is None
        assert session.get_validation(field.id) is None

    @pytest.mark.asyncio
    async def test_edit_after_request_discards_results(self, session):
        field = session.add("text", required=True)
        pending = session.validate_async()
        session.update(field.id, {"required": False})
        assert await pending is None
        assert session.get_validation(field.id) is None

    @pytest.mark.asyncio
    async def test_value_change_after_request_discards_results(self, session):
        field = session.add("text", required=True)
        pending = session.validate_async()
        session.set_value(field.id, "filled")
        assert await pending is None

    @pytest.mark.asyncio
    async def test_unknown_target_raises_at_call_time(self, session):
        with pytest.raises(ElementNotFoundError):
            session.validate_async("missing")


class TestPersistence:
    """Tests for export and load."""

    @pytest.mark.unit
    def test_round_trip(self, session):
        session.add("text", required=True, max_length=20)
        session.add("number", min=0, max=5)
        text = session.export_json()

        other = EditorSession()
        loaded = other.load_json(text)
        assert loaded == session.definition
        assert len(other.history) == 1
        assert not other.can_undo

    @pytest.mark.unit
    def test_export_runs_save_check(self, session):
        session.add("text", min_length=5, max_length=1)
        with pytest.raises(DefinitionConfigError):
            session.export_json()

    @pytest.mark.unit
    def test_load_rejects_bad_rule(self, session):
        other = EditorSession()
        other.add("text", custom_validation="import os")
        text = other.definition.to_json()
        with pytest.raises(InvalidExpressionError):
            session.load_json(text)

    @pytest.mark.unit
    def test_load_rejects_unknown_kind(self, session):
        text = '{"elements": [{"id": "a", "type": "hologram"}]}'
        with pytest.raises(UnknownKindError):
            session.load_json(text)

    @pytest.mark.unit
    def test_load_resets_values(self, session):
        field = session.add("text")
        session.set_value(field.id, "x")
        session.load_json(session.export_json())
        assert session.values == {}


class TestRenderPayload:
    """Tests for the renderer-facing payload."""

    @pytest.mark.unit
    def test_payload_shape(self, session):
        field = session.add("text", required=True, position={"x": 4, "y": 8})
        session.validate()
        (item,) = session.render_payload()
        assert item["element"]["id"] == field.id
        assert item["element"]["type"] == "text"
        assert item["geometry"]["x"] == 4
        assert item["style"]["fontSize"] == "1rem"
        assert item["validation"]["message"] == "required"

    @pytest.mark.unit
    def test_mode_and_breakpoint(self, session):
        session.add("text", position={"hideMobile": True, "gridColumn": "1/4"})
        (item,) = session.render_payload(LayoutMode.GRID, "mobile")
        assert item["geometry"]["visible"] is False
        assert item["geometry"]["width"] == "25%"
        assert item["geometry"]["x"] is None

    @pytest.mark.unit
    def test_payload_shows_drag_preview(self, session):
        field = session.add("text")
        _drag(session, field.id, 7, 0)
        assert session.render_payload()[0]["geometry"]["x"] == 7

    @pytest.mark.unit
    def test_layout_mode_property(self, session):
        session.layout_mode = "rows"
        assert session.layout_mode is LayoutMode.ROWS
        with pytest.raises(ValueError):
            session.layout_mode = "masonry"

    @pytest.mark.unit
    def test_default_layout_from_environment(self, monkeypatch):
        monkeypatch.setenv("FORMENGINE_DEFAULT_LAYOUT", "columns")
        assert EditorSession().layout_mode is LayoutMode.COLUMNS
