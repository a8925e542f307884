"""Tests for the History Manager."""

import logging

import pytest

from formengine.schema import FormDefinition
from formengine.store import ElementStore

from .lib import HistoryManager


def _snapshots(count):
    """Build a chain of snapshots, each one element longer."""
    store = ElementStore()
    snapshots = [store.current]
    for _ in range(count):
        snapshots.append(store.add("text"))
    return snapshots


class TestCommit:
    """Tests for committing snapshots."""

    @pytest.mark.unit
    def test_advances_cursor(self):
        first, second = _snapshots(1)
        history = HistoryManager(first)
        assert history.commit(second) is second
        assert history.index == 1
        assert history.current is second
        assert len(history) == 2

    @pytest.mark.unit
    def test_truncates_redo_branch(self):
        base, a, b = _snapshots(2)
        history = HistoryManager(base)
        history.commit(a)
        history.undo()
        history.commit(b)
        assert not history.can_redo
        assert len(history) == 2
        assert history.current is b

    @pytest.mark.unit
    def test_eviction_keeps_cursor_on_snapshot(self):
        snapshots = _snapshots(5)
        history = HistoryManager(snapshots[0], max_depth=3)
        for snapshot in snapshots[1:]:
            history.commit(snapshot)
        assert len(history) == 3
        assert history.current is snapshots[-1]
        assert history.index == 2
        assert history.get_stats().evicted == 3
        history.undo()
        history.undo()
        assert history.current is snapshots[3]
        assert history.undo() is None

    @pytest.mark.unit
    def test_depth_from_environment(self, monkeypatch):
        monkeypatch.setenv("FORMENGINE_HISTORY_DEPTH", "4")
        assert HistoryManager(FormDefinition.create()).max_depth == 4


class TestUndoRedo:
    """Tests for moving the cursor."""

    @pytest.mark.unit
    def test_undo_after_adds_matches_earlier_snapshot(self):
        snapshots = _snapshots(4)
        history = HistoryManager(snapshots[0])
        for snapshot in snapshots[1:]:
            history.commit(snapshot)

        restored = history.undo()
        assert restored is snapshots[3]
        assert len(restored.elements) == 3

    @pytest.mark.unit
    def test_redo_restores_equal_snapshot(self):
        snapshots = _snapshots(2)
        history = HistoryManager(snapshots[0])
        history.commit(snapshots[1])
        history.commit(snapshots[2])
        history.undo()
        history.undo()
        assert history.redo() == snapshots[1]
        assert history.redo() == snapshots[2]

    @pytest.mark.unit
    def test_out_of_bounds_is_reported(self, caplog):
        history = HistoryManager(FormDefinition.create())
        with caplog.at_level(logging.INFO, logger="formengine.history"):
            assert history.undo() is None
            assert history.redo() is None
        assert "Nothing to undo" in caplog.text
        assert "Nothing to redo" in caplog.text
        assert history.index == 0

    @pytest.mark.unit
    def test_can_undo_can_redo(self):
        base, a = _snapshots(1)
        history = HistoryManager(base)
        assert not history.can_undo
        history.commit(a)
        assert history.can_undo and not history.can_redo
        history.undo()
        assert history.can_redo and not history.can_undo


class TestClearAndStats:
    """Tests for reset and diagnostics."""

    @pytest.mark.unit
    def test_clear_to_snapshot(self):
        base, a, b = _snapshots(2)
        history = HistoryManager(base)
        history.commit(a)
        history.clear(b)
        assert len(history) == 1
        assert history.current is b
        assert not history.can_undo

    @pytest.mark.unit
    def test_clear_keeps_current(self):
        base, a = _snapshots(1)
        history = HistoryManager(base)
        history.commit(a)
        history.clear()
        assert history.current is a

    @pytest.mark.unit
    def test_stats(self):
        base, a, b = _snapshots(2)
        history = HistoryManager(base, max_depth=10)
        history.commit(a)
        history.commit(b)
        history.undo()
        stats = history.get_stats()
        assert stats.depth == 3
        assert stats.index == 1
        assert stats.commits == 2
        assert stats.undo_count == 1
        assert stats.redo_count == 1
        assert stats.to_dict()["max_depth"] == 10
