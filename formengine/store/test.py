"""Unit tests for the element store."""

import pytest
from pydantic import ValidationError

from formengine.errors import (
    ElementLockedError,
    ElementNotFoundError,
    IndexOutOfRangeError,
    UnknownKindError,
)
from formengine.schema import ElementKind, FormDefinition

from .lib import ElementStore


@pytest.fixture
def store():
    store = ElementStore(duplicate_offset=20)
    store.add("heading")
    store.add("text")
    store.add("number")
    return store


def _ids(store):
    return store.current.ids


class TestAdd:
    """Tests for adding elements."""

    @pytest.mark.unit
    def test_appends_default_element(self):
        store = ElementStore()
        snapshot = store.add(ElementKind.SELECT)
        assert snapshot is store.current
        element = snapshot.elements[-1]
        assert element.kind is ElementKind.SELECT
        assert element.options == ("Option 1", "Option 2", "Option 3")

    @pytest.mark.unit
    def test_unknown_kind(self):
        with pytest.raises(UnknownKindError):
            ElementStore().add("hologram")

    @pytest.mark.unit
    def test_refreshes_updated_at(self):
        store = ElementStore()
        before = store.current.updated_at
        assert store.add("text").updated_at >= before

    @pytest.mark.unit
    def test_previous_snapshot_untouched(self):
        store = ElementStore()
        first = store.add("text")
        store.add("text")
        assert len(first.elements) == 1


class TestUpdate:
    """Tests for merging field changes."""

    @pytest.mark.unit
    def test_wire_and_python_names(self, store):
        element_id = _ids(store)[1]
        store.update(element_id, {"helpText": "Your name", "max_length": 20})
        element = store.get(element_id)
        assert element.help_text == "Your name"
        assert element.max_length == 20

    @pytest.mark.unit
    def test_nested_groups_are_merged(self, store):
        element_id = _ids(store)[1]
        store.update(element_id, {"style": {"fontSize": "2rem"}, "position": {"hideMobile": True}})
        element = store.get(element_id)
        assert element.style.font_size == "2rem"
        assert element.style.width == "100%"
        assert element.position.hide_mobile is True

    @pytest.mark.unit
    def test_kind_change(self, store):
        element_id = _ids(store)[1]
        store.update(element_id, {"type": "textarea"})
        assert store.get(element_id).kind is ElementKind.TEXTAREA

    @pytest.mark.unit
    def test_unknown_kind_change(self, store):
        with pytest.raises(UnknownKindError):
            store.update(_ids(store)[1], {"type": "hologram"})

    @pytest.mark.unit
    def test_id_is_immutable(self, store):
        with pytest.raises(ValueError):
            store.update(_ids(store)[1], {"id": "other"})

    @pytest.mark.unit
    def test_unknown_field(self, store):
        with pytest.raises(ValueError):
            store.update(_ids(store)[1], {"colour": "red"})

    @pytest.mark.unit
    def test_invalid_value(self, store):
        with pytest.raises(ValidationError):
            store.update(_ids(store)[1], {"minLength": -1})

    @pytest.mark.unit
    def test_missing_element(self, store):
        with pytest.raises(ElementNotFoundError):
            store.update("missing", {"content": "x"})

    @pytest.mark.unit
    def test_locked_accepts_content_fields(self, store):
        element_id = _ids(store)[1]
        store.update(element_id, {"locked": True})
        store.update(element_id, {"content": "Name", "placeholder": "Jane", "hidden": True})
        assert store.get(element_id).content == "Name"

    @pytest.mark.unit
    def test_locked_rejects_other_fields(self, store):
        element_id = _ids(store)[1]
        store.update(element_id, {"locked": True})
        before = store.current
        with pytest.raises(ElementLockedError) as exc_info:
            store.update(element_id, {"content": "x", "style": {"width": "50%"}})
        assert exc_info.value.fields == ("style",)
        assert store.current is before

    @pytest.mark.unit
    def test_unlock(self, store):
        element_id = _ids(store)[1]
        store.update(element_id, {"locked": True})
        store.update(element_id, {"locked": False})
        store.update(element_id, {"required": True})
        assert store.get(element_id).required is True


class TestDelete:
    """Tests for deleting elements."""

    @pytest.mark.unit
    def test_removes_element(self, store):
        element_id = _ids(store)[0]
        store.delete(element_id)
        assert element_id not in store
        assert len(store) == 2

    @pytest.mark.unit
    def test_missing(self, store):
        with pytest.raises(ElementNotFoundError):
            store.delete("missing")

    @pytest.mark.unit
    def test_locked(self, store):
        element_id = _ids(store)[0]
        store.update(element_id, {"locked": True})
        with pytest.raises(ElementLockedError):
            store.delete(element_id)
        assert element_id in store


class TestDuplicate:
    """Tests for duplicating elements."""

    @pytest.mark.unit
    def test_copy_inserted_after_original(self, store):
        original_id = _ids(store)[1]
        store.update(original_id, {"content": "Name", "position": {"x": 5, "y": 7}})
        store.duplicate(original_id)

        ids = _ids(store)
        assert len(ids) == 4
        assert ids[1] == original_id
        copy = store.current.elements[2]
        assert copy.id != original_id
        assert copy.content == "Name (copy)"
        assert copy.position.x == 25
        assert copy.position.y == 27

    @pytest.mark.unit
    def test_copy_keeps_constraints(self, store):
        original_id = _ids(store)[2]
        store.update(original_id, {"min": 1, "max": 9})
        store.duplicate(original_id)
        copy = store.current.elements[3]
        assert (copy.min, copy.max) == (1, 9)

    @pytest.mark.unit
    def test_offset_from_environment(self, monkeypatch):
        monkeypatch.setenv("FORMENGINE_DUPLICATE_OFFSET", "8")
        store = ElementStore()
        store.add("text")
        store.duplicate(_ids(store)[0])
        assert store.current.elements[1].position.x == 8

    @pytest.mark.unit
    def test_missing(self, store):
        with pytest.raises(ElementNotFoundError):
            store.duplicate("missing")


class TestReorder:
    """Tests for reordering elements."""

    @pytest.mark.unit
    def test_is_a_permutation(self, store):
        a, b, c = _ids(store)
        store.reorder(0, 2)
        assert _ids(store) == [b, c, a]
        store.reorder(2, 0)
        assert _ids(store) == [a, b, c]

    @pytest.mark.unit
    @pytest.mark.parametrize(("from_index", "to_index"), [(3, 0), (0, 3), (-1, 0)])
    def test_out_of_range(self, store, from_index, to_index):
        with pytest.raises(IndexOutOfRangeError):
            store.reorder(from_index, to_index)

    @pytest.mark.unit
    def test_locked(self, store):
        store.update(_ids(store)[0], {"locked": True})
        with pytest.raises(ElementLockedError):
            store.reorder(0, 1)

    @pytest.mark.unit
    def test_same_index_is_noop(self, store):
        before = store.current
        assert store.reorder(1, 1) is before


class TestApplyDrag:
    """Tests for drag deltas."""

    @pytest.mark.unit
    def test_deltas_accumulate(self, store):
        element_id = _ids(store)[1]
        for _ in range(5):
            store.apply_drag(element_id, 2, -1)
        position = store.get(element_id).position
        assert (position.x, position.y) == (10, -5)

    @pytest.mark.unit
    def test_locked(self, store):
        element_id = _ids(store)[1]
        store.update(element_id, {"locked": True})
        with pytest.raises(ElementLockedError):
            store.apply_drag(element_id, 1, 1)


class TestLookup:
    """Tests for lookup and replace."""

    @pytest.mark.unit
    def test_index_of(self, store):
        assert store.index_of(_ids(store)[2]) == 2
        with pytest.raises(ElementNotFoundError):
            store.index_of("missing")

    @pytest.mark.unit
    def test_replace(self, store):
        definition = FormDefinition.create(name="Other")
        assert store.replace(definition) is definition
        assert store.current.name == "Other"
        assert len(store) == 0
