"""Element store for a form definition.

The store owns the current immutable FormDefinition snapshot. Every
operation builds a new snapshot, replaces ``current`` with it and returns
it. Operations that cannot be applied raise instead of doing nothing.

The store does not know about history or drag transactions; the editor
session decides which snapshots are committed.
"""

import logging
from typing import Any, Mapping

from pydantic import BaseModel

from formengine.config import EnvVar, get_environment
from formengine.errors import (
    ElementLockedError,
    ElementNotFoundError,
    IndexOutOfRangeError,
)
from formengine.schema import (
    ElementKind,
    ElementPosition,
    ElementStyle,
    FormDefinition,
    FormElement,
    create_default,
    new_element_id,
    resolve_kind,
)

logger = logging.getLogger(__name__)

COPY_SUFFIX = " (copy)"

# Fields a locked element still accepts (python names).
LOCKED_EDITABLE_FIELDS = frozenset(
    {"content", "placeholder", "help_text", "options", "default_value", "locked", "hidden"}
)

_NESTED_MODELS: dict[str, type[BaseModel]] = {
    "style": ElementStyle,
    "position": ElementPosition,
}


def _field_names(model: type[BaseModel]) -> dict[str, str]:
    """Map both wire names and python names to python names."""
    names: dict[str, str] = {}
    for name, info in model.model_fields.items():
        names[name] = name
        if info.alias:
            names[info.alias] = name
    return names


def normalize_fields(model: type[BaseModel], fields: Mapping[str, Any]) -> dict[str, Any]:
    """Translate camelCase or snake_case keys to python field names.

    Raises:
        ValueError: If a key is not a field of the model.
    """
    names = _field_names(model)
    normalized: dict[str, Any] = {}
    for key, value in fields.items():
        if key not in names:
            raise ValueError(f"Unknown {model.__name__} field: {key}")
        normalized[names[key]] = value
    return normalized


class ElementStore:
    """Mutable holder of the current form definition snapshot.

    Example:
        >>> store = ElementStore()
        >>> store.add("text")
        >>> element_id = store.current.elements[0].id
        >>> store.update(element_id, {"content": "Email", "required": True})
        >>> store.duplicate(element_id)
        >>> len(store.current.elements)
        2

    Args:
        definition: Starting snapshot. If None, an empty definition.
        duplicate_offset: x/y offset for duplicates. If None, from
            configuration.
    """

    def __init__(
        self,
        definition: FormDefinition | None = None,
        duplicate_offset: float | None = None,
    ):
        self._current = definition or FormDefinition.create()
        self._duplicate_offset = (
            duplicate_offset
            if duplicate_offset is not None
            else get_environment(EnvVar.DUPLICATE_OFFSET)
        )

    @property
    def current(self) -> FormDefinition:
        """The current snapshot."""
        return self._current

    def replace(self, definition: FormDefinition) -> FormDefinition:
        """Swap in a whole snapshot (undo, redo and load)."""
        self._current = definition
        return definition

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def get(self, element_id: str) -> FormElement:
        """Get an element by id.

        Raises:
            ElementNotFoundError: If absent.
        """
        return self._locate(element_id)[1]

    def index_of(self, element_id: str) -> int:
        """Position of an element in list order.

        Raises:
            ElementNotFoundError: If absent.
        """
        return self._locate(element_id)[0]

    def __contains__(self, element_id: str) -> bool:
        return self._current.index_of(element_id) is not None

    def __len__(self) -> int:
        return len(self._current.elements)

    def _locate(self, element_id: str) -> tuple[int, FormElement]:
        index = self._current.index_of(element_id)
        if index is None:
            raise ElementNotFoundError(element_id)
        return index, self._current.elements[index]

    def _commit(self, elements: list[FormElement]) -> FormDefinition:
        self._current = self._current.with_elements(elements)
        return self._current

    # -------------------------------------------------------------------------
    # Structural operations
    # -------------------------------------------------------------------------

    def add(self, kind: ElementKind | str, **overrides: Any) -> FormDefinition:
        """Append a default element of a kind.

        Raises:
            UnknownKindError: If the kind is not registered.
        """
        element = create_default(kind, **overrides)
        logger.debug(f"Adding {element.kind.value} element {element.id}")
        return self._commit([*self._current.elements, element])

    def update(self, element_id: str, fields: Mapping[str, Any]) -> FormDefinition:
        """Merge field changes into an element.

        Keys may be wire names (``helpText``) or python names
        (``help_text``). ``style`` and ``position`` mappings are merged key
        by key rather than replacing the whole group.

        Raises:
            ElementNotFoundError: If the element is absent.
            ElementLockedError: If the element is locked and a field other
                than content, placeholder, helpText, options, defaultValue,
                locked or hidden is changed.
            UnknownKindError: If ``type`` names an unknown kind.
            ValueError: If ``id`` is changed, a key is unknown, or a value
                fails model validation.
        """
        index, element = self._locate(element_id)
        changes = normalize_fields(FormElement, fields)

        if "id" in changes:
            if changes["id"] != element.id:
                raise ValueError(f"Element id is immutable: {element.id}")
            del changes["id"]

        if element.locked:
            rejected = sorted(set(changes) - LOCKED_EDITABLE_FIELDS)
            if rejected:
                raise ElementLockedError(element.id, tuple(rejected))

        if "kind" in changes:
            changes["kind"] = resolve_kind(changes["kind"])

        data = element.model_dump()
        for group, model in _NESTED_MODELS.items():
            if group in changes and isinstance(changes[group], Mapping):
                changes[group] = {**data[group], **normalize_fields(model, changes[group])}
        data.update(changes)

        updated = FormElement.model_validate(data)
        elements = list(self._current.elements)
        elements[index] = updated
        logger.debug(f"Updated element {element.id}: {', '.join(changes) or 'no fields'}")
        return self._commit(elements)

    def delete(self, element_id: str) -> FormDefinition:
        """Remove an element.

        Raises:
            ElementNotFoundError: If absent.
            ElementLockedError: If locked.
        """
        index, element = self._locate(element_id)
        if element.locked:
            raise ElementLockedError(element.id)

        elements = list(self._current.elements)
        del elements[index]
        logger.debug(f"Deleted element {element.id}")
        return self._commit(elements)

    def duplicate(self, element_id: str) -> FormDefinition:
        """Insert a copy of an element right after it.

        The copy gets a fresh id, ``" (copy)"`` appended to its content,
        and its position shifted by the duplicate offset on both axes.

        Raises:
            ElementNotFoundError: If absent.
        """
        index, element = self._locate(element_id)
        offset = self._duplicate_offset
        position = element.position.model_copy(
            update={"x": element.position.x + offset, "y": element.position.y + offset}
        )
        copy = element.model_copy(
            update={
                "id": new_element_id(),
                "content": (element.content + COPY_SUFFIX).lstrip(),
                "position": position,
            }
        )

        elements = list(self._current.elements)
        elements.insert(index + 1, copy)
        logger.debug(f"Duplicated element {element.id} as {copy.id}")
        return self._commit(elements)

    def reorder(self, from_index: int, to_index: int) -> FormDefinition:
        """Move the element at ``from_index`` to ``to_index``.

        Moving an element onto its own index leaves the snapshot as is.

        Raises:
            IndexOutOfRangeError: If either index is outside the list.
            ElementLockedError: If the moved element is locked.
        """
        size = len(self._current.elements)
        for index in (from_index, to_index):
            if not 0 <= index < size:
                raise IndexOutOfRangeError(index, size)

        element = self._current.elements[from_index]
        if element.locked:
            raise ElementLockedError(element.id)
        if from_index == to_index:
            return self._current

        elements = list(self._current.elements)
        elements.insert(to_index, elements.pop(from_index))
        logger.debug(f"Moved element {element.id} from {from_index} to {to_index}")
        return self._commit(elements)

    def apply_drag(self, element_id: str, dx: float, dy: float) -> FormDefinition:
        """Shift an element's free-layout position by a drag delta.

        Raises:
            ElementNotFoundError: If absent.
            ElementLockedError: If locked.
        """
        index, element = self._locate(element_id)
        if element.locked:
            raise ElementLockedError(element.id, ("position",))

        position = element.position.model_copy(
            update={"x": element.position.x + dx, "y": element.position.y + dy}
        )
        elements = list(self._current.elements)
        elements[index] = element.model_copy(update={"position": position})
        return self._commit(elements)


__all__ = [
    "COPY_SUFFIX",
    "LOCKED_EDITABLE_FIELDS",
    "ElementStore",
    "normalize_fields",
]
