"""Editor session: the store, history and validation wired together.

The session is the single entry point for collaborator events. It applies
edits through the element store, commits one history snapshot per
structural edit, folds a whole drag gesture into one snapshot, and keeps
validation results in step with the snapshot they were computed for.

Every visible snapshot change (commit, undo, redo, load) advances
``version``. Asynchronous validation results computed for an older version
are discarded instead of applied.
"""

import asyncio
import logging
from collections.abc import Awaitable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from formengine.config import EnvVar, get_environment
from formengine.errors import ElementNotFoundError, FormEngineError
from formengine.history import HistoryManager, HistoryStats
from formengine.layout import Breakpoint, LayoutMode, resolve_layout
from formengine.schema import ElementKind, FormDefinition, FormElement, resolve_style
from formengine.store import ElementStore
from formengine.validation import (
    ALL,
    CrossFieldRule,
    Evaluator,
    ValidationResult,
    check_definition,
    is_submit_valid,
    validate_definition,
    validated_elements,
)

from .models import (
    DragEndEvent,
    DragMoveEvent,
    FieldEvent,
    ReorderEvent,
    ValidationTicket,
)

logger = logging.getLogger(__name__)

CacheKey = tuple[int, int, str]


def _default_layout_mode() -> LayoutMode:
    configured = get_environment(EnvVar.DEFAULT_LAYOUT)
    try:
        return LayoutMode(configured.strip().lower())
    except ValueError:
        logger.warning(f"Unknown default layout {configured!r}, using free")
        return LayoutMode.FREE


class EditorSession:
    """One user's editing session over a form definition.

    Example:
        >>> session = EditorSession()
        >>> field = session.add("text", required=True)
        >>> session.validate(field.id)[field.id].message
        'required'
        >>> session.set_value(field.id, "Jane")
        >>> session.is_submit_valid()
        True

    Args:
        definition: Starting definition. If None, an empty definition.
        layout_mode: Canvas layout. If None, from configuration.
        history_depth: Undo depth. If None, from configuration.
        rules: Cross-field rules applied on every validation.
        evaluator: Custom rule evaluator; defaults to the restricted
            expression language.
    """

    def __init__(
        self,
        definition: FormDefinition | None = None,
        layout_mode: LayoutMode | str | None = None,
        history_depth: int | None = None,
        rules: tuple[CrossFieldRule, ...] | list[CrossFieldRule] = (),
        evaluator: Evaluator | None = None,
    ):
        self._store = ElementStore(definition)
        self._history = HistoryManager(self._store.current, max_depth=history_depth)
        self._layout_mode = LayoutMode(layout_mode) if layout_mode else _default_layout_mode()
        self._rules: list[CrossFieldRule] = list(rules)
        self._evaluator = evaluator

        self._version = 0
        self._values: dict[str, Any] = {}
        self._values_revision = 0
        self._results: dict[str, ValidationResult] = {}
        self._cache: dict[CacheKey, ValidationResult] = {}
        self._drag_id: str | None = None

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def definition(self) -> FormDefinition:
        """The committed snapshot."""
        return self._history.current

    @property
    def preview(self) -> FormDefinition:
        """The snapshot including an in-progress drag."""
        return self._store.current

    @property
    def version(self) -> int:
        return self._version

    @property
    def history(self) -> HistoryManager:
        return self._history

    @property
    def dragging(self) -> str | None:
        """Id of the element being dragged, if any."""
        return self._drag_id

    @property
    def layout_mode(self) -> LayoutMode:
        return self._layout_mode

    @layout_mode.setter
    def layout_mode(self, mode: LayoutMode | str) -> None:
        self._layout_mode = LayoutMode(mode)

    @property
    def rules(self) -> tuple[CrossFieldRule, ...]:
        return tuple(self._rules)

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo or self._drag_id is not None

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo and self._drag_id is None

    def get_history_stats(self) -> HistoryStats:
        return self._history.get_stats()

    def get(self, element_id: str) -> FormElement:
        """Committed element by id.

        Raises:
            ElementNotFoundError: If absent.
        """
        element = self.definition.get(element_id)
        if element is None:
            raise ElementNotFoundError(element_id)
        return element

    # -------------------------------------------------------------------------
    # Snapshot bookkeeping
    # -------------------------------------------------------------------------

    @contextmanager
    def _refusal(self, operation: str) -> Iterator[None]:
        try:
            yield
        except (FormEngineError, ValueError) as e:
            logger.warning(f"Refused {operation}: {e}")
            raise

    def _advance(self) -> None:
        """Bump the version after a visible snapshot change."""
        self._version += 1
        self._cache.clear()

        live = set(self.definition.ids)
        for store in (self._results, self._values):
            for element_id in [element_id for element_id in store if element_id not in live]:
                del store[element_id]

    def _commit(self, snapshot: FormDefinition) -> FormDefinition:
        if snapshot is self._history.current:
            return snapshot
        self._history.commit(snapshot)
        self._advance()
        return snapshot

    def _settle_drag(self) -> None:
        """Commit a pending drag before another edit is applied."""
        if self._drag_id is None:
            return
        logger.debug(f"Committing pending drag of {self._drag_id}")
        self._drag_id = None
        self._commit(self._store.current)

    def _discard_drag(self) -> None:
        if self._drag_id is None:
            return
        logger.debug(f"Discarding pending drag of {self._drag_id}")
        self._drag_id = None
        self._store.replace(self._history.current)

    # -------------------------------------------------------------------------
    # Structural edits
    # -------------------------------------------------------------------------

    def add(self, kind: ElementKind | str, **overrides: Any) -> FormElement:
        """Append a default element and commit.

        Returns:
            The new element.
        """
        with self._refusal("add"):
            self._settle_drag()
            snapshot = self._store.add(kind, **overrides)
        self._commit(snapshot)
        return snapshot.elements[-1]

    def update(self, element_id: str, fields: Mapping[str, Any]) -> FormElement:
        """Merge field changes into an element and commit.

        Returns:
            The updated element.
        """
        with self._refusal(f"update of {element_id}"):
            self._settle_drag()
            snapshot = self._store.update(element_id, fields)
        self._commit(snapshot)
        return self._store.get(element_id)

    def delete(self, element_id: str) -> FormDefinition:
        """Remove an element and commit.

        A pending drag of the deleted element is discarded rather than
        committed. Stored values and results for the element are dropped.
        """
        with self._refusal(f"delete of {element_id}"):
            if self._drag_id == element_id:
                self._discard_drag()
            else:
                self._settle_drag()
            snapshot = self._store.delete(element_id)
        return self._commit(snapshot)

    def duplicate(self, element_id: str) -> FormElement:
        """Insert a copy after an element and commit.

        Returns:
            The copy.
        """
        with self._refusal(f"duplicate of {element_id}"):
            self._settle_drag()
            snapshot = self._store.duplicate(element_id)
            copy = snapshot.elements[self._store.index_of(element_id) + 1]
        self._commit(snapshot)
        return copy

    def reorder(self, from_index: int, to_index: int) -> FormDefinition:
        """Move an element within the list and commit."""
        with self._refusal(f"reorder {from_index}->{to_index}"):
            self._settle_drag()
            snapshot = self._store.reorder(from_index, to_index)
        return self._commit(snapshot)

    def reorder_by_id(self, element_id: str, over_element_id: str) -> FormDefinition:
        """Move an element into the slot of another element."""
        with self._refusal(f"reorder of {element_id}"):
            self._settle_drag()
            from_index = self._store.index_of(element_id)
            to_index = self._store.index_of(over_element_id)
        return self.reorder(from_index, to_index)

    def on_reorder(self, event: ReorderEvent | Mapping[str, Any]) -> FormDefinition:
        """Handle a reorder event from the drag collaborator."""
        if not isinstance(event, ReorderEvent):
            event = ReorderEvent.model_validate(event)
        return self.reorder_by_id(event.element_id, event.over_element_id)

    # -------------------------------------------------------------------------
    # Drag transactions
    # -------------------------------------------------------------------------

    def on_drag_move(self, event: DragMoveEvent | Mapping[str, Any]) -> FormElement:
        """Apply a drag delta without committing history.

        Moves of a different element first commit the previous drag.

        Returns:
            The element as previewed.
        """
        if not isinstance(event, DragMoveEvent):
            event = DragMoveEvent.model_validate(event)

        with self._refusal(f"drag of {event.element_id}"):
            if self._drag_id is not None and self._drag_id != event.element_id:
                self._settle_drag()
            self._store.apply_drag(event.element_id, event.delta_x, event.delta_y)
        self._drag_id = event.element_id
        return self._store.get(event.element_id)

    def drag_end(
        self, event: DragEndEvent | Mapping[str, Any] | str | None = None
    ) -> FormDefinition | None:
        """Commit the pending drag as one snapshot.

        Args:
            event: End event, or the dragged element id.

        Returns:
            The committed snapshot, or None when no drag was pending.
        """
        if isinstance(event, Mapping):
            event = DragEndEvent.model_validate(event)
        element_id = event.element_id if isinstance(event, DragEndEvent) else event

        if self._drag_id is None:
            logger.debug(f"drag_end without a pending drag ({element_id})")
            return None
        if element_id is not None and element_id != self._drag_id:
            logger.debug(f"drag_end for {element_id} while {self._drag_id} is dragged")
        self._settle_drag()
        return self.definition

    def cancel_drag(self) -> None:
        """Throw away the pending drag."""
        self._discard_drag()

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    def undo(self) -> FormDefinition | None:
        """Step back one snapshot (a pending drag is committed first)."""
        self._settle_drag()
        snapshot = self._history.undo()
        if snapshot is None:
            return None
        self._store.replace(snapshot)
        self._advance()
        return snapshot

    def redo(self) -> FormDefinition | None:
        """Step forward one snapshot."""
        self._settle_drag()
        snapshot = self._history.redo()
        if snapshot is None:
            return None
        self._store.replace(snapshot)
        self._advance()
        return snapshot

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def export_json(self, indent: int | None = 2) -> str:
        """Save the committed definition.

        Raises:
            DefinitionConfigError: If an element's constraints conflict.
            InvalidExpressionError: If a custom rule does not compile.
        """
        self._settle_drag()
        with self._refusal("export"):
            check_definition(self.definition)
        return self.definition.to_json(indent=indent)

    def load_json(self, text: str) -> FormDefinition:
        """Load a saved definition and reset history to it.

        Raises:
            UnknownKindError: If an element has an unknown kind.
            DefinitionConfigError: If an element's constraints conflict.
            InvalidExpressionError: If a custom rule does not compile.
        """
        with self._refusal("load"):
            definition = FormDefinition.from_json(text)
            check_definition(definition)

        self._drag_id = None
        self._store.replace(definition)
        self._history.clear(definition)
        self._values.clear()
        self._values_revision += 1
        self._results.clear()
        self._advance()
        logger.info(f"Loaded definition {definition.id} ({len(definition.elements)} elements)")
        return definition

    # -------------------------------------------------------------------------
    # Values and validation
    # -------------------------------------------------------------------------

    def add_rule(self, rule: CrossFieldRule) -> None:
        """Register a cross-field rule."""
        self._rules.append(rule)
        self._cache.clear()

    def set_value(self, element_id: str, value: Any) -> ValidationResult | None:
        """Record an entered value.

        Returns:
            The field's result when the element validates on change,
            otherwise None.
        """
        self.get(element_id)
        self._values[element_id] = value
        self._values_revision += 1
        self._cache.clear()
        return self.field_event(element_id, FieldEvent.CHANGE)

    def blur(self, element_id: str) -> ValidationResult | None:
        """Field lost focus; validates when the element validates on blur."""
        return self.field_event(element_id, FieldEvent.BLUR)

    def field_event(self, element_id: str, event: FieldEvent | str) -> ValidationResult | None:
        """Validate a field if its blur/change flag asks for it."""
        element = self.get(element_id)
        event = FieldEvent(event)
        wanted = element.validate_on_blur if event == FieldEvent.BLUR else element.validate_on_change
        if not wanted:
            return None
        return self.validate(element_id).get(element_id)

    @property
    def values(self) -> dict[str, Any]:
        return dict(self._values)

    def validate(self, target: str = ALL) -> dict[str, ValidationResult]:
        """Validate the committed definition against the entered values.

        Args:
            target: ``"all"`` or a single element id.

        Returns:
            Element id to result for the validated fields.

        Raises:
            ElementNotFoundError: If target names an absent element.
        """
        definition = self.definition
        if target == ALL:
            wanted = [element.id for element in validated_elements(definition)]
        else:
            self.get(target)
            wanted = [target]

        keys = [self._key(element_id) for element_id in wanted]
        if wanted and all(key in self._cache for key in keys):
            cached = {element_id: self._cache[key] for element_id, key in zip(wanted, keys)}
            self._results.update(cached)
            return cached

        results = validate_definition(
            definition, self._values, self._rules, target, self._evaluator
        )
        self._store_results(results)
        return results

    def validate_async(self, target: str = ALL) -> Awaitable[dict[str, ValidationResult] | None]:
        """Validate off the event loop's thread.

        The snapshot, values and version are captured now, at call time.
        When the work finishes, results are applied only if the session is
        still on the same version and values revision.

        Returns:
            Awaitable resolving to the applied results, or None when they
            were discarded as stale.
        """
        if target != ALL:
            self.get(target)
        ticket = ValidationTicket(self._version, self._values_revision, target)
        return self._run_validation(
            ticket, self.definition, dict(self._values), tuple(self._rules)
        )

    async def _run_validation(
        self,
        ticket: ValidationTicket,
        definition: FormDefinition,
        values: dict[str, Any],
        rules: tuple[CrossFieldRule, ...],
    ) -> dict[str, ValidationResult] | None:
        results = await asyncio.to_thread(
            validate_definition, definition, values, rules, ticket.target, self._evaluator
        )
        if not self.is_current(ticket):
            logger.debug(
                f"Discarding stale validation (version {ticket.version}, now {self._version})"
            )
            return None

        live = set(self.definition.ids)
        results = {element_id: result for element_id, result in results.items() if element_id in live}
        self._store_results(results)
        return results

    def is_current(self, ticket: ValidationTicket) -> bool:
        """Whether a ticket still describes the session state."""
        return ticket.version == self._version and ticket.values_revision == self._values_revision

    def _key(self, element_id: str) -> CacheKey:
        return (self._version, self._values_revision, element_id)

    def _store_results(self, results: Mapping[str, ValidationResult]) -> None:
        for element_id, result in results.items():
            self._cache[self._key(element_id)] = result
            self._results[element_id] = result

    def get_validation(self, element_id: str) -> ValidationResult | None:
        """Latest result for an element, or None if never validated."""
        return self._results.get(element_id)

    def is_submit_valid(self) -> bool:
        """Validate every field and report whether the form may be submitted."""
        return is_submit_valid(self.validate(ALL))

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def render_payload(
        self,
        mode: LayoutMode | str | None = None,
        breakpoint: Breakpoint | str = Breakpoint.DESKTOP,
    ) -> list[dict[str, Any]]:
        """Renderer input for the previewed snapshot, in list order.

        Each item carries the element (wire shape), its resolved geometry,
        its fully resolved style and its latest validation result.
        """
        definition = self.preview
        geometries = resolve_layout(definition, mode or self._layout_mode, breakpoint)
        payload = []
        for element, geometry in zip(definition.elements, geometries):
            result = self._results.get(element.id)
            payload.append(
                {
                    "element": element.model_dump(mode="json", by_alias=True),
                    "geometry": geometry.to_dict(),
                    "style": resolve_style(element),
                    "validation": result.to_dict() if result else None,
                }
            )
        return payload


__all__ = ["EditorSession"]
