"""Editor module - session facade for collaborators.

This module provides:
- EditorSession: edits, drag transactions, undo/redo, validation, payloads
- Wire models for drag and reorder events
- Validation tickets for discarding stale asynchronous results

Example usage:
    >>> from formengine.editor import EditorSession
    >>> session = EditorSession(layout_mode="rows")
    >>> field = session.add("text")
    >>> session.on_drag_move({"elementId": field.id, "deltaX": 5, "deltaY": 0})
    >>> session.drag_end(field.id)
"""

from .lib import EditorSession
from .models import DragEndEvent, DragMoveEvent, FieldEvent, ReorderEvent, ValidationTicket

__all__ = [
    # Session
    "EditorSession",
    # Wire models
    "DragMoveEvent",
    "DragEndEvent",
    "ReorderEvent",
    "FieldEvent",
    "ValidationTicket",
]
