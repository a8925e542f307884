"""Wire models exchanged with editor collaborators.

Drag and reorder events arrive from the drag-and-drop collaborator as
camelCase JSON objects; the models validate them before they reach the
store.
"""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

_EVENT_CONFIG = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


class DragMoveEvent(BaseModel):
    """Incremental pointer movement of a dragged element."""

    model_config = _EVENT_CONFIG

    element_id: str = Field(..., min_length=1)
    delta_x: float = 0
    delta_y: float = 0


class DragEndEvent(BaseModel):
    """End of a drag gesture."""

    model_config = _EVENT_CONFIG

    element_id: str = Field(..., min_length=1)


class ReorderEvent(BaseModel):
    """Drop of an element onto the slot of another element."""

    model_config = _EVENT_CONFIG

    element_id: str = Field(..., min_length=1)
    over_element_id: str = Field(..., min_length=1)


class FieldEvent(str, Enum):
    """Field interaction that may trigger validation."""

    BLUR = "blur"
    CHANGE = "change"


@dataclass(frozen=True)
class ValidationTicket:
    """State captured when an asynchronous validation is requested.

    Attributes:
        version: Snapshot version the validation ran against.
        values_revision: Revision of the entered values.
        target: ``"all"`` or a single element id.
    """

    version: int
    values_revision: int
    target: str


__all__ = [
    "DragMoveEvent",
    "DragEndEvent",
    "ReorderEvent",
    "FieldEvent",
    "ValidationTicket",
]
