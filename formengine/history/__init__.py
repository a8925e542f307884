"""History module - bounded undo/redo over definition snapshots.

Example usage:
    >>> from formengine.history import HistoryManager
    >>> from formengine.schema import FormDefinition
    >>> history = HistoryManager(FormDefinition.create(), max_depth=50)
    >>> history.can_undo
    False
"""

from .lib import HistoryManager
from .models import HistoryStats

__all__ = [
    # Manager
    "HistoryManager",
    # Models
    "HistoryStats",
]
