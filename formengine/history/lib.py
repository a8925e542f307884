"""History Manager for form definitions.

Keeps a bounded stack of immutable definition snapshots with a cursor.
Committing after an undo drops the redo branch; committing past the depth
limit drops the oldest snapshot while the cursor stays on the same
snapshot.
"""

import logging

from formengine.config import EnvVar, get_environment
from formengine.schema import FormDefinition

from .models import HistoryStats

logger = logging.getLogger(__name__)


class HistoryManager:
    """Undo/redo stack of definition snapshots.

    Snapshots are frozen models held by reference, so undo and redo hand
    back exactly the snapshot that was committed.

    Example:
        >>> history = HistoryManager(FormDefinition.create())
        >>> history.commit(next_snapshot)
        >>> history.undo().elements
        ()

    Args:
        initial: Snapshot at index 0.
        max_depth: Maximum snapshots retained. If None, from configuration.
    """

    def __init__(self, initial: FormDefinition, max_depth: int | None = None):
        self._max_depth = max(
            1, max_depth if max_depth is not None else get_environment(EnvVar.HISTORY_DEPTH)
        )
        self._snapshots: list[FormDefinition] = [initial]
        self._index = 0
        self._commits = 0
        self._evicted = 0

    @property
    def current(self) -> FormDefinition:
        """Snapshot under the cursor."""
        return self._snapshots[self._index]

    @property
    def index(self) -> int:
        """Cursor position."""
        return self._index

    @property
    def max_depth(self) -> int:
        return self._max_depth

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._snapshots) - 1

    def __len__(self) -> int:
        return len(self._snapshots)

    def commit(self, snapshot: FormDefinition) -> FormDefinition:
        """Record a new snapshot after the cursor.

        Args:
            snapshot: Snapshot to append.

        Returns:
            The committed snapshot.
        """
        del self._snapshots[self._index + 1 :]
        self._snapshots.append(snapshot)
        self._index = len(self._snapshots) - 1
        self._commits += 1

        overflow = len(self._snapshots) - self._max_depth
        if overflow > 0:
            del self._snapshots[:overflow]
            self._index -= overflow
            self._evicted += overflow
            logger.debug(f"Evicted {overflow} oldest snapshot(s) past depth {self._max_depth}")

        logger.debug(f"Committed snapshot {self._index + 1}/{len(self._snapshots)}")
        return snapshot

    def undo(self) -> FormDefinition | None:
        """Step back one snapshot.

        Returns:
            The previous snapshot, or None if there is nothing to undo.
        """
        if not self.can_undo:
            logger.info("Nothing to undo")
            return None
        self._index -= 1
        return self.current

    def redo(self) -> FormDefinition | None:
        """Step forward one snapshot.

        Returns:
            The next snapshot, or None if there is nothing to redo.
        """
        if not self.can_redo:
            logger.info("Nothing to redo")
            return None
        self._index += 1
        return self.current

    def clear(self, snapshot: FormDefinition | None = None) -> None:
        """Reset to a single snapshot (the current one if None)."""
        self._snapshots = [snapshot if snapshot is not None else self.current]
        self._index = 0
        self._commits = 0
        self._evicted = 0

    def get_stats(self) -> HistoryStats:
        """Get stack diagnostics."""
        return HistoryStats(
            depth=len(self._snapshots),
            index=self._index,
            max_depth=self._max_depth,
            commits=self._commits,
            evicted=self._evicted,
        )


__all__ = ["HistoryManager"]
