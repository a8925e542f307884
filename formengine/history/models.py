"""Data models for the edit history."""

from dataclasses import dataclass
from typing import Any


@dataclass
class HistoryStats:
    """Diagnostics about the snapshot stack.

    Attributes:
        depth: Snapshots currently retained.
        index: Position of the current snapshot.
        max_depth: Retention limit.
        commits: Snapshots committed since the last clear.
        evicted: Oldest snapshots dropped to honour max_depth.
        undo_count: Snapshots reachable by undo.
        redo_count: Snapshots reachable by redo.
    """

    depth: int = 0
    index: int = 0
    max_depth: int = 0
    commits: int = 0
    evicted: int = 0

    @property
    def undo_count(self) -> int:
        return self.index

    @property
    def redo_count(self) -> int:
        return max(self.depth - self.index - 1, 0)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging and CLI output."""
        return {
            "depth": self.depth,
            "index": self.index,
            "max_depth": self.max_depth,
            "commits": self.commits,
            "evicted": self.evicted,
            "undo_count": self.undo_count,
            "redo_count": self.redo_count,
        }


__all__ = ["HistoryStats"]
