"""Visited-revision stack with undo-tree style forward pruning.

// [LAW:one-source-of-truth] cursor always names the displayed entry.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from blame_split.porcelain import normalize_revision


class HistoryKind(Enum):
    INITIAL = "initial"
    RECOMPUTED = "recomputed"
    PARENT = "parent"


@dataclass
class HistoryEntry:
    revision: str | None
    kind: HistoryKind
    line: int


class HistoryStack:
    """Ordered HistoryEntry list with a 1-based cursor (0 while empty)."""

    def __init__(self) -> None:
        self._entries: list[HistoryEntry] = []
        self._cursor = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(list(self._entries))

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def current(self) -> HistoryEntry | None:
        if self._cursor == 0:
            return None
        return self._entries[self._cursor - 1]

    def push(self, revision: str | None, kind: HistoryKind, line: int) -> HistoryEntry:
        """Record a visit.

        Re-pushing the current revision only updates its line. Pushing from the
        middle of the stack drops every entry after the cursor first.
        """
        revision = normalize_revision(revision)
        current = self.current
        if current is not None and current.revision == revision:
            current.line = line
            return current

        del self._entries[self._cursor:]
        entry = HistoryEntry(revision=revision, kind=kind, line=line)
        self._entries.append(entry)
        self._cursor = len(self._entries)
        return entry

    def update_line(self, line: int) -> None:
        current = self.current
        if current is not None:
            current.line = line

    def can_go_back(self) -> bool:
        return self._cursor > 1

    def can_go_forward(self) -> bool:
        return 0 < self._cursor < len(self._entries)

    def back(self) -> HistoryEntry | None:
        """Step back one entry. None (and no change) at the oldest entry."""
        if not self.can_go_back():
            return None
        self._cursor -= 1
        return self.current

    def forward(self) -> HistoryEntry | None:
        """Step forward one entry. None (and no change) at the newest entry."""
        if not self.can_go_forward():
            return None
        self._cursor += 1
        return self.current

    def seek(self, cursor: int) -> None:
        """Restore a previously read cursor value."""
        if not 0 <= cursor <= len(self._entries):
            raise ValueError(f"cursor {cursor} out of range 0..{len(self._entries)}")
        self._cursor = cursor

    def describe(self) -> str:
        """Short position label like ``2/5`` for status displays."""
        return f"{self._cursor}/{len(self._entries)}"
