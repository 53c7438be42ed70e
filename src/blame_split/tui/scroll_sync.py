"""Mirror cursor line and scroll position between the gutter and the content view.

Writing to the target view fires the target's own move/scroll callbacks
synchronously. The sync state stays non-IDLE across the read of the source and
the write to the target, so those echoes are dropped instead of bouncing back.

// [LAW:dataflow-not-control-flow] Source/target routing is a lookup, not branches.
// [LAW:single-enforcer] Only this module writes one view's position from the other.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from enum import Enum

from blame_split.tui.protocols import Viewport

logger = logging.getLogger(__name__)


class SyncState(Enum):
    IDLE = "idle"
    SYNCING_FROM_A = "syncing_from_a"
    SYNCING_FROM_B = "syncing_from_b"


class ScrollSynchronizer:
    """Bidirectional mirror between view_a and view_b.

    Args:
        view_a: First view (the gutter in the app).
        view_b: Second view (the content view in the app).
    """

    def __init__(self, view_a: Viewport, view_b: Viewport):
        self.view_a = view_a
        self.view_b = view_b
        self.state = SyncState.IDLE
        self.writes = 0
        self.suppressed = 0

    def _route(self, origin) -> tuple[SyncState, Viewport, Viewport] | None:
        if origin is self.view_a:
            return SyncState.SYNCING_FROM_A, self.view_a, self.view_b
        if origin is self.view_b:
            return SyncState.SYNCING_FROM_B, self.view_b, self.view_a
        return None

    @contextmanager
    def _syncing(self, state: SyncState):
        self.state = state
        try:
            yield
        finally:
            self.state = SyncState.IDLE

    def _begin(self, origin) -> tuple[SyncState, Viewport, Viewport] | None:
        if self.state is not SyncState.IDLE:
            # Echo of our own write
            self.suppressed += 1
            return None
        route = self._route(origin)
        if route is None:
            logger.debug("ignoring sync event from unknown origin %r", origin)
            return None
        _, source, target = route
        if not (source.is_attached and target.is_attached):
            return None
        return route

    def on_cursor_moved(self, origin) -> bool:
        """Copy origin's cursor line to the other view. True when a write happened."""
        route = self._begin(origin)
        if route is None:
            return False
        state, source, target = route
        with self._syncing(state):
            target.move_cursor(source.cursor_line)
            self.writes += 1
        return True

    def on_scrolled(self, origin) -> bool:
        """Copy origin's saved view (top line + cursor line) to the other view."""
        route = self._begin(origin)
        if route is None:
            return False
        state, source, target = route
        with self._syncing(state):
            target.restore_view(source.save_view())
            self.writes += 1
        return True
