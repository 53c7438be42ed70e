"""Blame navigation: open, re-blame at a revision, parent hops, back/forward, close.

A NavigatorSession is an explicit handle returned by open(); every other
operation takes it. Refreshes are two-phase: all git queries run first, and
only when every query succeeded are records, colors, content, rows and cursor
applied together. A failed query leaves the session exactly as it was.

// [LAW:one-source-of-truth] session.revision is the displayed revision; history only records visits.
// [LAW:single-enforcer] _apply_frame() is the only writer of displayed state.
// [LAW:dataflow-not-control-flow] Every operation returns a NavResult value.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from blame_split.history import HistoryKind, HistoryStack
from blame_split.hunks import Hunk, aggregate
from blame_split.palette import ColorAssigner, Palette
from blame_split.porcelain import AttributionRecord, BlameStatus, load_blame, normalize_revision
from blame_split.tui.protocols import (
    ContentSnapshot,
    ContentSurface,
    GutterSurface,
    Notify,
    Scheduler,
    TaskHandle,
)
from blame_split.tui.rendering import SHORT_ID_LENGTH, render_hunks

logger = logging.getLogger(__name__)

# Lets the host finish layout after a content swap before the cursor moves
CURSOR_RESTORE_DELAY = 0.01

SEVERITY_INFO = "information"
SEVERITY_WARNING = "warning"
SEVERITY_ERROR = "error"


class BlameQueryError(RuntimeError):
    """The initial blame failed, so there is no state to fall back to."""


class NavAction(Enum):
    REBLAMED = "reblamed"
    PARENT = "parent"
    BACK = "back"
    FORWARD = "forward"
    RELAYOUT = "relayout"
    SELECTED = "selected"
    SHOWN = "shown"
    CLOSED = "closed"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass(frozen=True)
class NavResult:
    """What a navigator operation did and why."""

    action: NavAction
    ok: bool
    detail: str = ""
    lines: tuple[str, ...] = ()


def revision_label(revision: str | None) -> str:
    """Human label: 'working tree', or a short id keeping any ^/~ suffix."""
    if revision is None:
        return "working tree"
    cut = min((i for i in (revision.find("^"), revision.find("~")) if i > 0), default=len(revision))
    base = revision[:cut]
    if len(base) > SHORT_ID_LENGTH and all(c in "0123456789abcdef" for c in base):
        return base[:SHORT_ID_LENGTH] + revision[len(base):]
    return revision


@dataclass
class NavigatorSession:
    """Live state of one blame split."""

    path: str
    gutter: GutterSurface
    content: ContentSurface
    colors: ColorAssigner
    history: HistoryStack = field(default_factory=HistoryStack)
    records: list[AttributionRecord] = field(default_factory=list)
    hunks: list[Hunk] = field(default_factory=list)
    revision: str | None = None
    selected_commit: str | None = None
    # Working content saved while a historical version is displayed
    working: ContentSnapshot | None = None
    pending: list[TaskHandle] = field(default_factory=list)
    closed: bool = False

    @property
    def line_count(self) -> int:
        return len(self.records)

    @property
    def is_historical(self) -> bool:
        return self.working is not None

    def record_at(self, line: int) -> AttributionRecord | None:
        if 1 <= line <= len(self.records):
            return self.records[line - 1]
        return None


@dataclass(frozen=True)
class _Frame:
    """Fully fetched data for one revision, ready to apply."""

    revision: str | None
    records: tuple[AttributionRecord, ...]
    content: list[str] | None  # None: show the working content
    empty: bool


def _log_notify(message: str, severity: str) -> None:
    level = logging.ERROR if severity == SEVERITY_ERROR else logging.INFO
    logger.log(level, "%s", message)


class NavigatorController:
    """Drives blame sessions against a git backend.

    Args:
        backend: Object with blame/blame_contents/show_file/show_commit (GitBackend).
        scheduler: Deferred callback source; handles are cancelled on close.
        notify: Callback(message, severity) for user-visible notices.
        palette: Palette for commit colors (module default when None).
    """

    def __init__(
        self,
        backend,
        scheduler: Scheduler,
        notify: Notify | None = None,
        palette: Palette | None = None,
    ):
        self.backend = backend
        self.scheduler = scheduler
        self.notify = notify or _log_notify
        self.palette = palette

    # ─── Lifecycle ──────────────────────────────────────────────────────────

    def open(
        self,
        path: str,
        line: int,
        gutter: GutterSurface,
        content: ContentSurface,
    ) -> NavigatorSession:
        """Blame the working copy of path and show it.

        Unsaved content (content.snapshot().modified) is blamed from memory.
        Raises BlameQueryError when git reports failure.
        """
        snapshot = content.snapshot()
        outcome = load_blame(
            self.backend,
            path,
            content=list(snapshot.lines) if snapshot.modified else None,
        )
        if outcome.status is BlameStatus.FAILED:
            raise BlameQueryError(outcome.message)

        session = NavigatorSession(
            path=path,
            gutter=gutter,
            content=content,
            colors=ColorAssigner(self.palette),
        )
        frame = _Frame(None, outcome.records, None, outcome.status is BlameStatus.EMPTY)
        self._apply_frame(session, frame, line)
        session.history.push(None, HistoryKind.INITIAL, line)
        logger.info("opened blame for %s (%d lines)", path, session.line_count)
        if frame.empty:
            self.notify(outcome.message, SEVERITY_INFO)
        return session

    def close(self, session: NavigatorSession) -> NavResult:
        """Cancel deferred work and put the working content back. Idempotent."""
        if session.closed:
            return NavResult(NavAction.CLOSED, True, "already closed")
        for handle in session.pending:
            handle.stop()
        session.pending.clear()
        if session.working is not None:
            working = session.working
            session.working = None
            session.content.show_lines(list(working.lines), working.title, working.modified)
        session.closed = True
        logger.info("closed blame for %s", session.path)
        return NavResult(NavAction.CLOSED, True)

    # ─── Revision changes ───────────────────────────────────────────────────

    def reblame_at(
        self,
        session: NavigatorSession,
        revision: str | None,
        line: int,
        kind: HistoryKind = HistoryKind.RECOMPUTED,
    ) -> NavResult:
        """Show blame at revision (None: working tree) and record it in history."""
        if session.closed:
            return self._reject("Blame session is closed")
        revision = normalize_revision(revision)
        action = NavAction.PARENT if kind is HistoryKind.PARENT else NavAction.REBLAMED

        # Read before the refresh clamps the cursor; written back only on success
        cursor_line = session.gutter.cursor_line
        result = self._refresh(session, revision, line, action)
        if result.ok:
            session.history.update_line(cursor_line)
            session.history.push(revision, kind, line)
        return result

    def reblame_at_line(self, session: NavigatorSession, line: int) -> NavResult:
        """Re-blame at the commit that last touched line, landing on its original line."""
        record = session.record_at(line)
        if record is None:
            return self._reject(f"No blame information for line {line}")
        if record.revision is None:
            return self._reject("Line is not committed yet")
        return self.reblame_at(session, record.commit, record.orig_line)

    def goto_parent(self, session: NavigatorSession, line: int) -> NavResult:
        """Re-blame at the first parent of the commit that last touched line."""
        record = session.record_at(line)
        if record is None:
            return self._reject(f"No blame information for line {line}")
        if record.revision is None:
            return self._reject("Uncommitted changes have no parent commit")
        return self.reblame_at(session, f"{record.commit}^", line, HistoryKind.PARENT)

    def navigate_back(self, session: NavigatorSession) -> NavResult:
        return self._step(session, backward=True)

    def navigate_forward(self, session: NavigatorSession) -> NavResult:
        return self._step(session, backward=False)

    def _step(self, session: NavigatorSession, *, backward: bool) -> NavResult:
        if session.closed:
            return self._reject("Blame session is closed")
        history = session.history
        allowed = history.can_go_back() if backward else history.can_go_forward()
        if not allowed:
            edge = "oldest" if backward else "newest"
            return self._reject(f"Already at the {edge} blame in history")

        leaving = history.current
        cursor_line = session.gutter.cursor_line
        saved_cursor = history.cursor
        entry = history.back() if backward else history.forward()
        action = NavAction.BACK if backward else NavAction.FORWARD

        result = self._refresh(session, entry.revision, entry.line, action)
        if result.ok:
            leaving.line = cursor_line
        else:
            # Displayed content did not change, so neither may the history position
            history.seek(saved_cursor)
        return result

    # ─── Display-only updates ───────────────────────────────────────────────

    def relayout(self, session: NavigatorSession) -> NavResult:
        """Re-render rows for the gutter's current width (after a resize)."""
        if session.closed:
            return NavResult(NavAction.RELAYOUT, False, "closed")
        self._render(session)
        return NavResult(NavAction.RELAYOUT, True)

    def record_at(self, session: NavigatorSession, line: int) -> AttributionRecord | None:
        return session.record_at(line)

    def select_line(self, session: NavigatorSession, line: int) -> NavResult:
        """Highlight the hunks of the commit under line; re-renders only on change."""
        if session.closed:
            return NavResult(NavAction.SELECTED, False, "closed")
        record = session.record_at(line)
        commit = record.commit if record is not None else None
        if commit == session.selected_commit:
            return NavResult(NavAction.SELECTED, True, "unchanged")
        session.selected_commit = commit
        self._render(session)
        return NavResult(NavAction.SELECTED, True)

    def show_commit(self, session: NavigatorSession, line: int) -> NavResult:
        """Fetch the commit detail text for the commit that last touched line."""
        record = session.record_at(line)
        if record is None:
            return self._reject(f"No blame information for line {line}")
        if record.revision is None:
            return self._reject("Line is not committed yet")
        result = self.backend.show_commit(record.commit)
        if not result.ok:
            return self._fail(_failure_message("Git show failed", result.stderr))
        return NavResult(NavAction.SHOWN, True, record.commit, tuple(result.lines))

    # ─── Internals ──────────────────────────────────────────────────────────

    def _refresh(
        self, session: NavigatorSession, revision: str | None, line: int, action: NavAction
    ) -> NavResult:
        frame_or_error = self._fetch_frame(session, revision)
        if isinstance(frame_or_error, str):
            return self._fail(frame_or_error)

        frame = frame_or_error
        self._apply_frame(session, frame, line)
        label = revision_label(revision)
        logger.info("%s %s at %s", action.value, session.path, label)
        if frame.empty:
            self.notify(f"No blame information for {session.path} at {label}", SEVERITY_INFO)
        return NavResult(action, True, label)

    def _fetch_frame(self, session: NavigatorSession, revision: str | None) -> _Frame | str:
        """Run every query for revision. Returns the frame or an error message."""
        if revision is None:
            working = session.working or session.content.snapshot()
            outcome = load_blame(
                self.backend,
                session.path,
                content=list(working.lines) if working.modified else None,
            )
            if outcome.status is BlameStatus.FAILED:
                return outcome.message
            return _Frame(None, outcome.records, None, outcome.status is BlameStatus.EMPTY)

        outcome = load_blame(self.backend, session.path, revision)
        if outcome.status is BlameStatus.FAILED:
            return outcome.message
        shown = self.backend.show_file(session.path, revision)
        if not shown.ok:
            return _failure_message("Git show failed", shown.stderr)
        return _Frame(revision, outcome.records, list(shown.lines), outcome.status is BlameStatus.EMPTY)

    def _apply_frame(self, session: NavigatorSession, frame: _Frame, line: int) -> None:
        # Phase 2: nothing below can fail on a query, so state changes together.
        for handle in session.pending:
            handle.stop()
        session.pending.clear()

        session.records = list(frame.records)
        session.hunks = aggregate(session.records)
        session.colors.reset()
        session.revision = frame.revision

        if frame.content is None:
            if session.working is not None:
                working = session.working
                session.working = None
                session.content.show_lines(list(working.lines), working.title, working.modified)
        else:
            if session.working is None:
                session.working = session.content.snapshot()
            title = f"{session.path} @ {revision_label(frame.revision)}"
            session.content.show_lines(frame.content, title, False)

        target = max(1, min(line, session.line_count)) if session.line_count else 1
        record = session.record_at(target)
        session.selected_commit = record.commit if record is not None else None
        self._render(session)
        self._schedule(session, lambda: self._restore_cursor(session, target))

    def _restore_cursor(self, session: NavigatorSession, line: int) -> None:
        if not session.gutter.is_attached or not session.content.is_attached:
            return
        session.gutter.move_cursor(line)
        session.content.move_cursor(line)
        session.gutter.center_cursor()
        session.content.center_cursor()

    def _render(self, session: NavigatorSession) -> None:
        rows = render_hunks(
            session.hunks,
            session.gutter.content_width,
            session.colors,
            selected_commit=session.selected_commit,
        )
        session.gutter.set_rows(rows)

    def _schedule(self, session: NavigatorSession, callback: Callable[[], None]) -> None:
        handle: TaskHandle | None = None

        def run() -> None:
            if handle in session.pending:
                session.pending.remove(handle)
            if session.closed:
                return
            callback()

        handle = self.scheduler.schedule(CURSOR_RESTORE_DELAY, run)
        session.pending.append(handle)

    def _reject(self, message: str) -> NavResult:
        self.notify(message, SEVERITY_WARNING)
        return NavResult(NavAction.REJECTED, False, message)

    def _fail(self, message: str) -> NavResult:
        logger.warning("%s", message)
        self.notify(message, SEVERITY_ERROR)
        return NavResult(NavAction.FAILED, False, message)


def _failure_message(prefix: str, stderr: str) -> str:
    stderr = (stderr or "").strip()
    return f"{prefix}:\n{stderr}" if stderr else prefix
