"""Textual host for the blame split: gutter on the left, source on the right.

The app owns the widgets and the ScrollSynchronizer; all blame state lives in
the NavigatorSession, and every revision change goes through the
NavigatorController. Key handling is a KEYMAP lookup in on_key.
"""

from __future__ import annotations

import logging

from textual.app import App, ComposeResult
from textual.containers import Horizontal
from textual.screen import ModalScreen
from textual.widgets import Header

from blame_split.io import settings
from blame_split.io.git_cli import GitUnavailableError
from blame_split.navigator import (
    BlameQueryError,
    NavigatorController,
    NavigatorSession,
    NavResult,
    revision_label,
)
from blame_split.palette import Palette
from blame_split.tui.commit_view import CommitDetailScreen
from blame_split.tui.keymap import GUTTER_STEP, KEYMAP
from blame_split.tui.scroll_sync import ScrollSynchronizer
from blame_split.tui.widgets import BlameGutterView, LineView, SourceView

logger = logging.getLogger(__name__)


class TextualScheduler:
    """Scheduler protocol on top of Textual timers (Timer.stop cancels)."""

    def __init__(self, app: App):
        self._app = app

    def schedule(self, delay, callback):
        return self._app.set_timer(delay, callback)


class BlameSplitApp(App):
    """Blame navigator for one file.

    Args:
        path: File path relative to the repository root (what git sees).
        lines: Working content of the file.
        backend: GitBackend (or a test double with the same methods).
        line: Initial cursor line (1-based).
        revision: Optional revision to jump to after the working-tree blame.
        gutter_width: Gutter width in cells; the saved setting when None.
        palette: Commit color palette; module default when None.
        modified: True when lines differ from what is on disk.
        persist_settings: Save gutter width changes to the settings file.
    """

    TITLE = "blame-split"

    CSS = """
    Horizontal {
        height: 1fr;
    }
    """

    def __init__(
        self,
        path: str,
        lines: list[str],
        backend,
        *,
        line: int = 1,
        revision: str | None = None,
        gutter_width: int | None = None,
        palette: Palette | None = None,
        modified: bool = False,
        persist_settings: bool = True,
    ):
        super().__init__()
        self.path = path
        self._initial_lines = list(lines)
        self._initial_line = line
        self._initial_revision = revision
        self._modified = modified
        self._persist_settings = persist_settings
        width = gutter_width if gutter_width is not None else settings.load_gutter_width()
        self._gutter_width = settings.clamp_gutter_width(width)
        self.controller = NavigatorController(
            backend, TextualScheduler(self), notify=self._notify, palette=palette
        )
        self.session: NavigatorSession | None = None
        self._sync: ScrollSynchronizer | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal():
            yield BlameGutterView(self._gutter_width, id="gutter")
            yield SourceView(self.path, id="source")

    @property
    def gutter(self) -> BlameGutterView:
        return self.query_one("#gutter", BlameGutterView)

    @property
    def source(self) -> SourceView:
        return self.query_one("#source", SourceView)

    def on_mount(self) -> None:
        gutter, source = self.gutter, self.source
        source.show_lines(self._initial_lines, self.path, self._modified)

        self._sync = ScrollSynchronizer(gutter, source)
        gutter.cursor_listener = self._on_cursor_moved
        source.cursor_listener = self._on_cursor_moved
        gutter.scroll_listener = self._sync.on_scrolled
        source.scroll_listener = self._sync.on_scrolled
        gutter.resize_listener = self._on_gutter_resized

        try:
            self.session = self.controller.open(self.path, self._initial_line, gutter, source)
        except BlameQueryError as exc:
            logger.error("initial blame failed: %s", exc)
            self.notify(str(exc), severity="error", timeout=10)
            return
        except GitUnavailableError as exc:
            self._fatal(exc)
            return
        gutter.focus()
        if self._initial_revision is not None:
            self._navigate(self.controller.reblame_at, self._initial_revision, self._initial_line)
        self._update_subtitle()

    def _fatal(self, exc: GitUnavailableError) -> None:
        logger.error("git unavailable: %s", exc)
        self.exit(return_code=1, message=f"blame-split: {exc}")

    def _navigate(self, operation, *args) -> NavResult | None:
        """Run a controller operation on the live session and refresh the subtitle."""
        if self.session is None:
            return None
        try:
            result = operation(self.session, *args)
        except GitUnavailableError as exc:
            self._fatal(exc)
            return None
        self._update_subtitle()
        return result

    def on_unmount(self) -> None:
        if self.session is not None:
            self.controller.close(self.session)

    # ─── View callbacks ─────────────────────────────────────────────────────

    def _notify(self, message: str, severity: str) -> None:
        self.notify(message, severity=severity)

    def _on_cursor_moved(self, view: LineView) -> None:
        if self._sync is not None:
            self._sync.on_cursor_moved(view)
        if self.session is not None:
            self.controller.select_line(self.session, view.cursor_line)

    def _on_gutter_resized(self, view: BlameGutterView) -> None:
        if self.session is not None:
            self.controller.relayout(self.session)

    def _update_subtitle(self) -> None:
        if self.session is None:
            self.sub_title = ""
            return
        label = revision_label(self.session.revision)
        self.sub_title = f"{self.path} @ {label}  [{self.session.history.describe()}]"

    # ─── Key dispatch ───────────────────────────────────────────────────────

    async def on_key(self, event) -> None:
        """// [LAW:single-enforcer] on_key is the sole key dispatcher."""
        if isinstance(self.screen, ModalScreen):
            return
        action_name = KEYMAP.get(event.key)
        if action_name:
            event.prevent_default()
            event.stop()
            await self.run_action(action_name)

    def _focused_view(self) -> LineView:
        focused = self.focused
        return focused if isinstance(focused, LineView) else self.gutter

    # ─── Actions ────────────────────────────────────────────────────────────

    def action_close_blame(self) -> None:
        if self.session is not None:
            self.controller.close(self.session)
        self.exit()

    def action_reblame(self) -> None:
        self._navigate(self.controller.reblame_at_line, self.gutter.cursor_line)

    def action_parent(self) -> None:
        self._navigate(self.controller.goto_parent, self.gutter.cursor_line)

    def action_working_tree(self) -> None:
        self._navigate(self.controller.reblame_at, None, self.gutter.cursor_line)

    def action_history_back(self) -> None:
        self._navigate(self.controller.navigate_back)

    def action_history_forward(self) -> None:
        self._navigate(self.controller.navigate_forward)

    def action_show_commit(self) -> None:
        result = self._navigate(self.controller.show_commit, self.gutter.cursor_line)
        if result is not None and result.ok:
            self.push_screen(CommitDetailScreen(result.detail, result.lines))

    def action_narrow_gutter(self) -> None:
        self._resize_gutter(-GUTTER_STEP)

    def action_widen_gutter(self) -> None:
        self._resize_gutter(GUTTER_STEP)

    def _resize_gutter(self, delta: int) -> None:
        width = settings.clamp_gutter_width(self.gutter.requested_width + delta)
        if width == self.gutter.requested_width:
            return
        self.gutter.set_width(width)
        if self._persist_settings:
            try:
                settings.save_gutter_width(width)
            except OSError as exc:
                logger.warning("could not save gutter width: %s", exc)

    def action_cursor_down(self) -> None:
        view = self._focused_view()
        view.move_cursor(view.cursor_line + 1)

    def action_cursor_up(self) -> None:
        view = self._focused_view()
        view.move_cursor(view.cursor_line - 1)

    def action_page_down(self) -> None:
        view = self._focused_view()
        view.move_cursor(view.cursor_line + view.page_height)

    def action_page_up(self) -> None:
        view = self._focused_view()
        view.move_cursor(view.cursor_line - view.page_height)

    def action_cursor_top(self) -> None:
        self._focused_view().move_cursor(1)

    def action_cursor_bottom(self) -> None:
        view = self._focused_view()
        view.move_cursor(view.row_count)
