"""Line-API views for the blame split: the gutter and the source view.

Both are ScrollViews that render pre-built Strips one line at a time and keep
a 1-based cursor line. They implement the GutterSurface / ContentSurface
protocols the navigator drives, and report cursor moves, scrolls and resizes
through plain callbacks so the app can route them to the ScrollSynchronizer.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable

from textual.geometry import Size
from textual.scroll_view import ScrollView
from textual.strip import Strip

from blame_split.tui.protocols import ContentSnapshot, ViewSnapshot
from blame_split.tui.rendering import highlight_source

ViewListener = Callable[["LineView"], None]


class LineView(ScrollView, can_focus=True, inherit_bindings=False):
    """Virtual line display with a cursor line.

    render_line(y) maps viewport row y to the stored strip at scroll_y + y.
    Scroll bindings are not inherited; the app's KEYMAP moves the cursor.
    """

    COMPONENT_CLASSES = {"line-view--cursor"}

    DEFAULT_CSS = """
    LineView {
        height: 1fr;
        overflow-y: scroll;
        overflow-x: auto;
        border: solid $panel;
        &:focus {
            border: solid $accent;
        }
    }
    LineView > .line-view--cursor {
        background: $accent 25%;
    }
    """

    def __init__(self, *, id: str | None = None, classes: str | None = None):
        super().__init__(id=id, classes=classes)
        self._strips: list[Strip] = []
        self._cursor: int = 1
        self._widest: int = 0
        self._restoring: bool = False
        self.cursor_listener: ViewListener | None = None
        self.scroll_listener: ViewListener | None = None

    # ─── Viewport protocol ──────────────────────────────────────────────────

    @property
    def cursor_line(self) -> int:
        return self._cursor

    @property
    def row_count(self) -> int:
        return len(self._strips)

    @property
    def page_height(self) -> int:
        return max(1, self.scrollable_content_region.height)

    def move_cursor(self, line: int) -> None:
        """Move the cursor to line (clamped) and keep it on screen."""
        line = self._clamp(line)
        if line == self._cursor:
            return
        self._cursor = line
        self._scroll_cursor_into_view()
        self.refresh()
        if self.cursor_listener is not None:
            self.cursor_listener(self)

    def center_cursor(self) -> None:
        height = self.scrollable_content_region.height
        if height <= 0:
            return
        top = max(0, self._cursor - 1 - height // 2)
        self.scroll_to(y=top, animate=False, immediate=True)

    def save_view(self) -> ViewSnapshot:
        return ViewSnapshot(top_line=int(self.scroll_y) + 1, cursor_line=self._cursor)

    def restore_view(self, snapshot: ViewSnapshot) -> None:
        self._cursor = self._clamp(snapshot.cursor_line)
        with self._restoring_view():
            self.scroll_to(x=0, y=max(0, snapshot.top_line - 1), animate=False, immediate=True)
        self.refresh()

    # ─── Rendering ──────────────────────────────────────────────────────────

    def render_line(self, y: int) -> Strip:
        """Line API: render a single line at viewport row y."""
        scroll_x, scroll_y = self.scroll_offset
        index = scroll_y + y
        width = self.scrollable_content_region.width
        if index >= len(self._strips):
            return Strip.blank(width, self.rich_style)
        strip = self._strips[index].crop_extend(scroll_x, scroll_x + width, self.rich_style)
        if index == self._cursor - 1:
            strip = strip.apply_style(self.get_component_rich_style("line-view--cursor"))
        return strip.apply_style(self.rich_style)

    def _set_strips(self, strips: list[Strip]) -> None:
        self._strips = strips
        self._widest = max((strip.cell_length for strip in strips), default=0)
        self.virtual_size = Size(self._widest, len(strips))
        self._cursor = self._clamp(self._cursor)
        self.refresh()

    # ─── Scrolling ──────────────────────────────────────────────────────────

    @contextmanager
    def _restoring_view(self):
        self._restoring = True
        try:
            yield
        finally:
            self._restoring = False

    def _clamp(self, line: int) -> int:
        return max(1, min(int(line), max(1, len(self._strips))))

    def _scroll_cursor_into_view(self) -> None:
        height = self.scrollable_content_region.height
        if height <= 0:
            return
        index = self._cursor - 1
        top = int(self.scroll_y)
        if index < top:
            self.scroll_to(y=index, animate=False, immediate=True)
        elif index >= top + height:
            self.scroll_to(y=index - height + 1, animate=False, immediate=True)

    def watch_scroll_y(self, old_value: float, new_value: float) -> None:
        """Report scroll position changes from all sources.

        Must call super() to keep scrollbar sync and refresh.
        """
        super().watch_scroll_y(old_value, new_value)
        if self.scroll_listener is not None and not self._restoring:
            self.scroll_listener(self)


class BlameGutterView(LineView):
    """Fixed-width annotation column; one row per source line."""

    DEFAULT_CSS = """
    BlameGutterView {
        overflow-x: hidden;
        scrollbar-size-vertical: 0;
    }
    """

    def __init__(self, width: int, *, id: str | None = None, classes: str | None = None):
        super().__init__(id=id, classes=classes)
        self._requested_width = width
        self._last_width = 0
        self.resize_listener: ViewListener | None = None
        self.styles.width = width

    @property
    def content_width(self) -> int:
        """Row width in cells; the requested width until layout has happened."""
        width = self.scrollable_content_region.width
        return width if width > 0 else self._requested_width

    @property
    def requested_width(self) -> int:
        return self._requested_width

    def set_rows(self, rows: list[Strip]) -> None:
        self._set_strips(rows)

    def set_width(self, width: int) -> None:
        """Request a new total width; rows re-render from on_resize."""
        self._requested_width = width
        self.styles.width = width

    def on_resize(self, event) -> None:
        width = self.content_width
        if width != self._last_width and width > 0:
            self._last_width = width
            if self.resize_listener is not None:
                self.resize_listener(self)


class SourceView(LineView):
    """Syntax-highlighted file content that can be swapped for another version."""

    DEFAULT_CSS = """
    SourceView {
        width: 1fr;
    }
    """

    def __init__(
        self,
        lexer_path: str,
        *,
        code_theme: str = "github-dark",
        id: str | None = None,
        classes: str | None = None,
    ):
        super().__init__(id=id, classes=classes)
        self.lexer_path = lexer_path
        self.code_theme = code_theme
        self._lines: list[str] = []
        self._title: str = ""
        self._modified: bool = False

    @property
    def line_count(self) -> int:
        return len(self._lines)

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    @property
    def title(self) -> str:
        return self._title

    @property
    def modified(self) -> bool:
        return self._modified

    def snapshot(self) -> ContentSnapshot:
        return ContentSnapshot(tuple(self._lines), self._title, self._modified)

    def show_lines(self, lines: list[str], title: str, modified: bool = False) -> None:
        """Replace the displayed content; the horizontal offset resets to 0."""
        self._lines = list(lines)
        self._title = title
        self._modified = modified
        self.border_title = f"{title} [+]" if modified else title
        strips = highlight_source(self._lines, self.lexer_path, self.app.console, code_theme=self.code_theme)
        self._set_strips(strips)
        with self._restoring_view():
            self.scroll_to(x=0, animate=False, immediate=True)
