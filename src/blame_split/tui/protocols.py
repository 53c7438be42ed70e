"""Protocol definitions for the surfaces the navigator drives.

The navigator and scroll synchronizer only see these shapes; the Textual
widgets in widgets.py implement them, and tests use plain fakes.
It has no dependencies on other project modules.
"""

from dataclasses import dataclass
from typing import Callable, Protocol

from textual.strip import Strip


@dataclass(frozen=True)
class ViewSnapshot:
    """Saved scroll view: 1-based top line and cursor line. Column is always 0."""

    top_line: int
    cursor_line: int


@dataclass(frozen=True)
class ContentSnapshot:
    """What a content surface showed before historical content replaced it."""

    lines: tuple[str, ...]
    title: str
    modified: bool


class Viewport(Protocol):
    """A scrollable line view with a cursor line."""

    @property
    def cursor_line(self) -> int:
        """1-based cursor line."""
        ...

    @property
    def is_attached(self) -> bool:
        """False once the view has been closed/unmounted."""
        ...

    def move_cursor(self, line: int) -> None:
        """Put the cursor on line (clamped), column 0."""
        ...

    def center_cursor(self) -> None:
        """Scroll so the cursor line sits mid-viewport."""
        ...

    def save_view(self) -> ViewSnapshot:
        ...

    def restore_view(self, snapshot: ViewSnapshot) -> None:
        """Apply top line and cursor line; horizontal offset resets to 0."""
        ...


class GutterSurface(Viewport, Protocol):
    """The annotation column."""

    @property
    def content_width(self) -> int:
        ...

    def set_rows(self, rows: list[Strip]) -> None:
        ...


class ContentSurface(Viewport, Protocol):
    """The source text view whose content can be swapped for a historical version."""

    @property
    def line_count(self) -> int:
        ...

    def snapshot(self) -> ContentSnapshot:
        ...

    def show_lines(self, lines: list[str], title: str, modified: bool = False) -> None:
        ...


class TaskHandle(Protocol):
    def stop(self) -> None:
        ...


class Scheduler(Protocol):
    """Deferred-callback source (Textual's set_timer in the app)."""

    def schedule(self, delay: float, callback: Callable[[], None]) -> TaskHandle:
        ...


# (message, severity) where severity is "information", "warning" or "error"
Notify = Callable[[str, str], None]
