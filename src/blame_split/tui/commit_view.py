"""Modal commit detail: `git show --stat --patch` output in a scrollable log."""

from rich.text import Text
from textual.app import ComposeResult
from textual.screen import ModalScreen
from textual.widgets import RichLog

# Keys that close the detail screen
CLOSE_KEYS = frozenset({"escape", "q", "s", "enter"})


def _line_style(line: str) -> str:
    if line.startswith("+") and not line.startswith("+++"):
        return "green"
    if line.startswith("-") and not line.startswith("---"):
        return "red"
    if line.startswith("@@"):
        return "cyan"
    if line.startswith("commit "):
        return "bold yellow"
    return ""


class CommitDetailScreen(ModalScreen):
    """Shows one commit; any close key dismisses it."""

    DEFAULT_CSS = """
    CommitDetailScreen {
        align: center middle;
    }
    CommitDetailScreen > RichLog {
        width: 90%;
        height: 90%;
        border: solid $accent;
    }
    """

    def __init__(self, commit: str, lines: tuple[str, ...] | list[str]):
        super().__init__()
        self.commit = commit
        self.lines = list(lines)

    def compose(self) -> ComposeResult:
        log = RichLog(wrap=False, highlight=False, markup=False, id="commit-detail")
        log.border_title = self.commit[:8]
        yield log

    def on_mount(self) -> None:
        log = self.query_one(RichLog)
        for line in self.lines:
            log.write(Text(line, style=_line_style(line)))
        log.scroll_home(animate=False)
        log.focus()

    def on_key(self, event) -> None:
        if event.key in CLOSE_KEYS:
            event.stop()
            event.prevent_default()
            self.dismiss()
