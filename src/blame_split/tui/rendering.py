"""Gutter layout: hunks → fixed-width Strips, plus source-line highlighting.

Every gutter row is exactly `width` cells wide. Widths are measured in
terminal cells (rich.cells), so CJK and combining characters truncate and
align correctly.

Row shapes per hunk:

    - 1a2b3c4d Alice fix the thing          2024-05-01   (single line)
    ┍ 1a2b3c4d Alice                        2024-05-01   (first of many)
    │ fix the thing                                       (second; ┕ when last)
    │                                                     (middle filler)
    ┕                                                     (last filler)

# [LAW:single-enforcer] All width clamping happens in this module.
"""

from __future__ import annotations

from datetime import datetime

from rich.cells import cell_len, get_character_cell_size
from rich.console import Console
from rich.segment import Segment
from rich.style import Style
from rich.syntax import Syntax
from textual.strip import Strip

from blame_split.hunks import Hunk
from blame_split.palette import ColorAssigner, date_style, message_style
from blame_split.porcelain import is_uncommitted

SHORT_ID_LENGTH = 8
UNCOMMITTED_LABEL = "Uncommitted"
ELLIPSIS = "..."
DATE_FORMAT = "%Y-%m-%d"

MARK_SINGLE = "-"
MARK_TOP = "┍"
MARK_MID = "│"
MARK_END = "┕"


def short_id(commit: str) -> str:
    if is_uncommitted(commit):
        return UNCOMMITTED_LABEL
    return commit[:SHORT_ID_LENGTH]


def format_date(timestamp: int) -> str:
    """Local calendar date of a unix timestamp."""
    try:
        return datetime.fromtimestamp(timestamp).strftime(DATE_FORMAT)
    except (OverflowError, OSError, ValueError):
        return "????-??-??"


def truncate_cells(text: str, max_cells: int) -> str:
    """Longest prefix of text that fits in max_cells terminal cells."""
    if max_cells <= 0:
        return ""
    if cell_len(text) <= max_cells:
        return text
    used = 0
    out: list[str] = []
    for ch in text:
        size = get_character_cell_size(ch)
        if used + size > max_cells:
            break
        out.append(ch)
        used += size
    return "".join(out)


def fit_with_ellipsis(text: str, available: int) -> str:
    """Text unchanged when it fits, else cut to available - 3 cells plus '...'."""
    if cell_len(text) <= available:
        return text
    return truncate_cells(text, max(0, available - len(ELLIPSIS))) + ELLIPSIS


def _finish(segments: list[Segment], width: int) -> Strip:
    # // [LAW:single-enforcer] Final clamp: every row is exactly `width` cells.
    return Strip(segments).adjust_cell_length(max(0, width))


def _single_line_row(
    hunk: Hunk, width: int, marker_style: Style, msg_style: Style, when_style: Style
) -> Strip:
    short = short_id(hunk.commit)
    date = format_date(hunk.author_time)
    prefix = f"{MARK_SINGLE} {short} {hunk.author} "
    prefix_len = cell_len(prefix)
    date_len = cell_len(date)

    summary = fit_with_ellipsis(hunk.summary, width - prefix_len - date_len - 1)
    padding = width - prefix_len - cell_len(summary) - date_len
    if padding < 1:
        # Keep at least one space before the date
        excess = 1 - padding
        summary = truncate_cells(summary, max(0, cell_len(summary) - excess))
        padding = 1

    return _finish(
        [
            Segment(f"{MARK_SINGLE} ", marker_style),
            Segment(short, marker_style),
            Segment(f" {hunk.author} "),
            Segment(summary, msg_style),
            Segment(" " * padding),
            Segment(date, when_style),
        ],
        width,
    )


def _first_row(hunk: Hunk, width: int, marker_style: Style, when_style: Style) -> Strip:
    short = short_id(hunk.commit)
    date = format_date(hunk.author_time)
    author = hunk.author
    head_len = cell_len(f"{MARK_TOP} {short} ")
    date_len = cell_len(date)

    padding = width - head_len - cell_len(author) - date_len
    if padding < 1:
        excess = 1 - padding
        author = truncate_cells(author, max(0, cell_len(author) - excess))
        padding = max(1, width - head_len - cell_len(author) - date_len)

    return _finish(
        [
            Segment(f"{MARK_TOP} ", marker_style),
            Segment(short, marker_style),
            Segment(f" {author}"),
            Segment(" " * padding),
            Segment(date, when_style),
        ],
        width,
    )


def _summary_row(hunk: Hunk, width: int, marker_style: Style, msg_style: Style) -> Strip:
    symbol = f"{MARK_END} " if hunk.line_count == 2 else f"{MARK_MID} "
    summary = fit_with_ellipsis(hunk.summary, width - cell_len(symbol))
    padding = max(0, width - cell_len(symbol) - cell_len(summary))
    return _finish(
        [
            Segment(symbol, marker_style),
            Segment(summary, msg_style),
            Segment(" " * padding),
        ],
        width,
    )


def _filler_row(width: int, marker_style: Style, last: bool) -> Strip:
    symbol = MARK_END if last else MARK_MID
    return _finish([Segment(symbol, marker_style), Segment(" " * max(0, width - 1))], width)


def render_hunk(hunk: Hunk, width: int, colors: ColorAssigner, selected: bool = False) -> list[Strip]:
    """All display rows for one hunk (hunk.line_count rows)."""
    marker_style = colors.style_for(hunk.commit, bold=selected)
    msg_style = message_style(bold=selected)
    when_style = date_style(colors.palette)

    if hunk.line_count == 1:
        return [_single_line_row(hunk, width, marker_style, msg_style, when_style)]

    rows = [
        _first_row(hunk, width, marker_style, when_style),
        _summary_row(hunk, width, marker_style, msg_style),
    ]
    for line_in_hunk in range(3, hunk.line_count + 1):
        rows.append(_filler_row(width, marker_style, last=line_in_hunk == hunk.line_count))
    return rows


def render_hunks(
    hunks: list[Hunk],
    width: int,
    colors: ColorAssigner,
    selected_commit: str | None = None,
) -> list[Strip]:
    """Render every hunk; one Strip per source line, in order.

    Colors are allocated in hunk order, so the first commit in the file always
    gets palette slot 0 after a reset.
    """
    rows: list[Strip] = []
    for hunk in hunks:
        selected = selected_commit is not None and hunk.commit == selected_commit
        rows.extend(render_hunk(hunk, width, colors, selected=selected))
    return rows


def strip_text(strip: Strip) -> str:
    """Plain text of a strip (tests and snapshots)."""
    return "".join(segment.text for segment in strip)


# ─── Source view ────────────────────────────────────────────────────────────


def highlight_source(
    lines: list[str],
    path: str,
    console: Console,
    *,
    code_theme: str = "github-dark",
    tab_size: int = 4,
) -> list[Strip]:
    """Syntax-highlight file content into one Strip per line.

    Pygments lexer is guessed from the path; unknown types render as plain text.
    """
    code = "\n".join(line.expandtabs(tab_size) for line in lines)
    lexer = Syntax.guess_lexer(path, code)
    highlighted = Syntax(
        code, lexer, theme=code_theme, tab_size=tab_size, background_color="default"
    ).highlight(code)
    text_lines = highlighted.split("\n", allow_blank=True)
    strips = [Strip(list(text_line.render(console))) for text_line in text_lines]
    # split() yields one line per newline; keep exactly len(lines) rows
    return strips[: len(lines)] + [Strip.blank(0)] * max(0, len(lines) - len(strips))
