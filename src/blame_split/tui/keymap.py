"""Key→action mapping for the blame split.

All keyboard input routes through BlameSplitApp.on_key; Textual BINDINGS
are not used. Printable keys are listed under both their character and
Textual's descriptive key name.
"""

# [LAW:one-source-of-truth] Key→action mapping.
KEYMAP: dict[str, str] = {
    # Session
    "q": "close_blame",
    "escape": "close_blame",

    # Revision navigation
    "r": "reblame",
    "p": "parent",
    "w": "working_tree",
    "[": "history_back",
    "left_square_bracket": "history_back",
    "ctrl+o": "history_back",
    "]": "history_forward",
    "right_square_bracket": "history_forward",

    # Commit detail
    "s": "show_commit",
    "enter": "show_commit",

    # Gutter width
    "<": "narrow_gutter",
    "less_than_sign": "narrow_gutter",
    ">": "widen_gutter",
    "greater_than_sign": "widen_gutter",

    # Cursor movement (applies to the focused view; the other view follows)
    "j": "cursor_down",
    "down": "cursor_down",
    "k": "cursor_up",
    "up": "cursor_up",
    "pagedown": "page_down",
    "ctrl+f": "page_down",
    "pageup": "page_up",
    "ctrl+b": "page_up",
    "g": "cursor_top",
    "home": "cursor_top",
    "G": "cursor_bottom",
    "end": "cursor_bottom",
}

# Cells added or removed per gutter resize keypress
GUTTER_STEP = 5
