"""Color palette generator using golden-angle spacing in HSL space.

Golden angle (137.508°) maximizes perceptual distance between consecutively
assigned colors, so the first commits of a file never get neighboring hues.

Foreground colors use L≈0.70, S≈0.75 so commit markers read on dark backgrounds.

ColorAssigner hands palette slots to commits in first-seen order.
"""

import colorsys
import logging
import os

from rich.style import Style

logger = logging.getLogger(__name__)

GOLDEN_ANGLE = 137.508
DEFAULT_SEED_HUE = 190.0
DEFAULT_PALETTE_SIZE = 16

# Fixed hue for dates, independent of the seed
DATE_HUE = 190.0


def _hsl_to_hex(h: float, s: float, lightness: float) -> str:
    """Convert HSL (h in 0-360, s/lightness in 0-1) to #RRGGBB hex string."""
    # colorsys uses h in 0-1
    r, g, b = colorsys.hls_to_rgb(h / 360.0, lightness, s)
    return "#{:02X}{:02X}{:02X}".format(
        int(round(r * 255)),
        int(round(g * 255)),
        int(round(b * 255)),
    )


class Palette:
    """Color palette with golden-angle spacing from a seed hue.

    Args:
        seed_hue: Starting hue in degrees (0-360). Default 190 (cyan).
        count: Number of colors to generate. Default 16.
    """

    def __init__(self, seed_hue: float = DEFAULT_SEED_HUE, count: int = DEFAULT_PALETTE_SIZE):
        if count < 1:
            raise ValueError("palette needs at least one color")
        self._seed_hue = seed_hue
        self._count = count
        self._hues = [(seed_hue + i * GOLDEN_ANGLE) % 360 for i in range(count)]
        self._fg_colors = [_hsl_to_hex(hue, 0.75, 0.70) for hue in self._hues]

    def fg(self, index: int) -> str:
        """Foreground hex color (#RRGGBB) at index (wraps)."""
        return self._fg_colors[index % self._count]

    @property
    def info(self) -> str:
        """Color for dates and other informational text."""
        return _hsl_to_hex(DATE_HUE, 0.75, 0.70)

    @property
    def count(self) -> int:
        """Number of colors in palette."""
        return self._count


# ─── Gutter styles ──────────────────────────────────────────────────────────

MESSAGE_COLOR = "#9A9A9A"


def message_style(bold: bool = False) -> Style:
    """Commit summary text: grey italic, bold when its commit is selected."""
    return Style(color=MESSAGE_COLOR, italic=True, bold=bold)


def date_style(palette: "Palette") -> Style:
    return Style(color=palette.info, bold=True)


class ColorAssigner:
    """Deterministic commit → palette slot mapping in first-seen order.

    // [LAW:one-source-of-truth] Slot allocation lives only here; reset() on revision change.
    """

    def __init__(self, palette: Palette | None = None):
        self.palette = palette or PALETTE
        self._slots: dict[str, int] = {}
        self._next = 0

    def color_for(self, commit: str) -> int:
        slot = self._slots.get(commit)
        if slot is None:
            slot = self._next % self.palette.count
            self._slots[commit] = slot
            self._next += 1
        return slot

    def style_for(self, commit: str, bold: bool = False) -> Style:
        """Rich style for the commit's slot; bold variant highlights the selection."""
        return Style(color=self.palette.fg(self.color_for(commit)), bold=bold)

    def reset(self) -> None:
        self._slots.clear()
        self._next = 0

    def __len__(self) -> int:
        return len(self._slots)


def _get_seed_hue() -> float:
    """Get seed hue from environment or default."""
    env = os.environ.get("BLAME_SPLIT_SEED_HUE")
    if env is not None:
        try:
            return float(env)
        except ValueError:
            logger.warning("invalid BLAME_SPLIT_SEED_HUE=%r, using default", env)
    return DEFAULT_SEED_HUE


def init_palette(seed_hue: float | None = None, count: int = DEFAULT_PALETTE_SIZE) -> Palette:
    """Initialize the global palette. Call before the TUI starts."""
    global PALETTE
    hue = seed_hue if seed_hue is not None else _get_seed_hue()
    PALETTE = Palette(seed_hue=hue, count=count)
    return PALETTE


# Module-level singleton; consumers import this
PALETTE = Palette(seed_hue=_get_seed_hue())
