"""Tests for the golden-angle palette and commit color assignment."""

import pytest

import blame_split.palette
from blame_split.palette import (
    DEFAULT_PALETTE_SIZE,
    ColorAssigner,
    Palette,
    init_palette,
    message_style,
)
from tests.harness import SHA_A, SHA_B, SHA_C


class TestPalette:
    def test_default_size(self):
        palette = Palette()
        assert palette.count == DEFAULT_PALETTE_SIZE == 16

    def test_colors_are_hex_and_distinct(self):
        palette = Palette()
        colors = [palette.fg(i) for i in range(palette.count)]
        assert all(c.startswith("#") and len(c) == 7 for c in colors)
        assert len(set(colors)) == palette.count

    def test_index_wraps(self):
        palette = Palette(count=4)
        assert palette.fg(4) == palette.fg(0)
        assert palette.fg(7) == palette.fg(3)

    def test_seed_hue_changes_colors(self):
        assert Palette(seed_hue=0).fg(0) != Palette(seed_hue=180).fg(0)

    def test_rejects_empty_palette(self):
        with pytest.raises(ValueError):
            Palette(count=0)

    def test_init_palette_reads_env(self, monkeypatch):
        monkeypatch.setenv("BLAME_SPLIT_SEED_HUE", "42")
        try:
            palette = init_palette()
            assert palette.fg(0) == Palette(seed_hue=42).fg(0)
            assert blame_split.palette.PALETTE is palette
        finally:
            monkeypatch.delenv("BLAME_SPLIT_SEED_HUE")
            init_palette()

    def test_invalid_env_hue_falls_back(self, monkeypatch):
        monkeypatch.setenv("BLAME_SPLIT_SEED_HUE", "teal")
        try:
            assert init_palette().fg(0) == Palette().fg(0)
        finally:
            monkeypatch.delenv("BLAME_SPLIT_SEED_HUE")
            init_palette()


class TestColorAssigner:
    def test_first_seen_order(self):
        colors = ColorAssigner(Palette())
        assert colors.color_for(SHA_B) == 0
        assert colors.color_for(SHA_A) == 1
        assert colors.color_for(SHA_B) == 0
        assert len(colors) == 2

    def test_wraps_after_palette_size(self):
        colors = ColorAssigner(Palette(count=16))
        commits = [f"{i:040x}" for i in range(1, 18)]
        slots = [colors.color_for(c) for c in commits]
        assert slots[:16] == list(range(16))
        # The 17th distinct commit reuses slot 0
        assert slots[16] == 0

    def test_same_commit_same_style(self):
        colors = ColorAssigner(Palette())
        assert colors.style_for(SHA_A) == colors.style_for(SHA_A)
        assert colors.style_for(SHA_A, bold=True).bold
        assert colors.style_for(SHA_A, bold=True).color == colors.style_for(SHA_A).color

    def test_reset_restarts_allocation(self):
        colors = ColorAssigner(Palette())
        colors.color_for(SHA_A)
        colors.color_for(SHA_B)
        colors.reset()
        assert len(colors) == 0
        assert colors.color_for(SHA_C) == 0


def test_message_style_is_italic_grey():
    style = message_style()
    assert style.italic
    assert not style.bold
    assert message_style(bold=True).bold
