"""Tests for the PNG information card layout.

The layout is pure: it is exercised here with a fixed-width measurer
(every character is ``size / 2`` pixels wide) and no drawing surface.
"""

from __future__ import annotations

import pytest

from trail_export.activities.compose_snapshot import (
    format_length,
    layout_card,
    max_card_width,
    wrap_title,
)
from trail_export.activities.compose_snapshot._layout import (
    CARD_MARGIN,
    CARD_PADDING,
    ELLIPSIS,
    MAX_CARD_WIDTH,
    MIN_CARD_WIDTH,
    SUBTITLE_LINE_HEIGHT,
    TITLE_LINE_HEIGHT,
)
from trail_export.providers.fonts import TextMeasurer

# Font size 10 -> 5 px per character; max_width 50 -> 10 characters per line.
SIZE = 10
WIDTH = 50


class TestWrapTitle:
    """Greedy wrapping, hard breaks and truncation."""

    def test_short_title_single_line(self, measurer: TextMeasurer) -> None:
        assert wrap_title("Dolina", WIDTH, measurer, SIZE) == ["Dolina"]

    def test_wraps_on_words(self, measurer: TextMeasurer) -> None:
        assert wrap_title("alpha beta gamma", WIDTH, measurer, SIZE) == ["alpha beta", "gamma"]

    def test_collapses_whitespace(self, measurer: TextMeasurer) -> None:
        assert wrap_title("  alpha   beta  ", WIDTH, measurer, SIZE) == ["alpha beta"]

    def test_breaks_long_words(self, measurer: TextMeasurer) -> None:
        lines = wrap_title("abcdefghijklmnopqrstuvwxyz", WIDTH, measurer, SIZE)
        assert lines == ["abcdefghij", "klmnopqrst", "uvwxyz"]

    def test_truncates_to_three_lines_with_ellipsis(self, measurer: TextMeasurer) -> None:
        lines = wrap_title(
            "one two three four five six seven eight nine ten", WIDTH, measurer, SIZE
        )
        assert lines == ["one two", "three four", f"five six{ELLIPSIS}"]

    def test_exactly_three_lines_not_truncated(self, measurer: TextMeasurer) -> None:
        lines = wrap_title("aaaaaaaaaa bbbbbbbbbb cccccccccc", WIDTH, measurer, SIZE)
        assert lines == ["aaaaaaaaaa", "bbbbbbbbbb", "cccccccccc"]

    def test_full_last_line_is_shortened_for_ellipsis(self, measurer: TextMeasurer) -> None:
        lines = wrap_title("aaaaaaaaaa bbbbbbbbbb cccccccccc dddd", WIDTH, measurer, SIZE)
        assert lines[-1] == f"ccccccccc{ELLIPSIS}"
        assert all(measurer.text_width(line, SIZE) <= WIDTH for line in lines)

    def test_blank_title(self, measurer: TextMeasurer) -> None:
        assert wrap_title("   ", WIDTH, measurer, SIZE) == [""]

    def test_custom_line_limit(self, measurer: TextMeasurer) -> None:
        lines = wrap_title("alpha beta gamma", WIDTH, measurer, SIZE, max_lines=1)
        assert lines == [f"alpha bet{ELLIPSIS}"]


class TestMaxCardWidth:
    """Width bound derived from the canvas."""

    def test_capped_at_maximum(self) -> None:
        assert max_card_width(2000) == MAX_CARD_WIDTH

    def test_half_of_canvas(self) -> None:
        assert max_card_width(600) == 300

    def test_never_below_minimum(self) -> None:
        assert max_card_width(250) == MIN_CARD_WIDTH

    def test_scaled(self) -> None:
        assert max_card_width(4000, scale=2.0) == MAX_CARD_WIDTH * 2


class TestLayoutCard:
    """Card geometry."""

    def test_short_title_uses_minimum_width(self, measurer: TextMeasurer) -> None:
        card = layout_card("Dolina", "3.14 km", (800, 600), measurer)

        assert card.width == MIN_CARD_WIDTH
        assert card.title_lines == ("Dolina",)
        assert card.height == 2 * CARD_PADDING + TITLE_LINE_HEIGHT + SUBTITLE_LINE_HEIGHT
        assert (card.x, card.y) == (CARD_MARGIN, CARD_MARGIN)

    def test_height_follows_line_count(self, measurer: TextMeasurer) -> None:
        title = " ".join(["Kościeliska"] * 12)
        card = layout_card(title, "12.00 km", (800, 600), measurer)

        assert len(card.title_lines) == 3
        assert card.title_lines[-1].endswith(ELLIPSIS)
        assert card.height == 2 * CARD_PADDING + 3 * TITLE_LINE_HEIGHT + SUBTITLE_LINE_HEIGHT
        assert card.subtitle_y == card.title_y + 3 * TITLE_LINE_HEIGHT

    def test_width_clamped_to_canvas_bound(self, measurer: TextMeasurer) -> None:
        title = " ".join(["Kościeliska"] * 12)
        card = layout_card(title, "12.00 km", (800, 600), measurer)
        assert MIN_CARD_WIDTH <= card.width <= max_card_width(800)

    def test_text_fits_inside_card(self, measurer: TextMeasurer) -> None:
        title = "Szlak przez Dolinę Chochołowską i Trzydniowiański Wierch"
        card = layout_card(title, "18.27 km", (640, 480), measurer)

        right_edge = card.x + card.width - card.padding
        for line in card.title_lines:
            assert card.text_x + measurer.text_width(line, card.title_font_size) <= right_edge

    def test_swatch_inside_card(self, measurer: TextMeasurer) -> None:
        card = layout_card("Dolina", "3.14 km", (800, 600), measurer)
        x0, y0, x1, y1 = card.swatch
        assert card.x < x0 < x1 < card.text_x
        assert card.y < y0 < y1 < card.y + card.height

    def test_scale_doubles_geometry(self, measurer: TextMeasurer) -> None:
        one = layout_card("Dolina", "3.14 km", (800, 600), measurer)
        two = layout_card("Dolina", "3.14 km", (1600, 1200), measurer, scale=2.0)

        assert two.width == one.width * 2
        assert two.height == one.height * 2
        assert two.x == one.x * 2
        assert two.title_font_size == one.title_font_size * 2


class TestFormatLength:
    @pytest.mark.parametrize(
        ("km", "expected"),
        [(0.0, "0.00 km"), (3.14159, "3.14 km"), (12.346, "12.35 km"), (120.0, "120.00 km")],
    )
    def test_two_decimals(self, km: float, expected: str) -> None:
        assert format_length(km) == expected
