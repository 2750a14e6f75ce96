"""Pure layout of the information card drawn on the PNG snapshot.

The card sits at a fixed margin from the top-left corner and shows:
- the route name, word-wrapped to at most ``MAX_TITLE_LINES`` lines,
  the last line ending in an ellipsis when more text did not fit;
- the route length in kilometres;
- a color swatch in the route's display color.

Every dimension below is in CSS pixels and is multiplied by ``scale``
(the canvas pixel ratio) so the card has the same physical size on
high-density rasters.  Text is measured through a ``TextMeasurer`` in
raster pixels, so the layout is testable without any drawing surface.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from trail_export.providers.fonts import TextMeasurer

CARD_MARGIN = 16
CARD_PADDING = 14
MIN_CARD_WIDTH = 200
MAX_CARD_WIDTH = 420
MAX_CARD_WIDTH_RATIO = 0.5
CARD_RADIUS = 10

TITLE_FONT_SIZE = 18
TITLE_LINE_HEIGHT = 24
SUBTITLE_FONT_SIZE = 14
SUBTITLE_LINE_HEIGHT = 20
SWATCH_SIZE = 14
SWATCH_GAP = 10

MAX_TITLE_LINES = 3
ELLIPSIS = "…"


@dataclass(frozen=True, slots=True)
class CardLayout:
    """Resolved card geometry in raster pixels.

    Attributes:
        x: Left edge of the card.
        y: Top edge of the card.
        width: Card width.
        height: Card height.
        title_lines: Wrapped (and possibly truncated) title lines.
        subtitle: Length text, e.g. ``"12.35 km"``.
        padding: Inner padding.
        radius: Corner radius.
        swatch: ``(x0, y0, x1, y1)`` of the color swatch.
        text_x: Left edge of the title and subtitle text.
        title_y: Top of the first title line.
        title_font_size: Title font size.
        title_line_height: Distance between title baselines.
        subtitle_y: Top of the subtitle line.
        subtitle_font_size: Subtitle font size.
    """

    x: int
    y: int
    width: int
    height: int
    title_lines: tuple[str, ...]
    subtitle: str
    padding: int
    radius: int
    swatch: tuple[int, int, int, int]
    text_x: int
    title_y: int
    title_font_size: int
    title_line_height: int
    subtitle_y: int
    subtitle_font_size: int


def format_length(length_km: float) -> str:
    """Subtitle text for a route length (two decimals)."""
    return f"{length_km:.2f} km"


def max_card_width(canvas_width: int, scale: float = 1.0) -> int:
    """Largest card width allowed on a canvas ``canvas_width`` pixels wide.

    Half the canvas, capped at ``MAX_CARD_WIDTH`` and at the canvas
    minus both margins, but never below ``MIN_CARD_WIDTH``.
    """
    cap = min(
        MAX_CARD_WIDTH * scale,
        canvas_width * MAX_CARD_WIDTH_RATIO,
        canvas_width - 2 * CARD_MARGIN * scale,
    )
    return round(max(MIN_CARD_WIDTH * scale, cap))


def wrap_title(
    title: str,
    max_width: float,
    measurer: TextMeasurer,
    font_size: float,
    max_lines: int = MAX_TITLE_LINES,
) -> list[str]:
    """Greedy word wrap limited to ``max_lines`` lines.

    Words wider than ``max_width`` are broken between characters.  When
    the text needs more than ``max_lines`` lines, the last kept line is
    shortened until it fits with a trailing ellipsis.

    Returns:
        At least one line (``[""]`` for a blank title).
    """

    def fits(text: str) -> bool:
        return measurer.text_width(text, font_size) <= max_width

    lines: list[str] = []
    current = ""
    for word in title.split():
        candidate = f"{current} {word}" if current else word
        if fits(candidate):
            current = candidate
            continue
        if current:
            lines.append(current)
        current = word
        while not fits(current) and len(current) > 1:
            cut = len(current) - 1
            while cut > 1 and not fits(current[:cut]):
                cut -= 1
            lines.append(current[:cut])
            current = current[cut:]
    if current or not lines:
        lines.append(current)

    if len(lines) <= max_lines:
        return lines

    kept = lines[:max_lines]
    last = kept[-1]
    while last and not fits(last + ELLIPSIS):
        last = last[:-1]
    kept[-1] = last.rstrip() + ELLIPSIS
    return kept


def layout_card(
    title: str,
    subtitle: str,
    canvas_size: tuple[int, int],
    measurer: TextMeasurer,
    scale: float = 1.0,
) -> CardLayout:
    """Compute the card for ``title`` on a raster of ``canvas_size`` pixels.

    Args:
        title: Route name.
        subtitle: Length text (see ``format_length``).
        canvas_size: Raster ``(width, height)`` in pixels.
        measurer: Text width source, in raster pixels.
        scale: Raster pixels per CSS pixel.

    Returns:
        The resolved ``CardLayout``.
    """
    canvas_width, _canvas_height = canvas_size
    margin = round(CARD_MARGIN * scale)
    padding = round(CARD_PADDING * scale)
    swatch_size = round(SWATCH_SIZE * scale)
    swatch_gap = round(SWATCH_GAP * scale)
    title_font_size = round(TITLE_FONT_SIZE * scale)
    title_line_height = round(TITLE_LINE_HEIGHT * scale)
    subtitle_font_size = round(SUBTITLE_FONT_SIZE * scale)
    subtitle_line_height = round(SUBTITLE_LINE_HEIGHT * scale)

    min_width = round(MIN_CARD_WIDTH * scale)
    max_width = max_card_width(canvas_width, scale)
    chrome = 2 * padding + swatch_size + swatch_gap
    text_width_limit = max(1, max_width - chrome)

    title_lines = wrap_title(title, text_width_limit, measurer, title_font_size)
    content_width = max(
        max(measurer.text_width(line, title_font_size) for line in title_lines),
        measurer.text_width(subtitle, subtitle_font_size),
    )
    width = round(min(max(content_width + chrome, min_width), max_width))
    height = 2 * padding + len(title_lines) * title_line_height + subtitle_line_height

    x = margin
    y = margin
    swatch_top = y + padding + (title_line_height - swatch_size) // 2
    swatch = (x + padding, swatch_top, x + padding + swatch_size, swatch_top + swatch_size)
    title_y = y + padding

    return CardLayout(
        x=x,
        y=y,
        width=width,
        height=height,
        title_lines=tuple(title_lines),
        subtitle=subtitle,
        padding=padding,
        radius=round(CARD_RADIUS * scale),
        swatch=swatch,
        text_x=x + padding + swatch_size + swatch_gap,
        title_y=title_y,
        title_font_size=title_font_size,
        title_line_height=title_line_height,
        subtitle_y=title_y + len(title_lines) * title_line_height,
        subtitle_font_size=subtitle_font_size,
    )
