"""Drawing the information card onto the rasterised map.

The card is drawn on a transparent overlay and alpha-composited onto
the snapshot so its translucent background blends with the map.
"""

from __future__ import annotations

import io
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from PIL import Image

    from trail_export.activities.compose_snapshot._layout import CardLayout
    from trail_export.providers.fonts import PillowTextMeasurer

logger = logging.getLogger("trail_export.activities.compose_snapshot")

CARD_FILL = (255, 255, 255, 230)
CARD_OUTLINE = (0, 0, 0, 40)
TITLE_COLOR = (17, 24, 39, 255)
SUBTITLE_COLOR = (75, 85, 99, 255)
SWATCH_OUTLINE = (0, 0, 0, 90)


def hex_to_rgba(color: str, alpha: int = 255) -> tuple[int, int, int, int]:
    """Convert ``#RRGGBB`` to an RGBA tuple."""
    value = color.lstrip("#")
    if len(value) != 6:
        msg = f"Expected #RRGGBB, got {color!r}"
        raise ValueError(msg)
    return (int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16), alpha)


def draw_card(
    image: Image.Image,
    layout: CardLayout,
    swatch_color: str,
    measurer: PillowTextMeasurer,
) -> Image.Image:
    """Return ``image`` with the card composited at ``layout``.

    Args:
        image: RGBA snapshot.
        layout: Resolved card geometry.
        swatch_color: Route color as ``#RRGGBB``.
        measurer: Supplies the fonts the layout was measured with.
    """
    from PIL import Image, ImageDraw

    overlay = Image.new("RGBA", image.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)

    box = (layout.x, layout.y, layout.x + layout.width, layout.y + layout.height)
    draw.rounded_rectangle(box, radius=layout.radius, fill=CARD_FILL, outline=CARD_OUTLINE)
    draw.rectangle(layout.swatch, fill=hex_to_rgba(swatch_color), outline=SWATCH_OUTLINE)

    title_font = measurer.font(layout.title_font_size)
    for index, line in enumerate(layout.title_lines):
        y = layout.title_y + index * layout.title_line_height
        draw.text((layout.text_x, y), line, font=title_font, fill=TITLE_COLOR)

    subtitle_font = measurer.font(layout.subtitle_font_size)
    draw.text(
        (layout.text_x, layout.subtitle_y),
        layout.subtitle,
        font=subtitle_font,
        fill=SUBTITLE_COLOR,
    )

    logger.debug(
        "Card drawn | lines=%d | width=%d | height=%d",
        len(layout.title_lines),
        layout.width,
        layout.height,
    )
    return Image.alpha_composite(image.convert("RGBA"), overlay)


def encode_png(image: Image.Image) -> bytes:
    """Serialise ``image`` as PNG bytes."""
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
