"""Text measurement for the snapshot card.

The card layout only needs text widths; ``TextMeasurer`` supplies them
in the same pixel units as the output raster.  ``PillowTextMeasurer``
measures with the same Pillow font that later draws the card, so the
layout matches the pixels.
"""

from __future__ import annotations

import abc
from functools import lru_cache
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from PIL import ImageFont


class TextMeasurer(abc.ABC):
    """Measures rendered text width."""

    @abc.abstractmethod
    def text_width(self, text: str, size: float) -> float:
        """Width in pixels of ``text`` rendered at font ``size`` pixels."""


class PillowTextMeasurer(TextMeasurer):
    """Pillow-backed measurer that also hands out the drawing fonts.

    Args:
        font_path: TrueType/OpenType font file; Pillow's bundled default
            font when empty.
    """

    def __init__(self, font_path: str = "") -> None:
        self._font_path = font_path
        self._load = lru_cache(maxsize=16)(self._load_font)

    def font(self, size: float) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
        """Return the font used to draw text at ``size`` pixels."""
        return self._load(max(1, round(size)))

    def text_width(self, text: str, size: float) -> float:
        if not text:
            return 0.0
        return float(self.font(size).getlength(text))

    def _load_font(self, size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
        from PIL import ImageFont

        if self._font_path:
            return ImageFont.truetype(self._font_path, size)
        return ImageFont.load_default(size=size)
