# RasterStag Filters - Tonal Adjustments
"""
Per-pixel tonal filters: Grayscale and Invert.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from rasterstag.pixel import grayscale_pixels, invert_pixels
from .base import Filter, FilterContext, register_filter, register_alias

if TYPE_CHECKING:
    from rasterstag.image import ImageBuffer


@register_filter
@dataclass
class Grayscale(Filter):
    """Convert every pixel to gray (channel average)."""

    def apply(self, image: ImageBuffer, context: FilterContext | None = None) -> ImageBuffer:
        grayscale_pixels(image.pixels)
        return image


@register_filter
@dataclass
class Invert(Filter):
    """Invert all channels (255 - value)."""

    def apply(self, image: ImageBuffer, context: FilterContext | None = None) -> ImageBuffer:
        invert_pixels(image.pixels)
        return image


register_alias('gray', Grayscale)
register_alias('grey', Grayscale)
register_alias('negate', Invert)
