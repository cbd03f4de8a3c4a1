# RasterStag Filters - Geometric Transforms
"""
Mirror filters which reflect one half of the image onto the other.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .base import Filter, FilterContext, register_filter, register_alias

if TYPE_CHECKING:
    from rasterstag.image import ImageBuffer


@register_filter
@dataclass
class MirrorX(Filter):
    """Reflect the left half onto the right half.

    For each column col < width // 2 the pixel is copied to column
    width - 1 - col of the same row. The centre column of odd widths keeps
    its value. Applying the filter twice gives the same result as once.
    """

    def apply(self, image: ImageBuffer, context: FilterContext | None = None) -> ImageBuffer:
        mid = image.width // 2
        if mid == 0:
            return image
        grid = image.pixels.reshape(image.height, image.width, 3)
        # Sources are all < mid, targets all >= width - mid >= mid
        grid[:, image.width - mid:] = grid[:, mid - 1::-1]
        return image


@register_filter
@dataclass
class MirrorY(Filter):
    """Reflect the top half onto the bottom half.

    For each row < height // 2 the row is copied to height - 1 - row.
    The centre row of odd heights keeps its value.
    """

    def apply(self, image: ImageBuffer, context: FilterContext | None = None) -> ImageBuffer:
        mid = image.height // 2
        if mid == 0:
            return image
        grid = image.pixels.reshape(image.height, image.width, 3)
        grid[image.height - mid:] = grid[mid - 1::-1]
        return image


register_alias('mirror', MirrorX)
register_alias('flipx', MirrorX)
register_alias('flipy', MirrorY)
