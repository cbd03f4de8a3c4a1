# RasterStag Filters - Edge Detection
"""
Sobel edge detection filters.

Both filters convert the image to gray and replace every interior pixel by
the gradient magnitude ``sqrt(sum_x**2 + sum_y**2)``, narrowed to 8 bits.
The gradients are computed from the red channel of a snapshot taken before
the gray conversion. Pixels closer to the border than the kernel margin keep
their gray value.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

import numpy as np

from rasterstag.config import settings
from rasterstag.pixel import grayscale_pixels
from .base import Filter, FilterContext, register_filter, register_alias
from .convolution import as_kernel, convolve_interior, narrow_to_u8

if TYPE_CHECKING:
    from rasterstag.image import ImageBuffer

logger = logging.getLogger(__name__)


SOBEL_3_X = as_kernel([
    [-1, 0, 1],
    [-2, 0, 2],
    [-1, 0, 1],
])

SOBEL_3_Y = as_kernel([
    [-1, -2, -1],
    [0, 0, 0],
    [1, 2, 1],
])

SOBEL_5_X = as_kernel([
    [-1, -2, 0, 2, 1],
    [-4, -10, 0, 10, 4],
    [-7, -17, 0, 17, 7],
    [-4, -10, 0, 10, 4],
    [-1, -2, 0, 2, 1],
], size=5)

SOBEL_5_Y = as_kernel([
    [-1, -4, -7, -4, -1],
    [-2, -10, -17, -10, -2],
    [0, 0, 0, 0, 0],
    [2, 10, 17, 10, 2],
    [1, 4, 7, 4, 1],
], size=5)

SOBEL_7_X = as_kernel([
    [-1, -3, -3, 0, 3, 3, 1],
    [-4, -11, -13, 0, 13, 11, 4],
    [-9, -26, -30, 0, 30, 26, 9],
    [-13, -34, -40, 0, 40, 34, 13],
    [-9, -26, -30, 0, 30, 26, 9],
    [-4, -11, -13, 0, 13, 11, 4],
    [-1, -3, -3, 0, 3, 3, 1],
], size=7)

SOBEL_7_Y = as_kernel([
    [-1, -4, -9, -13, -9, -4, -1],
    [-3, -11, -26, -34, -26, -11, -3],
    [-3, -13, -30, -40, -30, -13, -3],
    [0, 0, 0, 0, 0, 0, 0],
    [3, 13, 30, 40, 30, 13, 3],
    [3, 11, 26, 34, 26, 11, 3],
    [1, 4, 9, 13, 9, 4, 1],
], size=7)

SOBEL_KERNELS: dict[int, tuple[np.ndarray, np.ndarray]] = {
    1: (SOBEL_3_X, SOBEL_3_Y),
    2: (SOBEL_5_X, SOBEL_5_Y),
    3: (SOBEL_7_X, SOBEL_7_Y),
}
"Horizontal and vertical kernel per size code (1 = 3x3, 2 = 5x5, 3 = 7x7)"


def _write_gray(image: ImageBuffer, magnitude: np.ndarray, margin: int) -> None:
    """Store narrowed magnitudes as gray values of the interior pixels."""
    grid = image.pixels.reshape(image.height, image.width, 3)
    gray = narrow_to_u8(magnitude)
    grid[margin:image.height - margin, margin:image.width - margin] = gray[:, :, np.newaxis]


@register_filter
@dataclass
class EdgeDetection(Filter):
    """Fixed 3x3 Sobel edge detection.

    Sobel Filter:
              [ -1 0 1 ]        [ -1 -2 -1 ]
        Hx =  [ -2 0 2 ]   Hy = [  0  0  0 ]
              [ -1 0 1 ]        [  1  2  1 ]

    Example:
        'edges'
    """

    def apply(self, image: ImageBuffer, context: FilterContext | None = None) -> ImageBuffer:
        height, width = image.height, image.width
        red = image.channel(0).astype(np.int32)

        grayscale_pixels(image.pixels)
        if width < 3 or height < 3:
            return image

        def at(dr: int, dc: int) -> np.ndarray:
            return red[1 + dr:height - 1 + dr, 1 + dc:width - 1 + dc]

        sum_x = at(-1, 1)
        sum_x = sum_x - at(-1, -1)
        sum_x = sum_x - 2 * at(0, -1)
        sum_x = sum_x + 2 * at(0, 1)
        sum_x = sum_x - at(1, -1)
        sum_x = sum_x + at(1, 1)

        sum_y = -at(-1, -1)
        sum_y = sum_y - 2 * at(-1, 0)
        sum_y = sum_y - at(-1, 1)
        sum_y = sum_y + at(1, -1)
        sum_y = sum_y + 2 * at(1, 0)
        sum_y = sum_y + at(1, 1)

        magnitude = np.sqrt((sum_x * sum_x + sum_y * sum_y).astype(np.float64))
        _write_gray(image, magnitude, 1)
        return image


@register_filter
@dataclass
class SobelFilter(Filter):
    """Sobel edge detection with selectable kernel size.

    Unknown sizes leave the image completely untouched, not even the gray
    conversion is applied.

    Parameters:
        size: Kernel size code, 1 = 3x3, 2 = 5x5, 3 = 7x7

    Example:
        'sobel 2' or 'sobel5'
    """

    size: int = field(default_factory=lambda: settings.DEFAULT_SOBEL_SIZE)

    _primary_param: ClassVar[str] = 'size'

    @property
    def is_supported(self) -> bool:
        """Whether size selects one of the known kernel pairs."""
        # True == 1 as a dict key, so bools are rejected explicitly
        return (
            isinstance(self.size, int)
            and not isinstance(self.size, bool)
            and self.size in SOBEL_KERNELS
        )

    def apply(self, image: ImageBuffer, context: FilterContext | None = None) -> ImageBuffer:
        if not self.is_supported:
            logger.warning(f"Unsupported Sobel size {self.size!r}, image left unchanged")
            if context is not None:
                context['sobel_rejected'] = True
            return image
        kernel_x, kernel_y = SOBEL_KERNELS[self.size]

        red = image.channel(0).astype(np.float64)
        grayscale_pixels(image.pixels)

        margin = kernel_x.shape[0] // 2
        if image.height <= 2 * margin or image.width <= 2 * margin:
            return image

        sum_x = convolve_interior(red, kernel_x)
        sum_y = convolve_interior(red, kernel_y)
        magnitude = np.sqrt(sum_x * sum_x + sum_y * sum_y)
        _write_gray(image, magnitude, margin)
        return image


register_alias('edges', EdgeDetection)
register_alias('edge', EdgeDetection)
register_alias('sobel', SobelFilter)
register_alias('sobel3', SobelFilter, size=1)
register_alias('sobel5', SobelFilter, size=2)
register_alias('sobel7', SobelFilter, size=3)
