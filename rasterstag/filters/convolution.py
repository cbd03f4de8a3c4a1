# RasterStag Filters - Convolution
"""
Generic 3x3 convolution and the 8-bit narrowing shared by all kernel filters.

## Narrowing

Weighted sums are converted to channel values by truncating toward zero and
saturating at the 8-bit limits: negative results become 0, results above 255
become 255, NaN becomes 0. Values never wrap around.

Usage:
    from rasterstag.filters.convolution import Convolution, apply_convolution

    image.filter(Convolution(kernel=[[0, -1, 0], [-1, 5, -1], [0, -1, 0]]))
    value = apply_convolution(neighbourhood.red, kernel)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar

import numpy as np

from rasterstag.exceptions import InvalidKernelError
from .base import Filter, FilterContext, register_filter, register_alias

if TYPE_CHECKING:
    from rasterstag.image import ImageBuffer


ConvolutionMatrix = np.ndarray
"A 3x3 float64 kernel"

IDENTITY_KERNEL = ((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 0.0))


def as_kernel(values: Any, size: int = 3) -> ConvolutionMatrix:
    """Convert nested sequences to a read-only square float64 kernel.

    Args:
        values: Nested sequence or array of weights
        size: Required edge length

    Returns:
        The kernel as (size, size) float64 array

    Raises:
        InvalidKernelError: If the shape is wrong or a weight is not finite
    """
    try:
        kernel = np.array(values, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidKernelError(f"Kernel must be a {size}x{size} numeric matrix") from e
    if kernel.shape != (size, size):
        raise InvalidKernelError(
            f"Kernel must be a {size}x{size} matrix, got shape {kernel.shape}"
        )
    if not np.all(np.isfinite(kernel)):
        raise InvalidKernelError("Kernel weights must be finite")
    kernel.setflags(write=False)
    return kernel


def narrow_to_u8(values: np.ndarray | float) -> np.ndarray | int:
    """Truncate and saturate weighted sums to the 0-255 channel range."""
    if np.isscalar(values):
        value = float(values)
        if value != value:  # NaN
            return 0
        return int(min(max(np.trunc(value), 0.0), 255.0))
    values = np.nan_to_num(np.trunc(values), nan=0.0)
    return np.clip(values, 0, 255).astype(np.uint8)


def apply_convolution(neighbourhood: np.ndarray, kernel: ConvolutionMatrix) -> int:
    """Evaluate a kernel on one channel's neighbourhood.

    Shares :func:`convolve_interior` with the whole-image filters, so a pixel
    gets the same value whichever path computes it.

    Args:
        neighbourhood: 3x3 channel values, row-major
        kernel: 3x3 weights

    Returns:
        sum(neighbourhood[i][j] * kernel[i][j]) narrowed to 0-255
    """
    values = np.asarray(neighbourhood, dtype=np.float64)
    weights = np.asarray(kernel, dtype=np.float64)
    if values.shape != weights.shape:
        raise InvalidKernelError(
            f"Neighbourhood {values.shape} and kernel {weights.shape} differ in shape"
        )
    if values.ndim != 2 or values.shape[0] != values.shape[1] or values.shape[0] % 2 == 0:
        raise InvalidKernelError(f"Kernel must be square with odd size, got {weights.shape}")
    return narrow_to_u8(float(convolve_interior(values, weights)[0, 0]))


def convolve_interior(plane: np.ndarray, kernel: ConvolutionMatrix) -> np.ndarray:
    """Evaluate a kernel for every interior sample of a 2D plane at once.

    Terms are accumulated in kernel row-major order, one shifted window at a
    time, so each sample sees exactly the float additions of
    :func:`apply_convolution`.

    Args:
        plane: (H, W) channel values
        kernel: Square (k, k) weights with odd k

    Returns:
        (H - 2*margin, W - 2*margin) float64 weighted sums, not narrowed
    """
    k = kernel.shape[0]
    margin = k // 2
    height, width = plane.shape
    rows = height - 2 * margin
    cols = width - 2 * margin
    source = plane.astype(np.float64)
    sums = np.zeros((rows, cols), dtype=np.float64)
    for j in range(k):
        for l in range(k):
            sums += kernel[j, l] * source[j:j + rows, l:l + cols]
    return sums


@register_filter
@dataclass
class Convolution(Filter):
    """Convolve every interior pixel with a 3x3 kernel.

    Each channel is processed independently. Neighbour values are always read
    from a snapshot of the image taken before the first write. The one pixel
    wide border is left unchanged. Weights are not normalized.

    Parameters:
        kernel: 3x3 matrix of weights, identity by default

    Example:
        'conv kernel=[[0,-1,0],[-1,5,-1],[0,-1,0]]'
    """

    kernel: ConvolutionMatrix = field(default_factory=lambda: as_kernel(IDENTITY_KERNEL))

    _primary_param: ClassVar[str] = 'kernel'

    def __post_init__(self):
        self.kernel = as_kernel(self.kernel)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Convolution):
            return NotImplemented
        return np.array_equal(self.kernel, other.kernel)

    def apply(self, image: ImageBuffer, context: FilterContext | None = None) -> ImageBuffer:
        if image.width < 3 or image.height < 3:
            return image

        snapshot = image.to_array()
        live = image.pixels.reshape(image.height, image.width, 3)
        for channel in range(3):
            sums = convolve_interior(snapshot[:, :, channel], self.kernel)
            live[1:-1, 1:-1, channel] = narrow_to_u8(sums)
        return image


register_alias('conv', Convolution)
register_alias('kernel', Convolution)
register_alias('sharpen', Convolution, kernel=[[0, -1, 0], [-1, 5, -1], [0, -1, 0]])
register_alias('boxblur', Convolution, kernel=[[1 / 9] * 3] * 3)
