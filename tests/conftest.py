"""
Pytest fixtures for RasterStag tests
"""

import numpy as np
import pytest

from rasterstag import ImageBuffer, Pixel


SOBEL_VALUES = [119, 80, 122, 177, 154, 212, 89, 25, 152]
"3x3 gray levels whose Sobel magnitude at the centre is 174"


@pytest.fixture
def uniform_image() -> ImageBuffer:
    """
    A 3x3 image with every pixel set to (100, 150, 200).
    """
    return ImageBuffer.from_pixels([Pixel.rgb(100, 150, 200)] * 9, 3, 3)


@pytest.fixture
def sobel_image() -> ImageBuffer:
    """
    The 3x3 gray reference image for the Sobel filters.
    """
    return ImageBuffer.from_pixels([Pixel.gray(v) for v in SOBEL_VALUES], 3, 3)


@pytest.fixture
def random_image() -> ImageBuffer:
    """
    A deterministic 12x9 image with random colors.
    """
    rng = np.random.default_rng(42)
    return ImageBuffer.from_array(rng.integers(0, 256, (9, 12, 3), dtype=np.uint8))
