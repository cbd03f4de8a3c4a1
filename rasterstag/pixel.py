"""
Implements :class:`.Pixel`, a single RGB sample with 8 bits per channel.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


def _check_channel(name: str, value: int) -> int:
    value = int(value)
    if not 0 <= value <= 255:
        raise ValueError(f"{name} must be in range 0-255, got {value}")
    return value


@dataclass
class Pixel:
    """
    An RGB color sample.

    Pixels carry no identity beyond their position in an image buffer and are
    freely copied by value. The tonal operations modify the pixel in place.
    """

    red: int = 0
    green: int = 0
    blue: int = 0

    def __post_init__(self):
        self.red = _check_channel("red", self.red)
        self.green = _check_channel("green", self.green)
        self.blue = _check_channel("blue", self.blue)

    @classmethod
    def rgb(cls, red: int, green: int, blue: int) -> Pixel:
        """
        Creates a pixel from its three channel values.

        :param red: The red channel (0-255)
        :param green: The green channel (0-255)
        :param blue: The blue channel (0-255)
        :return: The new pixel
        """
        return cls(red, green, blue)

    @classmethod
    def gray(cls, value: int) -> Pixel:
        """
        Creates a gray pixel with all channels set to value.
        """
        return cls(value, value, value)

    def grayscale(self) -> None:
        """
        Converts the pixel to gray using the channel average.

        The integer mean of the three channels is assigned to all of them.
        """
        self.set_gray((self.red + self.green + self.blue) // 3)

    def invert(self) -> None:
        """
        Replaces every channel c by 255 - c.
        """
        self.red = 255 - self.red
        self.green = 255 - self.green
        self.blue = 255 - self.blue

    def set_gray(self, value: int) -> None:
        """
        Sets all three channels to value.

        :param value: The gray level (0-255)
        """
        value = _check_channel("gray", value)
        self.red = value
        self.green = value
        self.blue = value

    def to_tuple(self) -> tuple[int, int, int]:
        """
        Returns the pixel as (red, green, blue) tuple.
        """
        return self.red, self.green, self.blue

    def copy(self) -> Pixel:
        return Pixel(self.red, self.green, self.blue)


# ============================================================================
# Array forms of the per-pixel operations
# ============================================================================

def grayscale_pixels(pixels: np.ndarray) -> None:
    """Apply :meth:`Pixel.grayscale` to every row of an (N, 3) uint8 array.

    Args:
        pixels: Flat pixel array, modified in place
    """
    gray = pixels.astype(np.uint16).sum(axis=1) // 3
    pixels[:] = gray.astype(np.uint8)[:, np.newaxis]


def invert_pixels(pixels: np.ndarray) -> None:
    """Apply :meth:`Pixel.invert` to every row of an (N, 3) uint8 array."""
    np.subtract(255, pixels, out=pixels)
