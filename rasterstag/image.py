"""
Implements the class :class:`.ImageBuffer` which holds the pixels all RasterStag
filters operate on.

The pixels are stored as a flat, row-major numpy array of shape
``(width * height, 3)`` with one uint8 column per channel, so that the pixel
at ``(row, col)`` lives at index ``row * width + col``.
"""

from __future__ import annotations

from typing import Any, Iterator, NamedTuple, Sequence, TYPE_CHECKING

import numpy as np
import PIL.Image

from .config import settings
from .exceptions import ImageTooLargeError, InvalidGeometryError
from .pixel import Pixel

if TYPE_CHECKING:
    from .filters.base import Filter

PixelSourceTypes = np.ndarray | Sequence[Pixel] | Sequence[tuple[int, int, int]]
"The valid sources for the pixels of a buffer"


class Neighbourhood(NamedTuple):
    """The 3x3 neighbourhood of a pixel, split into its three channels."""

    red: np.ndarray
    green: np.ndarray
    blue: np.ndarray


def _check_geometry(width: int, height: int) -> None:
    if width < 1 or height < 1:
        raise InvalidGeometryError(
            f"Image dimensions must be positive, got {width}x{height}"
        )
    if width * height > settings.MAX_PIXELS:
        raise ImageTooLargeError(
            f"Image of {width}x{height} pixels exceeds the maximum of "
            f"{settings.MAX_PIXELS} pixels"
        )


def _pixel_data_from_source(source: PixelSourceTypes, count: int) -> np.ndarray:
    """
    Converts a pixel source to a flat (count, 3) uint8 array.

    Writeable uint8 arrays of the right shape are referenced directly,
    everything else is copied. Read-only arrays, such as
    ``np.asarray(pil_image)``, are copied since filters write in place.

    :param source: The pixel source
    :param count: The expected number of pixels
    :return: The pixel array
    """
    if isinstance(source, np.ndarray):
        data = source
    elif len(source) > 0 and isinstance(source[0], Pixel):
        data = np.array([p.to_tuple() for p in source], dtype=np.uint8)
    else:
        data = np.asarray(source)
    if data.ndim == 3:
        data = data.reshape(-1, data.shape[2])
    if data.ndim != 2 or data.shape[1] != 3:
        raise InvalidGeometryError(
            f"Expected RGB pixel data of shape (N, 3), got {data.shape}"
        )
    if data.shape[0] != count:
        raise InvalidGeometryError(
            f"Pixel count {data.shape[0]} does not match geometry ({count} pixels)"
        )
    if data.dtype != np.uint8:
        if data.size and (data.min() < 0 or data.max() > 255):
            raise ValueError("Channel values must be in range 0-255")
        data = data.astype(np.uint8)
    if not data.flags.c_contiguous or not data.flags.writeable:
        data = np.array(data, order="C")
    return data


class ImageBuffer:
    """
    A width x height grid of RGB pixels in row-major order.

    The buffer never changes its size. Filters only rewrite pixel values,
    see :meth:`filter`.
    """

    def __init__(
        self,
        width: int,
        height: int,
        pixels: PixelSourceTypes | None = None,
    ):
        """
        :param width: The width in pixels
        :param height: The height in pixels
        :param pixels: The pixel data. Either a uint8 numpy array of shape
            (width*height, 3) or (height, width, 3), which is referenced
            directly and modified by filters, or a sequence of
            :class:`.Pixel` objects or RGB tuples. Black if omitted.

        Raises an InvalidGeometryError if the geometry is malformed.
        """
        width = int(width)
        height = int(height)
        _check_geometry(width, height)
        self.width = width
        "The image's width in pixels"
        self.height = height
        "The image's height in pixels"
        if pixels is None:
            self.pixels = np.zeros((width * height, 3), dtype=np.uint8)
        else:
            self.pixels = _pixel_data_from_source(pixels, width * height)
        "The flat (width*height, 3) uint8 pixel array"

    @classmethod
    def from_pixels(
        cls, pixels: Sequence[Pixel], width: int, height: int
    ) -> ImageBuffer:
        """
        Creates a buffer from a row-major sequence of pixels.
        """
        return cls(width, height, pixels)

    @classmethod
    def from_array(cls, array: np.ndarray) -> ImageBuffer:
        """
        Creates a buffer from a (height, width, 3) array.

        A contiguous, writeable uint8 array is referenced, not copied.

        :param array: The pixel array
        :return: The buffer
        """
        if array.ndim != 3 or array.shape[2] != 3:
            raise InvalidGeometryError(
                f"Expected RGB image (H, W, 3), got shape {array.shape}"
            )
        height, width = array.shape[0:2]
        if array.dtype == np.uint8 and array.flags.c_contiguous and array.flags.writeable:
            return cls(width, height, array.reshape(-1, 3))
        return cls(width, height, array)

    @classmethod
    def from_pil(cls, image: PIL.Image.Image) -> ImageBuffer:
        """
        Creates a buffer from a Pillow image, converting it to RGB.
        """
        if image.mode != "RGB":
            image = image.convert("RGB")
        return cls.from_array(np.array(image, dtype=np.uint8))

    def to_array(self) -> np.ndarray:
        """
        Returns a copy of the pixels as (height, width, 3) uint8 array.
        """
        return self.pixels.reshape(self.height, self.width, 3).copy()

    def to_pil(self) -> PIL.Image.Image:
        """
        Returns the pixels as RGB Pillow image.
        """
        return PIL.Image.fromarray(self.to_array())

    def channel(self, index: int) -> np.ndarray:
        """
        Returns a (height, width) view of a single channel.

        :param index: 0 = red, 1 = green, 2 = blue
        :return: The channel plane. Writes go through to the buffer.
        """
        return self.pixels[:, index].reshape(self.height, self.width)

    def __len__(self) -> int:
        return self.pixels.shape[0]

    def index_to_row_col(self, index: int) -> tuple[int, int]:
        """
        Converts a flat pixel index to (row, col).

        :param index: The index in range [0, width*height)
        :return: The row and column
        """
        if not 0 <= index < len(self):
            raise IndexError(f"Pixel index {index} out of range")
        return divmod(index, self.width)

    def row_col_to_index(self, row: int, col: int) -> int:
        """
        Converts (row, col) to a flat pixel index.

        :param row: The row in range [0, height)
        :param col: The column in range [0, width)
        :return: The index
        """
        if not (0 <= row < self.height and 0 <= col < self.width):
            raise IndexError(f"Pixel ({row}, {col}) out of range")
        return row * self.width + col

    def pixel(self, index: int) -> Pixel:
        """
        Returns a copy of the pixel at index.
        """
        red, green, blue = self.pixels[index]
        return Pixel(int(red), int(green), int(blue))

    def set_pixel(self, index: int, pixel: Pixel) -> None:
        """
        Writes a pixel value to index.
        """
        self.pixels[index] = pixel.to_tuple()

    def __getitem__(self, index: int) -> Pixel:
        return self.pixel(index)

    def __setitem__(self, index: int, pixel: Pixel) -> None:
        self.set_pixel(index, pixel)

    def __iter__(self) -> Iterator[Pixel]:
        for index in range(len(self)):
            yield self.pixel(index)

    def get_neighbour_colours(self, index: int) -> Neighbourhood:
        """
        Returns the 3x3 neighbourhood of an interior pixel, one matrix per channel.

        :param index: Index of a pixel which is not on the image border
        :return: The red, green and blue 3x3 uint8 matrices, row-major
        """
        row, col = self.index_to_row_col(index)
        if not (0 < row < self.height - 1 and 0 < col < self.width - 1):
            raise IndexError(f"Pixel ({row}, {col}) has no full 3x3 neighbourhood")
        block = self.pixels.reshape(self.height, self.width, 3)[
            row - 1:row + 2, col - 1:col + 2
        ]
        return Neighbourhood(
            block[:, :, 0].copy(), block[:, :, 1].copy(), block[:, :, 2].copy()
        )

    def copy(self) -> ImageBuffer:
        """
        Returns an independent copy of this buffer.
        """
        return ImageBuffer(self.width, self.height, self.pixels.copy())

    def filter(self, selector: Filter | str) -> ImageBuffer:
        """
        Applies a filter to this buffer in place.

        :param selector: A filter instance or its compact string form,
            e.g. ``'sobel 2'``
        :return: This buffer
        """
        from .filters import filter_image

        return filter_image(self, selector)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ImageBuffer):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and np.array_equal(self.pixels, other.pixels)
        )

    def __repr__(self) -> str:
        return f"ImageBuffer(width={self.width}, height={self.height})"
