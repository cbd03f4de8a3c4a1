"""
RasterStag - In-memory RGB raster filtering: mirrors, tonal filters,
convolution and Sobel edge detection
"""

from .pixel import Pixel
from .image import ImageBuffer, Neighbourhood, PixelSourceTypes
from .config import Settings, settings, configure_logging
from .exceptions import (
    RasterStagError,
    InvalidGeometryError,
    ImageTooLargeError,
    InvalidKernelError,
)
from .filters import (
    Filter,
    FilterContext,
    FilterPipeline,
    MirrorX,
    MirrorY,
    Grayscale,
    Invert,
    Convolution,
    EdgeDetection,
    SobelFilter,
    filter_image,
)

__all__ = [
    # Core types
    "Pixel",
    "ImageBuffer",
    "Neighbourhood",
    "PixelSourceTypes",
    # Configuration
    "Settings",
    "settings",
    "configure_logging",
    # Errors
    "RasterStagError",
    "InvalidGeometryError",
    "ImageTooLargeError",
    "InvalidKernelError",
    # Filters
    "Filter",
    "FilterContext",
    "FilterPipeline",
    "MirrorX",
    "MirrorY",
    "Grayscale",
    "Invert",
    "Convolution",
    "EdgeDetection",
    "SobelFilter",
    "filter_image",
]

__version__ = "0.1.0"
