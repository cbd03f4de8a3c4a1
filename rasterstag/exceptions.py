"""Exception classes for RasterStag."""


class RasterStagError(Exception):
    """Base exception for RasterStag errors."""

    pass


class InvalidGeometryError(RasterStagError, ValueError):
    """Raised when width, height and pixel count of a buffer do not agree."""

    pass


class ImageTooLargeError(InvalidGeometryError):
    """Raised when a buffer exceeds the configured maximum pixel count."""

    pass


class InvalidKernelError(RasterStagError, ValueError):
    """Raised for convolution kernels which are not 3x3 finite matrices."""

    pass
