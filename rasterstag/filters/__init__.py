# RasterStag Filters Module
"""
Dataclass-based filter system for in-place raster filtering.

Every filter is a JSON-serializable dataclass; the class selects the filter
variant and the fields carry its parameters. Filters can be composed into a
FilterPipeline.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .base import (
    Filter,
    FilterContext,
    FILTER_REGISTRY,
    FILTER_ALIASES,
    register_filter,
    register_alias,
)

from .pipeline import FilterPipeline

from .geometric import (
    MirrorX,
    MirrorY,
)

from .color import (
    Grayscale,
    Invert,
)

from .convolution import (
    Convolution,
    ConvolutionMatrix,
    apply_convolution,
    narrow_to_u8,
)

from .edge import (
    EdgeDetection,
    SobelFilter,
    SOBEL_KERNELS,
)

if TYPE_CHECKING:
    from rasterstag.image import ImageBuffer

logger = logging.getLogger(__name__)


def filter_image(
    image: 'ImageBuffer',
    selector: Filter | str,
    context: FilterContext | None = None,
) -> 'ImageBuffer':
    """Apply one filter to image in place.

    :param image: The buffer to modify.
    :param selector: A filter instance, or its compact string form such as
        ``'sobel 2'`` or ``'gray|invert'``.
    :param context: Optional context receiving filter results.
    :returns: The same buffer.
    """
    if isinstance(selector, str):
        if '|' in selector or ';' in selector:
            selector = FilterPipeline.parse(selector)
        else:
            selector = Filter.parse(selector)
    if not isinstance(selector, Filter):
        raise TypeError(f"Expected a Filter or filter string, got {type(selector).__name__}")
    logger.debug(f"Applying {selector.type} to {image.width}x{image.height} image")
    return selector.apply(image, context)


__all__ = [
    # Base classes
    'Filter',
    'FilterContext',
    'FILTER_REGISTRY',
    'FILTER_ALIASES',
    'register_filter',
    'register_alias',
    'filter_image',
    # Pipeline
    'FilterPipeline',
    # Geometric
    'MirrorX',
    'MirrorY',
    # Tonal
    'Grayscale',
    'Invert',
    # Convolution
    'Convolution',
    'ConvolutionMatrix',
    'apply_convolution',
    'narrow_to_u8',
    # Edge detection
    'EdgeDetection',
    'SobelFilter',
    'SOBEL_KERNELS',
]
