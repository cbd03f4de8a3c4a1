# RasterStag Filters - Pipeline
"""
FilterPipeline for chaining multiple filters on the same buffer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, TYPE_CHECKING
import re

from .base import Filter, FilterContext, register_filter

if TYPE_CHECKING:
    from rasterstag.image import ImageBuffer


@register_filter
@dataclass
class FilterPipeline(Filter):
    """Chain of filters applied in sequence.

    Every filter modifies the same buffer, so each one sees the result of
    its predecessor.
    """
    filters: list[Filter] = field(default_factory=list)

    def apply(self, image: 'ImageBuffer', context: FilterContext | None = None) -> 'ImageBuffer':
        """Apply all filters in sequence."""
        for f in self.filters:
            f.apply(image, context)
        return image

    def append(self, filter: Filter) -> 'FilterPipeline':
        """Add filter to pipeline (chainable)."""
        self.filters.append(filter)
        return self

    def extend(self, filters: list[Filter]) -> 'FilterPipeline':
        """Add multiple filters to pipeline (chainable)."""
        self.filters.extend(filters)
        return self

    def __len__(self) -> int:
        return len(self.filters)

    def __iter__(self):
        return iter(self.filters)

    def __getitem__(self, index: int) -> Filter:
        return self.filters[index]

    def to_dict(self) -> dict[str, Any]:
        """Serialize pipeline to dictionary."""
        return {
            'type': 'FilterPipeline',
            'filters': [f.to_dict() for f in self.filters]
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'FilterPipeline':
        """Deserialize pipeline from dictionary."""
        filters = [Filter.from_dict(f) for f in data.get('filters', [])]
        return cls(filters=filters)

    @classmethod
    def parse(cls, text: str) -> 'FilterPipeline':
        """Parse filter string into pipeline.

        Examples:
            'gray|invert|sobel 2'
            'mirrorx; sobel(size=3)'
        """
        if not text:
            return cls()

        filters = []
        # Split by | or ;
        for part in re.split(r'[|;]', text):
            part = part.strip()
            if not part:
                continue
            filters.append(Filter.parse(part))

        return cls(filters=filters)

    def to_string(self) -> str:
        """Convert pipeline to compact string format."""
        return '|'.join(f.to_string() for f in self.filters)
