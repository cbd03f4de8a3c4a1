# RasterStag Filters - Base Classes
"""
Filter base class, filter registry and the compact text syntax.

A filter is a dataclass: its class selects the operation, its fields carry
the parameters. Applying a filter rewrites the pixels of an
:class:`~rasterstag.image.ImageBuffer` in place and returns that buffer.

Filters can be written as text, e.g. ``'sobel 2'`` or ``'sobel(2)'``, and
converted to and from plain dicts and JSON.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, fields, field, MISSING
from typing import Any, ClassVar, TYPE_CHECKING
import copy
import json
import re

import numpy as np

if TYPE_CHECKING:
    from rasterstag.image import ImageBuffer


@dataclass
class FilterContext:
    """Key/value results collected while filters run.

    One context is shared by all filters of a single call, e.g. the Sobel
    filter stores ``'sobel_rejected'`` here.
    """

    data: dict[str, Any] = field(default_factory=dict)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.data[key] = value

    def __contains__(self, key: str) -> bool:
        return key in self.data

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def to_dict(self) -> dict[str, Any]:
        return dict(self.data)


FILTER_REGISTRY: dict[str, type['Filter']] = {}
"Filter classes by class name, both as written and lower case"

FILTER_ALIASES: dict[str, type['Filter'] | tuple[type['Filter'], dict[str, Any]]] = {}
"Short names, optionally bound to preset parameters"


def register_filter(cls: type['Filter']) -> type['Filter']:
    """Class decorator adding a filter to :data:`FILTER_REGISTRY`."""
    FILTER_REGISTRY[cls.__name__] = cls
    FILTER_REGISTRY[cls.__name__.lower()] = cls
    return cls


def register_alias(
    alias: str,
    cls: type['Filter'],
    **default_params: Any
) -> None:
    """Make a filter available under another name.

    Keyword arguments become presets which explicit arguments in the text
    still override.

    Examples:
        register_alias('negate', Invert)
        register_alias('sobel5', SobelFilter, size=2)
    """
    if default_params:
        FILTER_ALIASES[alias.lower()] = (cls, default_params)
    else:
        FILTER_ALIASES[alias.lower()] = cls


def _lookup(name: str) -> tuple[type['Filter'], dict[str, Any]]:
    """Resolve a filter name or alias to its class and preset parameters."""
    alias_entry = FILTER_ALIASES.get(name)
    if alias_entry is not None:
        if isinstance(alias_entry, tuple):
            filter_cls, default_params = alias_entry
            return filter_cls, copy.deepcopy(default_params)
        return alias_entry, {}
    filter_cls = FILTER_REGISTRY.get(name)
    if filter_cls is None:
        raise ValueError(f"Unknown filter: {name}")
    return filter_cls, {}


@dataclass
class Filter(ABC):
    """Common base of every filter variant.

    A filter instance is the selector of one filter variant: its class is the
    tag, its dataclass fields are the payload.

    Example:
        @register_filter
        @dataclass
        class Darken(Filter):
            amount: int = 10

            def apply(self, image: ImageBuffer, context: FilterContext | None = None) -> ImageBuffer:
                np.subtract(image.pixels, np.minimum(image.pixels, self.amount), out=image.pixels)
                return image
    """

    # Field which receives a bare value in 'name(value)' text
    _primary_param: ClassVar[str | None] = None

    @abstractmethod
    def apply(self, image: 'ImageBuffer', context: FilterContext | None = None) -> 'ImageBuffer':
        """Rewrite the pixels of image in place.

        :param image: The buffer to modify.
        :param context: Receives results of the call, if given.
        :returns: The same, modified buffer.
        """
        pass

    def __call__(
        self,
        image: 'ImageBuffer',
        context: FilterContext | None = None
    ) -> 'ImageBuffer':
        return self.apply(image, context)

    @property
    def type(self) -> str:
        """Class name stored as ``'type'`` in serialized filters."""
        return self.__class__.__name__

    def to_dict(self) -> dict[str, Any]:
        """Plain dict of the public fields plus ``'type'``. Arrays become lists."""
        data = {}
        for f in fields(self):
            if f.name.startswith('_'):
                continue
            value = getattr(self, f.name)
            if isinstance(value, np.ndarray):
                value = value.tolist()
            data[f.name] = value
        data['type'] = self.type
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'Filter':
        """Rebuild a filter from the output of :meth:`to_dict`.

        Raises:
            ValueError: If ``'type'`` names no registered filter
        """
        data = dict(data)
        filter_type = data.pop('type', cls.__name__)

        filter_cls = FILTER_REGISTRY.get(filter_type) or FILTER_REGISTRY.get(filter_type.lower())
        if filter_cls is None:
            raise ValueError(f"Unknown filter type: {filter_type}")

        # Composite filters such as FilterPipeline deserialize their children
        if filter_cls is not cls and 'from_dict' in vars(filter_cls):
            return filter_cls.from_dict(data)
        return filter_cls(**data)

    @classmethod
    def from_json(cls, json_str: str) -> 'Filter':
        return cls.from_dict(json.loads(json_str))

    @classmethod
    def parse(cls, text: str) -> 'Filter':
        """Create a filter from its text form.

        Words after the name are positional values in field order or
        ``key=value`` pairs. The call form takes the primary parameter
        first.

            'sobel 2'                                -> SobelFilter(size=2)
            'sobel5'                                 -> SobelFilter(size=2)
            'conv kernel=[[0,0,0],[0,1,0],[0,0,0]]'  -> Convolution(...)
            'sobel(2)', 'sobelfilter(size=3)'        -> call form

        Raises:
            ValueError: On unknown names or malformed arguments
        """
        text = text.strip()

        match = re.match(r'^(\w+)\((.*)\)$', text)
        if match:
            return cls._parse_legacy(match.group(1).lower(), match.group(2))

        parts = _split_filter_args(text)
        if not parts:
            raise ValueError(f"Invalid filter format: {text}")

        filter_cls, kwargs = _lookup(parts[0].lower())

        positional = []
        for arg in parts[1:]:
            if '=' in arg and not arg.startswith('['):
                key, value = arg.split('=', 1)
                kwargs[key.strip()] = _parse_value(value.strip())
            else:
                positional.append(_parse_value(arg))

        if positional:
            kwargs = cls._map_positional_args(filter_cls, positional, kwargs)

        return filter_cls(**kwargs)

    @classmethod
    def _parse_legacy(cls, name: str, args_str: str) -> 'Filter':
        """Parse the ``name(a, key=b)`` call form."""
        filter_cls, kwargs = _lookup(name)

        for i, arg in enumerate(_split_top_level(args_str.strip(), ',')):
            arg = arg.strip()
            if not arg:
                continue
            if '=' in arg and not arg.startswith('['):
                key, value = arg.split('=', 1)
                kwargs[key.strip()] = _parse_value(value.strip())
            elif i == 0 and filter_cls._primary_param:
                kwargs[filter_cls._primary_param] = _parse_value(arg)
            else:
                raise ValueError(f"Positional arg not supported for {name}: {arg}")

        return filter_cls(**kwargs)

    @classmethod
    def _map_positional_args(
        cls,
        filter_cls: type['Filter'],
        positional: list[Any],
        kwargs: dict[str, Any]
    ) -> dict[str, Any]:
        """Assign positional values to the public fields in declaration order.

        Explicit ``key=value`` arguments win over positional ones.
        """
        param_names = [f.name for f in fields(filter_cls) if not f.name.startswith('_')]
        if len(positional) > len(param_names):
            raise ValueError(
                f"Too many positional args for {filter_cls.__name__}: "
                f"got {len(positional)}, max {len(param_names)}"
            )
        for name, value in zip(param_names, positional):
            kwargs.setdefault(name, value)
        return kwargs

    def to_string(self) -> str:
        """Text form accepted by :meth:`parse`.

            'sobelfilter size=2'
            'convolution kernel=[[0.0,0.0,0.0],[0.0,1.0,0.0],[0.0,0.0,0.0]]'

        Fields still at their plain default are left out, arrays are always
        written.
        """
        parts = [self.type.lower()]

        for f in fields(self):
            if f.name.startswith('_'):
                continue
            value = getattr(self, f.name)

            if isinstance(value, np.ndarray):
                value_str = json.dumps(value.tolist(), separators=(',', ':'))
            elif f.default is not MISSING and value == f.default:
                continue
            elif isinstance(value, bool):
                value_str = 'true' if value else 'false'
            else:
                value_str = str(value)
            parts.append(f"{f.name}={value_str}")

        return ' '.join(parts)


def _parse_value(s: str) -> int | float | bool | str | list:
    """Convert one argument word to a Python value.

    ``true``/``false`` become bools, numbers become int or float, bracketed
    text is read as a JSON list, quotes are stripped and anything else stays
    a string.
    """
    s = s.strip()

    if len(s) >= 2 and s[0] == s[-1] and s[0] in '"\'':
        return s[1:-1]

    if s.startswith('['):
        try:
            return json.loads(s)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid list value: {s}") from e

    lowered = s.lower()
    if lowered in ('true', 'false'):
        return lowered == 'true'
    for convert in (int, float):
        try:
            return convert(s)
        except ValueError:
            pass
    return s


def _split_top_level(text: str, separator: str) -> list[str]:
    """Split text at separator, ignoring separators inside brackets or quotes.

    A space separator matches any whitespace. Empty parts are dropped.
    """
    parts = []
    current = []
    depth = 0
    in_quotes = None

    for char in text:
        if in_quotes:
            current.append(char)
            if char == in_quotes:
                in_quotes = None
            continue
        if char in '"\'':
            in_quotes = char
        elif char == '[':
            depth += 1
        elif char == ']':
            depth -= 1
        elif depth == 0 and (char == separator or (separator == ' ' and char.isspace())):
            if current:
                parts.append(''.join(current))
                current = []
            continue
        current.append(char)

    if current:
        parts.append(''.join(current))

    return parts


def _split_filter_args(text: str) -> list[str]:
    """Split ``'conv kernel=[[1, 0], [0, 1]]'`` into name and argument words."""
    return _split_top_level(text, ' ')
