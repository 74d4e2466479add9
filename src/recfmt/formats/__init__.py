"""
Frozen format descriptors and the process-wide format registry.

Notes:
    - The registry is a static table populated once at import time and read-only
      afterwards; there is no runtime registration or class scanning.
    - Lookups are case-insensitive on the format name.
    - Each descriptor declares its recognized options, schema validator, per-file
      decoder (readable formats) and writer-config function (writable formats).

Examples:
    >>> from recfmt.formats import get_format
    >>> get_format("TEXT").name
    'text'
    >>> sorted(get_format("orc").options)[:2]
    ['compression_chunk_size', 'compression_codec']
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from ..core.errors import ConfigurationError, ErrorKind
from .avro import AVRO_FORMAT
from .base import FormatDescriptor, OptionSpec
from .delimited import DELIMITED_FORMAT
from .orc import ORC_FORMAT
from .parquet import PARQUET_FORMAT
from .text import TEXT_FORMAT

__all__ = [
    "FormatDescriptor",
    "OptionSpec",
    "TEXT_FORMAT",
    "DELIMITED_FORMAT",
    "PARQUET_FORMAT",
    "ORC_FORMAT",
    "AVRO_FORMAT",
    "get_format",
    "list_formats",
    "format_names",
]


# Registry
_FORMATS: Mapping[str, FormatDescriptor] = MappingProxyType(
    {
        TEXT_FORMAT.name: TEXT_FORMAT,
        DELIMITED_FORMAT.name: DELIMITED_FORMAT,
        PARQUET_FORMAT.name: PARQUET_FORMAT,
        ORC_FORMAT.name: ORC_FORMAT,
        AVRO_FORMAT.name: AVRO_FORMAT,
    }
)


def get_format(name: str | FormatDescriptor) -> FormatDescriptor:
    """
    Look up a format descriptor by name.

    Args:
        name (str | FormatDescriptor): Format name (any case), or a descriptor which
            is returned unchanged.

    Returns:
        FormatDescriptor: Descriptor for the requested format.

    Raises:
        ConfigurationError: kind=unknown_format if no such format is registered.
    """
    if isinstance(name, FormatDescriptor):
        return name
    key = str(name).strip().lower()
    try:
        return _FORMATS[key]
    except KeyError:
        raise ConfigurationError(
            f"Unknown format {name!r}. Available: {format_names()}",
            kind=ErrorKind.UNKNOWN_FORMAT,
            format_name=str(name),
        ) from None


def list_formats() -> list[FormatDescriptor]:
    """
    Return all registered descriptors in registry order.

    Returns:
        list[FormatDescriptor]: Registered descriptors.
    """
    return list(_FORMATS.values())


def format_names() -> list[str]:
    return list(_FORMATS)
