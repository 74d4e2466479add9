"""
Lightweight typing aliases used across recfmt.

This module contains no runtime logic and is zero-IO.

Examples:
    >>> from recfmt.core.typing import OutputConfig
    >>> def compress(cfg: OutputConfig) -> str | None:
    ...     return cfg.get("orc.compress")
    >>> compress({"orc.compress": "SNAPPY"})
    'SNAPPY'
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "JsonDict",
    "Fields",
    "OutputConfig",
]

JsonDict = dict[str, Any]

# Decoded record values keyed by schema field name (insertion order = schema order).
Fields = dict[str, Any]

# Flat, namespaced property map consumed verbatim by an external writer.
OutputConfig = dict[str, str]
