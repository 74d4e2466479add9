"""
Core package aggregator for recfmt contracts (schema, config values, errors, constants).

## Contracts (single source of truth)
- Schema: ordered (name, type, nullable) triples with an Avro-style JSON description.
- Values: Resolved | Unresolved option values and the immutable FormatConfig mapping.
- Errors: tagged ConfigurationError / ValidationError / DecodeError / SourceUnavailable.
- Constants/Typing: split sizing defaults, special field names, OutputConfig alias.

## Notes
- Zero-IO policy: stdlib + pydantic only; no file/network IO.
- recfmt.formats builds format descriptors on top of these contracts; recfmt.io consumes both.

## Examples
```python
from recfmt.core import FormatConfig, Schema
schema = Schema.of(("offset", "long"), ("body", "string"))
cfg = FormatConfig.from_mapping({"schema": schema.to_json(), "path_field": "${pf}"})
cfg.has_unresolved("path_field")  # True
```
"""

from __future__ import annotations

from .errors import (
    ConfigurationError,
    DecodeError,
    ErrorKind,
    RecfmtError,
    SourceUnavailable,
    SplitCancelled,
    ValidationError,
    WriteError,
)
from .schema import FieldType, Schema, SchemaField
from .values import FormatConfig, Resolved, Unresolved

__all__ = [
    "ConfigurationError",
    "DecodeError",
    "ErrorKind",
    "RecfmtError",
    "SourceUnavailable",
    "SplitCancelled",
    "ValidationError",
    "WriteError",
    "FieldType",
    "Schema",
    "SchemaField",
    "FormatConfig",
    "Resolved",
    "Unresolved",
]
