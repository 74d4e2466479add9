"""
Shared decoding helpers for columnar formats read through pyarrow.

Columnar files are read batch by batch and flattened into per-row field mappings.
They carry no meaningful byte offset per record, so decoders yield ``None`` offsets.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

import pyarrow as pa

from ..core.errors import DecodeError
from ..core.schema import Schema
from ..core.typing import Fields
from ..core.values import FormatConfig

__all__ = ["projected_columns", "iter_rows"]


def projected_columns(schema: Schema, config: FormatConfig, available: Iterable[str]) -> list[str]:
    """
    Columns to read from the file: every schema field except the path field.

    Raises:
        DecodeError: If the file does not contain one of the schema's columns.
    """
    path_field = config.get("path_field")
    wanted = [n for n in schema.field_names if n != path_field]
    present = set(available)
    missing = [n for n in wanted if n not in present]
    if missing:
        raise DecodeError(f"file does not contain column(s) {missing!r}")
    return wanted


def iter_rows(
    batches: Iterable[pa.RecordBatch], columns: list[str]
) -> Iterator[tuple[None, Fields]]:
    for batch in batches:
        for row in batch.to_pylist():
            yield None, {name: row.get(name) for name in columns}
