"""
Descriptor for the 'parquet' format.

Reading:
- Row batches via pyarrow.parquet.ParquetFile, projected onto the schema's columns.
- No byte offsets are reported.

Writing (OutputConfig keys):
- parquet.avro.schema     Avro JSON of the schema (always)
- parquet.compression     SNAPPY | GZIP | ZSTD | LZ4 | BROTLI (omitted for "none")
- parquet.block.size      row group size in bytes (only when block_size is set)
- parquet.page.size       page size in bytes (only when page_size is set)
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import BinaryIO

import pyarrow as pa
import pyarrow.parquet as pq

from ..core.errors import DecodeError
from ..core.rules import check_schema
from ..core.schema import Schema
from ..core.typing import Fields, OutputConfig
from ..core.values import FormatConfig
from .base import (
    PATH_TRACKING_OPTIONS,
    FormatDescriptor,
    OptionSpec,
    normalize_codec,
    options,
    put_if_set,
)
from .columnar import iter_rows, projected_columns
from .mapping import to_avro_json

NAME = "parquet"

SCHEMA_KEY = "parquet.avro.schema"
COMPRESSION_KEY = "parquet.compression"
BLOCK_SIZE_KEY = "parquet.block.size"
PAGE_SIZE_KEY = "parquet.page.size"

CODECS: dict[str, str] = {
    "snappy": "SNAPPY",
    "gzip": "GZIP",
    "zstd": "ZSTD",
    "lz4": "LZ4",
    "brotli": "BROTLI",
}

BATCH_SIZE = 8192


def validate_parquet(schema: Schema, config: FormatConfig) -> None:
    check_schema(NAME, schema, (), path_field=config.get("path_field"), strict=False)


def decode_parquet(
    handle: BinaryIO, schema: Schema, config: FormatConfig
) -> Iterator[tuple[int | None, Fields]]:
    try:
        pf = pq.ParquetFile(handle)
        columns = projected_columns(schema, config, pf.schema_arrow.names)
        yield from iter_rows(pf.iter_batches(batch_size=BATCH_SIZE, columns=columns), columns)
    except (pa.ArrowException, OSError) as exc:
        raise DecodeError(f"invalid parquet data: {exc}") from exc


def parquet_writer_config(schema: Schema, config: FormatConfig) -> OutputConfig:
    out: OutputConfig = {SCHEMA_KEY: to_avro_json(schema)}
    codec = normalize_codec(config, CODECS, format_name=NAME)
    if codec is not None:
        out[COMPRESSION_KEY] = codec
    put_if_set(out, BLOCK_SIZE_KEY, config, "block_size")
    put_if_set(out, PAGE_SIZE_KEY, config, "page_size")
    return out


PARQUET_FORMAT = FormatDescriptor(
    name=NAME,
    description="Plugin for reading and writing files in parquet format.",
    options=options(
        *PATH_TRACKING_OPTIONS,
        OptionSpec(
            "compression_codec",
            "string",
            False,
            "Compression codec to use when writing data. "
            "Must be 'snappy', 'gzip', 'zstd', 'lz4', 'brotli', or 'none'.",
        ),
        OptionSpec("block_size", "long", False, "Number of bytes in each row group."),
        OptionSpec("page_size", "long", False, "Number of bytes in each page."),
    ),
    validator=validate_parquet,
    decoder=decode_parquet,
    writer_config=parquet_writer_config,
    schema_required=True,
)
