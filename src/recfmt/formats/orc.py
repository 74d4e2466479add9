"""
Descriptor for the 'orc' format.

Reading:
- Stripe by stripe via pyarrow.orc.ORCFile, projected onto the schema's columns.

Writing (OutputConfig keys):
- orc.mapred.output.schema   Hive struct type string (always)
- orc.compress               SNAPPY | ZLIB | LZ4 | ZSTD (omitted for "none")
- orc.compress.size          compression chunk size (only when compression_chunk_size is set)
- orc.stripe.size            stripe size in bytes (only when stripe_size is set)
- orc.row.index.stride       rows between index entries, at least 1000 (only when set)
- orc.create.index           "true" | "false" (only when create_index is set)

Notes:
- Chunk size and stripe size are independent keys; neither overwrites the other.
- Tuning values are never defaulted here so the writer's own defaults apply.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import BinaryIO

import pyarrow as pa
from pyarrow import orc

from ..core.errors import ConfigurationError, DecodeError, ErrorKind
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
from .mapping import to_hive_type

NAME = "orc"

SCHEMA_KEY = "orc.mapred.output.schema"
COMPRESS_KEY = "orc.compress"
COMPRESS_SIZE_KEY = "orc.compress.size"
STRIPE_SIZE_KEY = "orc.stripe.size"
ROW_INDEX_STRIDE_KEY = "orc.row.index.stride"
CREATE_INDEX_KEY = "orc.create.index"

CODECS: dict[str, str] = {
    "snappy": "SNAPPY",
    "zlib": "ZLIB",
    "lz4": "LZ4",
    "zstd": "ZSTD",
}

MIN_INDEX_STRIDE = 1000


def validate_orc(schema: Schema, config: FormatConfig) -> None:
    check_schema(NAME, schema, (), path_field=config.get("path_field"), strict=False)


def decode_orc(
    handle: BinaryIO, schema: Schema, config: FormatConfig
) -> Iterator[tuple[int | None, Fields]]:
    try:
        reader = orc.ORCFile(handle)
        columns = projected_columns(schema, config, reader.schema.names)
        stripes = (reader.read_stripe(i, columns=columns) for i in range(reader.nstripes))
        yield from iter_rows(stripes, columns)
    except (pa.ArrowException, OSError) as exc:
        raise DecodeError(f"invalid orc data: {exc}") from exc


def orc_writer_config(schema: Schema, config: FormatConfig) -> OutputConfig:
    out: OutputConfig = {SCHEMA_KEY: to_hive_type(schema)}
    codec = normalize_codec(config, CODECS, format_name=NAME)
    if codec is not None:
        out[COMPRESS_KEY] = codec

    stride = config.get("index_stride")
    if stride is not None and int(stride) < MIN_INDEX_STRIDE:
        raise ConfigurationError(
            f"index_stride must be at least {MIN_INDEX_STRIDE}, got {stride}",
            kind=ErrorKind.INVALID_VALUE,
            format_name=NAME,
            option="index_stride",
        )
    put_if_set(out, COMPRESS_SIZE_KEY, config, "compression_chunk_size")
    put_if_set(out, STRIPE_SIZE_KEY, config, "stripe_size")
    put_if_set(out, ROW_INDEX_STRIDE_KEY, config, "index_stride")
    put_if_set(out, CREATE_INDEX_KEY, config, "create_index")
    return out


ORC_FORMAT = FormatDescriptor(
    name=NAME,
    description="Plugin for reading and writing files in orc format.",
    options=options(
        *PATH_TRACKING_OPTIONS,
        OptionSpec(
            "compression_codec",
            "string",
            False,
            "Compression codec to use when writing data. "
            "Must be 'snappy', 'zlib', 'lz4', 'zstd', or 'none'.",
        ),
        OptionSpec(
            "compression_chunk_size", "long", False, "Number of bytes in each compression chunk."
        ),
        OptionSpec("stripe_size", "long", False, "Number of bytes in each stripe."),
        OptionSpec(
            "index_stride",
            "long",
            False,
            "Number of rows between index entries. The value must be at least 1000.",
        ),
        OptionSpec("create_index", "boolean", False, "Whether to create inline indexes."),
    ),
    validator=validate_orc,
    decoder=decode_orc,
    writer_config=orc_writer_config,
    schema_required=True,
)
