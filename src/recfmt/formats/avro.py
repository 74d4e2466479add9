"""
Descriptor for the 'avro' format (write configuration only).

Writing (OutputConfig keys):
- avro.schema.output.key   Avro record schema JSON (always)
- avro.output.codec        snappy | deflate | bzip2 | xz | zstandard (omitted for "none")
- avro.mapred.deflate.level  1..9 (only when deflate_level is set)

Notes:
- Reading Avro containers is left to the host runtime; the descriptor declares no decoder.
"""

from __future__ import annotations

from ..core.errors import ConfigurationError, ErrorKind
from ..core.schema import Schema
from ..core.typing import OutputConfig
from ..core.values import FormatConfig
from .base import FormatDescriptor, OptionSpec, normalize_codec, options, put_if_set
from .mapping import to_avro_json

NAME = "avro"

SCHEMA_KEY = "avro.schema.output.key"
CODEC_KEY = "avro.output.codec"
DEFLATE_LEVEL_KEY = "avro.mapred.deflate.level"

CODECS: dict[str, str] = {
    "snappy": "snappy",
    "deflate": "deflate",
    "bzip2": "bzip2",
    "xz": "xz",
    "zstandard": "zstandard",
}


def validate_avro(schema: Schema, config: FormatConfig) -> None:
    # Every primitive schema maps onto Avro; nothing format-specific to check.
    return None


def avro_writer_config(schema: Schema, config: FormatConfig) -> OutputConfig:
    out: OutputConfig = {SCHEMA_KEY: to_avro_json(schema)}
    codec = normalize_codec(config, CODECS, format_name=NAME)
    if codec is not None:
        out[CODEC_KEY] = codec
    level = config.get("deflate_level")
    if level is not None and not 1 <= int(level) <= 9:
        raise ConfigurationError(
            f"deflate_level must be between 1 and 9, got {level}",
            kind=ErrorKind.INVALID_VALUE,
            format_name=NAME,
            option="deflate_level",
        )
    put_if_set(out, DEFLATE_LEVEL_KEY, config, "deflate_level")
    return out


AVRO_FORMAT = FormatDescriptor(
    name=NAME,
    description="Plugin for writing files in avro format.",
    options=options(
        OptionSpec("schema", "string", True, "Schema of the data to write."),
        OptionSpec(
            "compression_codec",
            "string",
            False,
            "Compression codec to use when writing data. "
            "Must be 'snappy', 'deflate', 'bzip2', 'xz', 'zstandard', or 'none'.",
        ),
        OptionSpec("deflate_level", "int", False, "Compression level for the deflate codec."),
    ),
    validator=validate_avro,
    writer_config=avro_writer_config,
    schema_required=True,
    schema_dependencies=("schema",),
)
