"""
Format descriptors: the capability bundle registered for one on-disk format.

A FormatDescriptor declares
- the recognized-options table ({name: OptionSpec(type, required, description)}),
- a schema validator (raises ValidationError),
- an optional per-file decoder used by the path-tracking reader,
- an optional writer-config function producing the flat OutputConfig,
- the offset-capturing field name, if the format reports byte offsets.

Decoder contract
- ``decoder(handle, schema, config)`` receives an open binary handle for one physical
  file and yields ``(offset, fields)`` pairs, where offset is the byte position
  immediately preceding the record (or None if the format cannot report it) and
  fields maps schema field names to values. Malformed input raises DecodeError with
  the offset set; the reader tags it with the file path.

Notes
- Descriptors are frozen and built once at import; see recfmt.formats for the registry.
- Helpers here (codec normalization, token conversion, option passthrough) are shared
  by the concrete format modules.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, BinaryIO, Literal

from ..core.errors import ConfigurationError, ErrorKind
from ..core.schema import FieldType, Schema, SchemaField
from ..core.typing import Fields, OutputConfig
from ..core.values import FormatConfig

if TYPE_CHECKING:
    from ..io.cancel import CancellationToken
    from ..io.splits import FileEntry, RecordEnvelope

__all__ = [
    "OptionType",
    "OptionSpec",
    "Decoder",
    "FormatDescriptor",
    "PATH_TRACKING_OPTIONS",
    "options",
    "normalize_codec",
    "put_if_set",
    "convert_token",
    "strip_eol",
]

OptionType = Literal["string", "long", "int", "boolean"]

Decoder = Callable[[BinaryIO, Schema, FormatConfig], Iterator[tuple[int | None, Fields]]]
SchemaValidator = Callable[[Schema, FormatConfig], None]
WriterConfigFn = Callable[[Schema, FormatConfig], OutputConfig]


@dataclass(frozen=True, slots=True)
class OptionSpec:
    """
    One entry of a format's recognized-options table.

    Attributes:
        name (str): Option name as passed by callers.
        type (OptionType): Expected value type.
        required (bool): Whether the option must be set.
        description (str): Human-readable description.
    """

    name: str
    type: OptionType
    required: bool = False
    description: str = ""


def options(*specs: OptionSpec) -> Mapping[str, OptionSpec]:
    """Build a read-only options table keyed by option name."""
    return MappingProxyType({s.name: s for s in specs})


PATH_TRACKING_OPTIONS: tuple[OptionSpec, ...] = (
    OptionSpec("schema", "string", False, "Schema of the records, as a JSON record description."),
    OptionSpec(
        "path_field",
        "string",
        False,
        "Output field to place the path of the file that the record was read from.",
    ),
    OptionSpec(
        "filename_only",
        "boolean",
        False,
        "Whether to only use the filename instead of the URI of the file path in path_field.",
    ),
)


@dataclass(frozen=True)
class FormatDescriptor:
    """
    Frozen capability bundle for one format.

    Attributes:
        name (str): Format name (lower-case registry key).
        description (str): One-line description.
        options (Mapping[str, OptionSpec]): Recognized-options table.
        validator (SchemaValidator): Structural schema check; raises ValidationError.
        decoder (Decoder | None): Per-file decoder; None if the format is write-only.
        writer_config (WriterConfigFn | None): OutputConfig builder; None if read-only.
        offset_field (str | None): Schema field that receives the record's byte offset.
        schema_required (bool): Whether a schema must be configured.
        default_schema (Callable[[FormatConfig], Schema] | None): Schema used when none
            is configured.
        schema_dependencies (tuple[str, ...]): Options whose values are needed to
            validate the schema; validation is deferred while any is unresolved.
    """

    name: str
    description: str
    options: Mapping[str, OptionSpec]
    validator: SchemaValidator
    decoder: Decoder | None = None
    writer_config: WriterConfigFn | None = None
    offset_field: str | None = None
    schema_required: bool = False
    default_schema: Callable[[FormatConfig], Schema] | None = None
    schema_dependencies: tuple[str, ...] = field(default=("schema", "path_field"))

    @property
    def readable(self) -> bool:
        return self.decoder is not None

    @property
    def writable(self) -> bool:
        return self.writer_config is not None

    def validate(self, schema: Schema, config: FormatConfig) -> None:
        self.validator(schema, config)

    def make_reader(
        self,
        file: FileEntry,
        schema: Schema,
        config: FormatConfig,
        *,
        cancel: CancellationToken | None = None,
    ) -> Iterator[RecordEnvelope]:
        """
        Open a lazy record stream over one physical file.

        Option values are coerced to their declared types before decoding.

        Raises:
            ConfigurationError: kind=unsupported_operation if the format cannot be read,
                kind=invalid_value if an option value cannot be coerced.
        """
        if self.decoder is None:
            raise self.unsupported("reading")
        from ..io.reader import track_paths
        from ..io.validate import coerce_options

        config = coerce_options(self, config)
        return track_paths(
            file,
            schema,
            self.decoder,
            config,
            path_field=config.get("path_field"),
            filename_only=bool(config.get("filename_only", False)),
            offset_field=self.offset_field,
            format_name=self.name,
            cancel=cancel,
        )

    def make_writer_config(self, schema: Schema, config: FormatConfig) -> OutputConfig:
        if self.writer_config is None:
            raise self.unsupported("writing")
        return self.writer_config(schema, config)

    def unsupported(self, what: str) -> ConfigurationError:
        return ConfigurationError(
            f"format {self.name!r} does not support {what}",
            kind=ErrorKind.UNSUPPORTED_OPERATION,
            format_name=self.name,
        )


# -----------------------------------------------------------------------------
# Shared helpers
# -----------------------------------------------------------------------------


def normalize_codec(
    config: FormatConfig,
    codecs: Mapping[str, str],
    *,
    format_name: str,
    option: str = "compression_codec",
) -> str | None:
    """
    Map the configured codec name (case-insensitive) to the writer's codec value.

    Returns:
        str | None: Writer codec value, or None when unset or "none".

    Raises:
        ConfigurationError: UnsupportedCodec when the name is not recognized.
    """
    raw = config.get(option)
    if raw is None:
        return None
    name = str(raw).strip().lower()
    if name == "none":
        return None
    try:
        return codecs[name]
    except KeyError:
        raise ConfigurationError.unsupported_codec(
            str(raw), format_name=format_name, allowed=["none", *codecs]
        ) from None


def put_if_set(out: OutputConfig, key: str, config: FormatConfig, option: str) -> None:
    """Copy an option into the output map only when explicitly set."""
    value = config.get(option)
    if value is None:
        return
    out[key] = str(value).lower() if isinstance(value, bool) else str(value)


def strip_eol(raw: bytes) -> bytes:
    if raw.endswith(b"\n"):
        raw = raw[:-1]
        if raw.endswith(b"\r"):
            raw = raw[:-1]
    return raw


_TRUE = {"true", "t", "1", "yes"}
_FALSE = {"false", "f", "0", "no"}


def convert_token(field: SchemaField, token: str) -> Any:
    """
    Convert one text token to the field's type.

    Empty tokens are null for nullable fields (and "" for non-nullable strings).

    Raises:
        ValueError: If the token cannot be represented as the field type.
    """
    if token == "":
        if field.nullable:
            return None
        if field.type is FieldType.STRING:
            return ""
        raise ValueError(f"empty value for non-nullable field {field.name!r}")
    t = field.type
    if t is FieldType.STRING:
        return token
    if t in (FieldType.INT, FieldType.LONG):
        return int(token.strip())
    if t in (FieldType.FLOAT, FieldType.DOUBLE):
        return float(token.strip())
    if t is FieldType.BOOLEAN:
        lo = token.strip().lower()
        if lo in _TRUE:
            return True
        if lo in _FALSE:
            return False
        raise ValueError(f"invalid boolean {token!r} for field {field.name!r}")
    if t is FieldType.BYTES:
        return token.encode("utf-8")
    raise ValueError(f"unsupported type {t.value!r}")  # pragma: no cover - exhaustive
