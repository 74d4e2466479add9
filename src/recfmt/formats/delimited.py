"""
Descriptor for the 'delimited' format.

Purpose:
- One record per line; tokens separated by a configurable delimiter and converted to
  the declared field types in schema order.

Schema:
- mandatory (there is no default schema)
- any primitive fields; the path field, when configured, must be a string and is not
  read from the file

Options:
- delimiter (default ","), skip_header (skip the first line of every file)

Notes:
- Tokens are split verbatim; quoting is not interpreted.
- Trailing missing tokens are null when the remaining fields are nullable;
  otherwise a wrong token count is a DecodeError.
- Blank lines are skipped.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from typing import BinaryIO

from ..core.constants import DEFAULT_DELIMITER, ENCODING
from ..core.errors import DecodeError
from ..core.rules import check_schema
from ..core.schema import Schema
from ..core.typing import Fields, OutputConfig
from ..core.values import FormatConfig
from .base import (
    PATH_TRACKING_OPTIONS,
    FormatDescriptor,
    OptionSpec,
    convert_token,
    options,
    strip_eol,
)

NAME = "delimited"

DELIMITER_KEY = "delimited.delimiter"
COLUMNS_KEY = "delimited.columns"


def validate_delimited(schema: Schema, config: FormatConfig) -> None:
    check_schema(NAME, schema, (), path_field=config.get("path_field"), strict=False)


def decode_delimited(
    handle: BinaryIO, schema: Schema, config: FormatConfig
) -> Iterator[tuple[int | None, Fields]]:
    delimiter = config.get("delimiter") or DEFAULT_DELIMITER
    path_field = config.get("path_field")
    skip_header = bool(config.get("skip_header", False))
    columns = [f for f in schema.fields if f.name != path_field]

    pos = 0
    for lineno, raw in enumerate(handle):
        start = pos
        pos += len(raw)
        if skip_header and lineno == 0:
            continue
        try:
            line = strip_eol(raw).decode(ENCODING)
        except UnicodeDecodeError as exc:
            raise DecodeError(f"line is not valid {ENCODING}: {exc.reason}", offset=start) from exc
        if not line.strip():
            continue
        tokens = line.split(delimiter)
        if len(tokens) > len(columns) or any(
            not f.nullable for f in columns[len(tokens) :]
        ):
            raise DecodeError(
                f"expected {len(columns)} fields but found {len(tokens)}", offset=start
            )
        record: Fields = {}
        for i, f in enumerate(columns):
            try:
                record[f.name] = convert_token(f, tokens[i]) if i < len(tokens) else None
            except ValueError as exc:
                raise DecodeError(
                    f"field {f.name!r}: cannot convert {tokens[i]!r} to {f.type_name}",
                    offset=start,
                ) from exc
        yield start, record


def delimited_writer_config(schema: Schema, config: FormatConfig) -> OutputConfig:
    path_field = config.get("path_field")
    return {
        DELIMITER_KEY: config.get("delimiter") or DEFAULT_DELIMITER,
        COLUMNS_KEY: json.dumps([n for n in schema.field_names if n != path_field]),
    }


DELIMITED_FORMAT = FormatDescriptor(
    name=NAME,
    description="Plugin for reading and writing files in delimited format.",
    options=options(
        *PATH_TRACKING_OPTIONS,
        OptionSpec("delimiter", "string", False, "Delimiter to use to separate record fields."),
        OptionSpec("skip_header", "boolean", False, "Whether to skip the first line of each file."),
    ),
    validator=validate_delimited,
    decoder=decode_delimited,
    writer_config=delimited_writer_config,
    schema_required=True,
)
