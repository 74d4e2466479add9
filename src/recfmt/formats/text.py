"""
Descriptor for the 'text' format.

Purpose:
- One record per line of a plain text file.

Schema:
- body string (required), offset long (optional), [path_field] string (optional)
- nullable wrapping of any of these is accepted
- no other fields
- default when no schema is configured: offset long, body string[, path_field string]

Notes:
- offset is the byte position of the first byte of the line within its file.
- Line terminators (``\\n`` and ``\\r\\n``) are not part of body.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import BinaryIO

from ..core.constants import BODY_FIELD, ENCODING, OFFSET_FIELD
from ..core.errors import DecodeError
from ..core.rules import FieldRule, check_schema
from ..core.schema import FieldType, Schema
from ..core.typing import Fields
from ..core.values import FormatConfig
from .base import PATH_TRACKING_OPTIONS, FormatDescriptor, options, strip_eol

NAME = "text"

TEXT_RULES = (
    FieldRule(OFFSET_FIELD, FieldType.LONG, required=False),
    FieldRule(BODY_FIELD, FieldType.STRING),
)


def default_schema(config: FormatConfig) -> Schema:
    fields: list[tuple[str, str]] = [(OFFSET_FIELD, "long"), (BODY_FIELD, "string")]
    path_field = config.get("path_field")
    if path_field:
        fields.append((path_field, "string"))
    return Schema.of(*fields, name="textfile")


def validate_text(schema: Schema, config: FormatConfig) -> None:
    check_schema(NAME, schema, TEXT_RULES, path_field=config.get("path_field"), strict=True)


def decode_text(
    handle: BinaryIO, schema: Schema, config: FormatConfig
) -> Iterator[tuple[int | None, Fields]]:
    pos = 0
    for raw in handle:
        start = pos
        pos += len(raw)
        try:
            body = strip_eol(raw).decode(ENCODING)
        except UnicodeDecodeError as exc:
            raise DecodeError(f"line is not valid {ENCODING}: {exc.reason}", offset=start) from exc
        yield start, {BODY_FIELD: body}


TEXT_FORMAT = FormatDescriptor(
    name=NAME,
    description="Plugin for reading files in text format.",
    options=options(*PATH_TRACKING_OPTIONS),
    validator=validate_text,
    decoder=decode_text,
    offset_field=OFFSET_FIELD,
    default_schema=default_schema,
)
