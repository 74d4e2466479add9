from __future__ import annotations

import io

import pytest

from recfmt.core.errors import DecodeError, ErrorKind, ValidationError
from recfmt.core.schema import Schema
from recfmt.core.values import FormatConfig
from recfmt.formats.text import TEXT_FORMAT, decode_text, default_schema


def test_default_schema_includes_path_field_when_configured() -> None:
    s = default_schema(FormatConfig({"path_field": "file"}))
    assert s.name == "textfile"
    assert s.field_names == ["offset", "body", "file"]
    assert default_schema(FormatConfig()).field_names == ["offset", "body"]


def test_validate_accepts_offset_body_and_path() -> None:
    cfg = FormatConfig({"path_field": "file"})
    TEXT_FORMAT.validate(
        Schema.of(("offset", "long"), ("body", "string"), ("file", "string")), cfg
    )


def test_validate_rejects_int_offset() -> None:
    with pytest.raises(ValidationError) as ei:
        TEXT_FORMAT.validate(Schema.of(("offset", "int"), ("body", "string")), FormatConfig())
    assert ei.value.kind is ErrorKind.SCHEMA_MISMATCH
    assert ei.value.context["field"] == "offset"


def test_validate_rejects_extra_field() -> None:
    with pytest.raises(ValidationError) as ei:
        TEXT_FORMAT.validate(Schema.of(("body", "string"), ("extra", "int")), FormatConfig())
    assert ei.value.kind is ErrorKind.UNEXPECTED_FIELDS
    assert ei.value.context["count"] == 1


def test_decode_reports_line_start_offsets_and_strips_eol() -> None:
    data = b"hello\r\nworld\n\nlast"
    schema = Schema.of(("offset", "long"), ("body", "string"))
    out = list(decode_text(io.BytesIO(data), schema, FormatConfig()))
    assert out == [
        (0, {"body": "hello"}),
        (7, {"body": "world"}),
        (13, {"body": ""}),
        (14, {"body": "last"}),
    ]


def test_decode_invalid_utf8_raises_with_offset() -> None:
    data = b"ok\n\xff\xfe\n"
    it = decode_text(io.BytesIO(data), Schema.of(("body", "string")), FormatConfig())
    assert next(it) == (0, {"body": "ok"})
    with pytest.raises(DecodeError) as ei:
        next(it)
    assert ei.value.offset == 3


def test_text_has_no_writer() -> None:
    assert not TEXT_FORMAT.writable
