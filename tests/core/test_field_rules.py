from __future__ import annotations

import pytest

from recfmt.core.errors import ErrorKind, ValidationError
from recfmt.core.rules import FieldRule, check_schema
from recfmt.core.schema import FieldType, Schema

RULES = (
    FieldRule("offset", FieldType.LONG, required=False),
    FieldRule("body", FieldType.STRING),
)


def test_text_like_schema_passes() -> None:
    check_schema("text", Schema.of(("offset", "long"), ("body", "string")), RULES)
    # offset is optional
    check_schema("text", Schema.of(("body", "string")), RULES)


def test_nullable_wrapping_is_accepted() -> None:
    check_schema("text", Schema.of(("offset", "long", True), ("body", "string", True)), RULES)


def test_wrong_type_names_the_field() -> None:
    with pytest.raises(ValidationError) as ei:
        check_schema("text", Schema.of(("offset", "int"), ("body", "string")), RULES)
    err = ei.value
    assert err.kind is ErrorKind.SCHEMA_MISMATCH
    assert err.format_name == "text"
    assert err.context["field"] == "offset"
    assert err.context["expected_type"] == "long"
    assert err.context["actual_type"] == "int"


def test_missing_required_field() -> None:
    with pytest.raises(ValidationError) as ei:
        check_schema("text", Schema.of(("offset", "long")), RULES)
    assert ei.value.kind is ErrorKind.MISSING_FIELD
    assert ei.value.context["field"] == "body"


def test_unexpected_fields_counts_and_names_allowed_set() -> None:
    with pytest.raises(ValidationError) as ei:
        check_schema("text", Schema.of(("body", "string"), ("extra", "int")), RULES)
    err = ei.value
    assert err.kind is ErrorKind.UNEXPECTED_FIELDS
    assert err.context["count"] == 1
    assert err.context["allowed"] == ["offset", "body"]
    assert err.context["extras"] == ["extra"]
    assert "1 other field" in str(err)


def test_path_field_is_allowed_and_must_be_string() -> None:
    schema = Schema.of(("body", "string"), ("file", "string"))
    check_schema("text", schema, RULES, path_field="file")

    with pytest.raises(ValidationError) as ei:
        check_schema(
            "text", Schema.of(("body", "string"), ("file", "long")), RULES, path_field="file"
        )
    assert ei.value.kind is ErrorKind.SCHEMA_MISMATCH
    assert ei.value.context["field"] == "file"

    with pytest.raises(ValidationError) as ei:
        check_schema("text", Schema.of(("body", "string")), RULES, path_field="file")
    assert ei.value.kind is ErrorKind.MISSING_FIELD


def test_non_strict_allows_extra_fields() -> None:
    check_schema("delimited", Schema.of(("a", "int"), ("b", "string")), (), strict=False)
