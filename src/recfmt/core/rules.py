"""
Structural schema rules shared by every format validator.

Checks performed
- Every field with special meaning to a format (a body field, an offset field) must
  exist with the exact expected type when required; optional special fields are only
  type-checked when present.
- A nullable field is accepted as long as its non-null branch has the expected type.
- The configured path-injection field, if any, must exist and be a string.
- When strict: no fields beyond the rule fields and the path field.

Notes
- Pure functions over Schema; zero-IO.
- Failures raise recfmt.core.errors.ValidationError with kind schema_mismatch,
  missing_field or unexpected_fields.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .errors import ValidationError
from .schema import FieldType, Schema

__all__ = [
    "FieldRule",
    "check_field",
    "check_schema",
]


@dataclass(frozen=True, slots=True)
class FieldRule:
    """
    Expected name/type of a field with special meaning to a format.

    Attributes:
        name (str): Field name.
        type (FieldType): Expected type of the (non-null branch of the) field.
        required (bool): Whether the schema must declare the field.
    """

    name: str
    type: FieldType
    required: bool = True


def check_field(schema: Schema, rule: FieldRule, *, format_name: str | None = None) -> None:
    """
    Check a single rule against a schema.

    Raises:
        ValidationError: missing_field when a required field is absent, schema_mismatch
            when the field's type differs from the rule type.
    """
    field = schema.field(rule.name)
    if field is None:
        if rule.required:
            raise ValidationError.missing_field(
                rule.name, rule.type.value, format_name=format_name
            )
        return
    if field.type is not rule.type:
        raise ValidationError.schema_mismatch(
            rule.name, rule.type.value, field.type.value, format_name=format_name
        )


def check_schema(
    format_name: str,
    schema: Schema,
    rules: Sequence[FieldRule],
    *,
    path_field: str | None = None,
    strict: bool = True,
) -> None:
    """
    Validate a schema against a format's field rules.

    Args:
        format_name (str): Format being validated, used in error context.
        schema (Schema): Declared record schema.
        rules (Sequence[FieldRule]): Special fields of the format, in check order.
        path_field (str | None): Configured path-injection field name.
        strict (bool): Reject fields outside rules ∪ {path_field} when True.

    Raises:
        ValidationError: On the first violated rule.

    Examples:
        >>> from recfmt.core.schema import Schema, FieldType
        >>> rules = [FieldRule("offset", FieldType.LONG, required=False),
        ...          FieldRule("body", FieldType.STRING)]
        >>> check_schema("text", Schema.of(("offset", "long"), ("body", "string")), rules)
    """
    for rule in rules:
        check_field(schema, rule, format_name=format_name)

    if path_field:
        check_field(schema, FieldRule(path_field, FieldType.STRING), format_name=format_name)

    if not strict:
        return

    allowed = [r.name for r in rules]
    if path_field and path_field not in allowed:
        allowed.append(path_field)
    extras = [name for name in schema.field_names if name not in allowed]
    if extras:
        raise ValidationError.unexpected_fields(
            len(extras), allowed, extras=extras, format_name=format_name
        )
