"""
Pydantic v2 models for record schemas.

A Schema is an ordered sequence of (field name, type, nullable) triples. Schemas are
supplied by configuration as a serialized structural description, validated once per
format before any split is processed, and immutable thereafter.

Serialized description
- Avro-style record JSON, which both recfmt and the external reader/writer libraries
  can parse:

      {"type": "record", "name": "etlSchemaBody",
       "fields": [{"name": "offset", "type": "long"},
                  {"name": "body", "type": ["string", "null"]}]}

- A nullable field is a two-branch union with "null" (either order).
- Only primitive types are supported (see FieldType).

Style
- Zero-IO (stdlib + pydantic only).
- Parse failures surface as ConfigurationError(kind=invalid_schema).

Examples:
    >>> from recfmt.core.schema import Schema
    >>> s = Schema.parse_json(
    ...     '{"type":"record","name":"r","fields":[{"name":"body","type":["string","null"]}]}'
    ... )
    >>> s.field("body").nullable
    True
    >>> s.field_names
    ['body']
"""

from __future__ import annotations

import json
import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from .constants import DEFAULT_RECORD_NAME
from .errors import ConfigurationError, ErrorKind
from .typing import JsonDict

__all__ = [
    "FieldType",
    "SchemaField",
    "Schema",
]

_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class FieldType(Enum):
    """Primitive field types; values are the lower-case wire names."""

    BOOLEAN = "boolean"
    INT = "int"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"
    STRING = "string"
    BYTES = "bytes"

    @classmethod
    def from_value(cls, value: str | FieldType) -> FieldType:
        if isinstance(value, FieldType):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            allowed = [t.value for t in cls]
            msg = f"unsupported field type {value!r}; expected one of {allowed}"
            raise ValueError(msg) from exc


class SchemaField(BaseModel):
    """
    One field of a record schema.

    Attributes:
        name (str): Field name, an identifier ([A-Za-z_][A-Za-z0-9_]*).
        type (FieldType): Type of the non-null branch.
        nullable (bool): Whether null is permitted.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    type: FieldType
    nullable: bool = False

    @field_validator("name")
    @classmethod
    def _check_name(cls, v: str) -> str:
        if not _NAME_RE.match(v):
            raise ValueError(f"invalid field name {v!r}")
        return v

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, v: Any) -> FieldType:
        return FieldType.from_value(v)

    @property
    def type_name(self) -> str:
        return self.type.value

    def to_json_obj(self) -> JsonDict:
        t: Any = [self.type.value, "null"] if self.nullable else self.type.value
        return {"name": self.name, "type": t}


class Schema(BaseModel):
    """
    Ordered record schema.

    Attributes:
        name (str): Record name carried in the serialized description.
        fields (tuple[SchemaField, ...]): Fields in declaration order; names are unique.

    Raises:
        pydantic.ValidationError: On duplicate names or invalid fields when constructed
            directly. The JSON entry points convert this into ConfigurationError.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = DEFAULT_RECORD_NAME
    fields: tuple[SchemaField, ...]

    @model_validator(mode="after")
    def _unique_names(self) -> Schema:
        seen: set[str] = set()
        for f in self.fields:
            if f.name in seen:
                raise ValueError(f"duplicate field name {f.name!r}")
            seen.add(f.name)
        return self

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    def field(self, name: str) -> SchemaField | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def __len__(self) -> int:
        return len(self.fields)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def of(cls, *fields: tuple[Any, ...], name: str = DEFAULT_RECORD_NAME) -> Schema:
        """
        Build a schema from (name, type) or (name, type, nullable) tuples.

        Examples:
            >>> Schema.of(("offset", "long"), ("body", "string", True)).field_names
            ['offset', 'body']
        """
        built = []
        for spec in fields:
            fname, ftype, *rest = spec
            built.append(SchemaField(name=fname, type=ftype, nullable=bool(rest and rest[0])))
        return cls(name=name, fields=tuple(built))

    @classmethod
    def from_json_obj(cls, obj: Any) -> Schema:
        """
        Build a schema from a decoded JSON description.

        Raises:
            ConfigurationError: kind=invalid_schema if the description is malformed.
        """
        if not isinstance(obj, dict):
            raise _invalid(f"schema must be a JSON object, got {type(obj).__name__}")
        if obj.get("type", "record") != "record":
            raise _invalid(f"schema type must be 'record', got {obj.get('type')!r}")
        raw_fields = obj.get("fields")
        if not isinstance(raw_fields, list):
            raise _invalid("schema must declare a 'fields' list")
        fields = []
        for raw in raw_fields:
            if not isinstance(raw, dict) or "name" not in raw or "type" not in raw:
                raise _invalid(f"schema field must have 'name' and 'type': {raw!r}")
            ftype, nullable = _parse_field_type(raw["name"], raw["type"])
            fields.append({"name": raw["name"], "type": ftype, "nullable": nullable})
        try:
            return cls(name=str(obj.get("name") or DEFAULT_RECORD_NAME), fields=fields)
        except PydanticValidationError as exc:
            raise _invalid(str(exc)) from exc

    @classmethod
    def parse_json(cls, text: str) -> Schema:
        """
        Parse a serialized schema description.

        Raises:
            ConfigurationError: kind=invalid_schema on JSON or structural errors.
        """
        try:
            obj = json.loads(text)
        except (TypeError, json.JSONDecodeError) as exc:
            raise _invalid(f"Unable to parse schema: {exc}") from exc
        return cls.from_json_obj(obj)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def to_json_obj(self) -> JsonDict:
        return {
            "type": "record",
            "name": self.name,
            "fields": [f.to_json_obj() for f in self.fields],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_json_obj(), separators=(",", ":"))


def _parse_field_type(name: Any, raw: Any) -> tuple[str, bool]:
    if isinstance(raw, str):
        if raw == "null":
            raise _invalid(f"field {name!r} cannot be of type 'null' only")
        return raw, False
    if isinstance(raw, list):
        branches = [b for b in raw if b != "null"]
        if len(raw) == 2 and len(branches) == 1 and isinstance(branches[0], str):
            return branches[0], True
    raise _invalid(f"field {name!r} has unsupported type {raw!r}")


def _invalid(msg: str) -> ConfigurationError:
    return ConfigurationError(msg, kind=ErrorKind.INVALID_SCHEMA, option="schema")
