"""
Stateless schema-mapping functions into external type systems.

- to_hive_type: Hive/ORC type string, e.g. ``struct<offset:bigint,body:string>``.
- to_avro_json: Avro record schema JSON (nullable fields as ``["null", T]`` unions).
- to_arrow_schema: pyarrow.Schema used by the columnar writers and decoders.
- to_polars_schema: ordered name -> polars dtype mapping for DataFrame materialization.

Notes
- Every function is pure; the same Schema always maps to the same description.
- Descriptions must stay consistent with the target library's own grammar; the
  Hive names follow ORC's TypeDescription parser.
"""

from __future__ import annotations

import json
from typing import Any

import polars as pl
import pyarrow as pa

from ..core.schema import FieldType, Schema

__all__ = [
    "to_hive_type",
    "to_avro_json",
    "to_arrow_schema",
    "to_polars_schema",
]

_HIVE: dict[FieldType, str] = {
    FieldType.BOOLEAN: "boolean",
    FieldType.INT: "int",
    FieldType.LONG: "bigint",
    FieldType.FLOAT: "float",
    FieldType.DOUBLE: "double",
    FieldType.STRING: "string",
    FieldType.BYTES: "binary",
}

_ARROW: dict[FieldType, Any] = {
    FieldType.BOOLEAN: pa.bool_(),
    FieldType.INT: pa.int32(),
    FieldType.LONG: pa.int64(),
    FieldType.FLOAT: pa.float32(),
    FieldType.DOUBLE: pa.float64(),
    FieldType.STRING: pa.string(),
    FieldType.BYTES: pa.binary(),
}

_POLARS: dict[FieldType, Any] = {
    FieldType.BOOLEAN: pl.Boolean,
    FieldType.INT: pl.Int32,
    FieldType.LONG: pl.Int64,
    FieldType.FLOAT: pl.Float32,
    FieldType.DOUBLE: pl.Float64,
    FieldType.STRING: pl.Utf8,
    FieldType.BYTES: pl.Binary,
}


def to_hive_type(schema: Schema) -> str:
    """
    Return the Hive struct type string for a schema.

    Examples:
        >>> from recfmt.core.schema import Schema
        >>> to_hive_type(Schema.of(("offset", "long"), ("body", "string", True)))
        'struct<offset:bigint,body:string>'
    """
    cols = ",".join(f"{f.name}:{_HIVE[f.type]}" for f in schema.fields)
    return f"struct<{cols}>"


def to_avro_json(schema: Schema) -> str:
    """Return the Avro record schema for ``schema`` as compact JSON."""
    fields = []
    for f in schema.fields:
        t: Any = ["null", f.type.value] if f.nullable else f.type.value
        fields.append({"name": f.name, "type": t})
    obj = {"type": "record", "name": schema.name, "fields": fields}
    return json.dumps(obj, separators=(",", ":"))


def to_arrow_schema(schema: Schema) -> pa.Schema:
    return pa.schema([pa.field(f.name, _ARROW[f.type], nullable=f.nullable) for f in schema.fields])


def to_polars_schema(schema: Schema) -> dict[str, Any]:
    return {f.name: _POLARS[f.type] for f in schema.fields}
