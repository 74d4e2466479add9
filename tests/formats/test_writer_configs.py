from __future__ import annotations

import json

import pytest

from recfmt.core.errors import ConfigurationError, ErrorKind
from recfmt.core.schema import Schema
from recfmt.core.values import FormatConfig
from recfmt.formats import AVRO_FORMAT, ORC_FORMAT, PARQUET_FORMAT
from recfmt.formats.mapping import to_arrow_schema, to_avro_json, to_hive_type, to_polars_schema

SCHEMA = Schema.of(("id", "long"), ("name", "string", True))


def test_orc_schema_only_when_nothing_else_set() -> None:
    out = ORC_FORMAT.make_writer_config(SCHEMA, FormatConfig())
    assert out == {"orc.mapred.output.schema": "struct<id:bigint,name:string>"}


@pytest.mark.parametrize("codec", ["none", "NONE", "None"])
def test_none_codec_produces_no_compression_key(codec: str) -> None:
    out = ORC_FORMAT.make_writer_config(SCHEMA, FormatConfig({"compression_codec": codec}))
    assert "orc.compress" not in out
    out = PARQUET_FORMAT.make_writer_config(SCHEMA, FormatConfig({"compression_codec": codec}))
    assert "parquet.compression" not in out


def test_codec_names_are_case_insensitive() -> None:
    out = ORC_FORMAT.make_writer_config(SCHEMA, FormatConfig({"compression_codec": "Snappy"}))
    assert out["orc.compress"] == "SNAPPY"
    out = PARQUET_FORMAT.make_writer_config(SCHEMA, FormatConfig({"compression_codec": "gzip"}))
    assert out["parquet.compression"] == "GZIP"


def test_unknown_codec_fails() -> None:
    with pytest.raises(ConfigurationError) as ei:
        ORC_FORMAT.make_writer_config(SCHEMA, FormatConfig({"compression_codec": "bogus"}))
    assert ei.value.kind is ErrorKind.UNSUPPORTED_CODEC
    assert ei.value.context["codec"] == "bogus"
    assert ei.value.format_name == "orc"


def test_orc_stripe_and_chunk_sizes_are_independent_keys() -> None:
    cfg = FormatConfig(
        {
            "compression_codec": "zlib",
            "compression_chunk_size": 262144,
            "stripe_size": 67108864,
            "index_stride": 10000,
            "create_index": True,
        }
    )
    out = ORC_FORMAT.make_writer_config(SCHEMA, cfg)
    assert out["orc.compress"] == "ZLIB"
    assert out["orc.compress.size"] == "262144"
    assert out["orc.stripe.size"] == "67108864"
    assert out["orc.row.index.stride"] == "10000"
    assert out["orc.create.index"] == "true"


def test_orc_tuning_values_never_defaulted() -> None:
    out = ORC_FORMAT.make_writer_config(SCHEMA, FormatConfig({"stripe_size": 1024}))
    assert set(out) == {"orc.mapred.output.schema", "orc.stripe.size"}


def test_orc_index_stride_lower_bound() -> None:
    with pytest.raises(ConfigurationError) as ei:
        ORC_FORMAT.make_writer_config(SCHEMA, FormatConfig({"index_stride": 999}))
    assert ei.value.kind is ErrorKind.INVALID_VALUE
    assert ei.value.context["option"] == "index_stride"


def test_parquet_keys() -> None:
    cfg = FormatConfig({"compression_codec": "zstd", "block_size": 1 << 20, "page_size": 8192})
    out = PARQUET_FORMAT.make_writer_config(SCHEMA, cfg)
    assert json.loads(out["parquet.avro.schema"])["fields"][1] == {
        "name": "name",
        "type": ["null", "string"],
    }
    assert out["parquet.compression"] == "ZSTD"
    assert out["parquet.block.size"] == str(1 << 20)
    assert out["parquet.page.size"] == "8192"


def test_avro_keys_and_deflate_level() -> None:
    out = AVRO_FORMAT.make_writer_config(
        SCHEMA, FormatConfig({"compression_codec": "Deflate", "deflate_level": 6})
    )
    assert out["avro.output.codec"] == "deflate"
    assert out["avro.mapred.deflate.level"] == "6"
    assert json.loads(out["avro.schema.output.key"])["type"] == "record"
    with pytest.raises(ConfigurationError):
        AVRO_FORMAT.make_writer_config(SCHEMA, FormatConfig({"deflate_level": 10}))


def test_schema_mappings_are_consistent() -> None:
    assert to_hive_type(SCHEMA) == "struct<id:bigint,name:string>"
    assert json.loads(to_avro_json(SCHEMA))["fields"][0] == {"name": "id", "type": "long"}
    arrow = to_arrow_schema(SCHEMA)
    assert arrow.names == ["id", "name"]
    assert arrow.field("id").nullable is False
    assert list(to_polars_schema(SCHEMA)) == ["id", "name"]
