"""
Writer sink: persist a record stream to one file using a flat OutputConfig.

Overview
- Accepts RecordEnvelopes (or plain field mappings) in schema order.
- Interprets the OutputConfig keys produced by build_output_config():
  parquet and orc through pyarrow, delimited through polars.
- Writes to a temporary sibling file, fsyncs it, then renames it atomically onto the
  final path, so readers never observe a partial file.

Notes
- The OutputConfig is used verbatim; no option is re-derived from FormatConfig here.
- Parquet files embed the whole OutputConfig as key-value metadata (this includes
  ``parquet.avro.schema``, as Avro-aware Parquet readers expect).
- parquet.block.size is a byte target that pyarrow cannot express; it is kept in the
  metadata only.
- orc.create.index is implied by the pyarrow ORC writer and not configurable there.
- Avro output requires an Avro container writer, which recfmt does not ship.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import uuid
from collections.abc import Iterable, Mapping
from typing import Any

import polars as pl
import pyarrow as pa
import pyarrow.parquet as pq
from pyarrow import orc as pa_orc

from ..core.constants import DEFAULT_DELIMITER
from ..core.errors import ConfigurationError, ErrorKind, WriteError
from ..core.schema import Schema
from ..core.typing import Fields, OutputConfig
from ..formats import FormatDescriptor, get_format
from ..formats import delimited as delimited_fmt
from ..formats import orc as orc_fmt
from ..formats import parquet as parquet_fmt
from ..formats.mapping import to_arrow_schema, to_polars_schema
from .fs import fsync_path, makedirs, rename_atomic
from .splits import RecordEnvelope

__all__ = ["write_records"]

logger = logging.getLogger(__name__)


def _rows(records: Iterable[RecordEnvelope | Mapping[str, Any]], schema: Schema) -> list[Fields]:
    names = schema.field_names
    out: list[Fields] = []
    for rec in records:
        row = rec.fields if isinstance(rec, RecordEnvelope) else rec
        out.append({n: row.get(n) for n in names})
    return out


def _optional_int(cfg: OutputConfig, key: str) -> int | None:
    v = cfg.get(key)
    return int(v) if v is not None else None


def _write_parquet(tmp: str, rows: list[Fields], schema: Schema, cfg: OutputConfig) -> None:
    table = pa.Table.from_pylist(rows, schema=to_arrow_schema(schema))
    meta = dict(table.schema.metadata or {})
    meta.update({k.encode("utf-8"): v.encode("utf-8") for k, v in cfg.items()})
    table = table.replace_schema_metadata(meta)
    kwargs: dict[str, Any] = {
        "compression": cfg.get(parquet_fmt.COMPRESSION_KEY, "none").lower(),
    }
    page_size = _optional_int(cfg, parquet_fmt.PAGE_SIZE_KEY)
    if page_size is not None:
        kwargs["data_page_size"] = page_size
    pq.write_table(table, tmp, **kwargs)


def _write_orc(tmp: str, rows: list[Fields], schema: Schema, cfg: OutputConfig) -> None:
    table = pa.Table.from_pylist(rows, schema=to_arrow_schema(schema))
    kwargs: dict[str, Any] = {
        "compression": cfg.get(orc_fmt.COMPRESS_KEY, "uncompressed").lower(),
    }
    for key, arg in (
        (orc_fmt.COMPRESS_SIZE_KEY, "compression_block_size"),
        (orc_fmt.STRIPE_SIZE_KEY, "stripe_size"),
        (orc_fmt.ROW_INDEX_STRIDE_KEY, "row_index_stride"),
    ):
        v = _optional_int(cfg, key)
        if v is not None:
            kwargs[arg] = v
    pa_orc.write_table(table, tmp, **kwargs)


def _write_delimited(tmp: str, rows: list[Fields], schema: Schema, cfg: OutputConfig) -> None:
    delimiter = cfg.get(delimited_fmt.DELIMITER_KEY, DEFAULT_DELIMITER)
    if len(delimiter.encode("utf-8")) != 1:
        raise ConfigurationError(
            f"the delimited writer needs a single-byte delimiter, got {delimiter!r}",
            kind=ErrorKind.INVALID_VALUE,
            format_name=delimited_fmt.NAME,
            option="delimiter",
        )
    columns = json.loads(cfg.get(delimited_fmt.COLUMNS_KEY, "null")) or schema.field_names
    df = pl.DataFrame(rows, schema=to_polars_schema(schema)).select(columns)
    df.write_csv(tmp, separator=delimiter, include_header=False)


_WRITERS = {
    parquet_fmt.NAME: _write_parquet,
    orc_fmt.NAME: _write_orc,
    delimited_fmt.NAME: _write_delimited,
}


def write_records(
    path: str,
    records: Iterable[RecordEnvelope | Mapping[str, Any]],
    schema: Schema,
    format: str | FormatDescriptor,
    output_config: OutputConfig,
) -> dict[str, Any]:
    """
    Write records to ``path`` atomically.

    Args:
        path (str): Final file path; parent directories are created.
        records (Iterable[RecordEnvelope | Mapping[str, Any]]): Records to write.
        schema (Schema): Record schema (column order and types).
        format (str | FormatDescriptor): Target format.
        output_config (OutputConfig): Flat writer configuration for that format.

    Returns:
        dict[str, Any]: Summary with keys path, format, rows, bytes.

    Raises:
        ConfigurationError: unsupported_operation if recfmt cannot write the format.
        WriteError: Encoding, fsync or rename failed; the temporary file is removed.
    """
    descriptor = get_format(format)
    writer = _WRITERS.get(descriptor.name)
    if writer is None:
        raise descriptor.unsupported("writing files")

    rows = _rows(records, schema)
    parent = os.path.dirname(os.path.abspath(path))
    makedirs(parent, exist_ok=True)
    tmp = os.path.join(parent, f".{os.path.basename(path)}.{uuid.uuid4().hex}.tmp")

    try:
        writer(tmp, rows, schema, output_config)
        fsync_path(tmp)
        rename_atomic(tmp, path)
    except ConfigurationError:
        with contextlib.suppress(FileNotFoundError):
            os.remove(tmp)
        raise
    except (pa.ArrowException, pl.exceptions.PolarsError, OSError, ValueError) as exc:
        with contextlib.suppress(FileNotFoundError):
            os.remove(tmp)
        raise WriteError(
            f"failed to write {descriptor.name} file {path}: {exc}",
            path=path,
            format_name=descriptor.name,
        ) from exc

    nbytes = os.path.getsize(path)
    logger.info("wrote %d row(s) to %s (%s, %d bytes)", len(rows), path, descriptor.name, nbytes)
    return {"path": path, "format": descriptor.name, "rows": len(rows), "bytes": nbytes}
