"""
Path-tracking record readers.

Overview
- track_paths(): wraps a format decoder for one physical file and turns each decoded
  record into a RecordEnvelope carrying its source path and (when the schema declares
  the format's offset field) its byte offset.
- read_split(): iterates the files of one CombinedSplit in order, fully draining each
  file before opening the next, as one continuous lazy stream.
- to_frame(): materializes envelopes as a polars DataFrame typed from the schema.

Guarantees
- Streams are lazy, finite, forward-only and not restartable; a file is opened on the
  first next() and its handle is released on exhaustion, error, cancellation or close().
- A DecodeError ends the stream of the offending file and is re-raised tagged with
  the file path and format; no partial-record recovery is attempted.
- A missing file raises SourceUnavailable when the reader reaches it; nothing is retried.
- Cancellation is cooperative: the token is checked before every record and before
  opening each file; a cancelled reader raises SplitCancelled.

Notes
- Records of one split never interleave: file order in the output equals file order
  in the split.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING

import polars as pl

from ..core.errors import DecodeError, SplitCancelled
from ..core.schema import Schema
from ..core.typing import Fields
from ..core.values import FormatConfig
from ..formats.mapping import to_polars_schema
from .cancel import CancellationToken
from .fs import open_read
from .splits import CombinedSplit, FileEntry, RecordEnvelope

if TYPE_CHECKING:
    from ..formats.base import Decoder, FormatDescriptor

__all__ = ["track_paths", "read_split", "to_frame"]

logger = logging.getLogger(__name__)


def _check_cancel(cancel: CancellationToken | None, path: str) -> None:
    if cancel is not None and cancel.is_cancelled():
        raise SplitCancelled(path)


def track_paths(
    file: FileEntry,
    schema: Schema,
    decoder: Decoder,
    config: FormatConfig,
    *,
    path_field: str | None = None,
    filename_only: bool = False,
    offset_field: str | None = None,
    format_name: str | None = None,
    cancel: CancellationToken | None = None,
) -> Iterator[RecordEnvelope]:
    """
    Decode one physical file into RecordEnvelopes tagged with provenance.

    Args:
        file (FileEntry): File to read.
        schema (Schema): Declared record schema; output fields follow its order.
        decoder (Decoder): Format decoder yielding ``(offset, fields)`` pairs.
        config (FormatConfig): Resolved format options passed to the decoder.
        path_field (str | None): Schema field receiving the source path.
        filename_only (bool): Inject only the file name instead of the full path.
        offset_field (str | None): Format's offset-capturing field; offsets are only
            reported when the schema declares it.
        format_name (str | None): Used to tag errors.
        cancel (CancellationToken | None): Cooperative cancellation token.

    Yields:
        RecordEnvelope: One per decoded record, in file order.

    Raises:
        SourceUnavailable: The file is missing or unreadable.
        DecodeError: A record is malformed (tagged with path and offset).
        SplitCancelled: Cancellation was requested.
    """
    path = file.path
    path_value = os.path.basename(path) if filename_only else path
    track_offset = offset_field is not None and schema.field(offset_field) is not None
    names = schema.field_names

    _check_cancel(cancel, path)
    with open_read(path) as handle:
        records = decoder(handle, schema, config)
        try:
            while True:
                _check_cancel(cancel, path)
                try:
                    offset, decoded = next(records)
                except StopIteration:
                    break
                except DecodeError as exc:
                    raise exc.with_source(path, format_name) from exc

                fields: Fields = {}
                for name in names:
                    if name == path_field:
                        fields[name] = path_value
                    elif track_offset and name == offset_field:
                        fields[name] = offset
                    else:
                        fields[name] = decoded.get(name)
                yield RecordEnvelope(
                    fields=fields,
                    source_path=path,
                    source_offset=offset if track_offset else None,
                )
        finally:
            close = getattr(records, "close", None)
            if close is not None:
                close()


def read_split(
    split: CombinedSplit,
    schema: Schema,
    descriptor: FormatDescriptor,
    config: FormatConfig,
    *,
    cancel: CancellationToken | None = None,
) -> Iterator[RecordEnvelope]:
    """
    Read every file of a combined split, in order, as one lazy stream.

    Args:
        split (CombinedSplit): Files to read.
        schema (Schema): Validated record schema.
        descriptor (FormatDescriptor): Readable format.
        config (FormatConfig): Resolved format options; raw strings are coerced.
        cancel (CancellationToken | None): Cooperative cancellation token.

    Yields:
        RecordEnvelope: Records of the first file, then the second, and so on.

    Raises:
        ConfigurationError: kind=unsupported_operation if the format is write-only.
        SourceUnavailable | DecodeError | SplitCancelled: As raised by track_paths.
    """
    logger.debug(
        "reading split of %d file(s), %d bytes (%s)", len(split), split.total_size, descriptor.name
    )
    for entry in split:
        yield from descriptor.make_reader(entry, schema, config, cancel=cancel)


def to_frame(records: Iterable[RecordEnvelope], schema: Schema) -> pl.DataFrame:
    """
    Materialize records as a DataFrame with columns and dtypes from ``schema``.

    Examples:
        >>> from recfmt.core.schema import Schema
        >>> to_frame([], Schema.of(("body", "string"))).columns
        ['body']
    """
    rows = [r.to_row() for r in records]
    return pl.DataFrame(rows, schema=to_polars_schema(schema))
