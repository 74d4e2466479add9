"""
recfmt.io: split planning, path-tracking reads and writer configuration.

## Responsibilities
- Group many small files into few combined splits bounded by a byte size.
- Read each split as one lazy record stream, tagging every record with its source
  file path and, where the format supports it, its byte offset.
- Validate format options and schemas, deferring while macros are unresolved and
  re-checking authoritatively before the first split is read.
- Translate schema and options into the flat property map an external writer consumes,
  and write record streams atomically (tmp → fsync → rename).

## Public API
- ReadSettings: runtime settings (env > TOML > defaults).
- ReadJob / JobSummary: validate, plan and run a read over many files.
- combine_files, read_split, track_paths, to_frame: the underlying building blocks.
- validate_format, check_options, build_output_config, write_records.

## Import DAG discipline
- Depends on stdlib, polars/pyarrow, recfmt.core and recfmt.formats.
- recfmt.formats reaches back into recfmt.io.reader only lazily (FormatDescriptor.make_reader).

## Examples
```python
from recfmt.io import ReadJob, ReadSettings

job = ReadJob("text", {"path_field": "file"}, ReadSettings(max_split_size=64 * 1024 * 1024))
summary = job.run("logs/")  # doctest: +SKIP
for env in summary.collected:  # doctest: +SKIP
    print(env.source_path, env.source_offset, env.fields["body"])
```
"""

from __future__ import annotations

from .cancel import CancellationToken
from .fs import list_files
from .job import JobSummary, ReadJob
from .output import build_output_config
from .reader import read_split, to_frame, track_paths
from .settings import ReadSettings
from .splits import CombinedSplit, FileEntry, RecordEnvelope, combine_files
from .validate import ValidationStatus, check_options, effective_schema, validate_format
from .write import write_records

__all__ = [
    "CancellationToken",
    "CombinedSplit",
    "FileEntry",
    "JobSummary",
    "ReadJob",
    "ReadSettings",
    "RecordEnvelope",
    "ValidationStatus",
    "build_output_config",
    "check_options",
    "combine_files",
    "effective_schema",
    "list_files",
    "read_split",
    "to_frame",
    "track_paths",
    "validate_format",
    "write_records",
]
