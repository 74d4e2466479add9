"""
recfmt core defaults.

Defines split sizing and field-name defaults consumed by the format descriptors and
the IO layer. This module is zero-IO and uses only the Python standard library.

Notes:
    - Readers combine small files into splits of at most ``MAX_SPLIT_SIZE`` bytes
      unless overridden by ``ReadSettings.max_split_size``.
    - The text format stores the line body under ``BODY_FIELD`` and, when the schema
      declares it, the byte offset of the line under ``OFFSET_FIELD``.
"""

from __future__ import annotations

__all__ = [
    "MAX_SPLIT_SIZE",
    "MAX_WORKERS",
    "DEFAULT_DELIMITER",
    "OFFSET_FIELD",
    "BODY_FIELD",
    "DEFAULT_RECORD_NAME",
    "ENCODING",
]

# Upper bound on the aggregate size of one combined split (128 MiB).
MAX_SPLIT_SIZE: int = 128 * 1024 * 1024

# Default number of splits read concurrently by ReadJob.run.
MAX_WORKERS: int = 4

DEFAULT_DELIMITER: str = ","

OFFSET_FIELD: str = "offset"
BODY_FIELD: str = "body"

DEFAULT_RECORD_NAME: str = "record"

# Encoding used to decode line-oriented formats.
ENCODING: str = "utf-8"
