"""
Split data model and the split combiner.

Overview
- FileEntry: one physical file (path, size, locality hints) from a directory listing.
- CombinedSplit: ordered group of files read by one worker.
- RecordEnvelope: one decoded record plus its provenance (source path and offset).
- combine_files(): greedily groups files, in listing order, into the fewest splits whose
  total size does not exceed max_split_size.

Guarantees of combine_files
- Every input file appears in exactly one split, in input order.
- No split exceeds max_split_size, except a singleton split holding one file that is
  larger than max_split_size on its own (files are never truncated to fit).
- Deterministic: the same input and bound always yield the same grouping.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

from ..core.errors import ConfigurationError, ErrorKind
from ..core.typing import Fields

__all__ = [
    "FileEntry",
    "CombinedSplit",
    "RecordEnvelope",
    "combine_files",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FileEntry:
    """
    One candidate file.

    Attributes:
        path (str): File path.
        size_bytes (int): Size in bytes (non-negative).
        locations (tuple[str, ...]): Opaque locality hints (e.g., hosts holding the data).
    """

    path: str
    size_bytes: int
    locations: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.size_bytes < 0:
            raise ValueError(f"size_bytes must be non-negative, got {self.size_bytes}")


@dataclass(frozen=True, slots=True)
class CombinedSplit:
    """
    Ordered group of files assigned to one worker.

    Attributes:
        files (tuple[FileEntry, ...]): Files in read order.
    """

    files: tuple[FileEntry, ...]

    @property
    def total_size(self) -> int:
        return sum(f.size_bytes for f in self.files)

    @property
    def paths(self) -> list[str]:
        return [f.path for f in self.files]

    @property
    def locations(self) -> tuple[str, ...]:
        """Union of the files' locality hints, in first-seen order."""
        seen: dict[str, None] = {}
        for f in self.files:
            for loc in f.locations:
                seen.setdefault(loc, None)
        return tuple(seen)

    def __len__(self) -> int:
        return len(self.files)

    def __iter__(self) -> Iterator[FileEntry]:
        return iter(self.files)

    def to_json_obj(self) -> dict[str, Any]:
        return {
            "total_size": self.total_size,
            "files": [{"path": f.path, "size_bytes": f.size_bytes} for f in self.files],
            "locations": list(self.locations),
        }


@dataclass(frozen=True, slots=True)
class RecordEnvelope:
    """
    One decoded record with its provenance.

    Attributes:
        fields (dict[str, Any]): Field values in schema order (includes the injected
            path field and offset field when the schema declares them).
        source_path (str): Path of the file the record was decoded from.
        source_offset (int | None): Byte position immediately preceding the record,
            when the format reports it and the schema declares an offset field.
    """

    fields: Fields
    source_path: str
    source_offset: int | None = field(default=None)

    def to_row(self) -> Fields:
        return dict(self.fields)


def combine_files(files: Iterable[FileEntry], max_split_size: int) -> list[CombinedSplit]:
    """
    Group files into combined splits bounded by ``max_split_size`` bytes.

    Args:
        files (Iterable[FileEntry]): Candidate files in listing order.
        max_split_size (int): Maximum aggregate size of one split (> 0).

    Returns:
        list[CombinedSplit]: Splits in order; empty for an empty file list.

    Raises:
        ConfigurationError: kind=invalid_value if max_split_size <= 0.

    Examples:
        >>> splits = combine_files(
        ...     [FileEntry("a", 100), FileEntry("b", 150), FileEntry("c", 900)], 300
        ... )
        >>> [s.paths for s in splits]
        [['a', 'b'], ['c']]
    """
    if max_split_size <= 0:
        raise ConfigurationError(
            f"max_split_size must be positive, got {max_split_size}",
            kind=ErrorKind.INVALID_VALUE,
            option="max_split_size",
        )

    splits: list[CombinedSplit] = []
    current: list[FileEntry] = []
    current_size = 0
    oversized = 0

    def close() -> None:
        nonlocal current, current_size
        if current:
            splits.append(CombinedSplit(tuple(current)))
        current = []
        current_size = 0

    for entry in files:
        if entry.size_bytes > max_split_size:
            close()
            splits.append(CombinedSplit((entry,)))
            oversized += 1
            continue
        if current_size + entry.size_bytes > max_split_size:
            close()
        current.append(entry)
        current_size += entry.size_bytes
    close()

    logger.debug(
        "combined %d file(s) into %d split(s) (max_split_size=%d, oversized=%d)",
        sum(len(s) for s in splits),
        len(splits),
        max_split_size,
        oversized,
    )
    return splits
