"""
Filesystem helpers for recfmt.io (file protocol baseline).

Responsibilities
- Produce FileEntry listings (path, size) for the split combiner.
- Open files for reading as scoped resources, converting missing/unreadable files into
  SourceUnavailable.
- Support the atomic write path used by the writer sink: tmp write → fsync → rename.

Notes
- stdlib-only; remote filesystems can be layered later behind the same interface.
- Atomicity via os.replace is guaranteed only when src and dst reside on the same filesystem.
- Listings skip hidden files and "_"-prefixed markers (e.g., _SUCCESS).
"""

from __future__ import annotations

import fnmatch
import os
from collections.abc import Iterator
from contextlib import contextmanager
from typing import BinaryIO

from ..core.errors import SourceUnavailable
from .splits import FileEntry

__all__ = [
    "makedirs",
    "list_files",
    "file_entry",
    "open_read",
    "fsync_path",
    "rename_atomic",
]


def makedirs(path: str, exist_ok: bool = True) -> None:
    os.makedirs(path, exist_ok=exist_ok)


def _visible(name: str) -> bool:
    return not (name.startswith(".") or name.startswith("_"))


def file_entry(path: str) -> FileEntry:
    """
    Stat a single file into a FileEntry.

    Raises:
        SourceUnavailable: If the path does not exist or cannot be stat'ed.
    """
    try:
        size = os.stat(path).st_size
    except FileNotFoundError:
        raise SourceUnavailable(path) from None
    except OSError as exc:
        raise SourceUnavailable(path, exc.strerror or str(exc)) from exc
    return FileEntry(path=path, size_bytes=size)


def list_files(root: str, pattern: str = "*", recursive: bool = True) -> list[FileEntry]:
    """
    List candidate files under a directory (or a single file) in sorted path order.

    Args:
        root (str): Directory to list, or a single file path.
        pattern (str): fnmatch pattern applied to file names.
        recursive (bool): Descend into subdirectories when True.

    Returns:
        list[FileEntry]: Entries sorted by path; [] for an empty directory.

    Raises:
        SourceUnavailable: If root does not exist.
    """
    if os.path.isfile(root):
        return [file_entry(root)]
    if not os.path.isdir(root):
        raise SourceUnavailable(root)

    paths: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if _visible(d)) if recursive else []
        for name in filenames:
            if _visible(name) and fnmatch.fnmatch(name, pattern):
                paths.append(os.path.join(dirpath, name))
    return [file_entry(p) for p in sorted(paths)]


@contextmanager
def open_read(path: str) -> Iterator[BinaryIO]:
    """
    Open a file for binary read as a context manager.

    Raises:
        SourceUnavailable: If the file is missing or cannot be opened.

    Notes:
        The handle is closed on every exit path, including errors raised by the caller.
    """
    try:
        fh = open(path, "rb")
    except FileNotFoundError:
        raise SourceUnavailable(path) from None
    except OSError as exc:
        raise SourceUnavailable(path, exc.strerror or str(exc)) from exc
    try:
        yield fh
    finally:
        fh.close()


def fsync_path(path: str) -> None:
    """
    Open a path read-only and fsync its file descriptor.

    Notes:
        Used after a library wrote to a path directly (pyarrow, polars) and before the
        atomic rename.
    """
    fd = os.open(path, os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


def rename_atomic(src: str, dst: str) -> None:
    os.replace(src, dst)
