"""
Exception types raised by recfmt.

One class per failure family, each tagged with an ErrorKind and carrying the
structured context needed to act on it (format name, field name, file path,
byte offset) without re-deriving state:

- ConfigurationError: bad or missing format option, invalid codec name, unknown
  format, unparseable schema, unresolved macro. Always raised before any split runs.
- ValidationError: schema does not satisfy the format's structural rules.
- DecodeError: malformed record inside one file; tagged with path and offset.
- SourceUnavailable: a file of a split is missing or unreadable at read time.
- WriteError: the writer sink failed to produce its output file.

Notes:
    - This module uses only the Python standard library and has no side effects.
    - Callers branch on ``err.kind`` and ``err.context`` rather than on subclasses.

Examples:
    >>> from recfmt.core.errors import ErrorKind, ValidationError
    >>> err = ValidationError.schema_mismatch("offset", "long", "int", format_name="text")
    >>> err.kind is ErrorKind.SCHEMA_MISMATCH
    True
    >>> err.context["field"]
    'offset'
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import Any

__all__ = [
    "ErrorKind",
    "RecfmtError",
    "ConfigurationError",
    "ValidationError",
    "DecodeError",
    "SourceUnavailable",
    "SplitCancelled",
    "WriteError",
]


class ErrorKind(str, Enum):
    """Tag identifying the specific failure inside an error family."""

    # configuration
    UNKNOWN_FORMAT = "unknown_format"
    UNKNOWN_OPTION = "unknown_option"
    MISSING_OPTION = "missing_option"
    INVALID_VALUE = "invalid_value"
    INVALID_SCHEMA = "invalid_schema"
    UNSUPPORTED_CODEC = "unsupported_codec"
    UNRESOLVED_MACRO = "unresolved_macro"
    UNSUPPORTED_OPERATION = "unsupported_operation"
    # validation
    SCHEMA_MISMATCH = "schema_mismatch"
    MISSING_FIELD = "missing_field"
    UNEXPECTED_FIELDS = "unexpected_fields"
    # read time
    MALFORMED_RECORD = "malformed_record"
    SOURCE_UNAVAILABLE = "source_unavailable"
    CANCELLED = "cancelled"
    # write time
    WRITE_FAILED = "write_failed"


class RecfmtError(Exception):
    """
    Base class for all recfmt errors.

    Attributes:
        kind (ErrorKind): Tag of the specific failure.
        format_name (str | None): Format the failure belongs to, when known.
        context (dict[str, Any]): Structured details (field, path, offset, ...).
    """

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind,
        format_name: str | None = None,
        **context: Any,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.format_name = format_name
        self.context: dict[str, Any] = dict(context)

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else ""


class ConfigurationError(RecfmtError, ValueError):
    """Invalid, unknown or missing configuration; fatal to the job."""

    @classmethod
    def unsupported_codec(
        cls,
        name: str,
        *,
        format_name: str | None = None,
        allowed: Iterable[str] = (),
    ) -> ConfigurationError:
        allowed = sorted(allowed)
        msg = f"Unsupported compression codec {name!r}"
        if allowed:
            msg += f" (expected one of {allowed!r})"
        return cls(
            msg,
            kind=ErrorKind.UNSUPPORTED_CODEC,
            format_name=format_name,
            codec=name,
            allowed=allowed,
        )


class ValidationError(RecfmtError, ValueError):
    """Schema failed the structural rules of a format; fatal to the job."""

    @classmethod
    def schema_mismatch(
        cls,
        field: str,
        expected_type: str,
        actual_type: str,
        *,
        format_name: str | None = None,
    ) -> ValidationError:
        return cls(
            f"The {field!r} field must be of type {expected_type!r}, but found {actual_type!r}",
            kind=ErrorKind.SCHEMA_MISMATCH,
            format_name=format_name,
            field=field,
            expected_type=expected_type,
            actual_type=actual_type,
        )

    @classmethod
    def missing_field(
        cls, field: str, expected_type: str, *, format_name: str | None = None
    ) -> ValidationError:
        fmt = f"the {format_name!r} format" if format_name else "this format"
        return cls(
            f"The schema for {fmt} must have a field named {field!r} of type {expected_type!r}",
            kind=ErrorKind.MISSING_FIELD,
            format_name=format_name,
            field=field,
            expected_type=expected_type,
        )

    @classmethod
    def unexpected_fields(
        cls,
        count: int,
        allowed: Iterable[str],
        *,
        extras: Iterable[str] = (),
        format_name: str | None = None,
    ) -> ValidationError:
        allowed = list(allowed)
        fmt = f"the {format_name!r} format" if format_name else "this format"
        names = ", ".join(repr(a) for a in allowed)
        return cls(
            f"The schema for {fmt} must only contain the fields {names}, "
            f"but found {count} other field{'s' if count != 1 else ''}",
            kind=ErrorKind.UNEXPECTED_FIELDS,
            format_name=format_name,
            count=count,
            allowed=allowed,
            extras=list(extras),
        )


class DecodeError(RecfmtError):
    """
    Malformed record inside one file.

    Attributes:
        path (str | None): File being decoded (filled in by the path-tracking reader).
        offset (int | None): Byte position of the record start, when the decoder knows it.
    """

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        offset: int | None = None,
        format_name: str | None = None,
    ) -> None:
        super().__init__(
            message,
            kind=ErrorKind.MALFORMED_RECORD,
            format_name=format_name,
            path=path,
            offset=offset,
        )
        self.path = path
        self.offset = offset

    def with_source(self, path: str, format_name: str | None = None) -> DecodeError:
        """Return a copy tagged with the file path (and format) it was raised for."""
        where = path if self.offset is None else f"{path}@{self.offset}"
        return DecodeError(
            f"{self.message} ({where})",
            path=path,
            offset=self.offset,
            format_name=format_name or self.format_name,
        )


class SourceUnavailable(RecfmtError):
    """A file is missing or unreadable at read time; not retried by recfmt."""

    def __init__(self, path: str, reason: str = "file not found") -> None:
        super().__init__(
            f"Source unavailable: {path} ({reason})",
            kind=ErrorKind.SOURCE_UNAVAILABLE,
            path=path,
            reason=reason,
        )
        self.path = path


class SplitCancelled(RecfmtError):
    """Raised by a split reader after it observed a cancellation request."""

    def __init__(self, path: str | None = None) -> None:
        super().__init__(
            "Split read cancelled" + (f" while reading {path}" if path else ""),
            kind=ErrorKind.CANCELLED,
            path=path,
        )
        self.path = path


class WriteError(RecfmtError):
    """The writer sink failed to write, fsync or rename its output file."""

    def __init__(self, message: str, *, path: str, format_name: str | None = None) -> None:
        super().__init__(message, kind=ErrorKind.WRITE_FAILED, format_name=format_name, path=path)
        self.path = path
