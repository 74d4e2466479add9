"""
Read jobs: validation, split planning and parallel split reading for one format.

Lifecycle
1) ReadJob.validate() at definition time; may return DEFERRED while macros are pending.
2) ReadJob.resolve(arguments) substitutes macros and returns a new job.
3) ReadJob.plan(files) runs the authoritative validation (no unresolved values allowed)
   and combines the files into splits.
4) ReadJob.run(files, sink) reads one split per worker and feeds every record to sink.

Error policy
- ConfigurationError / ValidationError surface before any split is read.
- DecodeError: "abort" fails the job; "skip_file" logs the file, drops its remaining
  records and continues with the next file of the split.
- SourceUnavailable always fails the job; nothing is retried here.
- When one worker fails, the others are cancelled and the first failure is re-raised.

Notes
- Records within a split keep file order; splits run concurrently, so records of
  different splits may reach the sink in any relative order.
- Sink calls are serialized; a sink does not need to be thread-safe.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any

from ..core.errors import DecodeError, SplitCancelled
from ..core.schema import Schema
from ..core.values import FormatConfig
from ..formats import FormatDescriptor, get_format
from .cancel import CancellationToken
from .fs import list_files
from .settings import ReadSettings
from .splits import CombinedSplit, FileEntry, RecordEnvelope, combine_files
from .validate import ValidationStatus, check_options, effective_schema, validate_format

__all__ = ["ReadJob", "JobSummary", "Sink"]

logger = logging.getLogger(__name__)

Sink = Callable[[RecordEnvelope], None]


@dataclass
class JobSummary:
    """
    Outcome of ReadJob.run.

    Attributes:
        splits (int): Number of splits read.
        files (int): Number of files across all splits.
        records (int): Records delivered to the sink.
        skipped_files (list[str]): Files abandoned under the "skip_file" policy.
        collected (list[RecordEnvelope]): Records in split order when no sink was given.
    """

    splits: int = 0
    files: int = 0
    records: int = 0
    skipped_files: list[str] = field(default_factory=list)
    collected: list[RecordEnvelope] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "splits": self.splits,
            "files": self.files,
            "records": self.records,
            "skipped_files": list(self.skipped_files),
        }


@dataclass
class _SplitResult:
    index: int
    records: int = 0
    skipped: list[str] = field(default_factory=list)
    collected: list[RecordEnvelope] = field(default_factory=list)


class ReadJob:
    """
    Read records of one format from many files as combined splits.

    Args:
        format (str | FormatDescriptor): Readable format name or descriptor.
        config (FormatConfig | dict[str, Any] | None): Format options; may contain macros.
        settings (ReadSettings | None): Runtime settings (defaults to ReadSettings()).

    Examples:
        >>> job = ReadJob("text", {"path_field": "file"})
        >>> job.validate()
        <ValidationStatus.PASSED: 'passed'>
    """

    def __init__(
        self,
        format: str | FormatDescriptor,
        config: FormatConfig | dict[str, Any] | None = None,
        settings: ReadSettings | None = None,
    ) -> None:
        self.descriptor = get_format(format)
        self.config = FormatConfig.from_mapping(config)
        self.settings = (settings or ReadSettings()).validate()

    def __repr__(self) -> str:
        return f"ReadJob(format={self.descriptor.name!r}, config={self.config!r})"

    # Validation ------------------------------------------------------------

    def validate(self) -> ValidationStatus:
        """Definition-time validation; DEFERRED while the schema or path field is a macro."""
        return validate_format(self.descriptor, self.config)

    def resolve(self, arguments: dict[str, Any]) -> ReadJob:
        """Return a new job with every macro substituted from ``arguments``."""
        return ReadJob(self.descriptor, self.config.resolve(arguments), self.settings)

    def prepare(self) -> tuple[Schema, FormatConfig]:
        """
        Authoritative pre-execution validation.

        Returns:
            tuple[Schema, FormatConfig]: Effective schema and coerced configuration.

        Raises:
            ConfigurationError: Unresolved macros, bad options, unreadable format.
            ValidationError: Schema violates the format's rules.
        """
        if not self.descriptor.readable:
            raise self.descriptor.unsupported("reading")
        validate_format(self.descriptor, self.config, require_resolved=True)
        cfg = check_options(self.descriptor, self.config)
        return effective_schema(self.descriptor, cfg), cfg

    # Planning --------------------------------------------------------------

    def plan(self, files: str | Iterable[FileEntry]) -> list[CombinedSplit]:
        """
        Validate, then group files into combined splits.

        Args:
            files (str | Iterable[FileEntry]): A directory or file path to list, or
                entries from an external listing.

        Returns:
            list[CombinedSplit]: Splits bounded by settings.max_split_size.
        """
        self.prepare()
        return self._combine(files)

    def _combine(self, files: str | Iterable[FileEntry]) -> list[CombinedSplit]:
        if isinstance(files, str):
            files = list_files(files, self.settings.pattern, self.settings.recursive)
        return combine_files(files, self.settings.max_split_size)

    # Reading ---------------------------------------------------------------

    def read(
        self, split: CombinedSplit, cancel: CancellationToken | None = None
    ) -> Iterator[RecordEnvelope]:
        """Lazily read one split, applying the configured decode-error policy."""
        schema, cfg = self.prepare()
        return self._iter_split(split, schema, cfg, cancel, [])

    def _iter_split(
        self,
        split: CombinedSplit,
        schema: Schema,
        cfg: FormatConfig,
        cancel: CancellationToken | None,
        skipped: list[str],
    ) -> Iterator[RecordEnvelope]:
        for entry in split:
            try:
                yield from self.descriptor.make_reader(entry, schema, cfg, cancel=cancel)
            except DecodeError as exc:
                if self.settings.on_decode_error != "skip_file":
                    raise
                logger.warning("skipping rest of %s: %s", entry.path, exc)
                skipped.append(entry.path)

    def _run_split(
        self,
        index: int,
        split: CombinedSplit,
        schema: Schema,
        cfg: FormatConfig,
        token: CancellationToken,
        sink: Sink | None,
        lock: threading.Lock,
    ) -> _SplitResult:
        result = _SplitResult(index)
        for env in self._iter_split(split, schema, cfg, token, result.skipped):
            result.records += 1
            if sink is None:
                result.collected.append(env)
            else:
                with lock:
                    sink(env)
        return result

    def run(
        self,
        files: str | Iterable[FileEntry],
        sink: Sink | None = None,
        cancel: CancellationToken | None = None,
    ) -> JobSummary:
        """
        Validate, plan and read every split.

        Args:
            files (str | Iterable[FileEntry]): Directory/file path or file entries.
            sink (Sink | None): Called once per record; when None, records are collected
                into JobSummary.collected in split order.
            cancel (CancellationToken | None): Caller's token; cancelling it stops all
                workers with SplitCancelled.

        Returns:
            JobSummary: Counts of splits, files, records and skipped files.

        Raises:
            ConfigurationError | ValidationError: Before any split is read.
            DecodeError: Under the "abort" policy.
            SourceUnavailable: A file vanished after planning.
            SplitCancelled: The caller's token was cancelled.
        """
        schema, cfg = self.prepare()
        splits = self._combine(files)
        token = CancellationToken(parent=cancel)
        lock = threading.Lock()
        logger.info(
            "reading %d split(s) of %s with %s executor",
            len(splits),
            self.descriptor.name,
            self.settings.executor,
        )

        results: list[_SplitResult] = []
        if self.settings.executor == "serial" or len(splits) <= 1:
            for i, split in enumerate(splits):
                results.append(self._run_split(i, split, schema, cfg, token, sink, lock))
        else:
            error: BaseException | None = None
            workers = min(self.settings.max_workers, len(splits))
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="recfmt-split") as pool:
                futures = [
                    pool.submit(self._run_split, i, split, schema, cfg, token, sink, lock)
                    for i, split in enumerate(splits)
                ]
                for fut in as_completed(futures):
                    try:
                        results.append(fut.result())
                    except SplitCancelled as exc:
                        if error is None:
                            error = exc
                    except Exception as exc:
                        if error is None or isinstance(error, SplitCancelled):
                            error = exc
                        token.cancel()
            if error is not None:
                raise error

        results.sort(key=lambda r: r.index)
        summary = JobSummary(splits=len(splits), files=sum(len(s) for s in splits))
        for r in results:
            summary.records += r.records
            summary.skipped_files.extend(r.skipped)
            summary.collected.extend(r.collected)
        logger.info(
            "read %d record(s) from %d file(s); skipped %d",
            summary.records,
            summary.files,
            len(summary.skipped_files),
        )
        return summary
