from __future__ import annotations

import threading
from pathlib import Path

import pytest

from recfmt.core.errors import (
    ConfigurationError,
    DecodeError,
    ErrorKind,
    SourceUnavailable,
    SplitCancelled,
    ValidationError,
)
from recfmt.core.schema import Schema
from recfmt.io.cancel import CancellationToken
from recfmt.io.fs import list_files
from recfmt.io.job import ReadJob
from recfmt.io.settings import ReadSettings
from recfmt.io.validate import ValidationStatus

CSV_SCHEMA = Schema.of(("n", "long"), ("file", "string")).to_json()


def _tree(root: Path, files: dict[str, bytes]) -> Path:
    for name, data in files.items():
        (root / name).write_bytes(data)
    return root


def test_validate_defers_then_resolves(tmp_path: Path) -> None:
    job = ReadJob("text", {"path_field": "${pf}"})
    assert job.validate() is ValidationStatus.DEFERRED
    with pytest.raises(ConfigurationError) as ei:
        job.plan(str(tmp_path))
    assert ei.value.kind is ErrorKind.UNRESOLVED_MACRO

    resolved = job.resolve({"pf": "file"})
    assert resolved.validate() is ValidationStatus.PASSED
    assert resolved.plan(str(tmp_path)) == []


def test_validation_runs_before_any_split(tmp_path: Path) -> None:
    _tree(tmp_path, {"a.txt": b"x\n"})
    bad = Schema.of(("body", "string"), ("extra", "int")).to_json()
    job = ReadJob("text", {"schema": bad})
    with pytest.raises(ValidationError):
        job.run(str(tmp_path))


def test_write_only_format_cannot_be_read(tmp_path: Path) -> None:
    job = ReadJob("avro", {"schema": Schema.of(("a", "int")).to_json()})
    with pytest.raises(ConfigurationError) as ei:
        job.run(str(tmp_path))
    assert ei.value.kind is ErrorKind.UNSUPPORTED_OPERATION


def test_plan_respects_max_split_size(tmp_path: Path) -> None:
    _tree(tmp_path, {"a.txt": b"x" * 100, "b.txt": b"x" * 150, "c.txt": b"x" * 900})
    job = ReadJob("text", {}, ReadSettings(max_split_size=300))
    splits = job.plan(str(tmp_path))
    assert [[Path(p).name for p in s.paths] for s in splits] == [["a.txt", "b.txt"], ["c.txt"]]


@pytest.mark.parametrize("executor", ["threads", "serial"])
def test_run_collects_every_record_in_split_order(tmp_path: Path, executor: str) -> None:
    files = {f"f{i:02d}.csv": f"{i}\n{i + 100}\n".encode() for i in range(12)}
    _tree(tmp_path, files)
    settings = ReadSettings(max_split_size=20, max_workers=3, executor=executor)
    job = ReadJob("delimited", {"schema": CSV_SCHEMA, "path_field": "file"}, settings)

    summary = job.run(str(tmp_path))
    assert summary.files == 12
    assert summary.splits == len(job.plan(str(tmp_path)))
    assert summary.splits > 1
    assert summary.records == 24
    assert [e.fields["n"] for e in summary.collected] == [
        n for i in range(12) for n in (i, i + 100)
    ]
    assert all(Path(e.fields["file"]).name == Path(e.source_path).name for e in summary.collected)


def test_sink_calls_are_serialized(tmp_path: Path) -> None:
    _tree(tmp_path, {f"f{i}.txt": b"a\nb\nc\n" for i in range(8)})
    inside = threading.Lock()
    seen: list[str] = []

    def sink(env) -> None:
        assert inside.acquire(blocking=False), "sink entered concurrently"
        try:
            seen.append(env.source_path)
        finally:
            inside.release()

    job = ReadJob("text", {}, ReadSettings(max_split_size=6, max_workers=4))
    summary = job.run(str(tmp_path), sink=sink)
    assert summary.records == 24 == len(seen)
    assert summary.collected == []


def test_decode_error_aborts_by_default(tmp_path: Path) -> None:
    _tree(tmp_path, {"a.csv": b"1\n", "b.csv": b"2\nbad\n3\n"})
    job = ReadJob("delimited", {"schema": Schema.of(("n", "long")).to_json()})
    with pytest.raises(DecodeError) as ei:
        job.run(str(tmp_path))
    assert ei.value.path.endswith("b.csv")
    assert ei.value.offset == 2


def test_skip_file_policy_drops_rest_of_bad_file(tmp_path: Path) -> None:
    _tree(tmp_path, {"a.csv": b"1\n", "b.csv": b"2\nbad\n3\n", "c.csv": b"4\n"})
    settings = ReadSettings(on_decode_error="skip_file", executor="serial")
    job = ReadJob("delimited", {"schema": Schema.of(("n", "long")).to_json()}, settings)
    summary = job.run(str(tmp_path))
    assert [e.fields["n"] for e in summary.collected] == [1, 2, 4]
    assert [Path(p).name for p in summary.skipped_files] == ["b.csv"]
    assert summary.to_dict()["records"] == 3


def test_missing_file_always_aborts(tmp_path: Path) -> None:
    _tree(tmp_path, {"a.txt": b"x\n", "b.txt": b"y\n"})
    entries = list_files(str(tmp_path))
    (tmp_path / "b.txt").unlink()
    settings = ReadSettings(on_decode_error="skip_file")
    with pytest.raises(SourceUnavailable) as ei:
        ReadJob("text", {}, settings).run(entries)
    assert ei.value.path.endswith("b.txt")


def test_cancelled_token_stops_job(tmp_path: Path) -> None:
    _tree(tmp_path, {f"f{i}.txt": b"x\n" for i in range(4)})
    token = CancellationToken()
    token.cancel()
    job = ReadJob("text", {}, ReadSettings(max_split_size=2))
    with pytest.raises(SplitCancelled):
        job.run(str(tmp_path), cancel=token)


def test_worker_failure_cancels_siblings_without_touching_caller_token(tmp_path: Path) -> None:
    _tree(tmp_path, {f"f{i}.csv": b"1\n" for i in range(6)})
    (tmp_path / "f3.csv").write_bytes(b"oops\n")
    caller = CancellationToken()
    settings = ReadSettings(max_split_size=2, max_workers=3)
    job = ReadJob("delimited", {"schema": Schema.of(("n", "long")).to_json()}, settings)
    with pytest.raises(DecodeError):
        job.run(str(tmp_path), cancel=caller)
    assert not caller.is_cancelled()


def test_read_single_split_lazily(tmp_path: Path) -> None:
    _tree(tmp_path, {"a.txt": b"1\n2\n"})
    job = ReadJob("text", {"path_field": "file"})
    (split,) = job.plan(str(tmp_path))
    stream = job.read(split)
    first = next(stream)
    assert first.fields["body"] == "1"
    assert first.source_offset == 0
    assert [e.fields["body"] for e in stream] == ["2"]
