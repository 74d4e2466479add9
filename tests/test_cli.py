from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from recfmt.cli import main
from recfmt.logging_ import setup_logging


def _run(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as ei:
        main(argv)
    return int(ei.value.code)


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    for key in [
        "RECFMT_IO_MAX_SPLIT_SIZE",
        "RECFMT_IO_MAX_WORKERS",
        "RECFMT_IO_EXECUTOR",
        "RECFMT_IO_ON_DECODE_ERROR",
        "RECFMT_IO_PATTERN",
        "RECFMT_IO_RECURSIVE",
    ]:
        monkeypatch.delenv(key, raising=False)


def test_formats_json(capsys) -> None:
    assert _run(["formats", "--json"]) == 0
    rows = json.loads(capsys.readouterr().out)
    assert [r["name"] for r in rows] == ["text", "delimited", "parquet", "orc", "avro"]
    assert rows[3]["options"]["index_stride"]["type"] == "long"


def test_validate_defers_and_resolves(capsys) -> None:
    assert _run(["validate", "text", "-o", "path_field=${pf}"]) == 0
    assert capsys.readouterr().out.strip() == "deferred"
    assert _run(["validate", "text", "-o", "path_field=${pf}", "-a", "pf=file"]) == 0
    assert capsys.readouterr().out.strip() == "passed"


def test_errors_exit_nonzero_with_kind(capsys) -> None:
    assert _run(["validate", "text", "-o", "delimiter=,"]) == 1
    assert "unknown_option" in capsys.readouterr().err


def test_unknown_command(capsys) -> None:
    assert _run(["frobnicate"]) == 2


def test_plan_and_read(tmp_path: Path, capsys) -> None:
    data = tmp_path / "in"
    data.mkdir()
    (data / "a.txt").write_text("hello\nworld\n")
    (data / "b.txt").write_text("bye\n")

    assert _run(["plan", "text", str(data), "--max-split-size", "12"]) == 0
    splits = json.loads(capsys.readouterr().out)
    assert [len(s["files"]) for s in splits] == [1, 1]

    argv = ["read", "text", str(data), "-o", "path_field=file", "--serial", "--provenance"]
    assert _run(argv) == 0
    out = capsys.readouterr()
    rows = [json.loads(line) for line in out.out.splitlines()]
    assert [r["body"] for r in rows] == ["hello", "world", "bye"]
    assert rows[1]["offset"] == 6 == rows[1]["_offset"]
    assert rows[2]["file"].endswith("b.txt")
    assert json.loads(out.err.strip().splitlines()[-1])["records"] == 3


def test_output_config_with_schema_file(tmp_path: Path, capsys) -> None:
    schema = tmp_path / "schema.json"
    schema.write_text(
        json.dumps(
            {"type": "record", "name": "r", "fields": [{"name": "id", "type": "long"}]}
        )
    )
    argv = ["output-config", "orc", "--schema-file", str(schema), "-o", "compression_codec=none"]
    assert _run(argv) == 0
    assert json.loads(capsys.readouterr().out) == {"orc.mapred.output.schema": "struct<id:bigint>"}



def test_missing_schema_file_is_a_configuration_error(tmp_path: Path, capsys) -> None:
    argv = ["output-config", "orc", "--schema-file", str(tmp_path / "missing.json")]
    assert _run(argv) == 1
    err = capsys.readouterr().err
    assert "[ERROR] invalid_value:" in err
    assert "missing.json" in err

def test_setup_logging_replaces_handlers_and_writes_file(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "recfmt.log"
    setup_logging("info", str(log_file))
    setup_logging("info", str(log_file))
    logger = logging.getLogger("recfmt")
    try:
        assert logger.level == logging.INFO
        assert len(logger.handlers) == 2
        logging.getLogger("recfmt.io.job").info("hello from the job")
        for h in logger.handlers:
            h.flush()
        assert "INFO recfmt.io.job | hello from the job" in log_file.read_text(encoding="utf-8")
    finally:
        for h in list(logger.handlers):
            h.close()
            logger.removeHandler(h)
        logger.setLevel(logging.NOTSET)
