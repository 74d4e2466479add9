from __future__ import annotations

from pathlib import Path

import pytest

from recfmt.core.constants import MAX_SPLIT_SIZE, MAX_WORKERS
from recfmt.core.errors import ConfigurationError, ErrorKind
from recfmt.io.settings import ReadSettings

ENV_KEYS = [
    "RECFMT_IO_MAX_SPLIT_SIZE",
    "RECFMT_IO_MAX_WORKERS",
    "RECFMT_IO_EXECUTOR",
    "RECFMT_IO_ON_DECODE_ERROR",
    "RECFMT_IO_PATTERN",
    "RECFMT_IO_RECURSIVE",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults_come_from_constants(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    s = ReadSettings.load()
    assert s.max_split_size == MAX_SPLIT_SIZE
    assert s.max_workers == MAX_WORKERS
    assert s.executor == "threads"
    assert s.on_decode_error == "abort"


def test_env_overrides_toml(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "recfmt.toml").write_text(
        """
        [io]
        max_split_size = 1000
        max_workers = 2
        on_decode_error = "skip_file"
        """.strip()
    )
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("RECFMT_IO_MAX_SPLIT_SIZE", "2048")
    monkeypatch.setenv("RECFMT_IO_EXECUTOR", "serial")

    s = ReadSettings.load()
    assert s.max_split_size == 2048  # env
    assert s.executor == "serial"  # env
    assert s.max_workers == 2  # toml
    assert s.on_decode_error == "skip_file"  # toml


def test_pyproject_tool_table(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "pyproject.toml").write_text(
        """
        [tool.recfmt.io]
        max_workers = 8
        recursive = false
        """.strip()
    )
    monkeypatch.chdir(tmp_path)
    s = ReadSettings.from_toml()
    assert s.max_workers == 8
    assert s.recursive is False


def test_unparseable_values_are_ignored(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("RECFMT_IO_MAX_WORKERS", "many")
    monkeypatch.setenv("RECFMT_IO_EXECUTOR", "processes")
    s = ReadSettings.load()
    assert s.max_workers == MAX_WORKERS
    assert s.executor == "threads"


@pytest.mark.parametrize(
    "kwargs,option",
    [({"max_split_size": 0}, "max_split_size"), ({"max_workers": 0}, "max_workers")],
)
def test_validate_rejects_out_of_range(kwargs: dict, option: str) -> None:
    with pytest.raises(ConfigurationError) as ei:
        ReadSettings(**kwargs).validate()
    assert ei.value.kind is ErrorKind.INVALID_VALUE
    assert ei.value.context["option"] == option


def test_invalid_toml_is_a_configuration_error(tmp_path: Path) -> None:
    p = tmp_path / "recfmt.toml"
    p.write_text("[io\nmax_workers = ")
    with pytest.raises(ConfigurationError):
        ReadSettings.from_toml(p)
