"""
Runtime settings for recfmt.io read jobs.

Defines ReadSettings, a frozen dataclass controlling split sizing, concurrency and the
decode-error policy. Defaults are sourced from recfmt.core.constants.

Precedence
- environment (RECFMT_IO_*) > TOML (./recfmt.toml [io] or ./pyproject.toml [tool.recfmt.io])
  > defaults.

Notes
- Unparseable values in env/TOML are ignored and the lower-precedence value is kept;
  out-of-range values are rejected by ReadSettings.validate().
- Format options (codec, schema, delimiter, ...) are not settings; they travel in a
  FormatConfig per job.
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Literal

from ..core.constants import MAX_SPLIT_SIZE, MAX_WORKERS
from ..core.errors import ConfigurationError, ErrorKind

__all__ = ["ReadSettings", "DecodeErrorPolicy", "ExecutorKind"]

logger = logging.getLogger(__name__)

DecodeErrorPolicy = Literal["abort", "skip_file"]
ExecutorKind = Literal["threads", "serial"]

_TRUTHY = {"1", "true", "t", "yes", "y", "on"}


@dataclass(frozen=True)
class ReadSettings:
    """
    Runtime settings for reading combined splits.

    Attributes:
        max_split_size (int): Upper bound in bytes on one combined split.
        max_workers (int): Number of splits read concurrently (>= 1).
        executor (Literal["threads","serial"]): "serial" reads splits one after another
            on the calling thread; useful for debugging and deterministic logs.
        on_decode_error (Literal["abort","skip_file"]): "abort" fails the job on the first
            DecodeError; "skip_file" logs it and moves on to the next file of the split.
        pattern (str): fnmatch pattern used when listing an input directory.
        recursive (bool): Whether directory listings descend into subdirectories.

    Examples:
        >>> ReadSettings(max_split_size=1024).max_split_size
        1024
    """

    max_split_size: int = MAX_SPLIT_SIZE
    max_workers: int = MAX_WORKERS
    executor: ExecutorKind = "threads"
    on_decode_error: DecodeErrorPolicy = "abort"
    pattern: str = "*"
    recursive: bool = True

    def validate(self) -> ReadSettings:
        """
        Check value ranges.

        Returns:
            ReadSettings: self, for chaining.

        Raises:
            ConfigurationError: kind=invalid_value naming the offending setting.
        """
        if self.max_split_size <= 0:
            raise ConfigurationError(
                f"max_split_size must be positive, got {self.max_split_size}",
                kind=ErrorKind.INVALID_VALUE,
                option="max_split_size",
            )
        if self.max_workers < 1:
            raise ConfigurationError(
                f"max_workers must be at least 1, got {self.max_workers}",
                kind=ErrorKind.INVALID_VALUE,
                option="max_workers",
            )
        if self.executor not in ("threads", "serial"):
            raise ConfigurationError(
                f"executor must be 'threads' or 'serial', got {self.executor!r}",
                kind=ErrorKind.INVALID_VALUE,
                option="executor",
            )
        if self.on_decode_error not in ("abort", "skip_file"):
            raise ConfigurationError(
                f"on_decode_error must be 'abort' or 'skip_file', got {self.on_decode_error!r}",
                kind=ErrorKind.INVALID_VALUE,
                option="on_decode_error",
            )
        return self

    # Configuration loaders (env/TOML) with precedence: env > TOML > defaults.

    @classmethod
    def _apply_mapping(cls, base: ReadSettings, cfg: dict[str, Any] | None) -> ReadSettings:
        """Apply a loose config mapping onto ReadSettings, returning a new instance."""
        if not isinstance(cfg, dict):
            return base

        s = base

        def _int(key: str) -> int | None:
            try:
                return int(cfg[key])
            except (TypeError, ValueError):
                logger.warning("ignoring non-integer setting %s=%r", key, cfg[key])
                return None

        for key in ("max_split_size", "max_workers"):
            if key in cfg:
                v = _int(key)
                if v is not None:
                    s = replace(s, **{key: v})

        if isinstance(cfg.get("executor"), str):
            ex = cfg["executor"].strip().lower()
            if ex in ("threads", "serial"):
                s = replace(s, executor=ex)  # type: ignore[arg-type]

        if isinstance(cfg.get("on_decode_error"), str):
            pol = cfg["on_decode_error"].strip().lower().replace("-", "_")
            if pol in ("abort", "skip_file"):
                s = replace(s, on_decode_error=pol)  # type: ignore[arg-type]

        if isinstance(cfg.get("pattern"), str) and cfg["pattern"]:
            s = replace(s, pattern=cfg["pattern"])

        if "recursive" in cfg:
            v = cfg["recursive"]
            s = replace(
                s,
                recursive=v if isinstance(v, bool) else str(v).strip().lower() in _TRUTHY,
            )

        return s

    @classmethod
    def from_env(cls, base: ReadSettings | None = None, prefix: str = "RECFMT_IO_") -> ReadSettings:
        """
        Build ReadSettings from environment variables. Precedence is env > base > defaults.

        Recognized variables:
            - RECFMT_IO_MAX_SPLIT_SIZE
            - RECFMT_IO_MAX_WORKERS
            - RECFMT_IO_EXECUTOR ("threads" | "serial")
            - RECFMT_IO_ON_DECODE_ERROR ("abort" | "skip_file")
            - RECFMT_IO_PATTERN
            - RECFMT_IO_RECURSIVE (1/0/true/false/yes/no/on/off)
        """
        s = base or cls()
        mapping: dict[str, Any] = {}
        for key in (
            "max_split_size",
            "max_workers",
            "executor",
            "on_decode_error",
            "pattern",
            "recursive",
        ):
            v = os.getenv(prefix + key.upper())
            if v:
                mapping[key] = v
        return cls._apply_mapping(s, mapping)

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str] | None = None) -> ReadSettings:
        """
        Build ReadSettings from a TOML file.

        Search order when `path` is None:
            1) ./recfmt.toml (with either top-level [io] or direct keys)
            2) ./pyproject.toml under [tool.recfmt.io]

        Returns defaults if no file is present.

        Raises:
            ConfigurationError: kind=invalid_value if a present file is not valid TOML.
        """
        s = cls()

        cand: list[Path] = []
        if path is not None:
            cand.append(Path(path))
        else:
            cand.append(Path.cwd() / "recfmt.toml")
            cand.append(Path.cwd() / "pyproject.toml")

        cfg: dict[str, Any] | None = None
        for p in cand:
            if not p.exists():
                continue
            try:
                with p.open("rb") as fh:
                    data = tomllib.load(fh)
            except tomllib.TOMLDecodeError as exc:
                raise ConfigurationError(
                    f"Invalid TOML in {p}: {exc}",
                    kind=ErrorKind.INVALID_VALUE,
                    path=str(p),
                ) from exc
            if p.name == "pyproject.toml":
                tool = data.get("tool", {})
                cfg = tool.get("recfmt", {}).get("io", {}) if isinstance(tool, dict) else None
            elif isinstance(data.get("io"), dict):
                cfg = data["io"]
            else:
                cfg = data
            if cfg:
                logger.debug("loaded read settings from %s", p)
                break

        return cls._apply_mapping(s, cfg)

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> ReadSettings:
        """
        Load ReadSettings applying precedence: environment > TOML > defaults.

        Args:
            path: Optional explicit TOML path. If None, search defaults
                (recfmt.toml, pyproject.toml).

        Returns:
            ReadSettings: Validated settings.
        """
        s = cls.from_toml(path)
        s = cls.from_env(base=s)
        return s.validate()
