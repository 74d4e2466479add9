"""
Configuration values that may still be unresolved.

Format options can be defined with macro placeholders (``${name}``) that are only
substituted by the host runtime right before execution. Every option value is
therefore modeled as either Resolved (a concrete value) or Unresolved (a macro
expression). Validators short-circuit on Unresolved inputs and the caller re-runs
validation once FormatConfig.resolve() has substituted all macros.

Notes:
    - ``None`` means "not set" and is never stored; unset options are simply absent.
    - FormatConfig is immutable; resolve() and with_values() return new instances.

Examples:
    >>> from recfmt.core.values import FormatConfig
    >>> cfg = FormatConfig.from_mapping({"path_field": "${pf}", "delimiter": "|"})
    >>> cfg.is_unresolved("path_field"), cfg.get("delimiter")
    (True, '|')
    >>> cfg.resolve({"pf": "file"}).get("path_field")
    'file'
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from .errors import ConfigurationError, ErrorKind

__all__ = [
    "Resolved",
    "Unresolved",
    "ConfigValue",
    "FormatConfig",
    "contains_macro",
]

_MACRO_RE = re.compile(r"\$\{([^${}]+)\}")


def contains_macro(value: Any) -> bool:
    return isinstance(value, str) and _MACRO_RE.search(value) is not None


@dataclass(frozen=True, slots=True)
class Resolved:
    """A concrete configuration value."""

    value: Any


@dataclass(frozen=True, slots=True)
class Unresolved:
    """A configuration value that still contains macro placeholders."""

    expression: str

    @property
    def macros(self) -> list[str]:
        return _MACRO_RE.findall(self.expression)


ConfigValue = Resolved | Unresolved


def _wrap(value: Any) -> ConfigValue:
    if isinstance(value, (Resolved, Unresolved)):
        return value
    if contains_macro(value):
        return Unresolved(value)
    return Resolved(value)


class FormatConfig(Mapping[str, ConfigValue]):
    """
    Immutable mapping of option name to Resolved | Unresolved.

    Args:
        values (Mapping[str, Any] | None): Raw option values; strings containing a
            ``${...}`` macro become Unresolved, None values are dropped.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values: dict[str, ConfigValue] = {
            str(k): _wrap(v) for k, v in (values or {}).items() if v is not None
        }

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any] | FormatConfig | None) -> FormatConfig:
        if isinstance(values, FormatConfig):
            return values
        return cls(values)

    # Mapping protocol -------------------------------------------------------
    def __getitem__(self, name: str) -> ConfigValue:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"FormatConfig({self.to_dict()!r})"

    # Queries ---------------------------------------------------------------
    def names(self) -> list[str]:
        return list(self._values)

    def is_set(self, name: str) -> bool:
        return name in self._values

    def is_unresolved(self, name: str) -> bool:
        return isinstance(self._values.get(name), Unresolved)

    def unresolved_names(self) -> list[str]:
        return [k for k, v in self._values.items() if isinstance(v, Unresolved)]

    def has_unresolved(self, *names: str) -> bool:
        """True if any of ``names`` (or any option at all, when none given) is unresolved."""
        if not names:
            return bool(self.unresolved_names())
        return any(self.is_unresolved(n) for n in names)

    def get(self, name: str, default: Any = None) -> Any:  # type: ignore[override]
        """
        Return the concrete value of an option.

        Raises:
            ConfigurationError: kind=unresolved_macro if the value is still a macro.
        """
        v = self._values.get(name)
        if v is None:
            return default
        if isinstance(v, Unresolved):
            raise ConfigurationError(
                f"option {name!r} should not be read until macros are evaluated "
                f"(value {v.expression!r})",
                kind=ErrorKind.UNRESOLVED_MACRO,
                option=name,
            )
        return v.value

    # Derivation ------------------------------------------------------------
    def resolve(self, arguments: Mapping[str, Any]) -> FormatConfig:
        """
        Substitute every ``${key}`` placeholder from ``arguments``.

        A value that consists of a single macro takes the argument value as-is
        (keeping its type); embedded macros are substituted as strings.

        Raises:
            ConfigurationError: kind=unresolved_macro if an argument is missing.
        """
        out: dict[str, Any] = {}
        for name, v in self._values.items():
            if isinstance(v, Resolved):
                out[name] = v.value
                continue
            missing = [m for m in v.macros if m not in arguments]
            if missing:
                raise ConfigurationError(
                    f"no argument provided for macro(s) {missing!r} in option {name!r}",
                    kind=ErrorKind.UNRESOLVED_MACRO,
                    option=name,
                    macros=missing,
                )
            whole = _MACRO_RE.fullmatch(v.expression)
            if whole:
                out[name] = arguments[whole.group(1)]
            else:
                out[name] = _MACRO_RE.sub(lambda m: str(arguments[m.group(1)]), v.expression)
        # Concrete values from arguments are never re-parsed as macros.
        return FormatConfig({k: Resolved(val) for k, val in out.items() if val is not None})

    def with_values(self, **values: Any) -> FormatConfig:
        merged: dict[str, Any] = dict(self._values)
        merged.update(values)
        return FormatConfig(merged)

    def to_dict(self) -> dict[str, Any]:
        return {
            k: (v.value if isinstance(v, Resolved) else v.expression)
            for k, v in self._values.items()
        }
