"""
Format configuration and schema validation for recfmt.io.

Responsibilities
- check_options(): reject unknown option names, enforce required options and coerce
  resolved option values to their declared types.
- validate_format(): run option checks and the format's structural schema validator,
  deferring (optimistically passing) while the schema or the path field is still an
  unresolved macro.
- effective_schema(): the configured schema, or the format's default schema.

Notes
- Definition-time validation may return ValidationStatus.DEFERRED; callers must re-run
  validation with ``require_resolved=True`` immediately before the first split is read.
- The structural rules themselves live in recfmt.core.rules and in each format module.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from ..core.errors import ConfigurationError, ErrorKind
from ..core.schema import Schema
from ..core.values import FormatConfig, Resolved
from ..formats import FormatDescriptor, OptionSpec, get_format

__all__ = [
    "ValidationStatus",
    "check_options",
    "coerce_option",
    "coerce_options",
    "validate_format",
    "effective_schema",
]

logger = logging.getLogger(__name__)

_TRUE = {"true", "t", "1", "yes", "y", "on"}
_FALSE = {"false", "f", "0", "no", "n", "off"}


class ValidationStatus(str, Enum):
    PASSED = "passed"
    DEFERRED = "deferred"


def coerce_option(spec: OptionSpec, value: Any, *, format_name: str | None = None) -> Any:
    """
    Coerce one resolved option value to the option's declared type.

    Raises:
        ConfigurationError: kind=invalid_value if the value cannot represent the type.
    """

    def invalid() -> ConfigurationError:
        return ConfigurationError(
            f"option {spec.name!r} must be of type {spec.type!r}, got {value!r}",
            kind=ErrorKind.INVALID_VALUE,
            format_name=format_name,
            option=spec.name,
        )

    if spec.type == "string":
        if isinstance(value, Schema):
            return value.to_json()
        if isinstance(value, (str, int, float)) and not isinstance(value, bool):
            return str(value)
        raise invalid()
    if spec.type in ("long", "int"):
        if isinstance(value, bool):
            raise invalid()
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                raise invalid() from None
        raise invalid()
    if spec.type == "boolean":
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lo = value.strip().lower()
            if lo in _TRUE:
                return True
            if lo in _FALSE:
                return False
        raise invalid()
    raise invalid()  # pragma: no cover - OptionType is closed


def check_options(descriptor: FormatDescriptor, config: FormatConfig) -> FormatConfig:
    """
    Check a configuration against the format's recognized-options table.

    Args:
        descriptor (FormatDescriptor): Target format.
        config (FormatConfig): Caller-supplied options.

    Returns:
        FormatConfig: Configuration with resolved values coerced to their option types;
        unresolved values are carried through unchanged.

    Raises:
        ConfigurationError: unknown_option, missing_option or invalid_value.
    """
    unknown = [name for name in config if name not in descriptor.options]
    if unknown:
        raise ConfigurationError(
            f"unknown option(s) {unknown!r} for format {descriptor.name!r}; "
            f"recognized: {sorted(descriptor.options)!r}",
            kind=ErrorKind.UNKNOWN_OPTION,
            format_name=descriptor.name,
            options=unknown,
        )

    for spec in descriptor.options.values():
        if spec.required and not config.is_set(spec.name):
            raise ConfigurationError(
                f"option {spec.name!r} is required for format {descriptor.name!r}",
                kind=ErrorKind.MISSING_OPTION,
                format_name=descriptor.name,
                option=spec.name,
            )

    return coerce_options(descriptor, config)


def coerce_options(descriptor: FormatDescriptor, config: FormatConfig) -> FormatConfig:
    """
    Coerce resolved values of declared options to their option types.

    Unresolved values and names outside the options table are carried through
    unchanged; string booleans such as ``"false"`` become real booleans.

    Raises:
        ConfigurationError: invalid_value if a resolved value cannot be coerced.
    """
    coerced: dict[str, Any] = {}
    for name, value in config.items():
        spec = descriptor.options.get(name)
        if spec is not None and isinstance(value, Resolved):
            coerced[name] = Resolved(
                coerce_option(spec, value.value, format_name=descriptor.name)
            )
        else:
            coerced[name] = value
    return FormatConfig(coerced)


def effective_schema(descriptor: FormatDescriptor, config: FormatConfig) -> Schema:
    """
    Return the configured schema, or the format's default schema.

    Raises:
        ConfigurationError: missing_option when the format requires a schema and none is
            set; invalid_schema when the configured schema cannot be parsed;
            unresolved_macro when the schema is still a macro.
    """
    raw = config.get("schema")
    if raw is not None:
        return raw if isinstance(raw, Schema) else Schema.parse_json(raw)
    if descriptor.default_schema is not None and not descriptor.schema_required:
        return descriptor.default_schema(config)
    raise ConfigurationError(
        f"option 'schema' is required for format {descriptor.name!r}",
        kind=ErrorKind.MISSING_OPTION,
        format_name=descriptor.name,
        option="schema",
    )


def validate_format(
    format: str | FormatDescriptor,
    config: FormatConfig | dict[str, Any],
    *,
    require_resolved: bool = False,
) -> ValidationStatus:
    """
    Validate a format configuration and its schema.

    Args:
        format (str | FormatDescriptor): Format name or descriptor.
        config (FormatConfig | dict[str, Any]): Options, possibly containing macros.
        require_resolved (bool): Pre-execution mode; any unresolved value is an error
            instead of a reason to defer.

    Returns:
        ValidationStatus: PASSED, or DEFERRED when a value needed for schema validation
        is still unresolved.

    Raises:
        ConfigurationError: Bad options, unparseable schema or (with require_resolved)
            unresolved macros.
        ValidationError: Schema violates the format's structural rules.

    Examples:
        >>> validate_format("text", {"schema": "${schema}"})
        <ValidationStatus.DEFERRED: 'deferred'>
    """
    descriptor = get_format(format)
    cfg = check_options(descriptor, FormatConfig.from_mapping(config))

    if require_resolved and cfg.has_unresolved():
        names = cfg.unresolved_names()
        raise ConfigurationError(
            f"option(s) {names!r} of format {descriptor.name!r} still contain unresolved macros",
            kind=ErrorKind.UNRESOLVED_MACRO,
            format_name=descriptor.name,
            options=names,
        )

    if cfg.has_unresolved(*descriptor.schema_dependencies):
        logger.debug(
            "deferring %s schema validation; unresolved: %s",
            descriptor.name,
            [n for n in descriptor.schema_dependencies if cfg.is_unresolved(n)],
        )
        return ValidationStatus.DEFERRED

    schema = effective_schema(descriptor, cfg)
    descriptor.validate(schema, cfg)
    return ValidationStatus.PASSED
