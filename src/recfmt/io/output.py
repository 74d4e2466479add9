"""
Output configuration builder.

build_output_config() turns a format name and caller options into the flat
string -> string property map an external writer consumes.

Rules
- Runs only on fully resolved configuration; unresolved macros are an error here.
- Options are checked against the format's options table before translation.
- The schema is always translated into the target's native schema language by the
  stateless functions of recfmt.formats.mapping.
- Codec names are case-insensitive; "none" yields no compression key; anything else
  unrecognized raises ConfigurationError(kind=unsupported_codec).
- Tuning values (chunk size, stripe size, index stride, ...) appear only when set.
"""

from __future__ import annotations

import logging
from typing import Any

from ..core.typing import OutputConfig
from ..core.values import FormatConfig
from ..formats import FormatDescriptor, get_format
from .validate import check_options, effective_schema, validate_format

__all__ = ["build_output_config"]

logger = logging.getLogger(__name__)


def build_output_config(
    format: str | FormatDescriptor, config: FormatConfig | dict[str, Any]
) -> OutputConfig:
    """
    Build the flat writer configuration for a format.

    Args:
        format (str | FormatDescriptor): Writable format name or descriptor.
        config (FormatConfig | dict[str, Any]): Resolved format options.

    Returns:
        OutputConfig: Flat property map (string keys and values).

    Raises:
        ConfigurationError: unknown_format, unsupported_operation (read-only format),
            unknown_option, missing_option, invalid_value, invalid_schema,
            unsupported_codec or unresolved_macro.
        ValidationError: The schema violates the format's structural rules.

    Examples:
        >>> from recfmt.core.schema import Schema
        >>> schema = Schema.of(("id", "long"), ("name", "string"))
        >>> opts = {"schema": schema.to_json(), "compression_codec": "NONE"}
        >>> out = build_output_config("orc", opts)
        >>> out
        {'orc.mapred.output.schema': 'struct<id:bigint,name:string>'}
    """
    descriptor = get_format(format)
    if not descriptor.writable:
        raise descriptor.unsupported("writing")

    validate_format(descriptor, config, require_resolved=True)
    cfg = check_options(descriptor, FormatConfig.from_mapping(config))
    schema = effective_schema(descriptor, cfg)
    out = descriptor.make_writer_config(schema, cfg)
    logger.debug("built %s output config with keys %s", descriptor.name, sorted(out))
    return out
