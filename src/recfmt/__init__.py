"""
recfmt: split-combining, path-tracking record IO over multiple file formats.

Layers
- recfmt.core: zero-IO contracts (schema, configuration values, errors, field rules).
- recfmt.formats: frozen format descriptors and the static format registry.
- recfmt.io: split combining, path-tracking readers, validation, output configuration,
  writer sink, settings and read jobs.
- recfmt.cli: command line entry point (``recfmt``).
"""

__version__ = "0.1.0"
