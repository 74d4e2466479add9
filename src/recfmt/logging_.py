"""Logging setup for the recfmt command line.

Library modules only create module-level loggers (``logging.getLogger(__name__)``);
handlers are installed here, by the CLI, and never on import.

- Logs go to stderr so stdout stays reserved for command output (JSON).
- An optional log file receives the same records.
"""

from __future__ import annotations

import logging
import os

FORMAT = "%(asctime)s %(levelname)s %(name)s | %(message)s"
DATEFMT = "%Y-%m-%dT%H:%M:%S"


def setup_logging(level: int | str = logging.WARNING, log_file: str | None = None) -> None:
    """
    Configure the ``recfmt`` logger.

    Args:
        level: Logging level name or number.
        log_file: Optional path of a file that also receives the records.
    """
    logger = logging.getLogger("recfmt")
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    for h in list(logger.handlers):
        logger.removeHandler(h)

    fmt = logging.Formatter(fmt=FORMAT, datefmt=DATEFMT)

    # Console
    ch = logging.StreamHandler()
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    # File
    if log_file:
        parent = os.path.dirname(log_file)
        if parent:
            os.makedirs(parent, exist_ok=True)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setFormatter(fmt)
        logger.addHandler(fh)
