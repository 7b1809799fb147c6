"""Defaults and logging setup.

codeir has no configuration files. Defaults live here as constants; the CLI
overrides the log level with ``--log-level`` or ``CODEIR_LOG_LEVEL``.
"""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s] - %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"

DEFAULT_LOG_LEVEL = "WARNING"
LOG_LEVEL_ENVVAR = "CODEIR_LOG_LEVEL"

# Encoding of source files handed to the parsers
SOURCE_ENCODING = "utf-8"

_configured = False


def setup_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    """Configure the root logger. Idempotent; later calls only change the level."""
    global _configured  # noqa: PLW0603
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")

    if _configured:
        logging.getLogger().setLevel(numeric)
        return
    _configured = True

    logging.basicConfig(level=numeric, format=LOG_FORMAT, datefmt=LOG_DATEFMT)
