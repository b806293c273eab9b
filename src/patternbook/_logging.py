"""Logging setup for the pb command line.

Library modules only create loggers:

    import logging
    log = logging.getLogger(__name__)

    log.debug("Expected soft conditions (document absent, no registry file)")
    log.warning("Fail-closed conditions (malformed frontmatter, unreadable file)")
    log.error("Conditions that leave a category or registry unusable")

Handlers are installed only by the CLI entry point.

PATTERNBOOK_LOG_LEVEL picks the level (DEBUG, INFO, WARNING, ERROR);
unknown names fall back to WARNING.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TextIO

PACKAGE_LOGGER = "patternbook"
LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"
DEFAULT_LEVEL = logging.WARNING


def resolve_level(name: str | None) -> int:
    """Map a level name such as "debug" to its numeric value."""
    if not name:
        return DEFAULT_LEVEL
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else DEFAULT_LEVEL


def configure_logging(level: str | None = None, stream: TextIO | None = None) -> logging.Logger:
    """Attach a single stderr handler to the package logger.

    Args:
        level: Level name; defaults to PATTERNBOOK_LOG_LEVEL.
        stream: Destination; defaults to sys.stderr.

    Returns:
        The package logger. Calling again once a handler exists only
        returns it.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    if logger.handlers:
        return logger

    numeric = resolve_level(level if level is not None else os.environ.get("PATTERNBOOK_LOG_LEVEL"))

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(numeric)

    # Messages are already printed by our handler
    logger.propagate = False
    return logger


def set_quiet_mode(quiet: bool) -> None:
    """Only let errors through the package logger (pb --quiet)."""
    if quiet:
        logging.getLogger(PACKAGE_LOGGER).setLevel(logging.ERROR)
