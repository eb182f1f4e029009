"""Logging setup for pft.

Modules log through ``logging.getLogger(__name__)``; everything lives under
the ``pft`` namespace so a single handler covers the whole package.

The level comes from ``PFT_LOG_LEVEL`` (DEBUG, INFO, WARNING, ERROR) unless
the caller passes one explicitly. The CLI maps ``--verbose``/``--quiet``
onto it.
"""

from __future__ import annotations

import logging
import os
import sys

PACKAGE_LOGGER = "pft"


def configure_logging(level: str | None = None) -> None:
    """Attach a stderr handler to the ``pft`` logger.

    Safe to call more than once: the handler is only installed the first
    time, later calls just adjust the level.
    """
    level_name = (level or os.environ.get("PFT_LOG_LEVEL", "INFO")).upper()
    resolved = getattr(logging, level_name, logging.INFO)

    root_logger = logging.getLogger(PACKAGE_LOGGER)
    root_logger.setLevel(resolved)

    if root_logger.handlers:
        for handler in root_logger.handlers:
            handler.setLevel(resolved)
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt="[%(levelname)s] %(name)s: %(message)s"))
    root_logger.addHandler(handler)
    root_logger.propagate = False

