"""Logging setup for the cosense_kb package logger.

Modules log through ``logging.getLogger(__name__)``; only the CLI configures
output. COSENSE_KB_LOG_LEVEL picks the level:
    - DEBUG: per-page link counts while building the graph
    - INFO: export loading and graph totals (default)
    - ERROR: failures only (also what ``ckb --quiet`` selects)
"""

import logging
import os
import sys

PACKAGE_LOGGER = "cosense_kb"
LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


class _StderrHandler(logging.StreamHandler):
    """Writes to the sys.stderr current at emit time, not at creation."""

    def __init__(self) -> None:
        logging.Handler.__init__(self)

    @property
    def stream(self):
        return sys.stderr


def _level_from_env() -> int:
    level_name = os.environ.get("COSENSE_KB_LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def configure_logging(quiet: bool = False) -> None:
    """Send package log records to stderr and apply the level for this run.

    The handler is installed once per process. The level is applied on
    every call, so a quiet invocation does not leak into the next one.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)

    if not package_logger.handlers:
        handler = _StderrHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(handler)
        package_logger.propagate = False

    set_quiet_mode(quiet)


def set_quiet_mode(quiet: bool) -> None:
    """Switch between ERROR-only output and the COSENSE_KB_LOG_LEVEL level."""
    level = logging.ERROR if quiet else _level_from_env()

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)
    for handler in package_logger.handlers:
        handler.setLevel(level)
