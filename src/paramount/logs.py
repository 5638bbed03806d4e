"""Logging setup for paramount.

Verbose output narrates each step of a run on stdout. Without ``--verbose``
only warnings and above reach the console.
"""

from __future__ import annotations

import logging
import sys

LOGGER_NAME = "paramount"


def setup_logging(verbose: bool = False, stream=None) -> logging.Logger:
    """Configure the package logger and return it.

    Calling this again replaces the handler, so tests and repeated CLI
    invocations in one process do not stack duplicate output.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)

    logger.propagate = False
    return logger
