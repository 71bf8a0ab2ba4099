"""Logging configuration for the CLI entry point."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
PACKAGE_LOGGER: str = "mongo_rs_status"


def configure_logging(*, verbose: bool = False, serve: bool = False) -> None:
    """Send package logs to stderr.

    One-shot runs log warnings only, so stdout carries nothing but the
    reply and stderr stays quiet on success.  The service logs at INFO.
    ``verbose`` lowers either to DEBUG.  Calling again replaces the
    previous handler.
    """
    if verbose:
        level = logging.DEBUG
    elif serve:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logger = logging.getLogger(PACKAGE_LOGGER)
    for previous in list(logger.handlers):
        logger.removeHandler(previous)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
