"""Console logging for sync runs."""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
# one line per request would bury the per-record progress
CHATTY_LOGGERS = ("httpx", "httpcore", "hishel")


def resolve_level(*, verbose: bool = False) -> int:
    default = logging.DEBUG if verbose else logging.INFO
    configured = os.getenv("ELUSYNC_LOG_LEVEL", "").strip().upper()
    return logging.getLevelNamesMapping().get(configured, default)


def configure_logging(*, verbose: bool = False, force: bool = False) -> None:
    """Set up the root logger for a CLI run.

    ``ELUSYNC_LOG_LEVEL`` (a level name such as ``WARNING``) wins over ``verbose``.
    """
    level = resolve_level(verbose=verbose)

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%H:%M:%S", force=force)
    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
