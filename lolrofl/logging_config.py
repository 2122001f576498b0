"""Logging helpers for the command line and per-run debug traces."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

__all__ = ["LOG_FORMAT", "setup_logging", "debug_trace"]

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: int = logging.WARNING) -> None:
    """Configure root logging for command line runs."""

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


@contextmanager
def debug_trace(path: Path, name: str = "lolrofl") -> Iterator[logging.Logger]:
    """Send every record of the ``name`` logger tree to ``path`` while active.

    The trace file is rewritten on each run.  Records stop reaching the root
    handlers for the duration so a debug trace does not flood the console;
    the logger's level and propagation are restored on exit.
    """

    path.parent.mkdir(parents=True, exist_ok=True)
    logger = logging.getLogger(name)
    saved = (logger.level, logger.propagate)

    handler = logging.FileHandler(path, mode="w", encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    try:
        yield logger
    finally:
        logger.removeHandler(handler)
        handler.close()
        logger.level, logger.propagate = saved
