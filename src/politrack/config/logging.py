"""Logging setup for command-line runs."""

from __future__ import annotations

import logging
import os

# per-request chatter from the HTTP and migration stacks
NOISY_LOGGERS = ("httpx", "httpcore", "hishel", "alembic.runtime.migration")


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Configure the root logger for batch output.

    ``level`` defaults to ``POLITRACK_LOG_LEVEL`` (a level name) or INFO. The
    HTTP and migration libraries are held at WARNING unless DEBUG is requested.
    """

    if level is None:
        name = os.getenv("POLITRACK_LOG_LEVEL", "INFO").strip().upper()
        level = logging.getLevelNamesMapping().get(name, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    library_level = level if level <= logging.DEBUG else max(level, logging.WARNING)
    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(library_level)
