"""Logging set-up for the cvsync entry points."""

from __future__ import annotations

import logging
import os
from typing import Final

LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_LEVEL_ENV: Final[str] = "CVSYNC_LOG_LEVEL"

# Per-request lines from these drown the per-term events at INFO.
NOISY_LOGGERS: Final[tuple[str, ...]] = ("httpx", "httpcore", "hishel", "alembic.runtime")


def resolve_log_level(*, verbose: bool = False) -> int:
    """DEBUG when ``verbose``, else ``CVSYNC_LOG_LEVEL`` (a level name), else INFO."""

    if verbose:
        return logging.DEBUG
    name = os.getenv(LOG_LEVEL_ENV, "").strip().upper()
    if not name:
        return logging.INFO
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Initialise the root logger for CLI output.

    ``level`` defaults to :func:`resolve_log_level`. Pass ``force=True`` to
    replace handlers installed earlier, e.g. by Alembic's ``fileConfig``.
    """

    effective = resolve_log_level() if level is None else level
    logging.basicConfig(level=effective, format=LOG_FORMAT, datefmt="%H:%M:%S", force=force)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(effective, logging.WARNING))
