"""Logging setup for processes using memocache.

Library modules log through logging.getLogger(__name__), so every record
sits under the "memocache" logger. Cache HIT/MISS/SET lines are DEBUG,
invalidations INFO, store failures ERROR.
"""

import logging
import sys

from memocache.core.config import get_settings

PACKAGE_LOGGER = "memocache"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: int | None = None) -> None:
    """Send log records to stdout.

    Args:
        level: Explicit level. None picks DEBUG when settings.debug is
            set, else INFO. The package logger gets the same level so
            memocache records follow it even when the root logger was
            configured by the host application first.
    """
    if level is None:
        level = logging.DEBUG if get_settings().debug else logging.INFO
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """Logger under the memocache namespace (bare names are nested under it)."""
    if name != PACKAGE_LOGGER and not name.startswith(f"{PACKAGE_LOGGER}."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
