"""
Centralized logging configuration for the ``club_finance`` package.

``configure_logging()`` attaches a single ``StreamHandler`` to the package
root logger. It is called once by the application factory in main.py.
Library modules never attach handlers of their own; they only call
``logging.getLogger(__name__)``.
"""

import logging
import sys
from typing import IO

_PKG_LOGGER_NAME = "club_finance"
_CONFIGURED = False


def _parse_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    level = level.strip().upper()
    if level.isdigit():
        return int(level)
    numeric = getattr(logging, level, None)
    if isinstance(numeric, int):
        return numeric
    return logging.INFO


def configure_logging(
    level: int | str = logging.INFO,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> None:
    """
    Configure the package root logger exactly once.

    Args:
        level: Logging level as an int or a level name ("DEBUG", "INFO", ...).
        fmt: Optional format string for the handler.
        stream: Output stream for the handler (stderr by default).
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    logger = logging.getLogger(_PKG_LOGGER_NAME)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        logging.Formatter(fmt or "%(asctime)s %(name)s %(levelname)s %(message)s")
    )

    logger.setLevel(_parse_level(level))
    logger.addHandler(handler)
    # Uvicorn installs root handlers of its own.
    logger.propagate = False

    _CONFIGURED = True
