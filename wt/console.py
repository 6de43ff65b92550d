"""Rich consoles and logging setup.

Everything human-readable goes to stderr: stdout is reserved for the
directory-change sentinel and generated shell code.
"""

from __future__ import annotations

import logging
from enum import Enum

from rich.console import Console
from rich.logging import RichHandler

stderr_console = Console(stderr=True)


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def _normalize_level(level: LogLevel | str | int) -> int:
    if isinstance(level, int):
        return level
    if not isinstance(level, LogLevel):
        # Raises ValueError for anything that is not a level name.
        level = LogLevel(level.upper())
    return getattr(logging, level.value)


def setup_logging(
    level: LogLevel | str | int = LogLevel.WARNING, verbose: bool = False
) -> logging.Logger:
    numeric_level = logging.DEBUG if verbose else _normalize_level(level)

    handler = RichHandler(
        console=stderr_console,
        markup=False,
        rich_tracebacks=True,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.setLevel(numeric_level)

    logger = logging.getLogger("wt")
    logger.handlers.clear()
    logger.setLevel(numeric_level)
    logger.addHandler(handler)
    logger.propagate = False
    return logger
