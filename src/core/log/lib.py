"""Core logging implementation for formbridge."""

import logging
import sys
from typing import Optional

from src.config import EnvVar, get_environment

__all__ = ["get_logger", "setup_logging", "resolve_level"]

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def resolve_level(level: int | str | None = None) -> int:
    """Turn a level name or number into a logging level.

    None reads LOG_LEVEL. Unknown names fall back to INFO.
    """
    if level is None:
        level = get_environment(EnvVar.LOG_LEVEL)
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: int | str | None = None, stream=sys.stderr) -> None:
    """Configure basic logging.

    Args:
        level: Logging level or level name. Defaults to LOG_LEVEL.
        stream: Output stream.
    """
    logging.basicConfig(
        level=resolve_level(level),
        format=LOG_FORMAT,
        stream=stream,
    )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Name of the logger.

    Returns:
        Logger instance.
    """
    return logging.getLogger(name or "formbridge")
