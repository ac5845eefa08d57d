"""Core utilities shared by every formbridge module."""

from .log import get_logger, resolve_level, setup_logging

__all__ = ["get_logger", "setup_logging", "resolve_level"]
