"""Tests for core logging module."""

import logging
from io import StringIO

import pytest

from .lib import get_logger, resolve_level, setup_logging


class TestLogging:
    """Test core logging API."""

    @pytest.mark.unit
    def test_get_logger(self) -> None:
        """Verify logger instance creation."""
        logger = get_logger("test")
        assert logger.name == "test"
        assert isinstance(logger, logging.Logger)

    @pytest.mark.unit
    def test_get_logger_default_name(self) -> None:
        """Verify default logger name."""
        assert get_logger().name == "formbridge"

    @pytest.mark.unit
    def test_resolve_level(self, monkeypatch) -> None:
        """Names, numbers and LOG_LEVEL resolve to levels."""
        assert resolve_level("debug") == logging.DEBUG
        assert resolve_level(logging.ERROR) == logging.ERROR
        assert resolve_level("nonsense") == logging.INFO
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        assert resolve_level() == logging.WARNING

    @pytest.mark.unit
    def test_setup_logging(self) -> None:
        """Verify logging setup keeps the API contract.

        basicConfig does nothing when logging is already configured, so only
        the logger level is checked.
        """
        stream = StringIO()
        setup_logging(level="DEBUG", stream=stream)
        logger = get_logger("test_setup")
        logger.debug("test message")
        assert logger.level == logging.NOTSET
