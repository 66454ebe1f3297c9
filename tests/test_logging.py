"""Tests for logging configuration."""

import logging

from tmx2qml.logging_config import ColoredFormatter, resolve_level, setup_logging


class TestLoggingSetup:
    """setup_logging() and level resolution."""

    def test_explicit_level_wins(self, monkeypatch) -> None:
        monkeypatch.setenv("TMX2QML_LOG_LEVEL", "ERROR")
        assert resolve_level("debug") == logging.DEBUG
        assert resolve_level(logging.WARNING) == logging.WARNING

    def test_level_from_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("TMX2QML_LOG_LEVEL", "warning")
        assert resolve_level() == logging.WARNING

    def test_unknown_level_falls_back_to_info(self, monkeypatch) -> None:
        monkeypatch.delenv("TMX2QML_LOG_LEVEL", raising=False)
        assert resolve_level() == logging.INFO
        assert resolve_level("chatty") == logging.INFO

    def test_logging_attributes_that_are_not_levels(self, monkeypatch) -> None:
        monkeypatch.setenv("TMX2QML_LOG_LEVEL", "basic_format")
        assert resolve_level() == logging.INFO
        assert resolve_level("root") == logging.INFO

    def test_setup_is_idempotent(self) -> None:
        setup_logging("DEBUG")
        setup_logging("DEBUG")

        logger = logging.getLogger("tmx2qml")
        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG
        assert len(logging.getLogger("tmx_manager").handlers) == 1

    def test_colored_formatter_wraps_level_name(self) -> None:
        record = logging.LogRecord("tmx2qml", logging.ERROR, __file__, 1, "boom", None, None)
        formatted = ColoredFormatter(fmt="%(levelname)s: %(message)s").format(record)
        assert formatted == "\033[31mERROR\033[0m: boom"
