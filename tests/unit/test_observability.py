"""Unit tests for logging configuration."""

import logging

import pytest
import structlog

from abtest_admin.config import ConfigManager, Settings
from abtest_admin.config.settings import LoggingSettings
from abtest_admin.observability import LoggerMixin, get_logger, log_execution_time, setup_logging


class Widget(LoggerMixin):
    pass


class TestLoggingConfig:
    """Test structured logging setup."""

    def test_setup_logging_level(self):
        setup_logging(level="WARNING")
        assert logging.getLogger().level == logging.WARNING

    def test_setup_logging_from_config(self, tmp_path):
        log_file = tmp_path / "logs" / "admin.log"
        config = ConfigManager(Settings(logging=LoggingSettings(level="DEBUG", file_path=str(log_file))))

        setup_logging(config)
        get_logger("test").info("Test log message", param="value")

        assert logging.getLogger().level == logging.DEBUG
        assert log_file.exists()
        assert "Test log message" in log_file.read_text()

    def test_noisy_loggers_quieted(self):
        setup_logging(level="DEBUG")
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("sqlalchemy").level == logging.WARNING

    def test_logger_mixin(self):
        assert Widget().logger is not None

    def test_get_logger(self):
        assert get_logger(__name__) is not None


class TestLogExecutionTime:
    """Test the execution time decorator."""

    def setup_method(self):
        structlog.reset_defaults()

    def test_sync_function(self):
        logger = get_logger("timing")

        @log_execution_time(logger)
        def add(a, b):
            return a + b

        assert add(2, 3) == 5
        assert add.__name__ == "add"

    @pytest.mark.asyncio
    async def test_async_function(self):
        logger = get_logger("timing")

        @log_execution_time(logger)
        async def fetch():
            return "done"

        assert await fetch() == "done"

    def test_error_is_reraised(self):
        logger = get_logger("timing")

        @log_execution_time(logger)
        def explode():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            explode()
