"""Structured logging configuration for the application."""

import functools
import inspect
import logging
import sys
import time
from pathlib import Path
from typing import Optional

import structlog

from ..config import ConfigManager


def setup_logging(
    config: Optional[ConfigManager] = None,
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    json_format: bool = False,
) -> None:
    """Set up structured logging for the application.

    Args:
        config: Configuration manager instance.
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Path to log file.
        json_format: Whether to use JSON format for logs.
    """
    if config:
        level = level or config.get("logging.level", "INFO")
        log_file = log_file or config.get("logging.file_path")
        json_format = json_format or config.get("logging.json_format", False)

    numeric_level = getattr(logging, level.upper() if level else "INFO", logging.INFO)

    shared_processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        shared_processors.append(structlog.processors.JSONRenderer())
    else:
        shared_processors.append(
            structlog.dev.ConsoleRenderer(colors=True, exception_formatter=structlog.dev.plain_traceback)
        )

    structlog.configure(
        processors=shared_processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        force=True,
        level=numeric_level,
    )
    logging.getLogger().setLevel(numeric_level)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        logging.getLogger().addHandler(file_handler)

    # Suppress noisy third-party loggers
    for logger_name in ["httpx", "httpcore", "sqlalchemy", "aiosqlite", "asyncio"]:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (usually __name__).

    Returns:
        Configured logger instance.
    """
    return structlog.get_logger(name)


class LoggerMixin:
    """Mixin class to add logging capabilities to any class."""

    @property
    def logger(self) -> structlog.stdlib.BoundLogger:
        """Get logger for this class."""
        return get_logger(self.__class__.__module__ + "." + self.__class__.__name__)


def log_execution_time(logger: structlog.stdlib.BoundLogger):
    """Decorator to log execution time of sync or async functions.

    Args:
        logger: Logger instance to use.

    Returns:
        Decorator function.
    """
    def decorator(func):
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                logger.error(
                    "Function execution failed",
                    function=func.__name__,
                    execution_time=f"{time.perf_counter() - start_time:.4f}s",
                    error=str(e),
                )
                raise
            logger.debug(
                "Function executed successfully",
                function=func.__name__,
                execution_time=f"{time.perf_counter() - start_time:.4f}s",
            )
            return result

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.error(
                    "Function execution failed",
                    function=func.__name__,
                    execution_time=f"{time.perf_counter() - start_time:.4f}s",
                    error=str(e),
                )
                raise
            logger.debug(
                "Function executed successfully",
                function=func.__name__,
                execution_time=f"{time.perf_counter() - start_time:.4f}s",
            )
            return result

        if inspect.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator
