"""
Loguru Logging Configuration

This module provides centralized logging configuration for the storage toolkit.
"""

import sys
from pathlib import Path
from typing import Optional, Union

from loguru import logger

from config.settings import get_settings


class LoguruConfig:
    """Loguru configuration manager."""

    def __init__(self):
        self._configured = False
        self._handler_ids: list[int] = []

    def remove_default_handlers(self):
        """Remove every handler, including loguru's default stderr sink."""
        logger.remove()
        self._handler_ids.clear()
        self._configured = False

    def configure_console_logging(
        self,
        level: str = "INFO",
        format_string: Optional[str] = None,
        colorize: Optional[bool] = None,
        backtrace: bool = True,
        diagnose: bool = True,
    ):
        """Configure console logging."""
        if format_string is None:
            format_string = (
                "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
                "<level>{message}</level>"
            )

        if colorize is None:
            colorize = sys.stderr.isatty()

        handler_id = logger.add(
            sys.stderr,
            format=format_string,
            level=level,
            colorize=colorize,
            backtrace=backtrace,
            diagnose=diagnose,
        )
        self._handler_ids.append(handler_id)
        self._configured = True

    def configure_file_logging(
        self,
        log_dir: Union[str, Path],
        level: str = "INFO",
        format_string: Optional[str] = None,
        rotation: str = "1 day",
        retention: str = "30 days",
        compression: str = "zip",
        encoding: str = "utf-8",
        enqueue: bool = True,
    ):
        """Configure rotating file logging with a separate error log."""
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        if format_string is None:
            format_string = (
                "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
                "{level: <8} | "
                "{name}:{function}:{line} | "
                "{message} | "
                "{extra}"
            )

        for file_name, file_level in (("storage.log", level), ("error.log", "ERROR")):
            handler_id = logger.add(
                log_dir / file_name,
                format=format_string,
                level=file_level,
                rotation=rotation,
                retention=retention,
                compression=compression,
                encoding=encoding,
                enqueue=enqueue,
            )
            self._handler_ids.append(handler_id)

        self._configured = True

    def configure_development_logging(self, log_dir: Union[str, Path] = "logs", level: Optional[str] = None):
        """Configure development environment logging."""
        level = level or "DEBUG"
        self.remove_default_handlers()
        self.configure_console_logging(level=level, backtrace=True, diagnose=True)
        self.configure_file_logging(log_dir=log_dir, level=level, rotation="10 MB", retention="7 days")

    def configure_production_logging(self, log_dir: Union[str, Path] = "logs", level: Optional[str] = None):
        """Configure production environment logging."""
        self.remove_default_handlers()
        # diagnose would leak credentials from local variables into tracebacks
        self.configure_console_logging(level=level or "WARNING", colorize=False, backtrace=False, diagnose=False)
        self.configure_file_logging(log_dir=log_dir, level=level or "INFO", rotation="100 MB", retention="30 days")

    def configure_testing_logging(self, level: Optional[str] = None):
        """Configure testing environment logging, console only."""
        self.remove_default_handlers()
        self.configure_console_logging(level=level or "WARNING", colorize=False, backtrace=False, diagnose=False)

    def get_logger(self, name: Optional[str] = None, **extra):
        """Get a configured logger instance."""
        if name:
            extra["logger_name"] = name
        return logger.bind(**extra) if extra else logger

    def is_configured(self) -> bool:
        """Check if logging has been configured."""
        return self._configured


# Global loguru configuration instance
loguru_config = LoguruConfig()


def setup_logging(
    environment: Optional[str] = None,
    log_dir: Optional[Union[str, Path]] = None,
    level: Optional[str] = None,
) -> None:
    """
    Setup logging based on environment.

    Arguments left as None are read from ``get_settings()``, that is from the
    ``ENVIRONMENT``, ``LOG_DIR`` and ``LOG_LEVEL`` environment variables.

    Args:
        environment: Environment name (development, production, testing)
        log_dir: Directory for log files
        level: Minimum level for every sink, overrides the preset's levels
    """
    settings = get_settings()
    environment = (environment or settings.environment).lower()
    log_dir = log_dir if log_dir is not None else settings.log_dir
    level = (level or settings.log_level or "").upper() or None

    if environment == "production":
        loguru_config.configure_production_logging(log_dir, level)
    elif environment in ("testing", "test"):
        loguru_config.configure_testing_logging(level)
    else:
        loguru_config.configure_development_logging(log_dir, level)

    logger.debug(f"Logging configured for environment: {environment}")


def get_logger(name: Optional[str] = None, **extra):
    """Get a configured logger instance."""
    return loguru_config.get_logger(name=name, **extra)
