"""
Logging configuration for featuredocs.

This module provides centralized logging setup with structured logging support
and consistent formatting across all components.
"""

import logging
import logging.config
import sys
from pathlib import Path

from pythonjsonlogger.json import JsonFormatter

PACKAGE_LOGGER = "featuredocs"


def setup_logging(
    name: str | None = None,
    level: str | None = None,
    structured: bool = False,
    log_file: Path | None = None
) -> logging.Logger:
    """Setup logging configuration.

    Handlers are attached once to the package logger; module loggers
    propagate to it.

    Args:
        name: Logger name (defaults to the package logger)
        level: Logging level (INFO, DEBUG, etc.)
        structured: Enable JSON structured logging
        log_file: Optional log file path

    Returns:
        Configured logger instance
    """
    if name is None:
        name = PACKAGE_LOGGER

    logger = logging.getLogger(name)
    package_logger = logging.getLogger(PACKAGE_LOGGER)

    # Avoid duplicate handlers
    if package_logger.handlers:
        if level:
            logger.setLevel(getattr(logging, level.upper()))
        return logger

    package_logger.setLevel(getattr(logging, (level or "INFO").upper()))

    if structured:
        formatter = JsonFormatter(
            fmt='%(asctime)s %(name)s %(levelname)s %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
    else:
        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    package_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

    return logger


def configure_root_logging(
    level: str = "INFO",
    structured: bool = False,
    log_file: Path | None = None,
    fmt: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
) -> None:
    """Configure root logging for the entire application.

    Args:
        level: Root logging level
        structured: Enable JSON structured logging
        log_file: Optional log file path
        fmt: Format string for plain (non-JSON) output
    """
    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": fmt,
                "datefmt": "%Y-%m-%d %H:%M:%S"
            },
            "structured": {
                "()": "pythonjsonlogger.json.JsonFormatter",
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S"
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "structured" if structured else "standard",
                "stream": "ext://sys.stderr"
            }
        },
        "root": {
            "level": level,
            "handlers": ["console"]
        },
        "loggers": {
            PACKAGE_LOGGER: {
                "level": level,
                "handlers": ["console"],
                "propagate": False
            },
            # Reduce noise from third-party libraries
            "urllib3": {"level": "WARNING"},
        }
    }

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        config["handlers"]["file"] = {
            "class": "logging.FileHandler",
            "level": level,
            "formatter": "structured" if structured else "standard",
            "filename": str(log_file)
        }
        config["root"]["handlers"].append("file")
        config["loggers"][PACKAGE_LOGGER]["handlers"].append("file")

    logging.config.dictConfig(config)
