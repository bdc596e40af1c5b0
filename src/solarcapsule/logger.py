"""Logging configuration module for Solar Capsule.

Engine modules log through child loggers of ``solarcapsule`` obtained with
:func:`get_logger`; only the CLI calls :func:`setup_logger` to attach handlers.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from solarcapsule.config import LoggingConfig

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _file_handler(config: LoggingConfig, level: int) -> RotatingFileHandler:
    log_path = Path(config.file)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_path,
        maxBytes=config.max_size_mb * 1024 * 1024,
        backupCount=config.backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def setup_logger(
    config: Optional[LoggingConfig] = None,
    name: str = "solarcapsule",
) -> logging.Logger:
    """Set up and configure the application logger.

    Repeated calls replace the handlers installed by earlier ones.

    Args:
        config: Logging configuration. If None, uses defaults.
        name: Logger name.

    Returns:
        Configured logger instance.
    """
    if config is None:
        config = LoggingConfig()
    level = getattr(logging, config.level)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    # Console on stderr, stdout carries command output
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if not config.file:
        return logger

    try:
        file_handler = _file_handler(config, level)
    except PermissionError:
        logger.warning(f"Cannot write to log file {config.file}, logging to console only")
    except OSError as e:
        logger.warning(f"Error setting up file logging: {e}, logging to console only")
    else:
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = "solarcapsule") -> logging.Logger:
    """Get a module logger.

    Module loggers carry no handlers of their own and propagate to the
    ``solarcapsule`` logger configured by :func:`setup_logger`.

    Args:
        name: Logger name, usually the calling module's ``__name__``.

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)
