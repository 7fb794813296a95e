"""Logging utilities for wabot modules."""

import logging
from enum import Enum
from typing import Optional


ROOT_LOGGER_NAME = 'wabot'

DEFAULT_FORMAT = '%(asctime)s %(levelname)-8s %(name)s: %(message)s'
DEBUG_FORMAT = '%(asctime)s %(levelname)-8s %(name)s [%(filename)s:%(lineno)d]: %(message)s'


class LogLevel(Enum):
    """Log levels accepted by configure_logging."""
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL

    @classmethod
    def parse(cls, value) -> 'LogLevel':
        """Parse a level name ("info"), number (20) or LogLevel."""
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            return cls(value)
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown log level: {value!r}")


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Logger for a wabot module, namespaced under ``wabot``.
    
    Records propagate to the root logger, so an application calling
    ``logging.basicConfig()`` sees them. When nothing is configured at all
    the package logger defaults to WARNING to keep library use quiet.
    
    Args:
        name: Module name such as ``"bootstrap"``; ``None`` for the package
    """
    if not name or name == ROOT_LOGGER_NAME:
        full_name = ROOT_LOGGER_NAME
    elif name.startswith(ROOT_LOGGER_NAME + '.'):
        full_name = name
    else:
        full_name = f"{ROOT_LOGGER_NAME}.{name}"

    logger = logging.getLogger(full_name)
    logger.propagate = True
    
    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    if not logging.getLogger().handlers and package_logger.level == logging.NOTSET:
        package_logger.setLevel(logging.WARNING)
    
    return logger


def configure_logging(
    level=LogLevel.INFO,
    log_file: Optional[str] = None,
    enable_console: bool = True,
) -> logging.Logger:
    """
    Attach handlers to the ``wabot`` logger.
    
    Existing handlers installed by a previous call are replaced, so calling
    this twice does not duplicate output.
    
    Args:
        level: LogLevel, level name or numeric level
        log_file: Optional path of a file to append records to
        enable_console: Whether to log to stderr
        
    Returns:
        The ``wabot`` logger
    """
    log_level = LogLevel.parse(level)
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(log_level.value)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    fmt = DEBUG_FORMAT if log_level is LogLevel.DEBUG else DEFAULT_FORMAT
    formatter = logging.Formatter(fmt)

    if enable_console:
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        logger.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # Own handlers are attached; avoid double output through root
    logger.propagate = not logger.handlers
    return logger
