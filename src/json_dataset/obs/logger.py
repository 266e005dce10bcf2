"""Logging setup for the dataset query service."""

from __future__ import annotations

import logging
import sys

_DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def get_logger(name: str) -> logging.Logger:
    """Return a module logger that writes to stderr.

    A handler is attached only once per logger name, and only while the root
    logger has none; after `configure_logging` records go through the root.
    """
    logger = logging.getLogger(name)

    if not logger.handlers and not logging.getLogger().handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(fmt=_DEFAULT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(handler)

    if not logger.level:
        logger.setLevel(logging.INFO)

    return logger


def configure_logging(
    level: str = "INFO",
    fmt: str | None = None,
    log_file: str | None = None,
) -> None:
    """Reconfigure the root logger and every `json_dataset` logger."""
    log_level = _LEVELS.get(level.upper(), logging.INFO)
    formatter = logging.Formatter(fmt=fmt or _DEFAULT_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for name, logger in logging.Logger.manager.loggerDict.items():
        if name.startswith("json_dataset") and isinstance(logger, logging.Logger):
            logger.handlers.clear()
            logger.setLevel(log_level)
