"""
Logging setup for themesync.

All modules log under the ``themesync`` package logger. The CLI always
attaches a rotating log file next to the index; console output is added
only when running as ``python -m themesync`` / the ``themesync`` script.
"""
from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
import os
import sys


PACKAGE_LOGGER = "themesync"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_CONSOLE_HANDLER_NAME = "themesync.console"
_MAX_BYTES = 5 * 1024 * 1024
_BACKUP_COUNT = 5


def _level(verbose: bool) -> int:
    return logging.DEBUG if verbose else logging.INFO


def attach_log_file(log_path: str, verbose: bool = False) -> logging.Logger:
    """
    Send package logs to a rotating file at log_path.
    Repeated calls for the same file reuse the existing handler.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(_level(verbose))

    resolved = os.path.normcase(os.path.abspath(log_path))
    for handler in logger.handlers:
        if isinstance(handler, RotatingFileHandler) and os.path.normcase(handler.baseFilename) == resolved:
            handler.setLevel(_level(verbose))
            return logger

    os.makedirs(os.path.dirname(resolved), exist_ok=True)
    handler = RotatingFileHandler(
        resolved, maxBytes=_MAX_BYTES, backupCount=_BACKUP_COUNT, encoding="utf-8"
    )
    handler.setLevel(_level(verbose))
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)
    return logger


def attach_console(verbose: bool = False) -> logging.Logger:
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(min(logger.level or logging.INFO, _level(verbose)))
    if not any(h.get_name() == _CONSOLE_HANDLER_NAME for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.set_name(_CONSOLE_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger
