# cmdexec/logging_config.py
"""
Opt-in logging setup for the "cmdexec" logger hierarchy.

The library itself only attaches a NullHandler; applications call
setup_logging() to get console and/or file output.
"""

from __future__ import annotations

import logging
from pathlib import Path

LOGGER_NAME = "cmdexec"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_LOG_FILE = Path(".cmdexec") / "cmdexec.log"

_log_file_path: Path | None = None
_handlers: list[logging.Handler] = []


def setup_logging(
    level: int | str = "INFO",
    *,
    file: bool | str | Path = False,
    console: bool = True,
    format_string: str | None = None,
    propagate: bool = True,
) -> logging.Logger:
    """
    Configure the cmdexec logger.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        level: Logging level name or number
        file: True for DEFAULT_LOG_FILE, or an explicit path. False disables file output.
        console: Log to stderr
        format_string: logging.Formatter format
        propagate: Set False to stop records reaching the root logger

    Returns:
        The configured "cmdexec" logger
    """
    global _log_file_path

    logger = logging.getLogger(LOGGER_NAME)
    _remove_handlers(logger)

    if isinstance(level, str):
        level = level.upper()
    logger.setLevel(level)
    logger.propagate = propagate
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)

    if console:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        _add_handler(logger, stream_handler)

    if file:
        path = DEFAULT_LOG_FILE if file is True else Path(file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        _add_handler(logger, file_handler)
        _log_file_path = path.resolve()
    else:
        _log_file_path = None

    return logger


def disable_logging() -> None:
    """Remove handlers installed by setup_logging() and silence cmdexec."""
    global _log_file_path
    logger = logging.getLogger(LOGGER_NAME)
    _remove_handlers(logger)
    logger.setLevel(logging.CRITICAL + 1)
    _log_file_path = None


def get_log_file_path() -> Path | None:
    """Path of the active log file, or None when not logging to a file."""
    return _log_file_path


def _add_handler(logger: logging.Logger, handler: logging.Handler) -> None:
    logger.addHandler(handler)
    _handlers.append(handler)


def _remove_handlers(logger: logging.Logger) -> None:
    while _handlers:
        handler = _handlers.pop()
        logger.removeHandler(handler)
        handler.close()
