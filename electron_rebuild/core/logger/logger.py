"""Logging system with Rich support."""

import logging
import sys

from rich.console import Console
from rich.logging import RichHandler

from electron_rebuild.core.config.settings import LoggingSettings, get_settings

FILE_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_console: Console | None = None
_loggers: dict[str, logging.Logger] = {}


def _stream_handler(settings: LoggingSettings) -> logging.Handler:
    """Handler for terminal output, Rich or plain."""
    if settings.use_rich:
        return RichHandler(
            console=get_console(),
            show_path=False,
            show_time=True,
            rich_tracebacks=True,
            markup=False,
        )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(settings.format))
    return handler


def _file_handler(settings: LoggingSettings) -> logging.Handler:
    settings.file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(settings.file, encoding="utf-8")
    handler.setLevel(settings.level)
    handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
    return handler


def setup_logging(settings: LoggingSettings | None = None) -> None:
    """Configure the root logger.

    Replaces any existing root handlers with a terminal handler and, when
    ``settings.file`` is set, a file handler.

    Args:
        settings: Logging settings. Uses global settings if not provided.
    """
    if settings is None:
        settings = get_settings().logging

    root_logger = logging.getLogger()
    root_logger.setLevel(settings.level)
    root_logger.handlers.clear()
    root_logger.addHandler(_stream_handler(settings))

    if settings.file:
        root_logger.addHandler(_file_handler(settings))


def get_logger(name: str) -> logging.Logger:
    """Get or create a logger by name.

    Logging is configured from settings on first use if nothing else has
    configured the root logger.

    Args:
        name: Logger name (typically __name__).

    Returns:
        Logger instance.
    """
    if name not in _loggers:
        if not logging.getLogger().handlers:
            setup_logging()
        _loggers[name] = logging.getLogger(name)

    return _loggers[name]


def get_console() -> Console:
    """Shared Rich console writing to stderr."""
    global _console
    if _console is None:
        _console = Console(stderr=True)
    return _console


def print_captured_output(stdout: str, stderr: str) -> None:
    """Echo a failed tool's captured output so its diagnostics stay visible.

    Args:
        stdout: Captured standard output.
        stderr: Captured standard error.
    """
    console = get_console()
    if stdout:
        console.print(stdout, markup=False, highlight=False)
    if stderr:
        console.print(stderr, markup=False, highlight=False)
