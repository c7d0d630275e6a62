"""Centralized logging configuration for ngflow.

All modules obtain loggers through :func:`get_logger`, which places them under
the package root logger ``"ngflow"``. That root logger owns a single handler;
child loggers never get their own.
"""

import logging
import sys
from typing import Optional

ROOT_LOGGER_NAME = "ngflow"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False


def setup_root_logger(
    level: int = logging.INFO,
    format_string: Optional[str] = None,
    handler: Optional[logging.Handler] = None,
) -> None:
    """Attach one handler to the ``ngflow`` root logger.

    Later calls are no-ops until :func:`reset_logging` is called.

    Args:
        level: Logging level for the package root logger.
        format_string: Custom format string (optional).
        handler: Custom handler (optional, defaults to a stdout StreamHandler).
    """
    global _configured

    if _configured:
        return

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)
    root.handlers.clear()

    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))
    root.addHandler(handler)

    # Propagate so pytest's caplog sees package records
    root.propagate = True

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger that inherits the ``ngflow`` root configuration.

    Args:
        name: Logger name, normally ``__name__`` of the calling module.
    """
    setup_root_logger()
    logger = logging.getLogger(name)
    logger.setLevel(logging.NOTSET)
    return logger


def set_global_log_level(level: int) -> None:
    """Set the level of the package root logger and its handlers."""
    setup_root_logger()
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)
    for handler in root.handlers:
        handler.setLevel(level)


def enable_debug_logging() -> None:
    set_global_log_level(logging.DEBUG)


def disable_debug_logging() -> None:
    set_global_log_level(logging.INFO)


def reset_logging() -> None:
    """Drop the package handler so the next call reconfigures it (tests)."""
    global _configured
    _configured = False

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.handlers.clear()
    root.setLevel(logging.NOTSET)


setup_root_logger()
