"""Core logging implementation for formengine.

Every formengine logger lives under the ``formengine`` namespace, so one
level setting (``FORMENGINE_LOG_LEVEL``) governs the engine and the CLI
without touching other libraries' loggers.
"""

import logging
import sys
from typing import Optional

from formengine.config import EnvVar, get_environment

__all__ = ["LOG_FORMAT", "get_logger", "resolve_level", "setup_logging"]

DEFAULT_LOGGER_NAME = "formengine"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def resolve_level(level: int | str) -> int:
    """Convert a level name (``"debug"``, ``"INFO"``) or number to an int.

    Unrecognized names fall back to ``logging.INFO``.
    """
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(level: int | str | None = None, stream=sys.stderr) -> int:
    """Configure logging for the formengine namespace.

    Other libraries stay at WARNING on the root handler.

    Args:
        level: Logging level, as a number or a level name. Defaults to
            ``FORMENGINE_LOG_LEVEL``.
        stream: Output stream for the root handler.

    Returns:
        The level applied to formengine loggers.
    """
    if level is None:
        level = get_environment(EnvVar.LOG_LEVEL)
    resolved = resolve_level(level)

    logging.basicConfig(level=logging.WARNING, format=LOG_FORMAT, stream=stream)
    logging.getLogger(DEFAULT_LOGGER_NAME).setLevel(resolved)
    return resolved


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger inside the formengine namespace.

    Args:
        name: Component name such as ``"cli"``, or a module ``__name__``
            that already starts with ``formengine``.

    Returns:
        Logger instance.
    """
    if not name or name == DEFAULT_LOGGER_NAME:
        return logging.getLogger(DEFAULT_LOGGER_NAME)
    if name.startswith(f"{DEFAULT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{DEFAULT_LOGGER_NAME}.{name}")
