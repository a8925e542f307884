"""Logging micro API for formengine."""

from .lib import LOG_FORMAT, get_logger, resolve_level, setup_logging

__all__ = ["LOG_FORMAT", "get_logger", "resolve_level", "setup_logging"]
