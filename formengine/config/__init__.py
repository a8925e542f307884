"""Centralized configuration management for formengine.

Provides unified access to all configuration via the `get_environment()` function.

Example:
    >>> from formengine.config import EnvVar, get_environment
    >>>
    >>> depth = get_environment(EnvVar.HISTORY_DEPTH)  # Returns int: 100
    >>> depth = get_environment(EnvVar.HISTORY_DEPTH, override=25)
    >>>
    >>> for var in list_environment_variables("expression"):
    ...     info = get_environment_info(var)
    ...     print(f"{info.name}: {info.description}")

Environment Variable Categories:
    editor: Undo/redo depth and duplicate offset
    expression: Step and time budgets for custom validation rules
    layout: Grid column count and default layout mode
    logging: CLI log level
"""

from .lib import (
    EnvConfig,
    EnvVar,
    get_environment,
    get_environment_info,
    get_expression_budget,
    list_environment_variables,
)

__all__ = [
    # Core types
    "EnvConfig",
    "EnvVar",
    # Main interface
    "get_environment",
    "get_environment_info",
    "get_expression_budget",
    # Introspection
    "list_environment_variables",
]
