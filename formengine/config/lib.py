"""Centralized environment configuration management for formengine.

Provides a unified interface for all environment variables with:
- Single `get_environment()` function for all configuration
- Type-safe enum with metadata (default, type, description)
- Consistent resolution: override > environment > default

Example:
    >>> from formengine.config import EnvVar, get_environment
    >>>
    >>> depth = get_environment(EnvVar.HISTORY_DEPTH)  # Returns int
    >>> depth = get_environment(EnvVar.HISTORY_DEPTH, override=20)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, overload

# =============================================================================
# Environment Variable Configuration
# =============================================================================


@dataclass(frozen=True)
class EnvConfig:
    """Metadata for an environment variable.

    Attributes:
        name: Environment variable name (e.g., "FORMENGINE_HISTORY_DEPTH").
        default: Default value if not set in environment.
        var_type: Python type for value conversion (str or int).
        description: Human-readable description.
        category: Grouping category for documentation.
    """

    name: str
    default: Any
    var_type: type
    description: str = ""
    category: str = "general"


class EnvVar(Enum):
    """All environment variables used by formengine.

    Each member contains an EnvConfig with name, default, type, and description.
    Use with `get_environment()` for type-safe access.

    Categories:
        - editor: Edit history and store behavior
        - expression: Custom rule evaluation budgets
        - layout: Layout resolution defaults
        - logging: Log output
    """

    # -------------------------------------------------------------------------
    # Editor
    # -------------------------------------------------------------------------
    HISTORY_DEPTH = EnvConfig(
        name="FORMENGINE_HISTORY_DEPTH",
        default=100,
        var_type=int,
        description="Maximum number of snapshots retained for undo/redo",
        category="editor",
    )
    DUPLICATE_OFFSET = EnvConfig(
        name="FORMENGINE_DUPLICATE_OFFSET",
        default=20,
        var_type=int,
        description="Logical units a duplicated element is shifted on x and y",
        category="editor",
    )

    # -------------------------------------------------------------------------
    # Custom Expressions
    # -------------------------------------------------------------------------
    EXPRESSION_MAX_STEPS = EnvConfig(
        name="FORMENGINE_EXPRESSION_MAX_STEPS",
        default=1000,
        var_type=int,
        description="Node visits allowed per custom rule evaluation",
        category="expression",
    )
    EXPRESSION_TIMEOUT_MS = EnvConfig(
        name="FORMENGINE_EXPRESSION_TIMEOUT_MS",
        default=50,
        var_type=int,
        description="Wall-clock budget in milliseconds per custom rule evaluation",
        category="expression",
    )

    # -------------------------------------------------------------------------
    # Layout
    # -------------------------------------------------------------------------
    GRID_COLUMNS = EnvConfig(
        name="FORMENGINE_GRID_COLUMNS",
        default=12,
        var_type=int,
        description="Column count used to turn grid cell spans into widths",
        category="layout",
    )
    DEFAULT_LAYOUT = EnvConfig(
        name="FORMENGINE_DEFAULT_LAYOUT",
        default="free",
        var_type=str,
        description="Layout mode of a new editor session (free, grid, columns, rows)",
        category="layout",
    )

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    LOG_LEVEL = EnvConfig(
        name="FORMENGINE_LOG_LEVEL",
        default="INFO",
        var_type=str,
        description="Log level for the CLI (DEBUG, INFO, WARNING, ERROR)",
        category="logging",
    )


# =============================================================================
# Type Conversion Helpers
# =============================================================================


def _convert_value(value: str | None, var_type: type, default: Any) -> Any:
    """Convert string value to target type.

    Args:
        value: Raw string value from environment (or None).
        var_type: Target Python type.
        default: Default value if conversion fails or value is None.

    Returns:
        Converted value or default.
    """
    if value is None:
        return default

    if var_type is str:
        return value

    if var_type is int:
        try:
            return int(value)
        except ValueError:
            return default

    # Unknown type, return as-is
    return value


# =============================================================================
# Main Interface
# =============================================================================


@overload
def get_environment(env_var: EnvVar, override: int) -> int: ...
@overload
def get_environment(env_var: EnvVar, override: str) -> str: ...
@overload
def get_environment(env_var: EnvVar, override: None = None) -> Any: ...


def get_environment(env_var: EnvVar, override: Any = None) -> Any:
    """Get environment variable value with type conversion.

    Resolution priority:
        1. Explicit override parameter (highest)
        2. Environment variable value
        3. Default from EnvConfig (lowest)

    Args:
        env_var: Environment variable enum member.
        override: Optional override value (bypasses env lookup).

    Returns:
        Value converted to the appropriate type (str or int).

    Example:
        >>> get_environment(EnvVar.HISTORY_DEPTH)
        100
        >>> get_environment(EnvVar.HISTORY_DEPTH, override=10)
        10
    """
    config: EnvConfig = env_var.value

    if override is not None:
        return override

    raw_value = os.environ.get(config.name)
    return _convert_value(raw_value, config.var_type, config.default)


def get_environment_info(env_var: EnvVar) -> EnvConfig:
    """Get metadata for an environment variable.

    Args:
        env_var: Environment variable enum member.

    Returns:
        EnvConfig with name, default, type, and description.
    """
    return env_var.value


def list_environment_variables(category: str | None = None) -> list[EnvVar]:
    """List all environment variables, optionally filtered by category.

    Args:
        category: Filter by category (editor, expression, layout, logging).
                 None returns all variables.

    Returns:
        List of EnvVar enum members.
    """
    if category is None:
        return list(EnvVar)

    return [var for var in EnvVar if var.value.category == category]


def get_expression_budget() -> tuple[int, int]:
    """Get the (max_steps, timeout_ms) budget for custom rule evaluation."""
    return (
        get_environment(EnvVar.EXPRESSION_MAX_STEPS),
        get_environment(EnvVar.EXPRESSION_TIMEOUT_MS),
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
