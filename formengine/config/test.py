"""Tests for configuration management."""

import pytest

from .lib import (
    EnvConfig,
    EnvVar,
    get_environment,
    get_environment_info,
    get_expression_budget,
    list_environment_variables,
)


class TestGetEnvironment:
    """Tests for the unified get_environment interface."""

    @pytest.mark.unit
    def test_returns_default_when_not_set(self, monkeypatch):
        """Returns default value when env var is not set."""
        monkeypatch.delenv("FORMENGINE_HISTORY_DEPTH", raising=False)
        assert get_environment(EnvVar.HISTORY_DEPTH) == 100

    @pytest.mark.unit
    def test_override_takes_priority(self, monkeypatch):
        """Override parameter takes highest priority."""
        monkeypatch.setenv("FORMENGINE_HISTORY_DEPTH", "9")
        assert get_environment(EnvVar.HISTORY_DEPTH, override=5) == 5

    @pytest.mark.unit
    def test_env_var_overrides_default(self, monkeypatch):
        """Environment variable overrides default value."""
        monkeypatch.setenv("FORMENGINE_GRID_COLUMNS", "24")
        result = get_environment(EnvVar.GRID_COLUMNS)
        assert result == 24
        assert isinstance(result, int)

    @pytest.mark.unit
    def test_invalid_int_returns_default(self, monkeypatch):
        """Invalid integer value returns default."""
        monkeypatch.setenv("FORMENGINE_EXPRESSION_MAX_STEPS", "lots")
        assert get_environment(EnvVar.EXPRESSION_MAX_STEPS) == 1000

    @pytest.mark.unit
    def test_string_type(self, monkeypatch):
        """String type returns as-is."""
        monkeypatch.setenv("FORMENGINE_DEFAULT_LAYOUT", "grid")
        assert get_environment(EnvVar.DEFAULT_LAYOUT) == "grid"


class TestGetEnvironmentInfo:
    """Tests for environment variable metadata."""

    @pytest.mark.unit
    def test_returns_env_config(self):
        """Returns EnvConfig dataclass."""
        info = get_environment_info(EnvVar.EXPRESSION_TIMEOUT_MS)
        assert isinstance(info, EnvConfig)
        assert info.name == "FORMENGINE_EXPRESSION_TIMEOUT_MS"
        assert info.default == 50
        assert info.var_type is int
        assert info.category == "expression"

    @pytest.mark.unit
    def test_every_variable_is_prefixed_and_described(self):
        for var in EnvVar:
            assert var.value.name.startswith("FORMENGINE_")
            assert var.value.description


class TestListEnvironmentVariables:
    """Tests for listing environment variables."""

    @pytest.mark.unit
    def test_returns_all_variables(self):
        result = list_environment_variables()
        assert len(result) == len(EnvVar)

    @pytest.mark.unit
    def test_filter_by_category(self):
        editor_vars = list_environment_variables("editor")
        assert EnvVar.HISTORY_DEPTH in editor_vars
        assert EnvVar.DUPLICATE_OFFSET in editor_vars
        assert EnvVar.GRID_COLUMNS not in editor_vars


class TestExpressionBudget:
    """Tests for the expression budget helper."""

    @pytest.mark.unit
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("FORMENGINE_EXPRESSION_MAX_STEPS", raising=False)
        monkeypatch.delenv("FORMENGINE_EXPRESSION_TIMEOUT_MS", raising=False)
        assert get_expression_budget() == (1000, 50)

    @pytest.mark.unit
    def test_respects_env_overrides(self, monkeypatch):
        monkeypatch.setenv("FORMENGINE_EXPRESSION_MAX_STEPS", "10")
        monkeypatch.setenv("FORMENGINE_EXPRESSION_TIMEOUT_MS", "5")
        assert get_expression_budget() == (10, 5)
