"""Tests for the command line interface."""

import json
import subprocess
import sys
from pathlib import Path

import pytest

# Get the project root directory (three levels up from this file)
PROJECT_ROOT = Path(__file__).parent.parent.parent


def _run(*args: str) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, ".", *args],
        capture_output=True,
        text=True,
        cwd=PROJECT_ROOT,
        timeout=60,
    )


def _write_values(tmp_path: Path, values: dict) -> Path:
    path = tmp_path / "values.json"
    path.write_text(json.dumps(values), encoding="utf-8")
    return path


@pytest.mark.integration
class TestKindsCommand:
    """Tests for `python . kinds`."""

    def test_lists_kinds(self):
        result = _run("kinds")
        assert result.returncode == 0
        assert "alert-dialog" in result.stdout
        assert "=== Input ===" in result.stdout

    def test_json_output(self):
        result = _run("kinds", "--category", "input", "--json")
        kinds = {entry["type"] for entry in json.loads(result.stdout)}
        assert "select" in kinds
        assert "heading" not in kinds


@pytest.mark.integration
class TestValidateCommand:
    """Tests for `python . validate`."""

    def test_valid_values_exit_zero(self, tmp_path, definition_file):
        values = _write_values(tmp_path, {"name": "Jane", "age": 30, "terms": True})
        result = _run("validate", str(definition_file), "--values", str(values))
        assert result.returncode == 0, result.stderr
        assert "Full name" in result.stdout

    def test_defaults_fail_required(self, definition_file):
        result = _run("validate", str(definition_file), "--json")
        assert result.returncode == 1
        results = json.loads(result.stdout)
        assert results["name"]["message"] == "required"
        assert results["terms"]["message"] == "required"
        assert "submit" not in results

    def test_single_element_custom_rule(self, tmp_path, definition_file):
        values = _write_values(tmp_path, {"age": 15})
        result = _run(
            "validate", str(definition_file), "--values", str(values), "--element", "age"
        )
        assert result.returncode == 1
        assert "Custom validation failed" in result.stdout

    def test_log_level_from_environment(self, monkeypatch, definition_file):
        result = _run("validate", str(definition_file))
        assert "field(s) invalid" in result.stderr

        monkeypatch.setenv("FORMENGINE_LOG_LEVEL", "ERROR")
        result = _run("validate", str(definition_file))
        assert result.returncode == 1
        assert "field(s) invalid" not in result.stderr

    def test_missing_file(self, tmp_path):
        result = _run("validate", str(tmp_path / "missing.json"))
        assert result.returncode == 1
        assert "Error" in result.stderr


@pytest.mark.integration
class TestLayoutCommand:
    """Tests for `python . layout`."""

    def test_grid_layout(self, definition_file):
        result = _run("layout", str(definition_file), "--mode", "grid", "--breakpoint", "mobile")
        assert result.returncode == 0, result.stderr
        geometries = json.loads(result.stdout)
        assert [g["elementId"] for g in geometries] == ["title", "name", "age", "terms", "submit"]
        assert all(g["span"] == 12 and g["x"] is None for g in geometries)


@pytest.mark.integration
class TestCheckCommand:
    """Tests for `python . check`."""

    def test_consistent_definition(self, definition_file):
        result = _run("check", str(definition_file))
        assert result.returncode == 0
        assert "OK: Signup" in result.stdout

    def test_reports_issues(self, tmp_path, signup_definition):
        elements = list(signup_definition.elements)
        elements[2] = elements[2].model_copy(update={"min": 50, "max": 10})
        path = tmp_path / "bad.json"
        path.write_text(signup_definition.with_elements(elements).to_json(), encoding="utf-8")

        result = _run("check", str(path))
        assert result.returncode == 1
        assert "Age: max" in result.stdout


@pytest.mark.integration
class TestMiscCommands:
    """Tests for env, schema and dispatch."""

    def test_env_lists_variables(self):
        result = _run("env")
        assert result.returncode == 0
        assert "FORMENGINE_HISTORY_DEPTH" in result.stdout

    def test_env_category(self):
        result = _run("env", "--category", "expression")
        assert "FORMENGINE_EXPRESSION_MAX_STEPS" in result.stdout
        assert "FORMENGINE_GRID_COLUMNS" not in result.stdout

    def test_schema(self):
        result = _run("schema")
        assert json.loads(result.stdout)["title"] == "FormDefinition"

    def test_unknown_command(self):
        result = _run("frobnicate")
        assert result.returncode == 1
        assert "Usage:" in result.stdout

    def test_no_command_shows_help(self):
        result = _run()
        assert result.returncode == 1
        assert "validate" in result.stdout
