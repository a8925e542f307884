"""Tests for core logging module."""

import logging
from io import StringIO

import pytest

from .lib import DEFAULT_LOGGER_NAME, get_logger, resolve_level, setup_logging


@pytest.fixture
def restore_level():
    """Put the formengine logger level back after a test changes it."""
    package_logger = logging.getLogger(DEFAULT_LOGGER_NAME)
    previous = package_logger.level
    yield package_logger
    package_logger.setLevel(previous)


class TestGetLogger:
    """Test logger naming."""

    @pytest.mark.unit
    def test_component_names_are_namespaced(self) -> None:
        logger = get_logger("cli")
        assert logger.name == "formengine.cli"
        assert isinstance(logger, logging.Logger)

    @pytest.mark.unit
    def test_module_names_pass_through(self) -> None:
        assert get_logger("formengine.editor.lib").name == "formengine.editor.lib"

    @pytest.mark.unit
    def test_default_name(self) -> None:
        assert get_logger().name == "formengine"


class TestSetupLogging:
    """Test level configuration."""

    @pytest.mark.unit
    def test_explicit_level_name(self, restore_level) -> None:
        assert setup_logging(level="debug", stream=StringIO()) == logging.DEBUG
        assert restore_level.level == logging.DEBUG
        assert get_logger("cli").isEnabledFor(logging.DEBUG)

    @pytest.mark.unit
    def test_level_from_environment(self, monkeypatch, restore_level) -> None:
        monkeypatch.setenv("FORMENGINE_LOG_LEVEL", "error")
        assert setup_logging(stream=StringIO()) == logging.ERROR
        assert not get_logger("editor").isEnabledFor(logging.WARNING)

    @pytest.mark.unit
    def test_default_level_is_info(self, restore_level) -> None:
        assert setup_logging(stream=StringIO()) == logging.INFO


class TestResolveLevel:
    """Tests for level name resolution."""

    @pytest.mark.unit
    def test_names_are_case_insensitive(self) -> None:
        assert resolve_level("warning") == logging.WARNING
        assert resolve_level(" DEBUG ") == logging.DEBUG

    @pytest.mark.unit
    def test_numbers_pass_through(self) -> None:
        assert resolve_level(logging.ERROR) == logging.ERROR

    @pytest.mark.unit
    def test_unknown_name_falls_back_to_info(self) -> None:
        assert resolve_level("chatty") == logging.INFO
