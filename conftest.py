"""Root pytest configuration and fixtures.

This module provides:
- Environment setup (loads .env)
- Isolation from FORMENGINE_* variables set in the developer's shell
- Sample form definitions shared by CLI and integration tests
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from dotenv import load_dotenv

from formengine.schema import FormDefinition, create_default

# Load environment variables from .env file
load_dotenv()

REPO_ROOT = Path(__file__).parent


# =============================================================================
# Environment Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _clean_formengine_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every test against configuration defaults."""
    for name in list(os.environ):
        if name.startswith("FORMENGINE_"):
            monkeypatch.delenv(name, raising=False)


# =============================================================================
# Common Test Fixtures
# =============================================================================


@pytest.fixture
def signup_definition() -> FormDefinition:
    """Create a small signup form.

    Returns:
        A definition with a heading, a required name field, an age field
        with a custom rule, a terms checkbox and a submit button.
    """
    return FormDefinition.create(name="Signup").with_elements(
        [
            create_default("heading", id="title", content="Create account"),
            create_default("text", id="name", content="Full name", required=True, max_length=20),
            create_default(
                "number",
                id="age",
                content="Age",
                min=0,
                max=130,
                custom_validation="value == None or value > 18",
            ),
            create_default("checkbox", id="terms", content="Accept terms", required=True),
            create_default("button", id="submit", content="Sign up"),
        ]
    )


@pytest.fixture
def definition_file(tmp_path: Path, signup_definition: FormDefinition) -> Path:
    """Write the signup form to a JSON file.

    Returns:
        Path to the saved definition.
    """
    path = tmp_path / "signup.json"
    path.write_text(signup_definition.to_json(), encoding="utf-8")
    return path
