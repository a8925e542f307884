"""CLI entry point for formengine.

This module acts as the central entry point for the project's CLI tools.
It loads form definitions saved as JSON and runs the engine's validation,
layout and configuration checks against them.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from formengine.config import (
    EnvVar,
    get_environment,
    get_environment_info,
    list_environment_variables,
)
from formengine.core import get_logger, setup_logging
from formengine.errors import FormEngineError
from formengine.layout import Breakpoint, LayoutMode, resolve_layout
from formengine.schema import (
    FormDefinition,
    KindCategory,
    export_json_schema,
    get_kind_meta,
    get_kinds_by_category,
)
from formengine.validation import (
    ALL,
    find_definition_issues,
    is_submit_valid,
    validate_definition,
)

# Load environment variables from .env file
load_dotenv()

logger = get_logger("cli")


def _load_definition(path: Path) -> FormDefinition:
    return FormDefinition.from_json(path.read_text(encoding="utf-8"))


def _load_values(path: Path | None) -> dict[str, Any]:
    if path is None:
        return {}
    values = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(values, dict):
        raise ValueError(f"{path} must contain a JSON object of element id to value")
    return values


# =============================================================================
# Kinds Command
# =============================================================================


def cmd_kinds(args: argparse.Namespace) -> int:
    """Handle the kinds command."""
    categories = [KindCategory(args.category)] if args.category else list(KindCategory)

    if args.json:
        kinds = [
            get_kind_meta(kind).to_dict()
            for category in categories
            for kind in get_kinds_by_category(category)
        ]
        print(json.dumps(kinds, indent=2))
        return 0

    for category in categories:
        print(f"\n=== {category.value.title()} ===")
        for kind in get_kinds_by_category(category):
            print(f"  {kind.value:<14} {get_kind_meta(kind).description}")
    return 0


def handle_kinds_command(argv: list[str]) -> int:
    """Handle kinds-specific commands."""
    parser = argparse.ArgumentParser(
        prog="python . kinds",
        description="List the element kinds by category",
    )
    parser.add_argument(
        "--category",
        "-c",
        choices=[category.value for category in KindCategory],
        default=None,
        help="Only list one category",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print kind metadata as JSON",
    )

    args = parser.parse_args(argv)
    return cmd_kinds(args)


# =============================================================================
# Validate Command
# =============================================================================


def cmd_validate(args: argparse.Namespace) -> int:
    """Handle the validate command."""
    try:
        definition = _load_definition(args.file)
        values = _load_values(args.values)
        results = validate_definition(definition, values, target=args.element or ALL)
    except (OSError, ValueError, FormEngineError) as e:
        logger.error(f"Error: {e}")
        return 1

    if args.json:
        print(json.dumps({key: result.to_dict() for key, result in results.items()}, indent=2))
    else:
        for element in definition.elements:
            result = results.get(element.id)
            if result is None:
                continue
            status = "ok" if result.valid else f"{result.message} ({result.rule})"
            print(f"  {element.label:<24} {status}")

    if not is_submit_valid(results):
        invalid = sum(not result.valid for result in results.values())
        logger.info(f"{invalid} of {len(results)} field(s) invalid")
        return 1
    return 0


def handle_validate_command(argv: list[str]) -> int:
    """Handle validate-specific commands."""
    parser = argparse.ArgumentParser(
        prog="python . validate",
        description="Validate entered values against a saved form definition",
    )
    parser.add_argument(
        "file",
        type=Path,
        help="Form definition JSON file",
    )
    parser.add_argument(
        "--values",
        "-v",
        type=Path,
        default=None,
        help="JSON file mapping element id to entered value (default: element defaults)",
    )
    parser.add_argument(
        "--element",
        "-e",
        type=str,
        default=None,
        help="Validate a single element id",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON",
    )

    if not argv:
        parser.print_help()
        return 1

    args = parser.parse_args(argv)
    return cmd_validate(args)


# =============================================================================
# Layout Command
# =============================================================================


def cmd_layout(args: argparse.Namespace) -> int:
    """Handle the layout command."""
    try:
        definition = _load_definition(args.file)
    except (OSError, ValueError, FormEngineError) as e:
        logger.error(f"Error: {e}")
        return 1

    mode = args.mode or get_environment(EnvVar.DEFAULT_LAYOUT)
    geometries = resolve_layout(definition, mode, args.breakpoint, columns=args.columns)
    print(json.dumps([geometry.to_dict() for geometry in geometries], indent=2))
    return 0


def handle_layout_command(argv: list[str]) -> int:
    """Handle layout-specific commands."""
    parser = argparse.ArgumentParser(
        prog="python . layout",
        description="Resolve element geometry for a layout mode and breakpoint",
    )
    parser.add_argument(
        "file",
        type=Path,
        help="Form definition JSON file",
    )
    parser.add_argument(
        "--mode",
        "-m",
        choices=[mode.value for mode in LayoutMode],
        default=None,
        help="Layout mode (default: FORMENGINE_DEFAULT_LAYOUT)",
    )
    parser.add_argument(
        "--breakpoint",
        "-b",
        choices=[breakpoint.value for breakpoint in Breakpoint],
        default=Breakpoint.DESKTOP.value,
        help="Breakpoint (default: desktop)",
    )
    parser.add_argument(
        "--columns",
        type=int,
        default=None,
        help="Grid column count (default: FORMENGINE_GRID_COLUMNS)",
    )

    if not argv:
        parser.print_help()
        return 1

    args = parser.parse_args(argv)
    return cmd_layout(args)


# =============================================================================
# Check Command
# =============================================================================


def cmd_check(args: argparse.Namespace) -> int:
    """Handle the check command."""
    try:
        definition = _load_definition(args.file)
    except (OSError, ValueError, FormEngineError) as e:
        logger.error(f"Error: {e}")
        return 1

    issues = find_definition_issues(definition)
    if not issues:
        print(f"OK: {definition.name} ({len(definition.elements)} elements)")
        return 0

    for issue in issues:
        element = definition.get(issue.element_id)
        print(f"  {element.label if element else issue.element_id}: {issue.field}: {issue.message}")
    logger.error(f"{len(issues)} configuration issue(s) found")
    return 1


def handle_check_command(argv: list[str]) -> int:
    """Handle check-specific commands."""
    parser = argparse.ArgumentParser(
        prog="python . check",
        description="Run the save-time configuration check on a form definition",
    )
    parser.add_argument(
        "file",
        type=Path,
        help="Form definition JSON file",
    )

    if not argv:
        parser.print_help()
        return 1

    args = parser.parse_args(argv)
    return cmd_check(args)


# =============================================================================
# Schema Command
# =============================================================================


def handle_schema_command(argv: list[str]) -> int:
    """Print the JSON Schema of the saved definition format."""
    parser = argparse.ArgumentParser(
        prog="python . schema",
        description="Print the FormDefinition JSON Schema",
    )
    parser.parse_args(argv)
    print(json.dumps(export_json_schema(), indent=2))
    return 0


# =============================================================================
# Env Command
# =============================================================================


def cmd_env(args: argparse.Namespace) -> int:
    """Handle the env command."""
    for var in list_environment_variables(args.category):
        info = get_environment_info(var)
        value = get_environment(var)
        print(f"  {info.name:<36} {value!s:<8} [{info.category}] {info.description}")
    return 0


def handle_env_command(argv: list[str]) -> int:
    """Handle env-specific commands."""
    parser = argparse.ArgumentParser(
        prog="python . env",
        description="List configuration variables and their resolved values",
    )
    parser.add_argument(
        "--category",
        "-c",
        type=str,
        default=None,
        help="Only list one category (editor, expression, layout, logging)",
    )

    args = parser.parse_args(argv)
    return cmd_env(args)


def show_help() -> None:
    """Display CLI help message."""
    print("Usage: python . {command} [args]")
    print("\n=== Definitions ===")
    print("  validate   Validate entered values against a definition")
    print("  layout     Resolve element geometry for a layout mode")
    print("  check      Run the save-time configuration check")
    print("\n=== Reference ===")
    print("  kinds      List element kinds by category")
    print("  schema     Print the definition JSON Schema")
    print("  env        List configuration variables")
    print("\nExamples:")
    print("  python . validate form.json --values values.json")
    print("  python . layout form.json --mode grid --breakpoint mobile")
    print("  python . check form.json")
    print("  python . kinds --category input")


def main() -> int:
    """Main entry point for the CLI."""
    if len(sys.argv) < 2:
        show_help()
        return 1

    command = sys.argv[1]
    rest_args = sys.argv[2:]

    if command in ("-h", "--help"):
        show_help()
        return 0

    commands = {
        "kinds": lambda: handle_kinds_command(rest_args),
        "validate": lambda: handle_validate_command(rest_args),
        "layout": lambda: handle_layout_command(rest_args),
        "check": lambda: handle_check_command(rest_args),
        "schema": lambda: handle_schema_command(rest_args),
        "env": lambda: handle_env_command(rest_args),
    }

    setup_logging()
    if command in commands:
        return commands[command]()

    logger.error(f"Unknown command: {command}")
    show_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
