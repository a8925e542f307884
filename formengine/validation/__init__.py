"""Validation module - field, cross-field and save-time checks.

Example usage:
    >>> from formengine.schema import FormDefinition, create_default
    >>> from formengine.validation import validate_definition
    >>> element = create_default("text", required=True)
    >>> definition = FormDefinition().with_elements([element])
    >>> validate_definition(definition)[element.id].message
    'required'
"""

from .lib import (
    ALL,
    CUSTOM_FAILED_MESSAGE,
    PATTERN_MESSAGE,
    REQUIRED_MESSAGE,
    DefinitionIssue,
    Evaluator,
    ValidationResult,
    check_definition,
    coerce_value,
    compile_pattern,
    find_definition_issues,
    is_absent,
    is_empty,
    is_submit_valid,
    resolve_value,
    validate_definition,
    validate_field,
    validated_elements,
)
from .rules import (
    CrossFieldRule,
    RuleCheck,
    equals_rule,
    expression_rule,
    less_than_rule,
    not_equals_rule,
)

__all__ = [
    # Results
    "ValidationResult",
    "DefinitionIssue",
    "ALL",
    "REQUIRED_MESSAGE",
    "PATTERN_MESSAGE",
    "CUSTOM_FAILED_MESSAGE",
    # Field validation
    "Evaluator",
    "validate_field",
    "validate_definition",
    "validated_elements",
    "is_submit_valid",
    "resolve_value",
    "coerce_value",
    "is_absent",
    "is_empty",
    "compile_pattern",
    # Cross-field rules
    "CrossFieldRule",
    "RuleCheck",
    "equals_rule",
    "not_equals_rule",
    "less_than_rule",
    "expression_rule",
    # Save-time check
    "find_definition_issues",
    "check_definition",
]
