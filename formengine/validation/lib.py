"""Field and cross-field validation for form definitions.

This module validates the values entered into a form against the
constraints each element declares, and checks element configuration
before a definition is saved.

Per field, checks run in a fixed order and stop at the first failure:
    - Structural: the value has the kind's value type
    - Required
    - Length, numeric range and step, pattern
    - Custom rule expression
    - Cross-field rules (only once every field they read passed)

Validation never raises for field data: failures are ValidationResult
values. The same definition, values and rules always give the same
results.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from datetime import date
from functools import lru_cache
from typing import Any, Callable, Iterable, Mapping

from formengine.errors import (
    INVALID_EXPRESSION_MESSAGE,
    DefinitionConfigError,
    ElementNotFoundError,
    InvalidExpressionError,
)
from formengine.expression import check as check_expression
from formengine.expression import compile_expression, field_context
from formengine.schema import FormDefinition, FormElement, ValueType, get_capabilities

from .rules import CrossFieldRule

logger = logging.getLogger(__name__)

ALL = "all"
REQUIRED_MESSAGE = "required"
PATTERN_MESSAGE = "Input format is invalid"
CUSTOM_FAILED_MESSAGE = "Custom validation failed"

Evaluator = Callable[[str, Any, Mapping[str, Any]], bool]


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one field.

    Attributes:
        valid: Whether the field passed every check.
        message: Human-readable failure message (None when valid).
        rule: Name of the failing check (None when valid).
    """

    valid: bool
    message: str | None = None
    rule: str | None = None

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls(valid=True)

    @classmethod
    def fail(cls, message: str, rule: str) -> ValidationResult:
        return cls(valid=False, message=message, rule=rule)

    def to_dict(self) -> dict[str, Any]:
        return {"valid": self.valid, "message": self.message, "rule": self.rule}


@dataclass(frozen=True)
class DefinitionIssue:
    """A configuration problem found at save time.

    Attributes:
        element_id: Element carrying the bad configuration.
        field: Wire name of the offending constraint.
        message: Human-readable description.
    """

    element_id: str
    field: str
    message: str


# =============================================================================
# Value helpers
# =============================================================================

_SLASH_PATTERN = re.compile(r"^/(.*)/([gimsuy]*)$", re.DOTALL)
_PATTERN_FLAGS = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL}


@lru_cache(maxsize=256)
def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a field pattern.

    Accepts a bare regex or the ``/body/flags`` form; ``i``, ``m`` and
    ``s`` flags are honoured, the others ignored.

    Raises:
        re.error: If the pattern is not a valid regex.
    """
    match = _SLASH_PATTERN.match(pattern)
    if not match:
        return re.compile(pattern)
    flags = 0
    for letter in match.group(2):
        flags |= _PATTERN_FLAGS.get(letter, 0)
    return re.compile(match.group(1), flags)


def resolve_value(element: FormElement, values: Mapping[str, Any] | None) -> Any:
    """The value validated for an element: supplied, else its default."""
    if values is not None and element.id in values:
        return values[element.id]
    return element.default_value


def is_absent(value: Any, value_type: ValueType) -> bool:
    """Whether no value was entered at all.

    ``None`` always; a blank string only for number, choice and date kinds,
    whose inputs report "nothing entered" that way. Absent values skip the
    type check.
    """
    if value is None:
        return True
    if value_type in (ValueType.TEXT, ValueType.BOOLEAN):
        return False
    return isinstance(value, str) and not value.strip()


def is_empty(value: Any, value_type: ValueType) -> bool:
    """Whether a value counts as "not filled in" for ``required``."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if value_type == ValueType.BOOLEAN:
        return value is False
    return False


def _to_number(value: Any) -> float | int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
        if not math.isfinite(number):
            return None
        return int(number) if number.is_integer() and "." not in value else number
    return None


def _is_iso_date(value: Any) -> bool:
    if isinstance(value, date):
        return True
    if not isinstance(value, str):
        return False
    try:
        date.fromisoformat(value.strip())
    except ValueError:
        return False
    return True


def _fmt(number: float | int) -> str:
    if isinstance(number, float) and number.is_integer():
        number = int(number)
    return str(number)


def coerce_value(element: FormElement, value: Any) -> Any:
    """Typed form of a field value as rules see it.

    Absent values become ``None`` and numeric strings become numbers for
    number kinds; anything that does not coerce is returned unchanged.
    """
    value_type = get_capabilities(element.kind).value_type
    if is_absent(value, value_type):
        return None
    if value_type == ValueType.NUMBER:
        number = _to_number(value)
        if number is not None:
            return number
    return value


# =============================================================================
# Single-field checks
# =============================================================================


def _check_type(element: FormElement, value: Any) -> ValidationResult | None:
    value_type = get_capabilities(element.kind).value_type

    if value_type == ValueType.TEXT and not isinstance(value, str):
        return ValidationResult.fail("Value must be text", "type")
    if value_type == ValueType.NUMBER and _to_number(value) is None:
        return ValidationResult.fail("Value must be a number", "type")
    if value_type == ValueType.BOOLEAN and not isinstance(value, bool):
        return ValidationResult.fail("Value must be true or false", "type")
    if value_type == ValueType.CHOICE and value not in element.options:
        return ValidationResult.fail("Value must be one of the options", "type")
    if value_type == ValueType.DATE and not _is_iso_date(value):
        return ValidationResult.fail("Value must be a date (YYYY-MM-DD)", "type")
    return None


def _check_length(element: FormElement, text: str) -> ValidationResult | None:
    if element.min_length is not None and len(text) < element.min_length:
        return ValidationResult.fail(
            f"Input must be at least {element.min_length} characters", "minLength"
        )
    if element.max_length is not None and len(text) > element.max_length:
        return ValidationResult.fail(
            f"Input must be no more than {element.max_length} characters", "maxLength"
        )
    return None


def _check_range(element: FormElement, number: float | int) -> ValidationResult | None:
    if element.min is not None and number < element.min:
        return ValidationResult.fail(f"Value must be at least {_fmt(element.min)}", "min")
    if element.max is not None and number > element.max:
        return ValidationResult.fail(f"Value must be no more than {_fmt(element.max)}", "max")
    if element.step is not None and element.step > 0:
        base = element.min if element.min is not None else 0
        quotient = (number - base) / element.step
        if not math.isclose(quotient, round(quotient), abs_tol=1e-9):
            return ValidationResult.fail(
                f"Value must be a multiple of {_fmt(element.step)}", "step"
            )
    return None


def _check_pattern(element: FormElement, text: str) -> ValidationResult | None:
    try:
        matched = compile_pattern(element.pattern).search(text) is not None
    except re.error:
        logger.debug(f"Element {element.id} has an invalid pattern {element.pattern!r}")
        matched = False
    if not matched:
        return ValidationResult.fail(PATTERN_MESSAGE, "pattern")
    return None


def _check_custom(
    element: FormElement,
    value: Any,
    fields: Mapping[str, Any],
    evaluator: Evaluator,
) -> ValidationResult | None:
    try:
        passed = evaluator(element.custom_validation, value, fields)
    except InvalidExpressionError:
        return ValidationResult.fail(INVALID_EXPRESSION_MESSAGE, "custom")
    if not passed:
        return ValidationResult.fail(CUSTOM_FAILED_MESSAGE, "custom")
    return None


def validate_field(
    element: FormElement,
    value: Any,
    fields: Mapping[str, Any] | None = None,
    evaluator: Evaluator | None = None,
) -> ValidationResult:
    """Run the single-field checks for one element.

    Args:
        element: Element whose constraints apply.
        value: The field's current value.
        fields: Sibling values exposed to the custom rule by name.
        evaluator: Custom rule evaluator; defaults to the restricted
            expression language.

    Returns:
        The first failing check's result, or a passing result.
    """
    capabilities = get_capabilities(element.kind)
    evaluator = evaluator or check_expression
    absent = is_absent(value, capabilities.value_type)

    if not absent:
        failure = _check_type(element, value)
        if failure:
            return failure

    if element.required and is_empty(value, capabilities.value_type):
        return ValidationResult.fail(REQUIRED_MESSAGE, "required")

    if capabilities.text_constraints and isinstance(value, str):
        failure = _check_length(element, value)
        if failure:
            return failure

    if capabilities.numeric_constraints and not absent:
        failure = _check_range(element, _to_number(value))
        if failure:
            return failure

    if capabilities.text_constraints and element.pattern and isinstance(value, str):
        failure = _check_pattern(element, value)
        if failure:
            return failure

    if element.custom_validation:
        failure = _check_custom(
            element, coerce_value(element, value), fields or {}, evaluator
        )
        if failure:
            return failure

    return ValidationResult.ok()


# =============================================================================
# Definition-level validation
# =============================================================================


def validated_elements(definition: FormDefinition) -> list[FormElement]:
    """Elements that receive a validation result: visible input kinds."""
    return [
        element
        for element in definition.elements
        if get_capabilities(element.kind).accepts_input and not element.hidden
    ]


def _apply_rule(
    rule: CrossFieldRule,
    results: dict[str, ValidationResult],
    typed: Mapping[str, Any],
) -> None:
    for element_id in rule.element_ids:
        result = results.get(element_id)
        if result is None or not result.valid:
            return

    try:
        passed = rule.check({element_id: typed[element_id] for element_id in rule.element_ids})
    except InvalidExpressionError:
        results[rule.target] = ValidationResult.fail(INVALID_EXPRESSION_MESSAGE, rule.name)
        return

    if not passed:
        results[rule.target] = ValidationResult.fail(rule.message, rule.name)


def validate_definition(
    definition: FormDefinition,
    values: Mapping[str, Any] | None = None,
    rules: Iterable[CrossFieldRule] = (),
    target: str = ALL,
    evaluator: Evaluator | None = None,
) -> dict[str, ValidationResult]:
    """Validate a definition's field values.

    Args:
        definition: Definition whose elements carry the constraints.
        values: Entered values by element id; elements without an entry
            are validated against their default value.
        rules: Cross-field rules.
        target: ``"all"`` or a single element id.
        evaluator: Custom rule evaluator (see ``validate_field``).

    Returns:
        Element id to result, in list order. Only visible input kinds
        appear.

    Raises:
        ElementNotFoundError: If target names an element that is absent.
    """
    if target != ALL and definition.get(target) is None:
        raise ElementNotFoundError(target)

    elements = validated_elements(definition)
    typed = {
        element.id: coerce_value(element, resolve_value(element, values))
        for element in elements
    }
    named = field_context([(element.id, element.label, typed[element.id]) for element in elements])
    owners = field_context([(element.id, element.label, element.id) for element in elements])

    rules = list(rules)
    if target == ALL:
        needed = {element.id for element in elements}
    else:
        needed = {target}
        for rule in rules:
            if rule.target == target:
                needed.update(rule.depends_on)

    results: dict[str, ValidationResult] = {}
    for element in elements:
        if element.id not in needed:
            continue
        siblings = {
            name: value for name, value in named.items() if owners[name] != element.id
        }
        results[element.id] = validate_field(
            element, resolve_value(element, values), siblings, evaluator
        )

    for rule in rules:
        if target == ALL or rule.target == target:
            _apply_rule(rule, results, typed)

    if target != ALL:
        results = {target: results[target]} if target in results else {}

    logger.debug(
        f"Validated {len(results)} field(s) of {definition.id}: "
        f"{sum(not r.valid for r in results.values())} invalid"
    )
    return results


def is_submit_valid(results: Mapping[str, ValidationResult]) -> bool:
    """Whether a form with these results may be submitted."""
    return all(result.valid for result in results.values())


# =============================================================================
# Save-time configuration check
# =============================================================================


def find_definition_issues(definition: FormDefinition) -> list[DefinitionIssue]:
    """Collect every constraint configuration problem in a definition.

    Performs the following checks per element:
        - minLength strictly below maxLength
        - min strictly below max
        - step positive
        - pattern compiles
        - customValidation compiles

    Returns:
        list[DefinitionIssue]: Issues found (empty if the definition is
        consistent).
    """
    issues: list[DefinitionIssue] = []

    for element in definition.elements:
        if (
            element.min_length is not None
            and element.max_length is not None
            and element.min_length >= element.max_length
        ):
            issues.append(
                DefinitionIssue(element.id, "maxLength", "maxLength must be greater than minLength")
            )
        if element.min is not None and element.max is not None and element.min >= element.max:
            issues.append(DefinitionIssue(element.id, "max", "max must be greater than min"))
        if element.step is not None and element.step <= 0:
            issues.append(DefinitionIssue(element.id, "step", "step must be positive"))
        if element.pattern:
            try:
                compile_pattern(element.pattern)
            except re.error:
                issues.append(DefinitionIssue(element.id, "pattern", "pattern is not a valid regex"))
        if element.custom_validation:
            try:
                compile_expression(element.custom_validation)
            except InvalidExpressionError:
                issues.append(
                    DefinitionIssue(element.id, "customValidation", INVALID_EXPRESSION_MESSAGE)
                )

    return issues


def check_definition(definition: FormDefinition) -> None:
    """Reject a definition whose constraints are inconsistent.

    Raises:
        InvalidExpressionError: If a customValidation does not compile.
        DefinitionConfigError: For any other configuration issue.
    """
    issues = find_definition_issues(definition)
    if not issues:
        return

    issue = issues[0]
    logger.warning(f"Definition {definition.id} rejected: {issue.element_id} {issue.message}")
    if issue.field == "customValidation":
        raise InvalidExpressionError()
    raise DefinitionConfigError(issue.element_id, issue.field, issue.message)


__all__ = [
    "ALL",
    "REQUIRED_MESSAGE",
    "PATTERN_MESSAGE",
    "CUSTOM_FAILED_MESSAGE",
    "Evaluator",
    "ValidationResult",
    "DefinitionIssue",
    "compile_pattern",
    "resolve_value",
    "coerce_value",
    "is_absent",
    "is_empty",
    "validate_field",
    "validated_elements",
    "validate_definition",
    "is_submit_valid",
    "find_definition_issues",
    "check_definition",
]
