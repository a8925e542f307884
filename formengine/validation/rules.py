"""Cross-field validation rules.

A rule targets one element and reads the values of one or more other
elements. Rules run only after the target and every dependency passed
their own single-field checks, so a rule never has to deal with a value
of the wrong type.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping

from formengine.expression import check as check_expression
from formengine.expression import compile_expression

RuleCheck = Callable[[Mapping[str, Any]], bool]


@dataclass(frozen=True)
class CrossFieldRule:
    """A check spanning several fields.

    Attributes:
        name: Rule identifier reported in ValidationResult.rule.
        target: Element id the result is attached to.
        depends_on: Element ids the rule also reads.
        check: Receives ``{element_id: value}`` for the target and its
            dependencies; returns True when the values are consistent.
        message: Failure message.
    """

    name: str
    target: str
    depends_on: tuple[str, ...]
    check: RuleCheck
    message: str = "Fields are inconsistent"

    @property
    def element_ids(self) -> tuple[str, ...]:
        """Target followed by dependencies."""
        return (self.target, *self.depends_on)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def equals_rule(
    target: str,
    other: str,
    message: str = "Values do not match",
    name: str = "equals",
) -> CrossFieldRule:
    """Target must equal another field (e.g. password confirmation)."""
    return CrossFieldRule(
        name=name,
        target=target,
        depends_on=(other,),
        check=lambda values: values[target] == values[other],
        message=message,
    )


def not_equals_rule(
    target: str,
    other: str,
    message: str = "Values must be different",
    name: str = "notEquals",
) -> CrossFieldRule:
    """Target must differ from another field."""
    return CrossFieldRule(
        name=name,
        target=target,
        depends_on=(other,),
        check=lambda values: values[target] != values[other],
        message=message,
    )


def less_than_rule(
    target: str,
    other: str,
    message: str | None = None,
    name: str = "lessThan",
) -> CrossFieldRule:
    """Target must be strictly less than another field.

    Blank values pass; whether a field must be filled is the job of the
    ``required`` check.
    """

    def _check(values: Mapping[str, Any]) -> bool:
        left, right = values[target], values[other]
        if _is_blank(left) or _is_blank(right):
            return True
        try:
            return left < right
        except TypeError:
            return False

    return CrossFieldRule(
        name=name,
        target=target,
        depends_on=(other,),
        check=_check,
        message=message or "Value must be less than the related field",
    )


def expression_rule(
    target: str,
    source: str,
    fields: Mapping[str, str],
    message: str = "Custom validation failed",
    name: str = "expression",
) -> CrossFieldRule:
    """Cross-field rule written in the restricted expression language.

    Args:
        target: Element id the result is attached to (bound to ``value``).
        source: Rule text, e.g. ``"value > start"``.
        fields: Expression name to element id, e.g. ``{"start": "e1"}``.
        message: Failure message.
        name: Rule identifier.

    Raises:
        InvalidExpressionError: If the rule text does not compile.
    """
    expression = compile_expression(source)
    names = dict(fields)

    def _check(values: Mapping[str, Any]) -> bool:
        context = {alias: values[element_id] for alias, element_id in names.items()}
        return check_expression(expression, values[target], context)

    return CrossFieldRule(
        name=name,
        target=target,
        depends_on=tuple(names.values()),
        check=_check,
        message=message,
    )


__all__ = [
    "RuleCheck",
    "CrossFieldRule",
    "equals_rule",
    "not_equals_rule",
    "less_than_rule",
    "expression_rule",
]
