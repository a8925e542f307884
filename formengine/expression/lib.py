"""Restricted expression language for custom validation rules.

User-authored rules such as ``value > 18 and value < 120`` are parsed with
``ast.parse(mode="eval")`` and converted into a small tree of tagged nodes.
Only literals, names, arithmetic, comparisons and boolean connectives
survive the conversion; calls, attribute access, subscripts, lambdas and
comprehensions are rejected before anything is evaluated.

Evaluation walks the tree with a step budget and a wall-clock deadline.
Every failure (syntax, unsupported construct, unknown name, type error,
budget exhaustion) becomes InvalidExpressionError with the same generic
message.
"""

from __future__ import annotations

import ast
import logging
import operator
import re
import time
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Mapping, Union

from formengine.config import get_expression_budget
from formengine.errors import InvalidExpressionError

logger = logging.getLogger(__name__)

MAX_EXPRESSION_LENGTH = 500
MAX_RESULT_LENGTH = 10_000
MAX_NESTING_DEPTH = 50

# =============================================================================
# Expression Nodes
# =============================================================================


@dataclass(frozen=True)
class Literal:
    """Constant value (number, string, bool or None)."""

    value: Any


@dataclass(frozen=True)
class FieldRef:
    """Reference to ``value`` or a sibling field by name."""

    name: str


@dataclass(frozen=True)
class Sequence:
    """List or tuple literal, only useful as the right side of ``in``."""

    items: tuple[Node, ...]


@dataclass(frozen=True)
class Unary:
    """``not x``, ``-x`` or ``+x``."""

    op: str
    operand: Node


@dataclass(frozen=True)
class Binary:
    """Arithmetic: ``+ - * / // %``."""

    op: str
    left: Node
    right: Node


@dataclass(frozen=True)
class Compare:
    """Chained comparison ``a < b <= c``."""

    left: Node
    ops: tuple[str, ...]
    comparators: tuple[Node, ...]


@dataclass(frozen=True)
class BoolOp:
    """Short-circuit ``and`` / ``or`` over two or more operands."""

    op: str
    operands: tuple[Node, ...]


Node = Union[Literal, FieldRef, Sequence, Unary, Binary, Compare, BoolOp]


@dataclass(frozen=True)
class Expression:
    """A compiled rule.

    Attributes:
        source: Original rule text.
        root: Root node of the restricted tree.
        names: Field names the rule references.
    """

    source: str
    root: Node
    names: frozenset[str]


# =============================================================================
# Compilation
# =============================================================================

_UNARY_OPS = {ast.Not: "not", ast.USub: "-", ast.UAdd: "+"}
_BINARY_OPS = {
    ast.Add: "+",
    ast.Sub: "-",
    ast.Mult: "*",
    ast.Div: "/",
    ast.FloorDiv: "//",
    ast.Mod: "%",
}
_COMPARE_OPS = {
    ast.Eq: "==",
    ast.NotEq: "!=",
    ast.Lt: "<",
    ast.LtE: "<=",
    ast.Gt: ">",
    ast.GtE: ">=",
    ast.In: "in",
    ast.NotIn: "not in",
}
_BOOL_OPS = {ast.And: "and", ast.Or: "or"}


class _Rejected(Exception):
    """Internal signal for a construct outside the grammar."""


def _convert(node: ast.AST, names: set[str], depth: int = 0) -> Node:
    if depth > MAX_NESTING_DEPTH:
        raise _Rejected("nesting too deep")

    if isinstance(node, ast.Constant):
        if node.value is None or isinstance(node.value, (bool, int, float, str)):
            return Literal(node.value)
        raise _Rejected(f"unsupported constant {type(node.value).__name__}")

    if isinstance(node, ast.Name):
        names.add(node.id)
        return FieldRef(node.id)

    if isinstance(node, (ast.List, ast.Tuple)):
        return Sequence(tuple(_convert(item, names, depth + 1) for item in node.elts))

    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPS:
        return Unary(_UNARY_OPS[type(node.op)], _convert(node.operand, names, depth + 1))

    if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPS:
        return Binary(
            _BINARY_OPS[type(node.op)],
            _convert(node.left, names, depth + 1),
            _convert(node.right, names, depth + 1),
        )

    if isinstance(node, ast.Compare):
        ops = []
        for op in node.ops:
            if type(op) not in _COMPARE_OPS:
                raise _Rejected(f"unsupported comparison {type(op).__name__}")
            ops.append(_COMPARE_OPS[type(op)])
        return Compare(
            _convert(node.left, names, depth + 1),
            tuple(ops),
            tuple(_convert(item, names, depth + 1) for item in node.comparators),
        )

    if isinstance(node, ast.BoolOp) and type(node.op) in _BOOL_OPS:
        return BoolOp(
            _BOOL_OPS[type(node.op)],
            tuple(_convert(item, names, depth + 1) for item in node.values),
        )

    raise _Rejected(f"unsupported syntax {type(node).__name__}")


@lru_cache(maxsize=256)
def compile_expression(source: str) -> Expression:
    """Compile rule text into a restricted expression tree.

    Args:
        source: Rule text, at most MAX_EXPRESSION_LENGTH characters.

    Returns:
        Compiled Expression.

    Raises:
        InvalidExpressionError: If the text is empty, too long, not valid
            syntax, or uses anything outside the grammar.
    """
    if not isinstance(source, str) or not source.strip():
        raise InvalidExpressionError()
    if len(source) > MAX_EXPRESSION_LENGTH:
        raise InvalidExpressionError()

    try:
        tree = ast.parse(source.strip(), mode="eval")
        names: set[str] = set()
        root = _convert(tree.body, names)
    except (SyntaxError, ValueError, RecursionError, MemoryError, _Rejected) as e:
        logger.debug(f"Rejected custom rule {source!r}: {e}")
        raise InvalidExpressionError() from None

    return Expression(source=source, root=root, names=frozenset(names))


def is_valid_expression(source: str) -> bool:
    """Check whether rule text compiles."""
    try:
        compile_expression(source)
    except InvalidExpressionError:
        return False
    return True


# =============================================================================
# Evaluation
# =============================================================================


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _add(left: Any, right: Any) -> Any:
    if isinstance(left, str) and isinstance(right, str):
        if len(left) + len(right) > MAX_RESULT_LENGTH:
            raise OverflowError("string result too large")
        return left + right
    return _arithmetic(operator.add)(left, right)


def _arithmetic(func: Callable[[Any, Any], Any]) -> Callable[[Any, Any], Any]:
    def apply(left: Any, right: Any) -> Any:
        if not (_is_number(left) and _is_number(right)):
            raise TypeError("arithmetic requires numbers")
        return func(left, right)

    return apply


_BINARY_FUNCS: dict[str, Callable[[Any, Any], Any]] = {
    "+": _add,
    "-": _arithmetic(operator.sub),
    "*": _arithmetic(operator.mul),
    "/": _arithmetic(operator.truediv),
    "//": _arithmetic(operator.floordiv),
    "%": _arithmetic(operator.mod),
}

_COMPARE_FUNCS: dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "in": lambda x, y: x in y,
    "not in": lambda x, y: x not in y,
}


class _Budget:
    """Step counter and deadline for one evaluation."""

    def __init__(self, max_steps: int, timeout_ms: int):
        self.remaining = max_steps
        self.deadline = time.perf_counter() + timeout_ms / 1000

    def tick(self) -> None:
        self.remaining -= 1
        if self.remaining < 0:
            raise TimeoutError("step budget exhausted")
        if time.perf_counter() > self.deadline:
            raise TimeoutError("time budget exhausted")


def _eval(node: Node, context: Mapping[str, Any], budget: _Budget) -> Any:
    budget.tick()

    if isinstance(node, Literal):
        return node.value

    if isinstance(node, FieldRef):
        if node.name in context:
            return context[node.name]
        raise NameError(node.name)

    if isinstance(node, Sequence):
        return tuple(_eval(item, context, budget) for item in node.items)

    if isinstance(node, Unary):
        operand = _eval(node.operand, context, budget)
        if node.op == "not":
            return not operand
        if not _is_number(operand):
            raise TypeError("unary arithmetic requires a number")
        return -operand if node.op == "-" else +operand

    if isinstance(node, Binary):
        left = _eval(node.left, context, budget)
        right = _eval(node.right, context, budget)
        return _BINARY_FUNCS[node.op](left, right)

    if isinstance(node, Compare):
        left = _eval(node.left, context, budget)
        for op, comparator in zip(node.ops, node.comparators):
            right = _eval(comparator, context, budget)
            if not _COMPARE_FUNCS[op](left, right):
                return False
            left = right
        return True

    if isinstance(node, BoolOp):
        result: Any = node.op == "and"
        for operand in node.operands:
            result = _eval(operand, context, budget)
            if node.op == "and" and not result:
                return result
            if node.op == "or" and result:
                return result
        return result

    raise TypeError(f"unknown node {type(node).__name__}")


def evaluate(
    expression: Expression | str,
    value: Any = None,
    fields: Mapping[str, Any] | None = None,
    max_steps: int | None = None,
    timeout_ms: int | None = None,
) -> Any:
    """Evaluate a rule against the current field value and its siblings.

    Args:
        expression: Compiled Expression or rule text.
        value: The current field's value, bound to the name ``value``.
        fields: Sibling field values by name (see ``field_context``).
        max_steps: Node visit budget; defaults to configuration.
        timeout_ms: Wall-clock budget; defaults to configuration.

    Returns:
        The rule's result.

    Raises:
        InvalidExpressionError: On any compile, runtime or budget failure.
    """
    if isinstance(expression, str):
        expression = compile_expression(expression)

    default_steps, default_timeout = get_expression_budget()
    budget = _Budget(
        max_steps if max_steps is not None else default_steps,
        timeout_ms if timeout_ms is not None else default_timeout,
    )
    context = {**(fields or {}), "value": value}

    try:
        return _eval(expression.root, context, budget)
    except (
        ArithmeticError,
        NameError,
        TypeError,
        ValueError,
        TimeoutError,
        RecursionError,
        MemoryError,
    ) as e:
        logger.debug(f"Custom rule {expression.source!r} failed: {type(e).__name__}")
        raise InvalidExpressionError() from None


def check(
    expression: Expression | str,
    value: Any = None,
    fields: Mapping[str, Any] | None = None,
    max_steps: int | None = None,
    timeout_ms: int | None = None,
) -> bool:
    """Evaluate a rule and coerce the result to a pass/fail boolean."""
    return bool(evaluate(expression, value, fields, max_steps, timeout_ms))


_SLUG_INVALID = re.compile(r"[^0-9a-zA-Z_]+")


def to_identifier(label: str) -> str | None:
    """Turn a label such as "Confirm password" into ``confirm_password``.

    Returns None when nothing identifier-like remains.
    """
    slug = _SLUG_INVALID.sub("_", label.strip().lower()).strip("_")
    if not slug:
        return None
    if slug[0].isdigit():
        slug = f"_{slug}"
    return slug


def field_context(named_values: list[tuple[str, str, Any]]) -> dict[str, Any]:
    """Build the sibling-field namespace for rule evaluation.

    Each field is exposed under its id when the id is a valid identifier,
    and under the identifier form of its label. When two fields share a
    label, the first one in list order keeps the name.

    Args:
        named_values: ``(element_id, label, value)`` in list order.

    Returns:
        Mapping of name to field value (``value`` itself is reserved).
    """
    context: dict[str, Any] = {}
    for element_id, label, field_value in named_values:
        for name in (element_id, to_identifier(label)):
            if name and name.isidentifier() and name != "value" and name not in context:
                context[name] = field_value
    return context


__all__ = [
    # Nodes
    "Literal",
    "FieldRef",
    "Sequence",
    "Unary",
    "Binary",
    "Compare",
    "BoolOp",
    "Node",
    "Expression",
    # Compilation
    "MAX_EXPRESSION_LENGTH",
    "compile_expression",
    "is_valid_expression",
    # Evaluation
    "evaluate",
    "check",
    "field_context",
    "to_identifier",
]
