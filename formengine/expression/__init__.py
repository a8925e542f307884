"""Expression module - restricted rule language for custom validation.

Rules are plain expressions over the current field (``value``) and its
sibling fields. They are parsed into a closed node tree and evaluated under
a step and time budget; nothing is ever passed to ``eval``.

Example usage:
    >>> from formengine.expression import check
    >>> check("value > 18", 21)
    True
    >>> check("password == confirm", "a", {"password": "a", "confirm": "a"})
    True
"""

from .lib import (
    MAX_EXPRESSION_LENGTH,
    Binary,
    BoolOp,
    Compare,
    Expression,
    FieldRef,
    Literal,
    Node,
    Sequence,
    Unary,
    check,
    compile_expression,
    evaluate,
    field_context,
    is_valid_expression,
    to_identifier,
)

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
