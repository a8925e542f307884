"""Error types raised by the form engine.

Store operations fail explicitly with one of these instead of silently
doing nothing. Validation failures are data (see ``formengine.validation``)
and never surface as exceptions.
"""

INVALID_EXPRESSION_MESSAGE = "Invalid custom validation rule"


class FormEngineError(Exception):
    """Base exception for form engine errors."""


class UnknownKindError(FormEngineError, ValueError):
    """Raised when an element kind is not part of the closed kind set.

    Attributes:
        kind: The rejected kind value.
    """

    def __init__(self, kind: object):
        super().__init__(f"Unknown element kind: {kind!r}")
        self.kind = kind


class ElementNotFoundError(FormEngineError, KeyError):
    """Raised when an operation targets an element id that is absent."""

    def __init__(self, element_id: str):
        super().__init__(f"Element not found: {element_id}")
        self.element_id = element_id

    def __str__(self) -> str:
        return self.args[0]


class ElementLockedError(FormEngineError):
    """Raised on structural or positional changes to a locked element.

    Attributes:
        element_id: The locked element.
        fields: Field names that were rejected (empty for whole-element ops).
    """

    def __init__(self, element_id: str, fields: tuple[str, ...] = ()):
        detail = f" (fields: {', '.join(fields)})" if fields else ""
        super().__init__(f"Element {element_id} is locked{detail}")
        self.element_id = element_id
        self.fields = fields


class IndexOutOfRangeError(FormEngineError, IndexError):
    """Raised when a reorder index falls outside the element list."""

    def __init__(self, index: int, size: int):
        super().__init__(f"Index {index} out of range for {size} elements")
        self.index = index
        self.size = size


class InvalidExpressionError(FormEngineError):
    """Raised for any custom expression failure.

    The message is always the same generic text so that parser internals
    and host exception details never leak to the editor UI.
    """

    def __init__(self):
        super().__init__(INVALID_EXPRESSION_MESSAGE)


class DefinitionConfigError(FormEngineError):
    """Raised at definition-save time for inconsistent element constraints.

    Attributes:
        element_id: Element carrying the bad configuration.
        field: Constraint field at fault (e.g. ``maxLength``).
    """

    def __init__(self, element_id: str, field: str, message: str):
        super().__init__(f"{element_id}: {message}")
        self.element_id = element_id
        self.field = field


__all__ = [
    "INVALID_EXPRESSION_MESSAGE",
    "FormEngineError",
    "UnknownKindError",
    "ElementNotFoundError",
    "ElementLockedError",
    "IndexOutOfRangeError",
    "InvalidExpressionError",
    "DefinitionConfigError",
]
