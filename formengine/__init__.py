"""formengine - form-definition builder engine.

Assemble typed form elements into a definition, edit it with undo/redo,
validate entered values and resolve layout geometry per breakpoint.

Example usage:
    >>> from formengine import EditorSession
    >>> session = EditorSession()
    >>> field = session.add("text", required=True)
    >>> session.is_submit_valid()
    False
"""

from formengine.editor import EditorSession
from formengine.errors import (
    DefinitionConfigError,
    ElementLockedError,
    ElementNotFoundError,
    FormEngineError,
    IndexOutOfRangeError,
    InvalidExpressionError,
    UnknownKindError,
)
from formengine.history import HistoryManager
from formengine.layout import Breakpoint, LayoutMode, resolve_geometry, resolve_layout
from formengine.schema import ElementKind, FormDefinition, FormElement, create_default
from formengine.store import ElementStore
from formengine.validation import (
    CrossFieldRule,
    ValidationResult,
    check_definition,
    validate_definition,
)

__version__ = "0.1.0"

__all__ = [
    # Session
    "EditorSession",
    # Building blocks
    "ElementStore",
    "HistoryManager",
    # Model
    "ElementKind",
    "FormElement",
    "FormDefinition",
    "create_default",
    # Validation
    "ValidationResult",
    "CrossFieldRule",
    "validate_definition",
    "check_definition",
    # Layout
    "LayoutMode",
    "Breakpoint",
    "resolve_geometry",
    "resolve_layout",
    # Errors
    "FormEngineError",
    "UnknownKindError",
    "ElementNotFoundError",
    "ElementLockedError",
    "IndexOutOfRangeError",
    "InvalidExpressionError",
    "DefinitionConfigError",
]
