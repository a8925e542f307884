"""Store module - the current form definition and its edit operations.

Example usage:
    >>> from formengine.store import ElementStore
    >>> store = ElementStore()
    >>> snapshot = store.add("text")
    >>> len(snapshot.elements)
    1
"""

from .lib import COPY_SUFFIX, LOCKED_EDITABLE_FIELDS, ElementStore, normalize_fields

__all__ = [
    "ElementStore",
    "COPY_SUFFIX",
    "LOCKED_EDITABLE_FIELDS",
    "normalize_fields",
]
