"""
Element cache component - memoized per-dialog element lookup.
"""

from .component import (
    DOCUMENT_SCOPE,
    ElementCache,
    cache_key,
    name_selector,
    scope_prefix,
)

__all__ = [
    "DOCUMENT_SCOPE",
    "ElementCache",
    "cache_key",
    "name_selector",
    "scope_prefix",
]
