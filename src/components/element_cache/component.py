"""
Element cache component - memoized element lookup scoped per dialog.

Dialogs are opened and closed repeatedly and every validation pass looks up
the same handful of fields, so lookups are memoized by (scope, selector) and
evicted when the owning dialog closes.

Invariants:
- A cache key always embeds its scope, so clearing one dialog never evicts
  another dialog's entries
- Failed lookups are not cached
"""

from __future__ import annotations

import logging

from src.domain.form import FormElement
from src.ports.surface import ElementLookupPort

logger = logging.getLogger(__name__)

DOCUMENT_SCOPE = "doc"


def cache_key(selector: str, scope: str | None) -> str:
    return f"{scope or DOCUMENT_SCOPE}::{selector}"


def scope_prefix(scope: str) -> str:
    return f"{scope}::"


def name_selector(field_name: str) -> str:
    return f'[name="{field_name}"]'


class ElementCache:
    def __init__(self, lookup: ElementLookupPort) -> None:
        self._lookup = lookup
        self._entries: dict[str, FormElement] = {}
        self.hits = 0
        self.misses = 0

    def get(self, selector: str, scope: str | None = None) -> FormElement | None:
        key = cache_key(selector, scope)
        element = self._entries.get(key)
        if element is not None:
            self.hits += 1
            return element

        self.misses += 1
        element = self._lookup.query(scope, selector)
        if element is not None:
            self._entries[key] = element
        return element

    def field(self, dialog_id: str, field_name: str) -> FormElement | None:
        return self.get(name_selector(field_name), dialog_id)

    def evict(self, selector: str, scope: str | None = None) -> bool:
        return self._entries.pop(cache_key(selector, scope), None) is not None

    def clear(self, prefix: str) -> int:
        """Evict every entry whose cache key starts with prefix."""
        keys = [key for key in self._entries if key.startswith(prefix)]
        for key in keys:
            del self._entries[key]
        if keys:
            logger.debug("Evicted %d cached element(s) under %s", len(keys), prefix)
        return len(keys)

    def clear_scope(self, scope: str) -> int:
        return self.clear(scope_prefix(scope))

    def keys(self) -> list[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
