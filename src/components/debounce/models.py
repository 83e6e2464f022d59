"""
Debounce component models.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_WAIT_MS = 300


@dataclass(frozen=True)
class DebounceTimer:
    """A pending delayed call registered under a key."""

    key: str
    deadline: float
