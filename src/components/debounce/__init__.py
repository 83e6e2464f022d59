"""
Debounce component - keyed delayed execution with cancel-by-prefix.
"""

from .component import DebounceScheduler
from .models import DEFAULT_WAIT_MS, DebounceTimer

__all__ = [
    "DEFAULT_WAIT_MS",
    "DebounceScheduler",
    "DebounceTimer",
]
