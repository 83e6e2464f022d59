"""
Debounce component - keyed delayed execution.

Every registration under a key supersedes the previous one, so a burst of
calls collapses into a single invocation once the key has been quiet for the
wait period.

Invariants:
- At most one pending invocation per key
- Cancellation is synchronous; a cancelled callback never runs
- A fired key is forgotten before its callback runs
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from src.ports.timers import TimerHandle, TimerPort

from .models import DEFAULT_WAIT_MS, DebounceTimer

logger = logging.getLogger(__name__)


class DebounceScheduler:
    def __init__(self, timers: TimerPort) -> None:
        self._timers = timers
        self._pending: dict[str, tuple[DebounceTimer, TimerHandle]] = {}

    def schedule(
        self,
        key: str,
        fn: Callable[[], None],
        wait_ms: int = DEFAULT_WAIT_MS,
    ) -> None:
        """Cancel whatever is pending under key and arm a fresh timer."""
        self.cancel(key)

        def fire() -> None:
            entry = self._pending.get(key)
            if entry is None or entry[1] is not handle:
                return
            del self._pending[key]
            fn()

        deadline = self._timers.monotonic() + wait_ms / 1000
        handle = self._timers.call_later(wait_ms / 1000, fire)
        self._pending[key] = (DebounceTimer(key=key, deadline=deadline), handle)
        logger.debug("Armed debounce %s (%d ms)", key, wait_ms)

    def cancel(self, key: str) -> bool:
        entry = self._pending.pop(key, None)
        if entry is None:
            return False
        entry[1].cancel()
        return True

    def cancel_all(self, key_prefix: str) -> int:
        """Cancel every pending timer whose key starts with key_prefix."""
        keys = [key for key in self._pending if key.startswith(key_prefix)]
        for key in keys:
            self.cancel(key)
        if keys:
            logger.debug("Cancelled %d debounce timer(s) under %s", len(keys), key_prefix)
        return len(keys)

    def is_pending(self, key: str) -> bool:
        return key in self._pending

    def pending_keys(self, prefix: str = "") -> list[str]:
        return [key for key in self._pending if key.startswith(prefix)]

    def timers(self) -> list[DebounceTimer]:
        return [timer for timer, _ in self._pending.values()]
