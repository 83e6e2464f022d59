from collections.abc import Callable
from typing import Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class TimerPort(Protocol):
    """Single-shot timer queue of the UI event loop."""

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> TimerHandle:
        ...

    def monotonic(self) -> float:
        """Current time on the same clock the timers run on."""
        ...
