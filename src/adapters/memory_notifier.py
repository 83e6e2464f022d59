from __future__ import annotations

from dataclasses import dataclass

from src.ports.notify import NotificationLevel


@dataclass(frozen=True)
class SentNotification:
    message: str
    level: NotificationLevel
    duration_ms: int


class RecordingNotifier:
    """NotifierPort that keeps every message instead of displaying it."""

    def __init__(self) -> None:
        self.sent: list[SentNotification] = []

    def notify(self, message: str, level: NotificationLevel, duration_ms: int) -> None:
        self.sent.append(SentNotification(message, level, duration_ms))

    def of_level(self, level: NotificationLevel) -> list[str]:
        return [n.message for n in self.sent if n.level == level]

    def clear(self) -> None:
        self.sent.clear()
