from typing import Literal, Protocol

NotificationLevel = Literal["success", "error", "warning", "info"]


class NotifierPort(Protocol):
    def notify(self, message: str, level: NotificationLevel, duration_ms: int) -> None:
        """Show a transient message. Fire-and-forget."""
        ...
