"""
Notifications component - user-facing success/error/warning/info messages.

Thin glue over the toast collaborator: picks a duration per level and logs
every message so failures surfaced to the user also reach the logs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from src.components.validation import error_summary
from src.ports.notify import NotificationLevel, NotifierPort
from src.rules.models import NotificationRules

logger = logging.getLogger(__name__)

_LOG_LEVELS: dict[str, int] = {
    "success": logging.INFO,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


@dataclass(frozen=True)
class NotificationConfig:
    success_ms: int = 5000
    error_ms: int = 7000
    warning_ms: int = 6000
    info_ms: int = 5000

    @classmethod
    def from_rules(cls, rules: NotificationRules) -> NotificationConfig:
        return cls(
            success_ms=rules.success_ms,
            error_ms=rules.error_ms,
            warning_ms=rules.warning_ms,
            info_ms=rules.info_ms,
        )

    def duration_for(self, level: NotificationLevel) -> int:
        return {
            "success": self.success_ms,
            "error": self.error_ms,
            "warning": self.warning_ms,
            "info": self.info_ms,
        }[level]


class NotificationService:
    def __init__(self, port: NotifierPort, config: NotificationConfig | None = None) -> None:
        self._port = port
        self.config = config or NotificationConfig()

    def notify(
        self,
        message: str,
        level: NotificationLevel = "info",
        duration_ms: int | None = None,
    ) -> None:
        logger.log(_LOG_LEVELS[level], "[%s] %s", level, message)
        self._port.notify(message, level, duration_ms or self.config.duration_for(level))

    def success(self, message: str) -> None:
        self.notify(message, "success")

    def error(self, message: str) -> None:
        self.notify(message, "error")

    def warning(self, message: str) -> None:
        self.notify(message, "warning")

    def info(self, message: str) -> None:
        self.notify(message, "info")

    @staticmethod
    def validation_summary(count: int) -> str:
        return error_summary(count)
