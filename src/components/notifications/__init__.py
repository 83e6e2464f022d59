"""
Notifications component - leveled toast messages with per-level durations.
"""

from .component import NotificationConfig, NotificationService

__all__ = [
    "NotificationConfig",
    "NotificationService",
]
