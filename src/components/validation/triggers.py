"""
Real-time validation triggers.

Each field moves through untouched -> touched_immediate -> touched_debounced.
Input on an untouched field is ignored; the first blur validates at once;
input after that is debounced. A blur always validates at once.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class TriggerState(StrEnum):
    UNTOUCHED = "untouched"
    TOUCHED_IMMEDIATE = "touched_immediate"
    TOUCHED_DEBOUNCED = "touched_debounced"


class TriggerAction(StrEnum):
    IGNORE = "ignore"
    VALIDATE_NOW = "validate_now"
    SCHEDULE = "schedule"


@dataclass
class FieldTrigger:
    state: TriggerState = TriggerState.UNTOUCHED

    def on_blur(self) -> TriggerAction:
        self.state = TriggerState.TOUCHED_IMMEDIATE
        return TriggerAction.VALIDATE_NOW

    def on_input(self) -> TriggerAction:
        if self.state is TriggerState.UNTOUCHED:
            return TriggerAction.IGNORE
        self.state = TriggerState.TOUCHED_DEBOUNCED
        return TriggerAction.SCHEDULE

    def reset(self) -> None:
        self.state = TriggerState.UNTOUCHED


class FieldTriggers:
    """Trigger state for every field of every dialog, keyed by dialog id."""

    def __init__(self) -> None:
        self._triggers: dict[tuple[str, str], FieldTrigger] = {}

    def get(self, dialog_id: str, field_name: str) -> FieldTrigger:
        key = (dialog_id, field_name)
        trigger = self._triggers.get(key)
        if trigger is None:
            trigger = self._triggers[key] = FieldTrigger()
        return trigger

    def state(self, dialog_id: str, field_name: str) -> TriggerState:
        trigger = self._triggers.get((dialog_id, field_name))
        return trigger.state if trigger else TriggerState.UNTOUCHED

    def reset_dialog(self, dialog_id: str) -> None:
        for key in [k for k in self._triggers if k[0] == dialog_id]:
            del self._triggers[key]
