"""
Dialog state component - single source of truth for open/mode/dirty.

Invariants:
- A DialogState exists if and only if its dialog is open
- Mode is edit exactly when a backing record was supplied on open
- Dirty marks for dialogs that are not open are ignored
"""

from __future__ import annotations

import logging
from typing import Any

from .models import DialogState

logger = logging.getLogger(__name__)


class DialogStateStore:
    def __init__(self) -> None:
        # Insertion order doubles as open order.
        self._states: dict[str, DialogState] = {}

    def open(self, dialog_id: str, record: dict[str, Any] | None = None) -> DialogState:
        self._states.pop(dialog_id, None)
        state = DialogState(
            dialog_id=dialog_id,
            mode="edit" if record is not None else "add",
            backing_record=record,
        )
        self._states[dialog_id] = state
        return state

    def get(self, dialog_id: str) -> DialogState | None:
        return self._states.get(dialog_id)

    def is_open(self, dialog_id: str) -> bool:
        return dialog_id in self._states

    def mark_dirty(self, dialog_id: str) -> bool:
        state = self._states.get(dialog_id)
        if state is None:
            return False
        if not state.is_dirty:
            logger.debug("Dialog %s has unsaved changes", dialog_id)
        state.is_dirty = True
        return True

    def mark_clean(self, dialog_id: str) -> None:
        state = self._states.get(dialog_id)
        if state is not None:
            state.is_dirty = False

    def is_dirty(self, dialog_id: str) -> bool:
        state = self._states.get(dialog_id)
        return state.is_dirty if state else False

    def close(self, dialog_id: str) -> DialogState | None:
        state = self._states.pop(dialog_id, None)
        if state is not None:
            state.is_open = False
        return state

    def open_dialogs(self) -> list[str]:
        return list(self._states)

    def top(self) -> str | None:
        return next(reversed(self._states), None)

    def has_unsaved_changes(self) -> bool:
        return any(state.is_dirty for state in self._states.values())
