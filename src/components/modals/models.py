"""
Modals component models.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from src.components.validation import FormValidationResult
from src.ports.records import Record, RecordId

SaveAction = Literal["created", "updated"]

UNSAVED_CHANGES_PROMPT = "You have unsaved changes. Are you sure you want to close?"


@dataclass(frozen=True)
class SaveOutcome:
    """Result of a save attempt. Failures never raise past the orchestrator."""

    success: bool
    action: SaveAction | None = None
    record_id: RecordId | None = None
    record: Record | None = None
    error: str | None = None
    validation: FormValidationResult | None = None

    @property
    def blocked_by_validation(self) -> bool:
        return self.validation is not None and not self.validation.is_valid


def validation_key(dialog_id: str, field_name: str) -> str:
    return f"validate:{dialog_id}:{field_name}"


def validation_prefix(dialog_id: str) -> str:
    return f"validate:{dialog_id}:"


FormData = dict[str, Any]
