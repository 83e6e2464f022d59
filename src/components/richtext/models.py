"""
Richtext component models.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .ports import EditorHandle

DEFAULT_EDITOR_OPTIONS: dict[str, Any] = {
    "theme": "snow",
    "toolbar": [
        ["header", 1, 2, 3],
        ["bold", "italic", "underline"],
        ["list-ordered", "list-bullet"],
        ["link"],
        ["clean"],
    ],
    "placeholder": "Enter content here...",
}

FALLBACK_WARNING = "Rich text editor failed to load. Using basic text input instead."
FALLBACK_FAILED = "Failed to initialize text editor. Please refresh the page."


class WidgetInitError(Exception):
    """The rich-text widget library is missing or failed to build an editor."""


@dataclass(frozen=True)
class RichTextValidationError:
    """Something the sanitizer removed."""

    code: str
    message: str
    path: str | None = None


@dataclass
class EditorEntry:
    """A pooled editor handle for one (dialog, field)."""

    key: str
    dialog_id: str
    field_name: str
    element_id: str
    handle: EditorHandle
    is_valid_handle: bool = True


def editor_key(dialog_id: str, field_name: str) -> str:
    return f"{dialog_id}-{field_name}"
