"""
Validation component port definitions.
"""

from __future__ import annotations

from typing import Protocol


class EditorTextPort(Protocol):
    """Plain-text access to widget-backed fields."""

    def text_for(self, dialog_id: str, field_name: str) -> str | None:
        """Widget plain text, or None when the field has no live widget."""
        ...
