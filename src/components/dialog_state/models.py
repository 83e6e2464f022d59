"""
Dialog state component models.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

DialogMode = Literal["add", "edit"]


@dataclass
class DialogState:
    """Bookkeeping for one open dialog. Exists only while the dialog is open."""

    dialog_id: str
    mode: DialogMode
    backing_record: dict[str, Any] | None = None
    is_dirty: bool = False
    is_open: bool = True
