"""
Dialog state component - per-dialog open/mode/dirty bookkeeping.
"""

from .component import DialogStateStore
from .models import DialogMode, DialogState

__all__ = [
    "DialogMode",
    "DialogState",
    "DialogStateStore",
]
