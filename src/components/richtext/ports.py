"""
Richtext component port definitions.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Protocol

from src.domain.form import FormElement


class EditorHandle(Protocol):
    """An instance of the pluggable rich-text widget."""

    def is_alive(self) -> bool:
        """True while the widget's root is still attached to its dialog."""
        ...

    def get_html(self) -> str:
        ...

    def set_html(self, html: str) -> None:
        ...

    def get_text(self) -> str:
        ...

    def clear(self) -> None:
        ...

    def on_change(self, callback: Callable[[], None]) -> None:
        ...


class EditorFactoryPort(Protocol):
    def create(self, element: FormElement, options: Mapping[str, Any]) -> EditorHandle:
        """
        Build a widget on element.

        Raises WidgetInitError (or anything else) when the widget cannot be
        built; the caller falls back to a plain textarea.
        """
        ...
