"""
In-memory rich-text widget.

Behaves like a browser editor bound to one element: it is alive while
that element stays attached, and fires change callbacks for every edit,
programmatic or typed.
"""

from __future__ import annotations

import html
from collections.abc import Callable, Mapping
from typing import Any

from src.components.richtext import WidgetInitError, html_to_text
from src.domain.form import FormElement


class MemoryEditor:
    def __init__(self, element: FormElement, options: Mapping[str, Any] | None = None) -> None:
        self.element = element
        self.options = dict(options or {})
        self.html = ""
        self._listeners: list[Callable[[], None]] = []

    def is_alive(self) -> bool:
        return self.element.attached

    def get_html(self) -> str:
        return self.html

    def set_html(self, html_content: str) -> None:
        self.html = html_content
        self._changed()

    def get_text(self) -> str:
        return html_to_text(self.html)

    def clear(self) -> None:
        self.html = ""
        self._changed()

    def type_text(self, text: str) -> None:
        """Simulate the user typing a paragraph."""
        self.html += f"<p>{html.escape(text)}</p>"
        self._changed()

    def on_change(self, callback: Callable[[], None]) -> None:
        self._listeners.append(callback)

    def _changed(self) -> None:
        for callback in list(self._listeners):
            callback()


class MemoryEditorFactory:
    def __init__(self, available: bool = True) -> None:
        self.available = available
        self.created: list[MemoryEditor] = []

    def create(self, element: FormElement, options: Mapping[str, Any]) -> MemoryEditor:
        if not self.available:
            raise WidgetInitError("Rich text widget library not loaded")
        editor = MemoryEditor(element, options)
        self.created.append(editor)
        return editor
