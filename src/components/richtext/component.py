"""
Richtext component - pooled rich-text editors per (dialog, field).

An editor is built once per key and reused across opens: reopening a
dialog clears the existing handle instead of building a second widget on
the same element. Handles whose root was detached are discarded and
rebuilt.

When the widget cannot be built the field degrades to a plain textarea
with the same name, so the form still submits.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from src.components.notifications import NotificationService
from src.ports.surface import DialogSurfacePort

from ._impl import DEFAULT_CONFIG, RichTextConfig, html_to_text, sanitize
from .models import (
    DEFAULT_EDITOR_OPTIONS,
    FALLBACK_FAILED,
    FALLBACK_WARNING,
    EditorEntry,
    WidgetInitError,
    editor_key,
)
from .ports import EditorFactoryPort, EditorHandle

logger = logging.getLogger(__name__)

ChangeListener = Callable[[str, str], None]


class EditorLifecycleManager:
    def __init__(
        self,
        factory: EditorFactoryPort | None,
        surface: DialogSurfacePort,
        notifications: NotificationService,
        config: RichTextConfig = DEFAULT_CONFIG,
    ) -> None:
        self._factory = factory
        self._surface = surface
        self._notifications = notifications
        self.config = config
        self._entries: dict[str, EditorEntry] = {}
        self.on_change: ChangeListener | None = None

    # --- lifecycle ---

    def acquire(
        self,
        element_id: str,
        options: Mapping[str, Any] | None = None,
        *,
        dialog_id: str,
        field_name: str,
    ) -> EditorHandle | None:
        """
        Return a usable editor for the field, or None after falling back.

        An existing alive handle is cleared and reused. A dead one is
        dropped and rebuilt on the current element.
        """
        key = editor_key(dialog_id, field_name)
        entry = self._entries.get(key)
        if entry is not None:
            if self._check_alive(entry):
                logger.debug("Reusing editor %s", key)
                entry.handle.clear()
                return entry.handle
            logger.info("Discarding detached editor %s", key)
            del self._entries[key]

        element = self._surface.query(dialog_id, f"#{element_id}")
        if element is None:
            logger.error("Editor element #%s not found in %s", element_id, dialog_id)
            return None

        merged = {**DEFAULT_EDITOR_OPTIONS, **(options or {})}
        try:
            if self._factory is None:
                raise WidgetInitError("Rich text widget library not loaded")
            handle = self._factory.create(element, merged)
            if handle is None or not handle.is_alive():
                raise WidgetInitError("Failed to create editor instance")
        except Exception as exc:  # noqa: BLE001
            logger.warning("Editor init failed for #%s: %s", element_id, exc)
            self._fall_back(dialog_id, element_id, field_name, element.value)
            return None

        self._entries[key] = EditorEntry(
            key=key,
            dialog_id=dialog_id,
            field_name=field_name,
            element_id=element_id,
            handle=handle,
        )
        handle.on_change(lambda: self._changed(key))
        logger.debug("Created editor %s", key)
        return handle

    def _fall_back(self, dialog_id: str, element_id: str, field_name: str, text: str) -> None:
        try:
            self._surface.replace_with_textarea(element_id, field_name, html_to_text(text))
        except Exception:
            logger.exception("Textarea fallback failed for #%s in %s", element_id, dialog_id)
            self._notifications.error(FALLBACK_FAILED)
            return
        self._notifications.warning(FALLBACK_WARNING)

    def release(self, key: str) -> None:
        """Clear a pooled editor, or drop it if its root is gone."""
        entry = self._entries.get(key)
        if entry is None:
            return
        if self._check_alive(entry):
            entry.handle.clear()
        else:
            del self._entries[key]

    def release_dialog(self, dialog_id: str) -> None:
        for key in self.keys_for(dialog_id):
            self.release(key)

    def _check_alive(self, entry: EditorEntry) -> bool:
        try:
            alive = bool(entry.handle.is_alive())
        except Exception:  # noqa: BLE001
            alive = False
        entry.is_valid_handle = alive
        return alive

    def _changed(self, key: str) -> None:
        entry = self._entries.get(key)
        if entry is not None and self.on_change is not None:
            self.on_change(entry.dialog_id, entry.field_name)

    # --- content ---

    def get_content(self, key: str) -> str:
        """Sanitized HTML of the editor, "" when it holds no text."""
        entry = self._entries.get(key)
        if entry is None or not self._check_alive(entry):
            return ""
        if not entry.handle.get_text().strip():
            return ""
        return sanitize(entry.handle.get_html(), self.config)

    def set_content(self, key: str, html: str) -> bool:
        entry = self._entries.get(key)
        if entry is None or not self._check_alive(entry):
            return False
        entry.handle.set_html(sanitize(html or "", self.config))
        return True

    def get_text(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None or not self._check_alive(entry):
            return None
        return entry.handle.get_text()

    def text_for(self, dialog_id: str, field_name: str) -> str | None:
        return self.get_text(editor_key(dialog_id, field_name))

    # --- introspection ---

    def entry(self, key: str) -> EditorEntry | None:
        return self._entries.get(key)

    def is_alive(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and self._check_alive(entry)

    def keys_for(self, dialog_id: str) -> list[str]:
        return [key for key, entry in self._entries.items() if entry.dialog_id == dialog_id]

    def __len__(self) -> int:
        return len(self._entries)
