"""
Headless dialog surface.

Holds every dialog's FormElements in memory and records what the
orchestrator asked it to display. The flet surface syncs its controls
from the same elements; tests drive this one directly.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field

from src.components.modals import FormCatalog
from src.domain.form import FieldSpec, FormElement

logger = logging.getLogger(__name__)

_NAME_SELECTOR = re.compile(r'^\[name="([^"]+)"\]$')


@dataclass
class PreviewTile:
    preview_id: str
    field_name: str
    url: str
    filename: str


@dataclass
class MemoryDialog:
    dialog_id: str
    elements: list[FormElement]
    visible: bool = False
    save_enabled: bool = True
    save_title: str = ""
    previews: dict[str, PreviewTile] = field(default_factory=dict)
    refreshes: int = 0


class MemoryDialogSurface:
    def __init__(self, confirm_answer: bool = True) -> None:
        self.confirm_answer = confirm_answer
        self.confirm_messages: list[str] = []
        self.focused: FormElement | None = None
        self._dialogs: dict[str, MemoryDialog] = {}

    @classmethod
    def from_catalog(cls, catalog: FormCatalog, confirm_answer: bool = True) -> MemoryDialogSurface:
        surface = cls(confirm_answer=confirm_answer)
        for form in catalog:
            surface.add_dialog(form.dialog_id, form.fields)
        return surface

    def add_dialog(self, dialog_id: str, fields: Iterable[FieldSpec]) -> MemoryDialog:
        dialog = MemoryDialog(
            dialog_id=dialog_id,
            elements=[FormElement.from_spec(spec, dialog_id) for spec in fields],
        )
        self._dialogs[dialog_id] = dialog
        return dialog

    def dialog(self, dialog_id: str) -> MemoryDialog:
        return self._dialogs[dialog_id]

    # --- lookup ---

    def query(self, scope: str | None, selector: str) -> FormElement | None:
        dialogs = [self._dialogs[scope]] if scope in self._dialogs else []
        if scope is None:
            dialogs = list(self._dialogs.values())

        match = _NAME_SELECTOR.match(selector)
        for dialog in dialogs:
            for element in dialog.elements:
                if not element.attached:
                    continue
                if selector.startswith("#") and element.element_id == selector[1:]:
                    return element
                if match and element.name == match.group(1):
                    return element
        return None

    def elements(self, dialog_id: str) -> Sequence[FormElement]:
        return [e for e in self._dialogs[dialog_id].elements if e.attached]

    # --- dialog chrome ---

    def has_dialog(self, dialog_id: str) -> bool:
        return dialog_id in self._dialogs

    def show(self, dialog_id: str) -> None:
        self._dialogs[dialog_id].visible = True

    def hide(self, dialog_id: str) -> None:
        self._dialogs[dialog_id].visible = False

    def is_visible(self, dialog_id: str) -> bool:
        return self._dialogs[dialog_id].visible

    def confirm(self, message: str, on_confirm: Callable[[], None]) -> None:
        self.confirm_messages.append(message)
        if self.confirm_answer:
            on_confirm()

    def reset_form(self, dialog_id: str) -> None:
        for element in self._dialogs[dialog_id].elements:
            element.reset()

    def refresh(self, dialog_id: str) -> None:
        self._dialogs[dialog_id].refreshes += 1

    def set_save_enabled(self, dialog_id: str, enabled: bool, title: str = "") -> None:
        dialog = self._dialogs[dialog_id]
        dialog.save_enabled = enabled
        dialog.save_title = title

    # --- errors and focus ---

    def show_field_error(self, element: FormElement, message: str) -> None:
        element.has_error = True
        element.error_message = message

    def clear_field_error(self, element: FormElement) -> None:
        element.has_error = False
        element.error_message = None

    def clear_all_errors(self, dialog_id: str) -> None:
        for element in self._dialogs[dialog_id].elements:
            self.clear_field_error(element)

    def focus(self, element: FormElement) -> None:
        self.focused = element

    # --- editors and files ---

    def replace_with_textarea(self, element_id: str, field_name: str, text: str) -> FormElement:
        for dialog in self._dialogs.values():
            for index, element in enumerate(dialog.elements):
                if element.element_id == element_id and element.attached:
                    element.attached = False
                    textarea = FormElement(
                        element_id=element_id,
                        name=field_name,
                        kind="textarea",
                        value=text,
                    )
                    dialog.elements[index] = textarea
                    logger.debug("Replaced #%s with a textarea", element_id)
                    return textarea
        raise LookupError(f"Element #{element_id} not found")

    def detach(self, element_id: str) -> None:
        """Drop an element from its dialog, as when the dialog markup is rebuilt."""
        for dialog in self._dialogs.values():
            for index, element in enumerate(dialog.elements):
                if element.element_id == element_id and element.attached:
                    element.attached = False
                    dialog.elements[index] = FormElement(
                        element_id=element_id, name=element.name, kind=element.kind
                    )
                    return

    def clear_file_input(self, element: FormElement) -> None:
        element.files = []

    def show_preview(
        self, dialog_id: str, field_name: str, preview_id: str, url: str, filename: str
    ) -> None:
        self._dialogs[dialog_id].previews[preview_id] = PreviewTile(
            preview_id=preview_id, field_name=field_name, url=url, filename=filename
        )

    def remove_preview(self, dialog_id: str, preview_id: str) -> None:
        self._dialogs[dialog_id].previews.pop(preview_id, None)

    def clear_previews(self, dialog_id: str) -> None:
        self._dialogs[dialog_id].previews.clear()
