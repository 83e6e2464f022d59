"""
flet presentation adapters.

FletDialogSurface keeps the element bookkeeping of the headless surface and
mirrors it onto one AlertDialog per content type. flet has no rich-text
widget, so NullEditorFactory makes every rich-text field fall back to a
multiline text field.
"""

from __future__ import annotations

import logging
import mimetypes
from collections.abc import Awaitable, Callable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

import flet as ft

from src.adapters.memory_surface import MemoryDialogSurface
from src.components.modals import ContentTypeForm, FormCatalog
from src.components.richtext import WidgetInitError
from src.domain.form import FieldSpec, FileBlob, FormElement
from src.ports.notify import NotificationLevel

if TYPE_CHECKING:
    from src.components.modals import ModalOrchestrator

logger = logging.getLogger(__name__)

EventHandler = Callable[[Any], Awaitable[None]]


def on_loop(fn: Callable[[Any], None]) -> EventHandler:
    """
    Wrap a handler as a coroutine function.

    flet awaits coroutine handlers on the page event loop and runs plain
    ones on worker threads. The orchestrator and its timers must only be
    touched from the loop.
    """

    async def handler(e: Any) -> None:
        fn(e)

    return handler


_LEVEL_COLORS: dict[str, str] = {
    "success": "green",
    "error": "red",
    "warning": "orange",
    "info": "blue",
}


class FletNotifier:
    def __init__(self, page: ft.Page) -> None:
        self.page = page

    def notify(self, message: str, level: NotificationLevel, duration_ms: int) -> None:
        snack = ft.SnackBar(
            ft.Text(message),
            bgcolor=_LEVEL_COLORS.get(level, "blue"),
            duration=duration_ms,
        )
        self.page.overlay.append(snack)
        snack.open = True
        self.page.update()


class NullEditorFactory:
    def create(self, element: FormElement, options: Mapping[str, Any]) -> Any:
        raise WidgetInitError("No rich text widget available")


class FletDialogSurface(MemoryDialogSurface):
    def __init__(self, page: ft.Page, catalog: FormCatalog) -> None:
        super().__init__()
        self.page = page
        self.orchestrator: ModalOrchestrator | None = None
        self._controls: dict[str, ft.Control] = {}
        self._dialogs_ui: dict[str, ft.AlertDialog] = {}
        self._save_buttons: dict[str, ft.ElevatedButton] = {}
        self._preview_rows: dict[str, ft.Row] = {}
        self._preview_tiles: dict[str, ft.Control] = {}
        for form in catalog:
            self.add_dialog(form.dialog_id, form.fields)
            self._build_dialog(form)

    def bind(self, orchestrator: ModalOrchestrator) -> None:
        self.orchestrator = orchestrator

    # --- building ---

    def _build_dialog(self, form: ContentTypeForm) -> None:
        rows: list[ft.Control] = []
        for spec in form.fields:
            control = self._build_control(form.dialog_id, spec)
            if control is not None:
                rows.append(control)

        save = ft.ElevatedButton("Save", on_click=on_loop(lambda _: self._save(form.dialog_id)))
        self._save_buttons[form.dialog_id] = save
        dialog = ft.AlertDialog(
            modal=True,
            title=ft.Text(form.label),
            content=ft.Column(rows, scroll=ft.ScrollMode.AUTO, tight=True),
            actions=[
                ft.TextButton("Cancel", on_click=on_loop(lambda _: self._cancel(form.dialog_id))),
                save,
            ],
        )
        self._dialogs_ui[form.dialog_id] = dialog
        self.page.overlay.append(dialog)

    def _build_control(self, dialog_id: str, spec: FieldSpec) -> ft.Control | None:
        element = self.query(dialog_id, f'[name="{spec.name}"]')
        if element is None or spec.kind == "hidden":
            return None
        label = spec.label or spec.name

        @on_loop
        def changed(e: ft.ControlEvent) -> None:
            self._read_control(dialog_id, spec, e.control)
            if self.orchestrator is not None:
                self.orchestrator.handle_input(dialog_id, spec.name)

        @on_loop
        def blurred(_: ft.ControlEvent) -> None:
            if self.orchestrator is not None:
                self.orchestrator.handle_blur(dialog_id, spec.name)

        control: ft.Control
        if spec.kind == "checkbox":
            control = ft.Checkbox(label=label, on_change=changed)
        elif spec.kind == "select" and not spec.multiple:
            control = ft.Dropdown(
                label=label,
                options=[ft.dropdown.Option(o) for o in spec.options],
                on_change=changed,
                on_blur=blurred,
            )
        elif spec.kind == "select":
            control = ft.Column(
                [ft.Text(label)]
                + [ft.Checkbox(label=o, data=o, on_change=changed) for o in spec.options]
            )
        elif spec.kind == "radio":
            control = ft.RadioGroup(
                content=ft.Row([ft.Radio(value=o, label=o) for o in spec.options]),
                on_change=changed,
            )
        elif spec.kind == "file":
            return self._build_file_control(dialog_id, spec, label)
        else:
            control = ft.TextField(
                label=label,
                multiline=spec.kind in ("textarea", "editor"),
                on_change=changed,
                on_blur=blurred,
            )
        self._controls[element.element_id] = control
        return control

    def _build_file_control(self, dialog_id: str, spec: FieldSpec, label: str) -> ft.Control:
        @on_loop
        def picked(e: ft.FilePickerResultEvent) -> None:
            if self.orchestrator is None or not e.files:
                return
            blobs = [_blob_from_pick(f) for f in e.files]
            self.orchestrator.select_files(dialog_id, spec.name, blobs)

        picker = ft.FilePicker(on_result=picked)
        self.page.overlay.append(picker)
        previews = ft.Row(wrap=True)
        self._preview_rows[f"{dialog_id}:{spec.name}"] = previews
        return ft.Column(
            [
                ft.ElevatedButton(
                    label,
                    icon="upload",
                    on_click=on_loop(lambda _: picker.pick_files(allow_multiple=spec.multiple)),
                ),
                previews,
            ]
        )

    # --- control <-> element ---

    def _read_control(self, dialog_id: str, spec: FieldSpec, control: Any) -> None:
        element = self.query(dialog_id, f'[name="{spec.name}"]')
        if element is None:
            return
        if spec.kind == "checkbox":
            element.checked = bool(control.value)
        elif spec.kind == "select" and spec.multiple:
            column = self._controls[element.element_id]
            boxes = getattr(column, "controls", [])
            element.selected = [c.data for c in boxes if isinstance(c, ft.Checkbox) and c.value]
        else:
            element.value = control.value or ""

    def refresh(self, dialog_id: str) -> None:
        super().refresh(dialog_id)
        for element in self.elements(dialog_id):
            control = self._controls.get(element.element_id)
            if control is None:
                continue
            if isinstance(control, ft.Checkbox):
                control.value = element.checked
            elif isinstance(control, ft.Column):
                for box in control.controls:
                    if isinstance(box, ft.Checkbox):
                        box.value = box.data in element.selected
            elif isinstance(control, ft.Dropdown):
                if element.options:
                    control.options = [ft.dropdown.Option(o) for o in element.options]
                control.value = element.value
                control.error_text = element.error_message
            elif isinstance(control, ft.TextField):
                control.value = element.value
                control.error_text = element.error_message
            elif isinstance(control, ft.RadioGroup):
                control.value = element.value
        save = self._save_buttons.get(dialog_id)
        if save is not None:
            save.disabled = not self.dialog(dialog_id).save_enabled
            save.tooltip = self.dialog(dialog_id).save_title or None
        self.page.update()

    # --- surface operations with a visible effect ---

    def show(self, dialog_id: str) -> None:
        super().show(dialog_id)
        self._dialogs_ui[dialog_id].open = True
        self.refresh(dialog_id)

    def hide(self, dialog_id: str) -> None:
        super().hide(dialog_id)
        self._dialogs_ui[dialog_id].open = False
        self.page.update()

    def confirm(self, message: str, on_confirm: Callable[[], None]) -> None:
        self.confirm_messages.append(message)

        def answer(accepted: bool) -> None:
            prompt.open = False
            self.page.update()
            if accepted:
                on_confirm()

        prompt = ft.AlertDialog(
            modal=True,
            title=ft.Text("Unsaved changes"),
            content=ft.Text(message),
            actions=[
                ft.TextButton("Keep editing", on_click=on_loop(lambda _: answer(False))),
                ft.TextButton("Discard", on_click=on_loop(lambda _: answer(True))),
            ],
        )
        self.page.overlay.append(prompt)
        prompt.open = True
        self.page.update()

    def show_field_error(self, element: FormElement, message: str) -> None:
        super().show_field_error(element, message)
        self._sync_error(element)

    def clear_field_error(self, element: FormElement) -> None:
        super().clear_field_error(element)
        self._sync_error(element)

    def _sync_error(self, element: FormElement) -> None:
        control = self._controls.get(element.element_id)
        if isinstance(control, (ft.TextField, ft.Dropdown)):
            control.error_text = element.error_message
            self.page.update()

    def focus(self, element: FormElement) -> None:
        super().focus(element)
        control = self._controls.get(element.element_id)
        if isinstance(control, (ft.TextField, ft.Dropdown)):
            control.focus()

    def show_preview(
        self, dialog_id: str, field_name: str, preview_id: str, url: str, filename: str
    ) -> None:
        super().show_preview(dialog_id, field_name, preview_id, url, filename)
        row = self._preview_rows.get(f"{dialog_id}:{field_name}")
        if row is None:
            return
        tile = ft.Column(
            [
                ft.Image(src=url, width=96, height=96, fit=ft.ImageFit.COVER),
                ft.IconButton(
                    icon="close",
                    tooltip=f"Remove {filename}",
                    on_click=on_loop(lambda _: self._remove(dialog_id, preview_id)),
                ),
            ]
        )
        self._preview_tiles[preview_id] = tile
        row.controls.append(tile)
        self.page.update()

    def remove_preview(self, dialog_id: str, preview_id: str) -> None:
        super().remove_preview(dialog_id, preview_id)
        tile = self._preview_tiles.pop(preview_id, None)
        if tile is None:
            return
        for key, row in self._preview_rows.items():
            if key.startswith(f"{dialog_id}:") and tile in row.controls:
                row.controls.remove(tile)
        self.page.update()

    def clear_previews(self, dialog_id: str) -> None:
        super().clear_previews(dialog_id)
        for key, row in self._preview_rows.items():
            if key.startswith(f"{dialog_id}:"):
                stale = [pid for pid, t in self._preview_tiles.items() if t in row.controls]
                for pid in stale:
                    del self._preview_tiles[pid]
                row.controls.clear()
        self.page.update()

    # --- actions ---

    def _save(self, dialog_id: str) -> None:
        if self.orchestrator is not None:
            self.page.run_task(self.orchestrator.save, dialog_id)

    def _cancel(self, dialog_id: str) -> None:
        if self.orchestrator is not None:
            self.orchestrator.close(dialog_id)

    def _remove(self, dialog_id: str, preview_id: str) -> None:
        if self.orchestrator is not None:
            self.orchestrator.remove_preview(dialog_id, preview_id)


def _blob_from_pick(picked: Any) -> FileBlob:
    path = Path(picked.path) if getattr(picked, "path", None) else None
    data = path.read_bytes() if path is not None else b""
    mime_type = mimetypes.guess_type(picked.name)[0] or ""
    return FileBlob(name=picked.name, mime_type=mime_type, data=data, size=picked.size)
