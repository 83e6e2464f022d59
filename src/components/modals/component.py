"""
Modals component - open/populate/validate/save/close for admin dialogs.

The orchestrator is the only writer of dialog state. It drives the
validator, the editor pool and the image intake, and hands extracted data
to the record store.

Invariants:
- A dialog's state exists exactly while it is open
- Population never marks a dialog dirty
- Save validates synchronously before its first await
- Closing cancels the dialog's debounced validations, evicts its cached
  elements, clears its editors and revokes its preview URLs
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from src.components.dialog_state import DialogState
from src.components.images import (
    DEFAULT_COMPRESSION,
    CompressionConfig,
    ImageCodecPort,
    ImagePreviewEntry,
    compress_image,
    generate_storage_key,
)
from src.components.notifications import NotificationService
from src.components.richtext import editor_key, html_to_text
from src.components.validation import FormValidator, TriggerAction, error_summary
from src.domain.form import FileBlob, FormElement
from src.ports.files import ImageStorePort
from src.ports.records import Record, RecordStorePort
from src.ports.surface import DialogSurfacePort

from ._impl import (
    coerce_record_id,
    is_truthy,
    join_list,
    normalize_date,
    record_title,
    split_list,
)
from .content_types import ContentTypeForm, FormCatalog
from .models import (
    UNSAVED_CHANGES_PROMPT,
    FormData,
    SaveOutcome,
    validation_key,
    validation_prefix,
)
from .registry import DialogRegistry

logger = logging.getLogger(__name__)


class ModalOrchestrator:
    def __init__(
        self,
        registry: DialogRegistry,
        surface: DialogSurfacePort,
        validator: FormValidator,
        notifications: NotificationService,
        records: RecordStorePort,
        catalog: FormCatalog | None = None,
        *,
        image_store: ImageStorePort | None = None,
        codec: ImageCodecPort | None = None,
        compression: CompressionConfig = DEFAULT_COMPRESSION,
        debounce_ms: int = 300,
    ) -> None:
        self.registry = registry
        self.surface = surface
        self.validator = validator
        self.notifications = notifications
        self.records = records
        self.catalog = catalog or FormCatalog()
        self.image_store = image_store
        self.codec = codec
        self.compression = compression
        self.debounce_ms = debounce_ms
        self._populating: set[str] = set()
        registry.editors.on_change = self._on_editor_change

    # --- open / populate / reset ---

    def open(self, dialog_id: str, data: FormData | None = None) -> DialogState | None:
        """
        Open a dialog, in edit mode when data is given.

        Fields, errors, previews and editors are reset first; data, or the
        content type's add-mode defaults, is populated afterwards without
        marking the dialog dirty.
        """
        if not self.surface.has_dialog(dialog_id):
            logger.error("Modal %s not found", dialog_id)
            return None

        form = self.catalog.for_dialog(dialog_id)
        state = self.registry.states.open(dialog_id, data)
        self._populating.add(dialog_id)
        try:
            self.reset(dialog_id)
            self._acquire_editors(dialog_id)
            if form is not None:
                self._load_options(dialog_id, form)
            if data is not None:
                self.populate(dialog_id, data)
            elif form is not None and form.add_defaults is not None:
                self.populate(dialog_id, form.add_defaults())
        finally:
            self._populating.discard(dialog_id)

        self.registry.states.mark_clean(dialog_id)
        self.registry.triggers.reset_dialog(dialog_id)
        self.surface.show(dialog_id)
        logger.info("Opened %s in %s mode", dialog_id, state.mode)
        return state

    def open_add(self, type_tag: str) -> DialogState | None:
        return self.open(self.catalog.get(type_tag).dialog_id)

    def open_edit(self, type_tag: str, record_id: Any) -> DialogState | None:
        form = self.catalog.get(type_tag)
        record = self.records.get_by_id(type_tag, record_id)
        if record is None:
            logger.warning("%s %r not found", form.label, record_id)
            self.notifications.error(f"{form.label} not found")
            return None

        data = form.to_form(record)
        if data.get(form.id_field) in (None, ""):
            data[form.id_field] = str(record_id)
        return self.open(form.dialog_id, data)

    def reset(self, dialog_id: str) -> None:
        self.registry.debounce.cancel_all(validation_prefix(dialog_id))
        self.surface.reset_form(dialog_id)
        self.surface.clear_all_errors(dialog_id)
        self.registry.intake.release_dialog(dialog_id)
        self.registry.editors.release_dialog(dialog_id)
        self.surface.set_save_enabled(dialog_id, True)
        self.surface.refresh(dialog_id)

    def _acquire_editors(self, dialog_id: str) -> None:
        form = self.catalog.for_dialog(dialog_id)
        if form is None:
            return
        for field_name, element_id in form.rich_text.items():
            handle = self.registry.editors.acquire(
                element_id, dialog_id=dialog_id, field_name=field_name
            )
            if handle is None:
                # the element may have been swapped for a textarea
                self.registry.cache.clear_scope(dialog_id)

    def _load_options(self, dialog_id: str, form: ContentTypeForm) -> None:
        """Fill reference dropdowns with the titles of existing records."""
        for field_name, source in form.option_sources.items():
            element = self.registry.cache.field(dialog_id, field_name)
            if element is None:
                continue
            try:
                records = self.records.all(source)
            except Exception as exc:  # noqa: BLE001
                logger.warning("Could not load %s options for %s: %s", source, field_name, exc)
                records = []
            element.options = [t for t in (record_title(r) for r in records) if t]

    def populate(self, dialog_id: str, data: FormData) -> None:
        """Write values into the dialog's fields by field name."""
        form = self.catalog.for_dialog(dialog_id)
        populating = dialog_id in self._populating
        self._populating.add(dialog_id)
        try:
            for name, value in data.items():
                if form is not None and name in form.rich_text:
                    key = editor_key(dialog_id, name)
                    if self.registry.editors.set_content(key, "" if value is None else str(value)):
                        continue
                    element = self.registry.cache.field(dialog_id, name)
                    if element is not None:
                        element.value = html_to_text(str(value or ""))
                    continue

                element = self.registry.cache.field(dialog_id, name)
                if element is None:
                    logger.debug("No field %s in %s, skipping", name, dialog_id)
                    continue
                _write_element(element, value)
        finally:
            if not populating:
                self._populating.discard(dialog_id)
        self.surface.refresh(dialog_id)

    def get_form_data(self, dialog_id: str) -> FormData:
        """Plain values of every field, rich text as sanitized HTML."""
        form = self.catalog.for_dialog(dialog_id)
        data: FormData = {}
        for element in self.surface.elements(dialog_id):
            name = element.name
            if form is not None and name in form.rich_text:
                key = editor_key(dialog_id, name)
                if self.registry.editors.is_alive(key):
                    data[name] = self.registry.editors.get_content(key)
                else:
                    data[name] = element.value.strip()
                continue
            data[name] = _read_element(element)
        return data

    # --- real-time validation ---

    def handle_blur(self, dialog_id: str, field_name: str) -> bool | None:
        if not self.registry.states.is_open(dialog_id):
            return None
        self.registry.triggers.get(dialog_id, field_name).on_blur()
        self.registry.debounce.cancel(validation_key(dialog_id, field_name))
        return self.validator.validate_field(dialog_id, field_name)

    def handle_input(self, dialog_id: str, field_name: str) -> TriggerAction | None:
        """A field changed: mark dirty and, once touched, validate after a pause."""
        if not self.registry.states.is_open(dialog_id):
            return None
        self.registry.states.mark_dirty(dialog_id)
        action = self.registry.triggers.get(dialog_id, field_name).on_input()
        if action is TriggerAction.SCHEDULE:
            self.registry.debounce.schedule(
                validation_key(dialog_id, field_name),
                lambda: self._validate_if_open(dialog_id, field_name),
                self.debounce_ms,
            )
        return action

    def _validate_if_open(self, dialog_id: str, field_name: str) -> None:
        if self.registry.states.is_open(dialog_id):
            self.validator.validate_field(dialog_id, field_name)

    def _on_editor_change(self, dialog_id: str, field_name: str) -> None:
        if dialog_id in self._populating:
            return
        self.handle_input(dialog_id, field_name)

    # --- images ---

    def select_files(
        self, dialog_id: str, field_name: str, files: Iterable[FileBlob | None]
    ) -> list[ImagePreviewEntry]:
        if not self.registry.states.is_open(dialog_id):
            logger.warning("File selection for closed dialog %s ignored", dialog_id)
            return []
        accepted = self.registry.intake.intake_files(dialog_id, field_name, files)
        if accepted:
            self.registry.states.mark_dirty(dialog_id)
        return accepted

    def drop_files(
        self, dialog_id: str, field_name: str, files: Iterable[FileBlob | None]
    ) -> list[ImagePreviewEntry]:
        logger.debug("Files dropped on %s.%s", dialog_id, field_name)
        return self.select_files(dialog_id, field_name, files)

    def remove_preview(self, dialog_id: str, preview_id: str) -> ImagePreviewEntry | None:
        entry = self.registry.intake.remove_preview(dialog_id, preview_id)
        if entry is not None:
            self.registry.states.mark_dirty(dialog_id)
        return entry

    async def _store_images(self, dialog_id: str, form: ContentTypeForm) -> Record:
        refs: Record = {}
        for spec in form.image_fields:
            element = self.registry.cache.field(dialog_id, spec.name)
            if element is None or not element.files:
                continue
            stored = []
            for file in list(element.files):
                result = await compress_image(
                    file, self.codec, self.notifications, self.compression
                )
                stored.append(self._store_image(result.file))
            refs[spec.name] = stored if spec.multiple else stored[0]
        return refs

    def _store_image(self, file: FileBlob) -> str:
        key = generate_storage_key(file)
        if self.image_store is None:
            return key
        return self.image_store.put(key, file.data, file.mime_type)

    # --- save / close ---

    async def save(self, dialog_id: str) -> SaveOutcome:
        """
        Validate, extract and persist the dialog's record.

        Raises KeyError only for a dialog id no content type or surface
        knows about. Every other failure comes back as a SaveOutcome.
        """
        form = self.catalog.for_dialog(dialog_id)
        if form is None or not self.surface.has_dialog(dialog_id):
            raise KeyError(f"Unknown dialog: {dialog_id}")
        if not self.registry.states.is_open(dialog_id):
            logger.warning("Save requested for closed dialog %s", dialog_id)
            return SaveOutcome(success=False, error="Dialog is not open")

        result = self.validator.validate_form(dialog_id)
        if not result.is_valid:
            self.notifications.error(error_summary(result.error_count))
            element = self.validator.first_invalid_field(dialog_id, result)
            if element is not None:
                self.surface.focus(element)
            return SaveOutcome(success=False, validation=result)

        form_data = self.get_form_data(dialog_id)
        record_id = coerce_record_id(form_data.get(form.id_field))
        action = "updated" if record_id is not None else "created"
        try:
            images = await self._store_images(dialog_id, form)
            if not self.registry.states.is_open(dialog_id):
                logger.info("%s closed while saving, discarding", dialog_id)
                return SaveOutcome(success=False, error="Dialog closed before save completed")

            # hooks map stored image URLs, never the previous input values
            payload = form.to_record({**form_data, **images})
            if record_id is not None:
                saved = self.records.update(form.type_tag, record_id, payload)
            else:
                saved = self.records.create(form.type_tag, payload)
            if not saved:
                raise RuntimeError(
                    f"Failed to save {form.label.lower()} - operation returned no result"
                )
        except Exception as exc:  # noqa: BLE001
            message = _error_message(exc)
            logger.error("Error saving %s: %s", form.type_tag, message, exc_info=True)
            self.notifications.error(f"Failed to save {form.label.lower()}: {message}")
            return SaveOutcome(success=False, action=action, record_id=record_id, error=message)

        self.notifications.success(f"{form.label} {action} successfully!")
        self.close(dialog_id, force=True)
        saved_id = saved.get(form.id_field, record_id) if isinstance(saved, dict) else record_id
        return SaveOutcome(success=True, action=action, record_id=saved_id, record=saved)

    def close(self, dialog_id: str, force: bool = False) -> bool:
        """
        Close a dialog, asking first when it has unsaved changes.

        Returns True once the dialog is closed. With a surface whose confirm
        answers later, False is returned and the close happens when the
        user accepts.
        """
        if not self.registry.states.is_open(dialog_id):
            return True
        if self.registry.states.is_dirty(dialog_id) and not force:
            self.surface.confirm(UNSAVED_CHANGES_PROMPT, lambda: self._teardown(dialog_id))
            return not self.registry.states.is_open(dialog_id)
        self._teardown(dialog_id)
        return True

    def close_top(self) -> bool:
        dialog_id = self.registry.states.top()
        if dialog_id is None:
            return False
        return self.close(dialog_id)

    def has_unsaved_changes(self) -> bool:
        return self.registry.states.has_unsaved_changes()

    def _teardown(self, dialog_id: str) -> None:
        if not self.registry.states.is_open(dialog_id):
            return
        self.surface.hide(dialog_id)
        self.registry.states.close(dialog_id)
        cancelled = self.registry.debounce.cancel_all(validation_prefix(dialog_id))
        self.registry.editors.release_dialog(dialog_id)
        revoked = self.registry.intake.release_dialog(dialog_id)
        self.registry.triggers.reset_dialog(dialog_id)
        self.surface.clear_all_errors(dialog_id)
        self.registry.cache.clear_scope(dialog_id)
        logger.info(
            "Closed %s (%d pending validation(s) cancelled, %d preview(s) revoked)",
            dialog_id,
            cancelled,
            revoked,
        )


def _write_element(element: FormElement, value: Any) -> None:
    if element.kind == "checkbox":
        element.checked = is_truthy(value)
    elif element.kind == "select" and element.multiple:
        element.selected = split_list(value)
    elif element.kind == "file":
        element.value = join_list(value)
    elif element.kind == "date":
        element.value = normalize_date(value)
    else:
        element.value = join_list(value)


def _read_element(element: FormElement) -> Any:
    if element.kind == "checkbox":
        return element.checked
    if element.kind == "select" and element.multiple:
        return list(element.selected)
    if element.kind == "file" and element.multiple:
        return split_list(element.value)
    return element.value


def _error_message(exc: Exception) -> str:
    if isinstance(exc, KeyError) and exc.args:
        return str(exc.args[0])
    return str(exc) or "Unknown error occurred"
