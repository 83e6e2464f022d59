"""
Validation component - field and form validation for modal dialogs.

Runs the registered rules against current field values (widget text for
rich-text fields) and reflects the outcome as error display and save-button
state.

Invariants:
- Validation never raises and never writes application data; the only
  side effects are error display and save-button state
- A missing element is skipped with a warning
- The first failing rule of a field is the one displayed, but every failing
  rule is counted
- Save-button state is always recomputed from a full-form pass
"""

from __future__ import annotations

import logging

from src.components.element_cache import ElementCache
from src.domain.form import FormElement
from src.ports.surface import DialogSurfacePort

from ._impl import RuleRegistry, error_summary, failing_rules
from .models import FieldError, FormValidationResult
from .ports import EditorTextPort

logger = logging.getLogger(__name__)

DIALOG_NOT_FOUND = "Dialog not found"


class FormValidator:
    def __init__(
        self,
        registry: RuleRegistry,
        surface: DialogSurfacePort,
        cache: ElementCache,
        editors: EditorTextPort | None = None,
    ) -> None:
        self.registry = registry
        self._surface = surface
        self._cache = cache
        self._editors = editors

    def resolve_value(self, dialog_id: str, field_name: str, element: FormElement) -> str:
        """Current value of a field as the rules see it."""
        if self._editors is not None:
            text = self._editors.text_for(dialog_id, field_name)
            if text is not None:
                return text.strip()

        if element.kind == "checkbox":
            return "checked" if element.checked else ""
        if element.kind == "select" and element.multiple:
            return ",".join(element.selected)
        return element.value.strip()

    def validate_form(self, dialog_id: str, *, display: bool = True) -> FormValidationResult:
        """
        Validate every field with registered rules.

        With display=False nothing on screen changes; this is how the
        save-button state is computed.
        """
        if not self._surface.has_dialog(dialog_id):
            logger.error("Cannot validate %s: dialog not found", dialog_id)
            return FormValidationResult(
                is_valid=False,
                errors=[FieldError(field="", message=DIALOG_NOT_FOUND)],
                error_count=1,
            )

        if display:
            self._surface.clear_all_errors(dialog_id)

        errors: list[FieldError] = []
        for field_name, rules in self.registry.rules_for(dialog_id).items():
            element = self._cache.field(dialog_id, field_name)
            if element is None:
                logger.warning("Field %s not found in dialog %s", field_name, dialog_id)
                continue

            value = self.resolve_value(dialog_id, field_name, element)
            failed = failing_rules(rules, value)
            errors.extend(FieldError(field=field_name, message=r.message) for r in failed)

            if failed and display:
                self._surface.show_field_error(element, failed[0].message)

        return FormValidationResult(
            is_valid=not errors,
            errors=errors,
            error_count=len(errors),
        )

    def validate_field(self, dialog_id: str, field_name: str) -> bool:
        rules = self.registry.field_rules(dialog_id, field_name)
        if not rules:
            return True

        element = self._cache.field(dialog_id, field_name)
        if element is None:
            logger.warning("Field %s not found in dialog %s", field_name, dialog_id)
            return True

        self._surface.clear_field_error(element)
        failed = failing_rules(rules, self.resolve_value(dialog_id, field_name, element))
        if failed:
            self._surface.show_field_error(element, failed[0].message)

        self.update_save_button(dialog_id)
        return not failed

    def update_save_button(self, dialog_id: str) -> FormValidationResult:
        result = self.validate_form(dialog_id, display=False)
        if result.is_valid:
            self._surface.set_save_enabled(dialog_id, True)
        else:
            self._surface.set_save_enabled(dialog_id, False, error_summary(result.error_count))
        return result

    def first_invalid_field(
        self, dialog_id: str, result: FormValidationResult
    ) -> FormElement | None:
        for error in result.errors:
            element = self._cache.field(dialog_id, error.field)
            if element is not None:
                return element
        return None
