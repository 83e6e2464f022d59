from collections.abc import Callable, Sequence
from typing import Protocol

from src.domain.form import FormElement


class ElementLookupPort(Protocol):
    def query(self, scope: str | None, selector: str) -> FormElement | None:
        """
        Find an element.

        Selectors are either "#element-id" or '[name="field"]'. A scope of
        None searches every dialog.
        """
        ...


class DialogSurfacePort(ElementLookupPort, Protocol):
    """Presentation collaborator for modal dialogs.

    The orchestrator only asks it to show/hide dialogs and to reflect state
    onto elements; it never reaches into the widget toolkit itself.
    """

    def has_dialog(self, dialog_id: str) -> bool:
        ...

    def show(self, dialog_id: str) -> None:
        ...

    def hide(self, dialog_id: str) -> None:
        ...

    def confirm(self, message: str, on_confirm: Callable[[], None]) -> None:
        """Ask the user; call on_confirm only if they accept."""
        ...

    def elements(self, dialog_id: str) -> Sequence[FormElement]:
        ...

    def reset_form(self, dialog_id: str) -> None:
        ...

    def refresh(self, dialog_id: str) -> None:
        """Push element state changed by the caller back onto the screen."""
        ...

    def show_field_error(self, element: FormElement, message: str) -> None:
        ...

    def clear_field_error(self, element: FormElement) -> None:
        ...

    def clear_all_errors(self, dialog_id: str) -> None:
        ...

    def focus(self, element: FormElement) -> None:
        ...

    def set_save_enabled(self, dialog_id: str, enabled: bool, title: str = "") -> None:
        ...

    def replace_with_textarea(self, element_id: str, field_name: str, text: str) -> FormElement:
        ...

    def clear_file_input(self, element: FormElement) -> None:
        ...

    def show_preview(
        self, dialog_id: str, field_name: str, preview_id: str, url: str, filename: str
    ) -> None:
        ...

    def remove_preview(self, dialog_id: str, preview_id: str) -> None:
        ...

    def clear_previews(self, dialog_id: str) -> None:
        ...
