"""
Form element model shared by every dialog surface.

A FormElement is the headless stand-in for one named input inside a dialog.
Surfaces own the elements; the orchestrator and validator read and write
them through the surface and the element cache.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

FieldKind = Literal[
    "hidden",
    "text",
    "textarea",
    "number",
    "email",
    "url",
    "date",
    "select",
    "radio",
    "checkbox",
    "file",
    "editor",
]


@dataclass(frozen=True, eq=False)
class FileBlob:
    """A selected file: name, size and MIME metadata plus its bytes."""

    name: str
    mime_type: str
    data: bytes = b""
    size: int | None = None

    @property
    def byte_size(self) -> int:
        return self.size if self.size is not None else len(self.data)


@dataclass(frozen=True)
class FieldSpec:
    """Declarative description of one field of a dialog."""

    name: str
    kind: FieldKind = "text"
    label: str = ""
    element_id: str = ""
    multiple: bool = False
    options: tuple[str, ...] = ()
    default: str = ""


@dataclass(eq=False)
class FormElement:
    element_id: str
    name: str
    kind: FieldKind = "text"
    value: str = ""
    checked: bool = False
    multiple: bool = False
    options: list[str] = field(default_factory=list)
    selected: list[str] = field(default_factory=list)
    files: list[FileBlob] = field(default_factory=list)
    default_value: str = ""
    attached: bool = True
    has_error: bool = False
    error_message: str | None = None

    @classmethod
    def from_spec(cls, spec: FieldSpec, dialog_id: str) -> FormElement:
        return cls(
            element_id=spec.element_id or f"{dialog_id}-{spec.name}",
            name=spec.name,
            kind=spec.kind,
            value=spec.default,
            multiple=spec.multiple,
            options=list(spec.options),
            default_value=spec.default,
        )

    def reset(self) -> None:
        """Restore the element to its initial state, like a native form reset."""
        self.value = self.default_value
        self.checked = False
        self.selected = []
        self.files = []
        self.has_error = False
        self.error_message = None
