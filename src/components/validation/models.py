"""
Validation component models.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Literal

RuleKind = Literal["required", "minLength", "maxLength", "pattern", "email", "url"]

DEFAULT_MESSAGES: dict[str, str] = {
    "required": "This field is required",
    "minLength": "Minimum {value} characters required",
    "maxLength": "Maximum {value} characters allowed",
    "pattern": "Invalid format",
    "email": "Invalid email address",
    "url": "Invalid URL",
}


@dataclass(frozen=True)
class ValidationRule:
    """
    One declarative check on a field value.

    parameter is the length bound for minLength/maxLength and the compiled
    expression for pattern; other kinds take none.
    """

    kind: RuleKind
    message: str = ""
    parameter: int | re.Pattern[str] | None = None

    def __post_init__(self) -> None:
        if self.kind in ("minLength", "maxLength") and not isinstance(self.parameter, int):
            raise ValueError(f"{self.kind} rule needs an integer bound")
        if self.kind == "pattern" and not isinstance(self.parameter, re.Pattern):
            raise ValueError("pattern rule needs a compiled regular expression")
        if not self.message:
            text = DEFAULT_MESSAGES[self.kind].format(value=self.parameter)
            object.__setattr__(self, "message", text)

    @classmethod
    def required(cls, message: str = "") -> ValidationRule:
        return cls("required", message)

    @classmethod
    def min_length(cls, bound: int, message: str = "") -> ValidationRule:
        return cls("minLength", message, bound)

    @classmethod
    def max_length(cls, bound: int, message: str = "") -> ValidationRule:
        return cls("maxLength", message, bound)

    @classmethod
    def pattern(cls, expression: str | re.Pattern[str], message: str = "") -> ValidationRule:
        compiled = expression if isinstance(expression, re.Pattern) else re.compile(expression)
        return cls("pattern", message, compiled)

    @classmethod
    def email(cls, message: str = "") -> ValidationRule:
        return cls("email", message)

    @classmethod
    def url(cls, message: str = "") -> ValidationRule:
        return cls("url", message)


@dataclass(frozen=True)
class FieldError:
    """A failed rule on one field. Returned as data, never raised."""

    field: str
    message: str


@dataclass(frozen=True)
class FormValidationResult:
    is_valid: bool
    errors: list[FieldError] = field(default_factory=list)
    error_count: int = 0

    @property
    def first_field(self) -> str | None:
        return self.errors[0].field if self.errors else None

    def messages_for(self, field_name: str) -> list[str]:
        return [e.message for e in self.errors if e.field == field_name]
