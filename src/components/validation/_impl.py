"""
Rule evaluation and the per-dialog rule registry.

Evaluation functions are pure: they take a prepared string value and never
touch the form.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from urllib.parse import urlparse

from src.rules.models import RuleSpec, ValidationRules

from .models import ValidationRule

# Permissive: something@something.tld, no whitespace.
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_absolute_url(value: str) -> bool:
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return bool(parsed.scheme and parsed.netloc)


def evaluate_rule(rule: ValidationRule, value: str) -> bool:
    """Return True if value satisfies rule."""
    if rule.kind == "required":
        return bool(value.strip())

    # Every other kind only judges non-empty values.
    if not value:
        return True

    if rule.kind == "minLength":
        assert isinstance(rule.parameter, int)
        return len(value) >= rule.parameter
    if rule.kind == "maxLength":
        assert isinstance(rule.parameter, int)
        return len(value) <= rule.parameter
    if rule.kind == "pattern":
        assert isinstance(rule.parameter, re.Pattern)
        return rule.parameter.search(value) is not None
    if rule.kind == "email":
        return EMAIL_PATTERN.match(value) is not None
    if rule.kind == "url":
        return is_absolute_url(value)
    return True


def failing_rules(rules: Iterable[ValidationRule], value: str) -> list[ValidationRule]:
    """Rules that value fails, in registration order."""
    return [rule for rule in rules if not evaluate_rule(rule, value)]


def error_summary(count: int) -> str:
    suffix = "" if count == 1 else "s"
    return f"Please fix {count} validation error{suffix} before saving"


def rule_from_spec(spec: RuleSpec) -> ValidationRule:
    if spec.kind in ("minLength", "maxLength"):
        if spec.value is None:
            raise ValueError(f"{spec.kind} rule is missing its value")
        return ValidationRule(spec.kind, spec.message, int(spec.value))
    if spec.kind == "pattern":
        if spec.value is None:
            raise ValueError("pattern rule is missing its expression")
        return ValidationRule.pattern(str(spec.value), spec.message)
    return ValidationRule(spec.kind, spec.message)


class RuleRegistry:
    """Ordered rule lists per (dialog id, field name)."""

    def __init__(self) -> None:
        self._rules: dict[str, dict[str, tuple[ValidationRule, ...]]] = {}
        self._aliases: dict[str, str] = {}

    @classmethod
    def from_rules(cls, rules: ValidationRules) -> RuleRegistry:
        registry = cls()
        for dialog_id, fields in rules.dialogs.items():
            registry.register_dialog(
                dialog_id,
                {name: [rule_from_spec(s) for s in specs] for name, specs in fields.items()},
            )
        for dialog_id, source in rules.aliases.items():
            registry.alias(dialog_id, source)
        return registry

    def register(
        self, dialog_id: str, field_name: str, rules: Iterable[ValidationRule]
    ) -> None:
        self._rules.setdefault(dialog_id, {})[field_name] = tuple(rules)

    def register_dialog(
        self, dialog_id: str, fields: Mapping[str, Iterable[ValidationRule]]
    ) -> None:
        self._rules[dialog_id] = {name: tuple(rules) for name, rules in fields.items()}

    def alias(self, dialog_id: str, source_dialog_id: str) -> None:
        """Make dialog_id share the rules of source_dialog_id."""
        if dialog_id == source_dialog_id:
            raise ValueError(f"Dialog {dialog_id} cannot alias itself")
        self._aliases[dialog_id] = source_dialog_id

    def _resolve(self, dialog_id: str) -> str:
        seen = {dialog_id}
        while dialog_id in self._aliases:
            dialog_id = self._aliases[dialog_id]
            if dialog_id in seen:
                raise ValueError(f"Rule alias cycle through {dialog_id}")
            seen.add(dialog_id)
        return dialog_id

    def rules_for(self, dialog_id: str) -> Mapping[str, tuple[ValidationRule, ...]]:
        return MappingProxyType(self._rules.get(self._resolve(dialog_id), {}))

    def field_rules(self, dialog_id: str, field_name: str) -> tuple[ValidationRule, ...]:
        return self.rules_for(dialog_id).get(field_name, ())

    def fields(self, dialog_id: str) -> list[str]:
        return list(self.rules_for(dialog_id))

    def has_rules(self, dialog_id: str) -> bool:
        return bool(self.rules_for(dialog_id))

    def required_fields(self, dialog_id: str) -> list[str]:
        return [
            name
            for name, rules in self.rules_for(dialog_id).items()
            if any(rule.kind == "required" for rule in rules)
        ]
