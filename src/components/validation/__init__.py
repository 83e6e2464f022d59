"""
Validation component - declarative rule registry, field/form validator and
real-time trigger state.
"""

from ._impl import (
    EMAIL_PATTERN,
    RuleRegistry,
    error_summary,
    evaluate_rule,
    failing_rules,
    is_absolute_url,
    rule_from_spec,
)
from .component import DIALOG_NOT_FOUND, FormValidator
from .models import (
    DEFAULT_MESSAGES,
    FieldError,
    FormValidationResult,
    RuleKind,
    ValidationRule,
)
from .ports import EditorTextPort
from .triggers import FieldTrigger, FieldTriggers, TriggerAction, TriggerState

__all__ = [
    # Entry points
    "FormValidator",
    "RuleRegistry",
    # Pure rule functions
    "evaluate_rule",
    "failing_rules",
    "is_absolute_url",
    "rule_from_spec",
    "error_summary",
    "EMAIL_PATTERN",
    # Models
    "DEFAULT_MESSAGES",
    "DIALOG_NOT_FOUND",
    "FieldError",
    "FormValidationResult",
    "RuleKind",
    "ValidationRule",
    # Triggers
    "FieldTrigger",
    "FieldTriggers",
    "TriggerAction",
    "TriggerState",
    # Ports
    "EditorTextPort",
]
