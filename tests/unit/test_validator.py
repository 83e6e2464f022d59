import pytest

from src.adapters.memory_surface import MemoryDialogSurface
from src.components.element_cache import ElementCache
from src.components.validation import (
    DIALOG_NOT_FOUND,
    FieldTrigger,
    FieldTriggers,
    FormValidator,
    RuleRegistry,
    TriggerAction,
    TriggerState,
    ValidationRule,
)
from src.domain.form import FieldSpec


class FakeEditors:
    def __init__(self, texts):
        self.texts = texts

    def text_for(self, dialog_id, field_name):
        return self.texts.get((dialog_id, field_name))


@pytest.fixture
def surface():
    surface = MemoryDialogSurface()
    surface.add_dialog(
        "m",
        [
            FieldSpec("title"),
            FieldSpec("size"),
            FieldSpec("tags", kind="select", multiple=True, options=("a", "b")),
            FieldSpec("agree", kind="checkbox"),
            FieldSpec("body", kind="editor"),
        ],
    )
    return surface


@pytest.fixture
def registry():
    registry = RuleRegistry()
    registry.register_dialog(
        "m",
        {
            "title": [
                ValidationRule.required("Title required"),
                ValidationRule.min_length(3, "Short"),
            ],
            "size": [ValidationRule.pattern(r"^\d+$", "Number")],
            "tags": [ValidationRule.required("Pick one")],
        },
    )
    return registry


@pytest.fixture
def validator(registry, surface):
    return FormValidator(registry, surface, ElementCache(surface))


def element(surface, name):
    return surface.query("m", f'[name="{name}"]')


def test_empty_form_counts_every_failing_rule(validator, surface):
    result = validator.validate_form("m")

    assert result.is_valid is False
    assert result.error_count == 2
    assert [e.field for e in result.errors] == ["title", "tags"]
    assert element(surface, "title").error_message == "Title required"
    assert element(surface, "size").has_error is False


def test_first_failing_rule_is_displayed_all_are_counted(registry):
    registry.register(
        "codes",
        "code",
        [ValidationRule.min_length(5, "Short"), ValidationRule.pattern(r"^\d+$", "Digits")],
    )
    surface = MemoryDialogSurface()
    surface.add_dialog("codes", [FieldSpec("code", default="ab")])
    validator = FormValidator(registry, surface, ElementCache(surface))

    result = validator.validate_form("codes")

    assert result.messages_for("code") == ["Short", "Digits"]
    assert surface.query("codes", '[name="code"]').error_message == "Short"


def test_valid_form(validator, surface):
    element(surface, "title").value = "Tower"
    element(surface, "size").value = "2500"
    element(surface, "tags").selected = ["a"]

    result = validator.validate_form("m")
    assert result.is_valid
    assert result.error_count == 0
    assert result.first_field is None


def test_values_are_trimmed(validator, surface):
    element(surface, "title").value = "   "
    assert validator.validate_form("m").messages_for("title") == ["Title required"]


def test_display_false_leaves_screen_alone(validator, surface):
    result = validator.validate_form("m", display=False)
    assert not result.is_valid
    assert all(not e.has_error for e in surface.elements("m"))


def test_unknown_dialog(validator):
    result = validator.validate_form("nope")
    assert result.is_valid is False
    assert result.error_count == 1
    assert result.errors[0].message == DIALOG_NOT_FOUND


def test_missing_field_is_skipped(registry, surface, validator, caplog):
    registry.register("m", "ghost", [ValidationRule.required()])
    element(surface, "title").value = "Tower"
    element(surface, "tags").selected = ["a"]

    result = validator.validate_form("m")

    assert result.is_valid
    assert "ghost" in caplog.text


def test_validate_field_updates_save_button(validator, surface):
    element(surface, "title").value = "Tower"
    assert validator.validate_field("m", "title") is True

    dialog = surface.dialog("m")
    assert dialog.save_enabled is False
    assert dialog.save_title == "Please fix 1 validation error before saving"

    element(surface, "tags").selected = ["b"]
    validator.validate_field("m", "tags")
    assert dialog.save_enabled is True
    assert dialog.save_title == ""


def test_validate_field_shows_only_its_own_error(validator, surface):
    element(surface, "title").value = "ab"

    assert validator.validate_field("m", "title") is False
    assert element(surface, "title").error_message == "Short"
    assert element(surface, "tags").has_error is False


def test_field_without_rules_is_valid(validator):
    assert validator.validate_field("m", "agree") is True


def test_editor_text_takes_precedence(registry, surface):
    registry.register("m", "body", [ValidationRule.min_length(10, "Longer please")])
    editors = FakeEditors({("m", "body"): "  Hello world  "})
    validator = FormValidator(registry, surface, ElementCache(surface), editors)

    assert validator.resolve_value("m", "body", element(surface, "body")) == "Hello world"
    assert validator.validate_form("m").messages_for("body") == []


def test_checkbox_and_multi_select_values(validator, surface):
    agree = element(surface, "agree")
    assert validator.resolve_value("m", "agree", agree) == ""
    agree.checked = True
    assert validator.resolve_value("m", "agree", agree) == "checked"

    tags = element(surface, "tags")
    tags.selected = ["a", "b"]
    assert validator.resolve_value("m", "tags", tags) == "a,b"


def test_first_invalid_field(validator, surface):
    result = validator.validate_form("m")
    assert validator.first_invalid_field("m", result) is element(surface, "title")


# --- triggers ---


def test_trigger_state_machine():
    trigger = FieldTrigger()
    assert trigger.on_input() is TriggerAction.IGNORE
    assert trigger.state is TriggerState.UNTOUCHED

    assert trigger.on_blur() is TriggerAction.VALIDATE_NOW
    assert trigger.state is TriggerState.TOUCHED_IMMEDIATE

    assert trigger.on_input() is TriggerAction.SCHEDULE
    assert trigger.state is TriggerState.TOUCHED_DEBOUNCED

    assert trigger.on_blur() is TriggerAction.VALIDATE_NOW
    trigger.reset()
    assert trigger.state is TriggerState.UNTOUCHED


def test_triggers_reset_per_dialog():
    triggers = FieldTriggers()
    triggers.get("a", "title").on_blur()
    triggers.get("b", "title").on_blur()

    triggers.reset_dialog("a")

    assert triggers.state("a", "title") is TriggerState.UNTOUCHED
    assert triggers.state("b", "title") is TriggerState.TOUCHED_IMMEDIATE
