import asyncio
from datetime import date

import pytest

from src.components.modals import UNSAVED_CHANGES_PROMPT, validation_prefix
from src.components.validation import RuleRegistry

PROJECT = "projectModal"


def valid_project(harness, long_text):
    harness.fill(
        PROJECT,
        title="Harbour Tower",
        status="completed",
        category=["commercial"],
        location="Leeds",
        completionDate="2024-05-01",
        size="2500",
    )
    harness.editor(PROJECT, "description").type_text(long_text)


# --- validation on a fresh form ---


@pytest.mark.parametrize("dialog_id", ["projectModal", "teamMemberModal", "serviceModal"])
def test_fresh_add_fails_once_per_required_field(harness, rules, dialog_id):
    harness.orchestrator.open(dialog_id)

    result = harness.ctx.validator.validate_form(dialog_id)

    required = RuleRegistry.from_rules(rules.validation).required_fields(dialog_id)
    assert result.is_valid is False
    assert result.error_count == len(required)


def test_all_valid_values_pass(harness, long_text):
    harness.orchestrator.open(PROJECT)
    valid_project(harness, long_text)

    result = harness.ctx.validator.validate_form(PROJECT)

    assert result.is_valid is True
    assert result.error_count == 0


# --- open / close ---


def test_open_add_shows_clean_dialog(harness):
    state = harness.orchestrator.open_add("project")

    assert state.mode == "add"
    assert harness.surface.is_visible(PROJECT)
    assert not harness.orchestrator.has_unsaved_changes()
    assert harness.element(PROJECT, "sizeUnit").value == "sq ft"


def test_open_unknown_dialog(harness):
    assert harness.orchestrator.open("nopeModal") is None


def test_open_add_unknown_type(harness):
    with pytest.raises(KeyError):
        harness.orchestrator.open_add("invoice")


def test_edit_open_then_close_needs_no_confirmation(harness):
    state = harness.orchestrator.open(PROJECT, {"title": "Tower", "status": "active"})

    assert state.mode == "edit"
    assert harness.element(PROJECT, "title").value == "Tower"
    assert harness.orchestrator.close(PROJECT) is True
    assert harness.surface.confirm_messages == []
    assert not harness.surface.is_visible(PROJECT)


def test_populating_rich_text_does_not_mark_dirty(harness):
    harness.orchestrator.open(PROJECT, {"description": "<p>Existing</p>"})

    assert harness.editor(PROJECT, "description").get_html() == "<p>Existing</p>"
    assert not harness.registry.states.is_dirty(PROJECT)


def test_typing_marks_dirty_and_close_asks(harness):
    harness.orchestrator.open(PROJECT)
    harness.fill(PROJECT, title="Tow")

    assert harness.orchestrator.close(PROJECT) is True
    assert harness.surface.confirm_messages == [UNSAVED_CHANGES_PROMPT]
    assert not harness.registry.states.is_open(PROJECT)


def test_declined_confirmation_keeps_dialog(make):
    harness = make(confirm_answer=False)
    harness.orchestrator.open(PROJECT)
    harness.editor(PROJECT, "description").type_text("draft")

    assert harness.orchestrator.close(PROJECT) is False
    assert harness.registry.states.is_open(PROJECT)
    assert harness.surface.is_visible(PROJECT)

    assert harness.orchestrator.close(PROJECT, force=True) is True
    assert not harness.registry.states.is_open(PROJECT)


def test_close_top_closes_most_recent(harness):
    harness.orchestrator.open(PROJECT)
    harness.orchestrator.open("serviceModal")

    assert harness.orchestrator.close_top() is True
    assert harness.registry.states.open_dialogs() == [PROJECT]


def test_close_of_closed_dialog_is_noop(harness):
    assert harness.orchestrator.close(PROJECT) is True
    assert harness.orchestrator.close_top() is False


def test_close_then_reopen_gives_empty_editor(harness):
    harness.orchestrator.open(PROJECT)
    editor = harness.editor(PROJECT, "description")
    editor.type_text("half-written description")
    harness.orchestrator.close(PROJECT)

    harness.orchestrator.open(PROJECT)

    assert harness.editor(PROJECT, "description") is editor
    assert editor.get_html() == ""
    assert len(harness.editor_factory.created) == 1


def test_reopen_after_markup_rebuild_creates_new_editor(harness):
    harness.orchestrator.open(PROJECT)
    harness.orchestrator.close(PROJECT)
    harness.surface.detach("projectDescriptionEditor")

    harness.orchestrator.open(PROJECT)

    assert len(harness.editor_factory.created) == 2
    assert harness.editor(PROJECT, "description").is_alive()


def test_editor_fallback_still_submits(make, long_text):
    harness = make(editors_available=False)
    harness.orchestrator.open(PROJECT)

    textarea = harness.element(PROJECT, "description")
    assert textarea.kind == "textarea"
    assert harness.notifier.of_level("warning") == [
        "Rich text editor failed to load. Using basic text input instead."
    ]

    textarea.value = long_text
    data = harness.orchestrator.get_form_data(PROJECT)
    assert data["description"] == long_text
    assert harness.ctx.validator.validate_form(PROJECT).messages_for("description") == []


# --- real-time validation ---


def test_input_before_blur_is_ignored(harness):
    harness.orchestrator.open(PROJECT)
    harness.fill(PROJECT, title="T")

    assert harness.registry.debounce.pending_keys() == []
    assert harness.element(PROJECT, "title").has_error is False


def test_blur_validates_immediately(harness):
    harness.orchestrator.open(PROJECT)
    harness.fill(PROJECT, title="T")

    assert harness.orchestrator.handle_blur(PROJECT, "title") is False
    assert harness.element(PROJECT, "title").error_message == (
        "Title must be at least 3 characters"
    )
    assert harness.surface.dialog(PROJECT).save_enabled is False


def test_input_after_blur_is_debounced(harness):
    harness.orchestrator.open(PROJECT)
    harness.orchestrator.handle_blur(PROJECT, "title")
    title = harness.element(PROJECT, "title")

    for text in ("T", "To", "Tow", "Towe"):
        harness.fill(PROJECT, title=text)
        harness.timers.advance(100)
    assert title.error_message == "Project title is required"

    harness.timers.advance(200)
    assert title.has_error is False


def test_blur_cancels_pending_validation(harness):
    harness.orchestrator.open(PROJECT)
    harness.orchestrator.handle_blur(PROJECT, "title")
    harness.fill(PROJECT, title="Tower")
    assert harness.registry.debounce.is_pending("validate:projectModal:title")

    harness.orchestrator.handle_blur(PROJECT, "title")
    assert harness.registry.debounce.pending_keys() == []


def test_events_for_closed_dialog_are_ignored(harness):
    assert harness.orchestrator.handle_input(PROJECT, "title") is None
    assert harness.orchestrator.handle_blur(PROJECT, "title") is None


def test_close_cancels_pending_validations(harness):
    harness.orchestrator.open(PROJECT)
    for field in ("title", "location"):
        harness.orchestrator.handle_blur(PROJECT, field)
    harness.fill(PROJECT, title="Tower", location="Leeds")
    assert len(harness.registry.debounce.pending_keys(validation_prefix(PROJECT))) == 2

    harness.orchestrator.close(PROJECT)

    assert harness.registry.debounce.pending_keys(validation_prefix(PROJECT)) == []
    assert harness.timers.pending == 0
    assert harness.timers.advance(1000) == 0


def test_close_evicts_cached_elements(harness):
    harness.orchestrator.open(PROJECT)
    harness.ctx.validator.validate_form(PROJECT)
    harness.orchestrator.open("serviceModal")
    harness.ctx.validator.validate_form("serviceModal")

    harness.orchestrator.close(PROJECT)

    keys = harness.registry.cache.keys()
    assert keys
    assert all(key.startswith("serviceModal::") for key in keys)


# --- populate / extract ---


def test_populate_extract_round_trip(harness):
    data = {
        "id": "7",
        "title": "Harbour Tower",
        "status": "completed",
        "description": "<p>Glass and <strong>steel</strong></p>",
        "category": ["commercial", "industrial"],
        "location": "Leeds",
        "completionDate": "March 5, 2024",
        "size": "2500",
        "sizeUnit": "sq m",
        "cost": "1200",
        "client": "ACME",
        "featuredImage": "/uploads/a.jpg",
        "galleryImages": ["/uploads/b.jpg", "/uploads/c.jpg"],
    }
    harness.orchestrator.open(PROJECT, data)

    extracted = harness.orchestrator.get_form_data(PROJECT)

    assert extracted == {**data, "completionDate": "2024-03-05"}


def test_populate_skips_unknown_fields(harness):
    harness.orchestrator.open(PROJECT, {"title": "Tower", "legacyField": "x"})
    assert "legacyField" not in harness.orchestrator.get_form_data(PROJECT)


def test_open_edit_loads_record(harness):
    harness.records.seed(
        "project",
        {"id": 4, "name": "Old Mill", "status": "Completed", "startDate": "2020-01-02"},
    )

    state = harness.orchestrator.open_edit("project", 4)

    assert state.mode == "edit"
    assert harness.element(PROJECT, "id").value == "4"
    assert harness.element(PROJECT, "title").value == "Old Mill"
    assert harness.element(PROJECT, "status").value == "completed"
    assert harness.element(PROJECT, "completionDate").value == "2020-01-02"


def test_open_edit_missing_record(harness):
    assert harness.orchestrator.open_edit("project", 99) is None
    assert harness.notifier.of_level("error") == ["Project not found"]
    assert not harness.registry.states.is_open(PROJECT)


@pytest.mark.parametrize(
    "type_tag,field_name",
    [("testimonial", "dateReceived"), ("blogPost", "publishDate")],
)
def test_open_add_defaults_date_to_today(harness, type_tag, field_name):
    state = harness.orchestrator.open_add(type_tag)

    assert harness.element(state.dialog_id, field_name).value == date.today().isoformat()
    assert not harness.orchestrator.has_unsaved_changes()


def test_edit_mode_keeps_record_date(harness):
    dialog = "testimonialModal"
    harness.orchestrator.open(dialog, {"clientName": "Ada", "dateReceived": "2023-03-04"})
    assert harness.element(dialog, "dateReceived").value == "2023-03-04"

    harness.orchestrator.close(dialog)
    harness.orchestrator.open(dialog, {"clientName": "Ada"})
    assert harness.element(dialog, "dateReceived").value == ""


def test_project_reference_lists_project_titles(harness):
    harness.records.seed("project", {"id": 1, "name": "Harbour Tower"})
    harness.records.seed("project", {"id": 2, "title": "Old Mill"})
    harness.records.seed("project", {"id": 3, "status": "active"})

    harness.orchestrator.open_add("testimonial")

    assert harness.element("testimonialModal", "projectRef").options == [
        "Harbour Tower",
        "Old Mill",
    ]


def test_project_reference_options_refresh_on_reopen(harness):
    dialog = "testimonialModal"
    harness.orchestrator.open(dialog)
    assert harness.element(dialog, "projectRef").options == []
    harness.orchestrator.close(dialog)

    harness.records.seed("project", {"id": 1, "name": "Harbour Tower"})
    harness.orchestrator.open(dialog)

    assert harness.element(dialog, "projectRef").options == ["Harbour Tower"]


def test_unreadable_project_list_leaves_reference_empty(harness, monkeypatch, caplog):
    def broken(type_tag):
        raise RuntimeError("records offline")

    monkeypatch.setattr(harness.records, "all", broken)

    state = harness.orchestrator.open_add("testimonial")

    assert state is not None
    assert harness.element("testimonialModal", "projectRef").options == []
    assert "records offline" in caplog.text


# --- save ---


def test_valid_project_is_created_once(harness, long_text):
    harness.orchestrator.open(PROJECT)
    valid_project(harness, long_text)

    outcome = asyncio.run(harness.orchestrator.save(PROJECT))

    assert outcome.success is True
    assert outcome.action == "created"
    assert outcome.record_id == 1
    assert len(harness.records.creates) == 1
    assert harness.records.updates == []
    assert not harness.registry.states.is_open(PROJECT)
    assert harness.notifier.of_level("success") == ["Project created successfully!"]
    assert harness.surface.confirm_messages == []

    stored = harness.records.get_by_id("project", 1)
    assert stored["name"] == "Harbour Tower"
    assert stored["size"] == "2500 sq ft"
    assert stored["description"].startswith("<p>A four storey")


def test_edit_save_updates(harness, long_text):
    harness.records.seed("project", {"id": 3, "title": "Old"})
    harness.orchestrator.open_edit("project", 3)
    valid_project(harness, long_text)

    outcome = asyncio.run(harness.orchestrator.save(PROJECT))

    assert outcome.action == "updated"
    assert outcome.record_id == 3
    assert harness.records.creates == []
    assert harness.notifier.of_level("success") == ["Project updated successfully!"]


def test_record_id_zero_is_an_update(harness, long_text):
    harness.records.seed("project", {"id": 0, "title": "Zero"})
    harness.orchestrator.open(PROJECT, {"id": "0"})
    valid_project(harness, long_text)

    outcome = asyncio.run(harness.orchestrator.save(PROJECT))

    assert outcome.action == "updated"
    assert harness.records.updates[0][1] == 0


def test_testimonial_errors_block_save(harness):
    dialog = "testimonialModal"
    harness.orchestrator.open(dialog)
    harness.fill(dialog, clientName="", company="Northwind", dateReceived="2024-01-10")
    harness.editor(dialog, "testimonialText").type_text("short")

    outcome = asyncio.run(harness.orchestrator.save(dialog))

    assert outcome.success is False
    assert outcome.blocked_by_validation
    assert outcome.validation.error_count == 2
    assert harness.records.creates == []
    assert harness.registry.states.is_open(dialog)
    assert harness.surface.focused is harness.element(dialog, "clientName")
    assert harness.notifier.of_level("error") == [
        "Please fix 2 validation errors before saving"
    ]
    assert harness.element(dialog, "clientName").error_message == "Client name is required"


def test_store_failure_keeps_dialog_open(harness, long_text):
    harness.records.fail_with = RuntimeError("database is locked")
    harness.orchestrator.open(PROJECT)
    valid_project(harness, long_text)

    outcome = asyncio.run(harness.orchestrator.save(PROJECT))

    assert outcome.success is False
    assert outcome.error == "database is locked"
    assert harness.registry.states.is_open(PROJECT)
    assert harness.notifier.of_level("error") == [
        "Failed to save project: database is locked"
    ]
    assert harness.element(PROJECT, "title").value == "Harbour Tower"


def test_update_of_vanished_record_reports_not_found(harness, long_text):
    harness.orchestrator.open(PROJECT, {"id": "42"})
    valid_project(harness, long_text)

    outcome = asyncio.run(harness.orchestrator.save(PROJECT))

    assert outcome.success is False
    assert outcome.error == "project 42 not found"


def test_save_of_unknown_dialog_raises(harness):
    with pytest.raises(KeyError):
        asyncio.run(harness.orchestrator.save("nopeModal"))


def test_save_of_closed_dialog_fails_quietly(harness):
    outcome = asyncio.run(harness.orchestrator.save(PROJECT))
    assert outcome.success is False
    assert harness.records.creates == []
