from datetime import datetime, timezone

import pytest

from voicenotes.core.errors import InputMissing, InvalidInput
from voicenotes.core.time import now_iso, parse_iso
from voicenotes.domain.notes import (
    Note,
    fallback_draft,
    is_placeholder_id,
    needs_create,
    new_placeholder_id,
    order_timestamps,
    validate_note,
)


def wire(**overrides):
    data = {
        "title": "Inspect roof",
        "content": "Inspect the roof after the storm",
        "category": "intervention",
        "createdAt": "2024-03-01T08:00:00.000Z",
        "updatedAt": "2024-03-01T08:00:00.000Z",
    }
    data.update(overrides)
    return data


def test_wire_format_is_camel_case_without_nulls():
    note = Note.model_validate(wire(hasNotification=True, notificationDate="2024-03-02T09:00"))

    out = note.to_wire()

    assert out["hasNotification"] is True
    assert out["notificationDate"] == "2024-03-02T09:00"
    assert out["completed"] is False
    assert "priority" not in out and "id" not in out


def test_snake_case_names_are_accepted():
    note = Note(title="t", content="c", category="task", created_at="x", updated_at="x", has_notification=True)

    assert note.has_notification is True


def test_empty_notification_date_and_priority_are_dropped():
    note = Note.model_validate(wire(notificationDate="", priority=""))

    assert note.notification_date is None
    assert note.priority is None


@pytest.mark.parametrize("legacy, value", [("rdv", "appointment"), ("tache", "task"), ("RDV", "appointment")])
def test_legacy_categories(legacy, value):
    assert Note.model_validate(wire(category=legacy)).category == value


def test_validate_note_rejects_unknown_category():
    with pytest.raises(InvalidInput) as exc:
        validate_note(wire(category="meeting"))

    assert "category" in exc.value.detail


def test_validate_note_requires_title_and_content():
    with pytest.raises(InputMissing):
        validate_note(wire(title="   "))
    with pytest.raises(InputMissing):
        validate_note(wire(content=""))


def test_placeholder_ids():
    pid = new_placeholder_id(1709280000000)

    assert pid == "note_1709280000000"
    assert is_placeholder_id(pid)
    assert needs_create(pid)
    assert needs_create(None)
    assert not needs_create("65f0c0ffee0000000000beef")


def test_fallback_draft_truncates_title():
    text = "a" * 80

    draft = fallback_draft(text)

    assert draft.title == "a" * 60
    assert draft.content == text
    assert (draft.category, draft.priority) == ("intervention", "normal")


def test_fallback_draft_handles_empty_text():
    assert fallback_draft("").title == ""


def test_timestamps_have_millisecond_z_suffix():
    stamp = now_iso()

    assert stamp.endswith("Z")
    assert len(stamp.split(".")[1]) == 4


def test_parse_iso_orders_and_tolerates_garbage():
    assert parse_iso("2024-03-01T08:00:00.000Z") < parse_iso("2024-03-01T08:00:01Z")
    assert parse_iso("2024-03-01T08:00:00") == datetime(2024, 3, 1, 8, tzinfo=timezone.utc)
    assert parse_iso("yesterday") == parse_iso(None)


def test_parse_iso_treats_non_strings_as_oldest():
    assert parse_iso(123) == parse_iso(None)


def test_order_timestamps_lifts_updated_to_created():
    note = Note.model_validate(wire(createdAt="2025-01-02T00:00:00.000Z", updatedAt="2020-01-01T00:00:00.000Z"))

    assert order_timestamps(note).updated_at == "2025-01-02T00:00:00.000Z"


def test_order_timestamps_prefers_a_later_stamp():
    note = Note.model_validate(wire(createdAt="2025-01-02T00:00:00.000Z", updatedAt="2020-01-01T00:00:00.000Z"))

    assert order_timestamps(note, stamp="2025-06-01T00:00:00.000Z").updated_at == "2025-06-01T00:00:00.000Z"
