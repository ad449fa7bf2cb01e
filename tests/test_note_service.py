"""Notes service over a mongomock database."""
from bson import ObjectId
import pytest

from voicenotes.core.errors import InputMissing, InvalidInput, NoteNotFound, StoreFailure
from voicenotes.infrastructure.db import mongo
from voicenotes.services import note_service


def payload(**overrides):
    data = {
        "title": "Check boiler",
        "content": "Boiler pressure low in building B",
        "category": "task",
        "hasNotification": False,
        "createdAt": "2024-03-01T08:00:00.000Z",
        "updatedAt": "2024-03-01T08:00:00.000Z",
        "completed": False,
    }
    data.update(overrides)
    return data


def test_create_assigns_backend_id_and_drops_placeholder(mock_db):
    note = note_service.create_note(payload(id="note_1709280000000"))

    assert note.id != "note_1709280000000"
    assert ObjectId.is_valid(note.id)
    doc = mock_db["notes"].find_one({"_id": ObjectId(note.id)})
    assert doc["title"] == "Check boiler"
    assert "id" not in doc


def test_create_keeps_valid_object_id(mock_db):
    oid = str(ObjectId())

    note = note_service.create_note(payload(id=oid))

    assert note.id == oid


def test_create_stamps_missing_timestamps(mock_db):
    data = payload()
    del data["createdAt"], data["updatedAt"]

    note = note_service.create_note(data)

    assert note.created_at
    assert note.updated_at == note.created_at


def test_list_round_trip_newest_first(mock_db):
    for i, stamp in enumerate(["2024-01-01T00:00:00.000Z", "2024-03-01T00:00:00.000Z", "2024-02-01T00:00:00.000Z"]):
        note_service.create_note(payload(title=f"n{i}", createdAt=stamp, updatedAt=stamp))

    notes = note_service.list_notes()

    assert [n.title for n in notes] == ["n1", "n2", "n0"]
    assert all(n.id for n in notes)


def test_legacy_documents_are_normalized(mock_db):
    mock_db["notes"].insert_one({**payload(category="tache", priority="normale")})

    [note] = note_service.list_notes()

    assert note.category == "task"
    assert note.priority == "normal"


def test_update_replaces_fields_and_keeps_created_at(mock_db):
    created = note_service.create_note(payload())

    updated = note_service.update_note(
        created.id,
        payload(completed=True, createdAt="2030-01-01T00:00:00.000Z", updatedAt="2024-03-02T09:00:00.000Z"),
    )

    assert updated.id == created.id
    assert updated.completed is True
    assert updated.created_at == "2024-03-01T08:00:00.000Z"
    assert updated.updated_at == "2024-03-02T09:00:00.000Z"


def test_update_without_updated_at_stamps_now(mock_db):
    created = note_service.create_note(payload())
    data = payload(title="Boiler fixed")
    del data["updatedAt"]

    updated = note_service.update_note(created.id, data)

    assert updated.updated_at > created.updated_at


@pytest.mark.parametrize("note_id", [str(ObjectId()), "note_123", "not-an-id"])
def test_update_unknown_id_is_not_found(mock_db, note_id):
    with pytest.raises(NoteNotFound):
        note_service.update_note(note_id, payload())


def test_delete_is_idempotent(mock_db):
    created = note_service.create_note(payload())

    note_service.delete_note(created.id)
    note_service.delete_note(created.id)
    note_service.delete_note("note_999")

    assert note_service.list_notes() == []


@pytest.mark.parametrize(
    "overrides, error",
    [
        ({"title": "  "}, InputMissing),
        ({"content": ""}, InputMissing),
        ({"category": "meeting"}, InvalidInput),
        ({"priority": "someday"}, InvalidInput),
    ],
)
def test_store_boundary_rejects_bad_notes(mock_db, overrides, error):
    with pytest.raises(error):
        note_service.create_note(payload(**overrides))
    assert mock_db["notes"].count_documents({}) == 0


def test_uninitialized_database_is_a_store_failure():
    mongo.use_database(None)

    with pytest.raises(StoreFailure):
        note_service.list_notes()


def test_create_never_stores_updated_before_created(mock_db):
    note = note_service.create_note(
        payload(createdAt="2025-01-02T00:00:00.000Z", updatedAt="2020-01-01T00:00:00.000Z")
    )

    assert note.updated_at == note.created_at == "2025-01-02T00:00:00.000Z"


def test_update_with_non_string_timestamp_is_invalid_input(mock_db):
    created = note_service.create_note(payload())

    with pytest.raises(InvalidInput):
        note_service.update_note(created.id, payload(updatedAt=123))


def test_repository_lists_every_category_newest_first(mock_db):
    from voicenotes.repositories import notes_repo

    note_service.create_note(payload(category="task", createdAt="2024-01-01T00:00:00.000Z"))
    note_service.create_note(payload(category="appointment", createdAt="2024-02-01T00:00:00.000Z"))

    docs = notes_repo.list_notes()

    assert [d["category"] for d in docs] == ["appointment", "task"]
    assert all("_id" not in d for d in docs)
