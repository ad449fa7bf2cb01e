"""Repository for the `notes` collection.

- Documents keep camelCase keys (the wire shape) and expose `id` (str) instead of `_id`.
- Only valid ObjectIds ever reach the collection as keys.
"""
from typing import Dict, Any, List, Optional
from bson import ObjectId
from pymongo import DESCENDING, ReturnDocument
from voicenotes.infrastructure.db.mongo import get_db

COLLECTION = "notes"


def _out(doc: Dict[str, Any]) -> Dict[str, Any]:
    d = dict(doc)
    d["id"] = str(d.pop("_id", ""))
    return d


def is_object_id(value: Optional[str]) -> bool:
    return bool(value) and ObjectId.is_valid(str(value))


def list_notes() -> List[Dict[str, Any]]:
    """Lists notes, newest `createdAt` first."""
    return [_out(d) for d in get_db()[COLLECTION].find({}).sort("createdAt", DESCENDING)]


def get_note(note_id: str) -> Optional[Dict[str, Any]]:
    if not is_object_id(note_id):
        return None
    doc = get_db()[COLLECTION].find_one({"_id": ObjectId(note_id)})
    return _out(doc) if doc else None


def insert_note(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Inserts and returns the stored document with its assigned `id`.

    A client-provided `id` is used as `_id` only when it is a valid ObjectId;
    anything else (e.g. a client placeholder) is dropped so Mongo assigns one.
    """
    data = dict(doc)
    data.pop("_id", None)
    client_id = data.pop("id", None)
    if is_object_id(client_id):
        data["_id"] = ObjectId(str(client_id))
    res = get_db()[COLLECTION].insert_one(data)
    data["_id"] = res.inserted_id
    return _out(data)


def replace_fields(note_id: str, doc: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Sets every provided field on the note; None when the id does not exist."""
    if not is_object_id(note_id):
        return None
    data = {k: v for k, v in doc.items() if k not in ("id", "_id")}
    updated = get_db()[COLLECTION].find_one_and_update(
        {"_id": ObjectId(note_id)},
        {"$set": data},
        return_document=ReturnDocument.AFTER,
    )
    return _out(updated) if updated else None


def delete_note(note_id: str) -> bool:
    """Deletes by id; unknown or malformed ids are a no-op (returns False)."""
    if not is_object_id(note_id):
        return False
    res = get_db()[COLLECTION].delete_one({"_id": ObjectId(note_id)})
    return res.deleted_count > 0
