"""
Mongo bootstrap: applies the `notes` JSON-schema validator and indexes.
Runs at app startup; failures are logged and never abort it.
"""
from __future__ import annotations

from typing import Any, Dict, List
import logging
from pymongo import DESCENDING, IndexModel
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError
from voicenotes.infrastructure.db.mongo import get_db
from voicenotes.domain.notes import CATEGORIES

_log = logging.getLogger("voicenotes.mongo.bootstrap")

NOTES_COLLECTION = "notes"

NOTES_VALIDATOR: Dict[str, Any] = {
    "bsonType": "object",
    "required": ["title", "content", "category", "createdAt", "updatedAt"],
    "properties": {
        "title": {"bsonType": "string", "minLength": 1},
        "content": {"bsonType": "string", "minLength": 1},
        "category": {"bsonType": "string", "enum": list(CATEGORIES)},
        "hasNotification": {"bsonType": "bool"},
        "notificationDate": {"bsonType": ["string", "null"]},
        "completed": {"bsonType": "bool"},
        "priority": {"bsonType": ["string", "null"]},
        "audioPath": {"bsonType": ["string", "null"]},
        "createdAt": {"bsonType": "string", "minLength": 10},
        "updatedAt": {"bsonType": "string", "minLength": 10},
    },
    "additionalProperties": True,
}

NOTES_INDEXES = [
    IndexModel([("createdAt", DESCENDING)], name="createdAt_desc"),
]


def _apply_validator(db: Database, name: str, schema: Dict[str, Any]) -> None:
    try:
        db.command({"collMod": name, "validator": {"$jsonSchema": schema}, "validationLevel": "moderate"})
        _log.info("Validator applied on '%s'", name)
        return
    except PyMongoError as e:
        reason = str(e)
    try:
        if name in db.list_collection_names():
            _log.warning("Validator not applied on '%s' (keeping collection as is): %s", name, reason)
            return
        db.create_collection(name, validator={"$jsonSchema": schema})
        _log.info("Created '%s' with validator", name)
    except PyMongoError as e:
        _log.warning("Could not create '%s': %s", name, e)


def _create_indexes(coll: Collection, indexes: List[IndexModel]) -> None:
    try:
        coll.create_indexes(indexes)
    except PyMongoError as e:
        _log.warning("Could not create indexes on '%s': %s", coll.name, e)


def ensure_collections() -> None:
    """Ensures the notes collection, its validator and indexes."""
    db = get_db()
    _apply_validator(db, NOTES_COLLECTION, NOTES_VALIDATOR)
    _create_indexes(db[NOTES_COLLECTION], NOTES_INDEXES)
