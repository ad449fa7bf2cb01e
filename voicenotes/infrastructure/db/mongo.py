"""Synchronous MongoDB client (pymongo).

`init_mongo()` runs once at FastAPI startup; repositories call `get_db()`.
"""
from __future__ import annotations

import logging
from typing import Optional

import certifi
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError, ServerSelectionTimeoutError

from voicenotes.core.config import settings

_log = logging.getLogger("voicenotes.mongo")

_client: Optional[MongoClient] = None
_db: Optional[Database] = None


def _client_kwargs(uri: str) -> dict:
    kwargs = dict(serverSelectionTimeoutMS=settings.mongo_timeout_ms)
    if uri.startswith("mongodb+srv://"):
        # SRV already implies TLS; provide the CA bundle
        kwargs["tlsCAFile"] = certifi.where()
    elif settings.mongo_tls:
        kwargs["tls"] = True
        kwargs["tlsCAFile"] = certifi.where()
        kwargs["tlsAllowInvalidCertificates"] = settings.mongo_tls_insecure
        kwargs["tlsAllowInvalidHostnames"] = settings.mongo_tls_allow_invalid_hostnames
    return kwargs


def init_mongo() -> None:
    """Builds the client and checks the connection (ping).

    An unreachable server does not abort startup: the db stays unset and note
    operations report a store failure until the next restart.
    """
    global _client, _db
    uri = settings.mongo_uri
    try:
        _client = MongoClient(uri, **_client_kwargs(uri))
        _client.admin.command("ping")
        _db = _client[settings.mongo_db]
        _log.info("Connected to MongoDB db=%s", settings.mongo_db)
    except ServerSelectionTimeoutError as e:
        _log.warning("MongoDB not reachable (timeout): %s", e)
        _client = None
        _db = None
    except PyMongoError as e:
        _log.warning("MongoDB connection error: %s", e)
        _client = None
        _db = None


def use_database(db: Optional[Database]) -> None:
    """Installs an already-built database handle (tests, scripts)."""
    global _db
    _db = db


def get_db() -> Database:
    """Returns the database handle. For repositories/services, not routers."""
    if _db is None:
        raise RuntimeError("MongoDB is not initialized")
    return _db


def db_ready() -> bool:
    return _db is not None


def close_mongo() -> None:
    global _client, _db
    if _client is not None:
        _client.close()
    _client = None
    _db = None
