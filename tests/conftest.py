"""Shared fixtures: mongomock database, fake OpenAI client, API test client."""
import os
import tempfile
from unittest.mock import MagicMock

# Must run before voicenotes.core.config builds its settings
os.environ["UPLOADS_DIR"] = tempfile.mkdtemp(prefix="voicenotes-uploads-")
os.environ.pop("API_BASE_URL", None)
os.environ.pop("VITE_API_URL", None)

import mongomock
import pytest

from voicenotes.core.config import settings
from voicenotes.infrastructure.ai import openai_client
from voicenotes.infrastructure.db import mongo


@pytest.fixture
def mock_db():
    db = mongomock.MongoClient()["voicenotes_test"]
    mongo.use_database(db)
    yield db
    mongo.use_database(None)


@pytest.fixture
def fake_openai():
    client = MagicMock()
    openai_client.set_openai(client)
    yield client
    openai_client.set_openai(None)


@pytest.fixture
def no_openai(monkeypatch):
    monkeypatch.setattr(settings, "openai_api_key", None)
    openai_client.set_openai(None)


@pytest.fixture
def api(mock_db):
    from fastapi.testclient import TestClient
    from voicenotes.main import app

    return TestClient(app)
