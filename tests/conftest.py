from __future__ import annotations

import os

os.environ.setdefault("APP_ENV", "test")

import mongomock
import pytest
from fastapi.testclient import TestClient

from user_api.app.core import db
from user_api.app.core.config import settings
from user_api.app.main import app


@pytest.fixture()
def mongo() -> mongomock.MongoClient:
    client = mongomock.MongoClient(tz_aware=True)
    db.set_client(client)
    db.ensure_indexes()
    yield client
    db.set_client(None)


@pytest.fixture()
def client(mongo: mongomock.MongoClient) -> TestClient:
    # Startup hooks are not run: the in-memory client is already installed.
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture()
def create_user(client: TestClient):
    def _create(**overrides) -> dict:
        payload = {
            "name": "Ann Lee",
            "email": "ann@example.com",
            "password": "Abcdef1",
        }
        payload.update(overrides)
        response = client.post("/api/users", json=payload)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create


@pytest.fixture()
def users(mongo: mongomock.MongoClient):
    """The raw users collection, for asserting on stored documents."""
    return mongo[settings.database_name][db.USERS_COLLECTION]
