from uuid import uuid4

import mongomock
import pytest
from fastapi.testclient import TestClient

from config import Settings
from database import ensure_indexes
from main import create_app

TEST_SECRET = "test-secret"


def make_settings(**overrides) -> Settings:
    values = {
        "mongo_uri": "mongodb://localhost:27017/scaffolder_test",
        "token_secret": TEST_SECRET,
        "bcrypt_rounds": 4,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def db():
    database = mongomock.MongoClient()[f"scaffolder_{uuid4().hex}"]
    ensure_indexes(database)
    return database


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def client(settings, db):
    return TestClient(create_app(settings, db))


@pytest.fixture
def auth_headers(client):
    res = client.post("/auth/register", json={"email": "owner@example.com", "password": "password123"})
    assert res.status_code == 201, res.text
    return {"Authorization": f"Bearer {res.json()['token']}"}
