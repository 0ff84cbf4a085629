"""
Shared pytest fixtures.

The event service runs against an in-memory store that honours the same
contract as MongoEventStore (owner-scoped filters, matched/deleted counts,
strictly increasing updated_at), so no MongoDB instance is needed. A
ticking clock makes timestamps predictable.
"""

import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-" + "x" * 52)
os.environ.setdefault("CREATE_INDEXES", "False")

import copy
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from contribution_api.app.config import Settings
from contribution_api.app.database import MongoConnection
from contribution_api.app.main import create_app
from contribution_api.app.services.event import EventService
from contribution_api.app.util.auth import create_access_token


class InMemoryEventStore:
    """Dict-backed stand-in for MongoEventStore."""

    def __init__(self):
        self.documents = {}
        self.calls = []

    async def insert(self, document):
        self.calls.append(("insert", document["_id"]))
        self.documents[document["_id"]] = copy.deepcopy(document)
        return document["_id"]

    async def find_many(self, owner_id, query=None):
        self.calls.append(("find_many", owner_id, query))
        return [
            copy.deepcopy(doc)
            for doc in self.documents.values()
            if doc["user_id"] == owner_id
            and (not query or query.lower() in doc["title"].lower())
        ]

    async def find_one(self, event_id, owner_id):
        self.calls.append(("find_one", event_id, owner_id))
        doc = self.documents.get(event_id)
        if doc is None or doc["user_id"] != owner_id:
            return None
        return copy.deepcopy(doc)

    async def update_fields(self, event_id, owner_id, fields, updated_at):
        self.calls.append(("update_fields", event_id, owner_id, dict(fields)))
        doc = self.documents.get(event_id)
        if doc is None or doc["user_id"] != owner_id:
            return 0
        doc.update(fields)
        doc["updated_at"] = max(updated_at, doc["updated_at"] + timedelta(milliseconds=1))
        return 1

    async def delete_one(self, event_id, owner_id):
        self.calls.append(("delete_one", event_id, owner_id))
        doc = self.documents.get(event_id)
        if doc is None or doc["user_id"] != owner_id:
            return 0
        del self.documents[event_id]
        return 1


class TickingClock:
    """Returns a new UTC time, one second later, on every call."""

    def __init__(self, start=datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self):
        self.current = self.current + timedelta(seconds=1)
        return self.current


@pytest.fixture
def config():
    return Settings(
        CREATE_INDEXES=False,
        STORAGE_TIMEOUT_SECONDS=0.5,
        LIST_TIMEOUT_SECONDS=0.5,
        BASE_URL="http://testserver"
    )


@pytest.fixture
def store():
    return InMemoryEventStore()


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def service(store, config, clock):
    return EventService(store, config, clock=clock)


@pytest.fixture
def owner_id():
    return ObjectId()


@pytest.fixture
def other_owner_id():
    return ObjectId()


@pytest.fixture
def mongo():
    connection = MagicMock(spec=MongoConnection)
    connection.ping.return_value = True
    connection.info.return_value = {
        "url": "mongodb://localhost:27017",
        "database": "contribution_tracker_test",
    }
    return connection


@pytest.fixture
def client(config, mongo, service):
    app = create_app(config, mongo=mongo, event_service=service)
    with TestClient(app) as test_client:
        yield test_client


def make_token(user_id, **claims) -> str:
    data = {"sub": "tester", "uid": str(user_id)}
    data.update(claims)
    return create_access_token(data)


def auth_headers(user_id, **extra) -> dict:
    headers = {"Authorization": f"Bearer {make_token(user_id)}"}
    headers.update(extra)
    return headers
