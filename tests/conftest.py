"""Shared pytest fixtures backed by an in-memory MongoDB."""

from __future__ import annotations

import sys
from pathlib import Path

import mongomock
import pytest

# Ensure the package is importable during tests.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from collection_fixture import database  # noqa: E402
from collection_fixture.config import DataSettings, Settings  # noqa: E402
from collection_fixture.plugin import database_fixture  # noqa: E402,F401

TEST_CONNECTION_STRING = "mongodb://localhost:27017/"


@pytest.fixture
def connect_calls():
    """Connection strings passed to ``database.connect`` during a test."""
    return []


@pytest.fixture(autouse=True)
def mongo_client(monkeypatch: pytest.MonkeyPatch, connect_calls):
    """Route every client the fixture creates to one in-memory server."""
    client = mongomock.MongoClient()

    def connect(connection_string):
        connect_calls.append(connection_string)
        return client

    monkeypatch.setattr(database, "connect", connect)

    yield client

    for name in client.list_database_names():
        client.drop_database(name)


@pytest.fixture
def settings():
    return Settings(data=DataSettings(connection_string=TEST_CONNECTION_STRING))
