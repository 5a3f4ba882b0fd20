"""
Pytest configuration for the school directory backend.

Provides an in-memory MongoDB (mongomock), settings pointing at a temporary
image directory, and a TestClient wired to both.
"""

import os

# main builds its module-level app at import time
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017")

import mongomock
import pytest
from fastapi.testclient import TestClient

from config import Settings, load_settings
from database import SchoolStore


class TrackingClient:
    """Wraps a mongomock client and counts how often it is opened and closed."""

    def __init__(self, backend):
        self.backend = backend
        self.opened = 0
        self.closed = 0

    def __call__(self, *args, **kwargs):
        self.opened += 1
        return self

    def __getitem__(self, name):
        return self.backend[name]

    def close(self):
        self.closed += 1


def make_settings(tmp_path, **overrides) -> Settings:
    values = {
        "MONGODB_URI": "mongodb://localhost:27017",
        "MONGODB_DB": "school_management_test",
        "IMAGE_STORAGE": "file",
        "IMAGE_DIR": str(tmp_path / "schoolImages"),
        "LOG_LEVEL": "DEBUG",
        "_env_file": None,
    }
    values.update(overrides)
    return load_settings(**values)


@pytest.fixture
def mongo_client() -> TrackingClient:
    return TrackingClient(mongomock.MongoClient())


@pytest.fixture
def file_settings(tmp_path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
def embedded_settings(tmp_path) -> Settings:
    return make_settings(tmp_path, IMAGE_STORAGE="embedded")


@pytest.fixture
def store(embedded_settings, mongo_client) -> SchoolStore:
    return SchoolStore(embedded_settings, client_factory=mongo_client)


@pytest.fixture
def file_client(file_settings, mongo_client) -> TestClient:
    from main import create_app

    app = create_app(file_settings, SchoolStore(file_settings, client_factory=mongo_client))
    return TestClient(app)


@pytest.fixture
def embedded_client(embedded_settings, store) -> TestClient:
    from main import create_app

    return TestClient(create_app(embedded_settings, store))


@pytest.fixture
def school_fields() -> dict:
    return {
        "name": "Green Valley School",
        "address": "123 Long Enough Address",
        "city": "Springfield",
        "state": "IL",
        "contact": "5551234567",
        "email": "admin@greenvalley.edu",
    }
