# tests/conftest.py
import uuid
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from database import Database
from main import create_app


class StepClock:
    """Returns a strictly increasing timestamp, one second apart, per call."""

    def __init__(self, start=datetime(2024, 1, 1)):
        self.now = start

    def __call__(self):
        self.now += timedelta(seconds=1)
        return self.now


class RecordingClient:
    def __init__(self):
        self.inner = AsyncMongoMockClient()
        self.closed = False

    def __getitem__(self, name):
        return self.inner[name]

    def close(self):
        self.closed = True


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def created_clients():
    return []


@pytest.fixture
def database(clock, created_clients):
    def client_factory(uri):
        client = RecordingClient()
        created_clients.append(client)
        return client

    return Database(
        uri="mongodb://localhost:27017",
        name=f"student_admin_test_{uuid.uuid4().hex}",
        client_factory=client_factory,
        clock=clock,
    )


@pytest.fixture
def app(database):
    return create_app(database)


@pytest.fixture
def api(app):
    return TestClient(app)


def student_payload(**overrides):
    payload = {
        "name": "Ahmad Rizky Pratama",
        "age": 16,
        "class": "10A",
        "registrationNumber": "2024001",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def add_student(api):
    def _add(**overrides):
        response = api.post("/add", json=student_payload(**overrides))
        assert response.status_code == 201, response.json()
        return response.json()["data"]

    return _add
