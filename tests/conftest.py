import mongomock
import pytest
from fastapi.testclient import TestClient

from main import create_app


@pytest.fixture()
def db():
    """A fresh in-memory MongoDB database for each test."""
    return mongomock.MongoClient().get_database("chat_test")


@pytest.fixture()
def app(db):
    return create_app(db)


@pytest.fixture()
def client(app):
    """Not entered as a context manager, so the sweeper task never starts."""
    return TestClient(app)


@pytest.fixture()
def join(client):
    def _join(*names):
        for name in names:
            assert client.post("/participants", json={"name": name}).status_code == 201
    return _join
