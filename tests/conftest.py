# tests/conftest.py

import mongomock
import pytest
from bson import ObjectId
from flask_jwt_extended import create_access_token

from taskboard.app import create_app


TEST_DB_NAME = "taskboard_test"


@pytest.fixture()
def mongo_client():
    """In-memory stand-in for pymongo, fresh for every test."""
    return mongomock.MongoClient()


@pytest.fixture()
def app(mongo_client):
    return create_app(
        {
            "TESTING": True,
            "JWT_SECRET_KEY": "test-secret-key-with-at-least-32-bytes",
            "MONGO_DB_NAME": TEST_DB_NAME,
        },
        mongo_client=mongo_client,
    )


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def tasks_collection(mongo_client):
    return mongo_client[TEST_DB_NAME]["tasks"]


def make_auth_headers(app, user_id):
    with app.app_context():
        token = create_access_token(identity=user_id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def user_a():
    return str(ObjectId())


@pytest.fixture()
def user_b():
    return str(ObjectId())


@pytest.fixture()
def auth_a(app, user_a):
    return make_auth_headers(app, user_a)


@pytest.fixture()
def auth_b(app, user_b):
    return make_auth_headers(app, user_b)


@pytest.fixture()
def create_task(client, auth_a):
    """POST a task as user A and return the JSON body."""

    def _create(headers=None, **fields):
        body = {"title": "Buy milk", "dueDate": "2025-01-01"}
        body.update(fields)
        resp = client.post("/api/tasks", json=body, headers=headers or auth_a)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()

    return _create
