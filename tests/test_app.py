import importlib
import logging
from datetime import datetime

from bson import ObjectId
from pymongo.errors import ServerSelectionTimeoutError

from taskboard import config
from taskboard.app import create_app
from taskboard.utils.db import serialize_doc, to_object_id


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok", "service": "Taskboard API"}


def test_unknown_route_returns_json(client):
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert resp.get_json() == {"message": "Not Found"}


def test_wrong_method_returns_json(client):
    resp = client.patch("/api/tasks")
    assert resp.status_code == 405
    assert resp.get_json() == {"message": "Method Not Allowed"}


def test_api_prefix_is_configurable(mongo_client):
    app = create_app({"TESTING": True, "API_PREFIX": "/v2/"}, mongo_client=mongo_client)
    assert app.test_client().get("/v2/health").status_code == 200


def test_serialize_doc_formats_ids_and_dates():
    oid = ObjectId()
    doc = {"_id": oid, "title": "t", "dueDate": datetime(2025, 1, 1, 9, 30), "completed": False}

    assert serialize_doc(doc) == {
        "id": str(oid),
        "title": "t",
        "dueDate": "2025-01-01T09:30:00.000Z",
        "completed": False,
    }
    assert serialize_doc(None) is None


def test_to_object_id():
    oid = ObjectId()
    assert to_object_id(str(oid)) == oid
    assert to_object_id(oid) is oid
    assert to_object_id("nope") is None
    assert to_object_id(None) is None


def test_owner_index_created_on_startup(app, tasks_collection):
    indexes = tasks_collection.index_information()
    assert "owner_1_createdAt_-1" in indexes


class UnreachableClient:
    def __getitem__(self, name):
        return self

    def create_index(self, *args, **kwargs):
        raise ServerSelectionTimeoutError("no servers available")


def test_index_failure_does_not_stop_startup(caplog):
    with caplog.at_level(logging.WARNING):
        app = create_app({"TESTING": True}, mongo_client=UnreachableClient())

    assert app.test_client().get("/api/health").status_code == 200
    assert "Could not create task indexes" in caplog.text


def test_debug_is_off_by_default(monkeypatch):
    monkeypatch.delenv("FLASK_DEBUG", raising=False)
    try:
        assert importlib.reload(config).Config.DEBUG is False
    finally:
        importlib.reload(config)
