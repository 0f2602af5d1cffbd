from datetime import datetime
from typing import Any, Optional

from bson import ObjectId
from bson.errors import InvalidId
from flask import Flask, current_app
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database
from pymongo.collection import Collection
from pymongo.errors import PyMongoError


TASKS_COLLECTION = "tasks"
_EXTENSION_KEY = "taskboard_mongo"


def init_app(app: Flask, client: Optional[MongoClient] = None) -> None:
    """Attach a Mongo client to the app.

    The pymongo client is pooled and thread-safe, so one instance serves every
    request. Pass ``client`` to reuse an existing one (tests hand in mongomock).
    """
    if client is None:
        client = MongoClient(
            app.config["MONGO_URI"],
            serverSelectionTimeoutMS=app.config["MONGO_TIMEOUT_MS"],
            connect=False,
        )
    app.extensions[_EXTENSION_KEY] = client

    # Every task query filters on owner; the list default sorts on createdAt
    tasks = client[app.config["MONGO_DB_NAME"]][TASKS_COLLECTION]
    try:
        tasks.create_index([("owner", ASCENDING), ("createdAt", DESCENDING)])
    except PyMongoError as exc:
        app.logger.warning("Could not create task indexes: %s", exc)


def get_client() -> MongoClient:
    return current_app.extensions[_EXTENSION_KEY]


def get_db() -> Database:
    return get_client()[current_app.config["MONGO_DB_NAME"]]


def get_tasks_collection() -> Collection:
    return get_db()[TASKS_COLLECTION]


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Return an ObjectId for a path parameter, or None if it isn't one."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def _format_datetime(value: datetime) -> str:
    if value.tzinfo is None:
        return value.isoformat(timespec="milliseconds") + "Z"
    return value.isoformat(timespec="milliseconds")


def serialize_value(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return _format_datetime(value)
    if isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [serialize_value(v) for v in value]
    return value


def serialize_doc(doc: Optional[dict]) -> Optional[dict]:
    """Turn a Mongo document into a JSON-ready dict with ``id`` in front."""
    if doc is None:
        return None
    out = {"id": str(doc["_id"])} if "_id" in doc else {}
    for key, value in doc.items():
        if key == "_id":
            continue
        out[key] = serialize_value(value)
    return out
