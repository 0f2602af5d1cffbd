from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required, get_jwt_identity
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from taskboard.models.task_model import (
    DEFAULT_CATEGORY,
    DEFAULT_PRIORITY,
    Task,
    TaskValidationError,
    parse_due_date,
    utcnow,
    validate_task,
    validate_update,
)
from taskboard.utils.db import get_tasks_collection, serialize_doc, to_object_id
from taskboard.utils.filters import build_list_query, build_sort, sanitize_updates


tasks_bp = Blueprint("tasks", __name__)


def _json_body() -> dict:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def _not_found():
    return jsonify(message="Task not found"), 404


@tasks_bp.post("")
@jwt_required()
def create_task():
    user_id = get_jwt_identity()
    payload = _json_body()

    title = payload.get("title")
    if not isinstance(title, str) or not title.strip():
        return jsonify(message="Title is required"), 400

    due_date = parse_due_date(payload.get("dueDate"))
    if due_date is None:
        return jsonify(message="Valid due date is required"), 400

    # Only a missing/null flag falls back to the default, false is kept
    reminder_enabled = payload.get("reminderEnabled")
    if reminder_enabled is None:
        reminder_enabled = True

    task = Task(
        owner=user_id,
        title=title.strip(),
        due_date=due_date,
        description=payload.get("description"),
        priority=payload.get("priority") or DEFAULT_PRIORITY,
        category=payload.get("category") or DEFAULT_CATEGORY,
        reminder_enabled=reminder_enabled,
    )

    try:
        doc = validate_task(task.to_document())
        tasks = get_tasks_collection()
        # insert_one sets doc["_id"]; the saved document is the response
        tasks.insert_one(doc)
    except (TaskValidationError, PyMongoError) as exc:
        current_app.logger.exception("Task creation error: %s", exc)
        return jsonify(message="Failed to create task"), 500

    current_app.logger.info("Created task %s for user %s", doc["_id"], user_id)
    return jsonify(serialize_doc(doc)), 201


@tasks_bp.get("")
@jwt_required()
def list_tasks():
    user_id = get_jwt_identity()
    args = request.args
    try:
        cursor = get_tasks_collection().find(build_list_query(user_id, args)).sort(build_sort(args))
        docs = [serialize_doc(d) for d in cursor]
    except PyMongoError as exc:
        current_app.logger.exception("Task fetch error: %s", exc)
        return jsonify(message="Failed to fetch tasks"), 500
    return jsonify(docs), 200


@tasks_bp.get("/<task_id>")
@jwt_required()
def get_task(task_id):
    user_id = get_jwt_identity()
    oid = to_object_id(task_id)
    if oid is None:
        return _not_found()
    try:
        doc = get_tasks_collection().find_one({"_id": oid, "owner": user_id})
    except PyMongoError as exc:
        current_app.logger.exception("Task fetch error: %s", exc)
        return jsonify(message="Failed to fetch task"), 500
    if doc is None:
        return _not_found()
    return jsonify(serialize_doc(doc)), 200


@tasks_bp.put("/<task_id>")
@jwt_required()
def update_task(task_id):
    user_id = get_jwt_identity()
    updates = sanitize_updates(_json_body())

    title = updates.get("title")
    if isinstance(title, str) and not title.strip():
        return jsonify(message="Title cannot be empty"), 400

    oid = to_object_id(task_id)
    if oid is None:
        return _not_found()

    try:
        checked = validate_update(updates)
        to_set = {k: v for k, v in checked.items() if v is not None}
        to_set["updatedAt"] = utcnow()
        change = {"$set": to_set}
        # description is the only optional field, null clears it
        to_unset = {k: "" for k, v in checked.items() if v is None}
        if to_unset:
            change["$unset"] = to_unset

        doc = get_tasks_collection().find_one_and_update(
            {"_id": oid, "owner": user_id},
            change,
            return_document=ReturnDocument.AFTER,
        )
    except (TaskValidationError, PyMongoError) as exc:
        current_app.logger.exception("Task update error: %s", exc)
        return jsonify(message="Failed to update task"), 500

    if doc is None:
        return _not_found()
    return jsonify(serialize_doc(doc)), 200


@tasks_bp.delete("/<task_id>")
@jwt_required()
def delete_task(task_id):
    user_id = get_jwt_identity()
    oid = to_object_id(task_id)
    if oid is None:
        return _not_found()
    try:
        doc = get_tasks_collection().find_one_and_delete({"_id": oid, "owner": user_id})
    except PyMongoError as exc:
        current_app.logger.exception("Task deletion error: %s", exc)
        return jsonify(message="Failed to delete task"), 500

    if doc is None:
        return _not_found()
    current_app.logger.info("Deleted task %s for user %s", task_id, user_id)
    return jsonify(message="Task deleted successfully", taskId=task_id), 200
