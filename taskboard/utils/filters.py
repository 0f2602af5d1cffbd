import re
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pymongo import ASCENDING, DESCENDING

from taskboard.models.task_model import UPDATABLE_FIELDS


DEFAULT_SORT_FIELD = "createdAt"

# API field names that differ from the stored ones
_SORT_ALIASES = {"id": "_id"}


def parse_completed(raw: Optional[str]) -> Optional[bool]:
    """Three-way read of the ``completed`` query parameter.

    ``None`` (parameter absent) means no filter. Otherwise only the exact
    string ``"true"`` is true; any other value, including ``"TRUE"`` or an
    empty string, is false.
    """
    if raw is None:
        return None
    return raw == "true"


def build_list_query(owner: str, args: Mapping[str, str]) -> Dict[str, Any]:
    query: Dict[str, Any] = {"owner": owner}

    category = args.get("category")
    if category:
        query["category"] = category

    priority = args.get("priority")
    if priority:
        query["priority"] = priority

    completed = parse_completed(args.get("completed"))
    if completed is not None:
        query["completed"] = completed

    search = args.get("search")
    if search:
        pattern = {"$regex": re.escape(search), "$options": "i"}
        query["$or"] = [{"title": pattern}, {"description": pattern}]

    return query


def build_sort(args: Mapping[str, str]) -> List[Tuple[str, int]]:
    """Sort order for the list query: named field, then ``_id`` as tie-break.

    Descending unless ``order`` is exactly ``"asc"``.
    """
    field_name = args.get("sort") or DEFAULT_SORT_FIELD
    field_name = _SORT_ALIASES.get(field_name, field_name)
    direction = ASCENDING if args.get("order") == "asc" else DESCENDING

    order_by = [(field_name, direction)]
    if field_name != "_id":
        order_by.append(("_id", direction))
    return order_by


def sanitize_updates(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy only the updatable fields out of a request body."""
    return {key: payload[key] for key in payload if key in UPDATABLE_FIELDS}
