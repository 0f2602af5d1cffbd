from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


PRIORITIES = ("low", "medium", "high")
CATEGORIES = ("personal", "work", "shopping", "health", "study", "other")

DEFAULT_PRIORITY = "medium"
DEFAULT_CATEGORY = "personal"

# Fields a client may change through PUT; anything else in the body is dropped.
UPDATABLE_FIELDS = frozenset(
    {
        "title",
        "description",
        "dueDate",
        "priority",
        "category",
        "completed",
        "reminderEnabled",
    }
)

_TRUE_STRINGS = ("true",)
_FALSE_STRINGS = ("false",)


class TaskValidationError(ValueError):
    """Raised when a task document or update breaks the schema rules."""

    def __init__(self, field_name: str, message: str):
        self.field = field_name
        self.message = message
        super().__init__(f"{field_name}: {message}")


def utcnow() -> datetime:
    # pymongo hands back naive UTC datetimes, keep stored values comparable
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_due_date(value: Any) -> Optional[datetime]:
    """Parse a client supplied due date.

    Accepts ISO-8601 strings (date only, full timestamps, ``Z`` or numeric
    offsets) and JSON numbers holding epoch milliseconds. Returns a naive UTC
    datetime, or ``None`` when the value cannot be read as a date.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        try:
            parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        if raw[-1] in ("Z", "z"):
            raw = raw[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def cast_boolean(field_name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    elif isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    raise TaskValidationError(field_name, f"cannot cast {value!r} to a boolean")


def _check_choice(field_name: str, value: Any, choices) -> str:
    if value not in choices:
        raise TaskValidationError(
            field_name, f"{value!r} is not one of {', '.join(choices)}"
        )
    return value


def _check_title(value: Any) -> str:
    if not isinstance(value, str):
        raise TaskValidationError("title", "must be a string")
    title = value.strip()
    if not title:
        raise TaskValidationError("title", "is required")
    return title


def _check_description(value: Any) -> str:
    if not isinstance(value, str):
        raise TaskValidationError("description", "must be a string")
    return value.strip()


def _check_due_date(value: Any) -> datetime:
    due = parse_due_date(value)
    if due is None:
        raise TaskValidationError("dueDate", "must be a valid date")
    return due


def validate_task(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Check a full task document before it is inserted.

    Returns a copy with defaults applied and values cast to their stored
    types. Raises :class:`TaskValidationError` on the first violation.
    """
    checked = dict(doc)

    owner = checked.get("owner")
    if not owner:
        raise TaskValidationError("owner", "is required")

    checked["title"] = _check_title(checked.get("title"))
    if checked.get("description") is None:
        checked.pop("description", None)
    else:
        checked["description"] = _check_description(checked["description"])
    checked["dueDate"] = _check_due_date(checked.get("dueDate"))

    checked.setdefault("priority", DEFAULT_PRIORITY)
    checked.setdefault("category", DEFAULT_CATEGORY)
    checked.setdefault("reminderEnabled", True)
    checked.setdefault("completed", False)

    _check_choice("priority", checked["priority"], PRIORITIES)
    _check_choice("category", checked["category"], CATEGORIES)
    checked["reminderEnabled"] = cast_boolean("reminderEnabled", checked["reminderEnabled"])
    checked["completed"] = cast_boolean("completed", checked["completed"])
    return checked


def validate_update(updates: Dict[str, Any]) -> Dict[str, Any]:
    """Validate an allow-listed partial update.

    A ``None`` description is kept as ``None`` so the caller can unset it;
    every other field must hold a valid value.
    """
    checked: Dict[str, Any] = {}
    for name, value in updates.items():
        if name not in UPDATABLE_FIELDS:
            raise TaskValidationError(name, "is not updatable")
        if name == "title":
            checked[name] = _check_title(value)
        elif name == "description":
            checked[name] = None if value is None else _check_description(value)
        elif name == "dueDate":
            checked[name] = _check_due_date(value)
        elif name == "priority":
            checked[name] = _check_choice(name, value, PRIORITIES)
        elif name == "category":
            checked[name] = _check_choice(name, value, CATEGORIES)
        else:
            checked[name] = cast_boolean(name, value)
    return checked


@dataclass
class Task:
    owner: str
    title: str
    due_date: Any
    description: Optional[str] = None
    priority: str = DEFAULT_PRIORITY
    category: str = DEFAULT_CATEGORY
    reminder_enabled: bool = True
    completed: bool = False
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def to_document(self) -> Dict[str, Any]:
        """Stored form of the task, using the collection's field names."""
        doc = {
            "owner": self.owner,
            "title": self.title,
            "dueDate": self.due_date,
            "priority": self.priority,
            "category": self.category,
            "reminderEnabled": self.reminder_enabled,
            "completed": self.completed,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.description is not None:
            doc["description"] = self.description
        return doc
