from datetime import date
from typing import Iterable
import json

from tasklist.domain.task import Task, TaskId
from tasklist.domain.enums import Priority
from tasklist.domain.errors import PersistenceError, TaskValidationError


### COMMENTS
# ==========================================================
# Persisted format of the task list (domain/codec.py).
# ==========================================================
# One storage key holds a JSON array, newest task first:
#   [{"id": str, "title": str, "description": str,
#     "priority": "Low"|"Medium"|"High", "dueDate": str, "completed": bool}, ...]
#
# - The key names are fixed so older payloads keep loading.
# - Anything that does not fit the shape -> PersistenceError (the store decides
#   whether that is fatal).


def validate_due_date(value: str | None) -> str:
    """Returns the due date unchanged, or "" when there is none.

    :raises TaskValidationError: When the value is not a `YYYY-MM-DD` date.
    """
    if not value:
        return ""
    try:
        date.fromisoformat(value)
    except (TypeError, ValueError):
        raise TaskValidationError("due_date", f"{value!r} is not a date (YYYY-MM-DD)")
    return value


def _encode_task(task: Task) -> dict:
    return {
        "id": str(task.task_id),
        "title": task.title,
        "description": task.description,
        "priority": task.priority.value,  # enum -> str
        "dueDate": task.due_date,
        "completed": task.completed,
    }


def _decode_task(row: dict) -> Task:
    task_id = row["id"]
    title = row["title"]
    if not isinstance(task_id, str) or not task_id:
        raise ValueError("id must be a non-empty string")
    if not isinstance(title, str) or not title.strip():
        raise ValueError("title must be a non-empty string")

    description = row.get("description")
    due_date = row.get("dueDate")
    description = "" if description is None else description
    due_date = "" if due_date is None else due_date
    if not isinstance(description, str) or not isinstance(due_date, str):
        raise ValueError("description and dueDate must be strings")

    completed = row.get("completed", False)
    if not isinstance(completed, bool):
        raise ValueError("completed must be a boolean")

    try:
        priority = Priority.parse(row.get("priority", Priority.LOW.value))  # str -> enum
    except TaskValidationError as e:
        raise ValueError(e.message)

    return Task(
        task_id=TaskId(task_id),
        title=title,
        description=description,
        priority=priority,
        due_date=due_date,
        completed=completed,
    )


def encode_tasks(tasks: Iterable[Task]) -> str:
    """Serializes the whole sequence, preserving its order."""
    return json.dumps([_encode_task(t) for t in tasks], ensure_ascii=False)


def decode_tasks(payload: str) -> list[Task]:
    """
        Parses a stored payload back into tasks, in stored order.

        - Missing `description`/`dueDate` -> "", missing `priority` -> Low,
          missing `completed` -> False.
        - Duplicate ids are rejected, the store relies on ids being unique.

        :param payload: Raw string read from storage.
        :raises PersistenceError: When the payload is not a valid task list.
        :return: List of `Task` objects.
    """
    try:
        data = json.loads(payload)
    except (TypeError, ValueError, RecursionError) as e:
        raise PersistenceError(f"invalid JSON: {type(e).__name__}: {e}")

    if not isinstance(data, list):
        raise PersistenceError(f"expected a JSON array, got {type(data).__name__}")

    tasks: list[Task] = []
    seen: set[str] = set()
    for index, row in enumerate(data):
        if not isinstance(row, dict):
            raise PersistenceError(f"entry {index}: expected an object")
        try:
            task = _decode_task(row)
        except KeyError as e:
            raise PersistenceError(f"entry {index}: missing field {e}")
        except ValueError as e:
            raise PersistenceError(f"entry {index}: {e}")

        key = str(task.task_id)
        if key in seen:
            raise PersistenceError(f"entry {index}: duplicate id '{key}'")
        seen.add(key)
        tasks.append(task)
    return tasks
