from tasklist.ports.storage import KeyValueStorage
from tasklist.ports.id_provider import IdProvider
from tasklist.domain.task import Task, TaskId
from tasklist.domain.enums import Priority
from tasklist.domain.errors import DomainError, TaskValidationError, PersistenceError
from tasklist.domain.codec import encode_tasks, decode_tasks, validate_due_date
import logging

logger = logging.getLogger(__name__)

DEFAULT_KEY = "tasks"

# Attempts at drawing a fresh id before giving up; only reachable with a broken provider.
MAX_ID_ATTEMPTS = 16


### COMMENTS
# ==========================================================
# Task store (services/task_store.py): the single owner of the task list.
# ==========================================================
# Role:
# - Holds the ordered task list (newest first) and is the only place it changes.
# - Validates input for `create` (title, priority, due date).
# - Calls `persist()` explicitly at the end of every mutation; the whole list is
#   written under one storage key.
#
# Rules:
# - toggle/delete of an unknown id is a silent no-op (stale reference, not a bug).
# - Load failure: `strict=True` -> PersistenceError; otherwise warn and start empty.
# - Write failure: warn, keep the in-memory list as the working truth, `unsaved=True`.
# - Ids are never reused: every id issued in this session is remembered.


class TaskStore:
    """
    Authoritative in-memory + persisted collection of tasks.

    :param storage: KeyValueStorage implementation (memory, JSON file, SQL).
    :param id_provider: IdProvider implementation (source of new ids).
    :param key: Storage key the whole list lives under.
    :param strict: Treat an unreadable/malformed stored list as fatal.
    """
    def __init__(
        self,
        storage: KeyValueStorage,
        id_provider: IdProvider,
        key: str = DEFAULT_KEY,
        strict: bool = False,
    ) -> None:
        self.storage = storage
        self.id_provider = id_provider
        self.key = key
        self.strict = strict
        self.unsaved = False
        self.load_error: PersistenceError | None = None
        self._tasks: list[Task] = []
        self._issued: set[str] = set()

        self._tasks = self.load()
        self._issued.update(str(t.task_id) for t in self._tasks)
        logger.info("TaskStore ready key=%s total=%d", self.key, len(self._tasks))

    # ---- reads ----

    @property
    def tasks(self) -> tuple[Task, ...]:
        """Snapshot of the list, newest first."""
        return tuple(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def get(self, task_id: TaskId) -> Task | None:
        for task in self._tasks:
            if task.task_id == task_id:
                return task
        return None

    # ---- persistence ----

    def load(self) -> list[Task]:
        """
            Reads the task list from storage.

            - Nothing stored -> empty list.
            - Read failure or malformed payload:
              * `strict=True` -> re-raises `PersistenceError`,
              * otherwise logs a warning, records it in `load_error`, returns [].

            :raises PersistenceError: Only in strict mode.
            :return: Tasks in stored order.
        """
        try:
            payload = self.storage.get_item(self.key)
            if payload is None:
                return []
            return decode_tasks(payload)
        except PersistenceError as e:
            if self.strict:
                raise
            logger.warning("Could not load tasks from key %r, starting empty: %s", self.key, e)
            self.load_error = e
            return []

    def persist(self) -> bool:
        """
            Writes the whole list under `self.key`.

            :return: True when saved; False when the write failed (state kept in memory).
        """
        try:
            self.storage.set_item(self.key, encode_tasks(self._tasks))
        except PersistenceError as e:
            logger.warning("Could not save %d tasks, keeping them in memory: %s", len(self._tasks), e)
            self.unsaved = True
            return False
        self.unsaved = False
        return True

    # ---- mutations ----

    def create(
        self,
        title: str,
        description: str | None = "",
        priority: Priority | str = Priority.LOW,
        due_date: str | None = "",
    ) -> Task:
        """
            Creates a task, puts it at the front of the list and persists.

            - `title` must not be empty or whitespace only (stored as given).
            - `priority` must be Low / Medium / High.
            - `due_date` is "" / None for no due date, or `YYYY-MM-DD`.

            :return: The new `Task` (completed=False).
            :raises TaskValidationError: On invalid input; nothing is changed.
        """
        if not title or not title.strip():
            raise TaskValidationError("title", "Title is required!")
        checked_priority = Priority.parse(priority)
        checked_due = validate_due_date(due_date)

        task = Task(
            task_id=self._new_id(),
            title=title,
            description=description or "",
            priority=checked_priority,
            due_date=checked_due,
        )
        self._tasks.insert(0, task)
        logger.info("Created task %s (%s)", task.task_id, task.priority)
        self.persist()
        return task

    def toggle_complete(self, task_id: TaskId) -> None:
        """Flips `completed` on the task; unknown ids are ignored."""
        for index, task in enumerate(self._tasks):
            if task.task_id == task_id:
                self._tasks[index] = task.toggled()
                logger.info("Task %s completed=%s", task_id, not task.completed)
                self.persist()
                return
        logger.debug("toggle_complete: no task %s", task_id)

    def delete(self, task_id: TaskId) -> None:
        """Removes the task for good; unknown ids are ignored.
        Asking the user for confirmation is the caller's job."""
        for index, task in enumerate(self._tasks):
            if task.task_id == task_id:
                del self._tasks[index]
                logger.info("Deleted task %s", task_id)
                self.persist()
                return
        logger.debug("delete: no task %s", task_id)

    def _new_id(self) -> TaskId:
        for _ in range(MAX_ID_ATTEMPTS):
            candidate = str(self.id_provider.new_id())
            if candidate and candidate not in self._issued:
                self._issued.add(candidate)
                return TaskId(candidate)
        raise DomainError(f"id provider kept returning used ids after {MAX_ID_ATTEMPTS} attempts")
