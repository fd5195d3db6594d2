from dataclasses import dataclass
from typing import Iterable

from tasklist.domain.task import Task
from tasklist.domain.enums import TaskFilter


def matches_filter(task: Task, task_filter: TaskFilter) -> bool:
    """True when the task passes the filter selector."""
    if task_filter is TaskFilter.COMPLETED:
        return task.completed
    if task_filter is TaskFilter.PENDING:
        return not task.completed
    if task_filter.priority is not None:
        return task.priority == task_filter.priority
    return True


def matches_search(task: Task, search: str) -> bool:
    """Case-insensitive substring match on the title; "" matches everything."""
    return search.casefold() in task.title.casefold()


def query_tasks(
    tasks: Iterable[Task],
    task_filter: TaskFilter | str = TaskFilter.ALL,
    search: str | None = "",
) -> list[Task]:
    """
    Returns the tasks to display for the given filter and search text.

    Filter stage first, then search stage; both must pass. Order of `tasks`
    is kept (newest first coming from the store). Nothing is mutated.

    :param tasks: Full task sequence.
    :param task_filter: One of All / Completed / Pending / Low / Medium / High.
    :param search: Substring looked up in titles, ignoring case.
    :raises TaskValidationError: When `task_filter` is not a known selector.
    :return: Matching tasks; an empty list is a normal result.
    """
    selector = TaskFilter.parse(task_filter)
    needle = search or ""
    return [
        task for task in tasks
        if matches_filter(task, selector) and matches_search(task, needle)
    ]


@dataclass(frozen=True)
class ViewState:
    """Transient (never persisted) filter + search criteria."""
    task_filter: TaskFilter = TaskFilter.ALL
    search: str = ""

    def apply(self, tasks: Iterable[Task]) -> list[Task]:
        return query_tasks(tasks, self.task_filter, self.search)
