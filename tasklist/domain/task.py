from typing import NewType
from dataclasses import dataclass, replace

from tasklist.domain.enums import Priority

TaskId = NewType("TaskId", str)

@dataclass(frozen=True)
class Task():
    """
    Domain model of a single task; immutable; priority from a closed set;
    `due_date` is an ISO date string or "" when the task has no due date.
    The id is assigned by the store, never by the caller.
    """
    task_id: TaskId
    title: str
    description: str = ""
    priority: Priority = Priority.LOW
    due_date: str = ""
    completed: bool = False

    def toggled(self) -> "Task":
        """Copy of this task with `completed` flipped, every other field kept."""
        return replace(self, completed=not self.completed)



### COMMENTS
# The only change a task ever goes through after creation is the completion
# toggle. Because the dataclass is frozen, the store swaps in the result of
# `toggled()` at the same position instead of editing the object.
