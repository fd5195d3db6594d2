from enum import Enum

from tasklist.domain.errors import TaskValidationError


class Priority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    def __str__(self):
        return self.value

    @classmethod
    def parse(cls, value: "Priority | str") -> "Priority":
        """Exact match only; stored payloads and callers must use the canonical values."""
        try:
            return cls(value)
        except ValueError:
            allowed = ", ".join(p.value for p in cls)
            raise TaskValidationError("priority", f"{value!r} is not one of: {allowed}")


class TaskFilter(str, Enum):
    ALL = "All"
    COMPLETED = "Completed"
    PENDING = "Pending"
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    def __str__(self):
        return self.value

    @classmethod
    def parse(cls, value: "TaskFilter | str") -> "TaskFilter":
        """Accepts the member, its value, or the value in any letter case."""
        if isinstance(value, cls):
            return value
        for member in cls:
            if str(value).strip().lower() == member.value.lower():
                return member
        allowed = ", ".join(f.value for f in cls)
        raise TaskValidationError("filter", f"{value!r} is not one of: {allowed}")

    @property
    def priority(self) -> Priority | None:
        """Priority selected by this filter, or None for the status filters."""
        try:
            return Priority(self.value)
        except ValueError:
            return None
