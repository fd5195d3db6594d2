

### COMMENTS
# ============================================
# Domain errors used across the project
# ============================================
# - Storage adapters:
#     * map technical failures (OSError, SQLAlchemyError) onto PersistenceError
#
# - Store / enums:
#     * validate user input and raise TaskValidationError
#     * unknown ids on toggle/delete are NOT errors (stale reference -> no-op)
#
# - UI (CLI):
#     * catches DomainError (or a concrete subclass) and prints a friendly panel


class DomainError(Exception):
    """Base class for domain errors.
    Lets the UI tell business failures apart from programming errors.
    Not raised directly, use a subclass.
    """

class TaskValidationError(DomainError):
    """Raised when input does not satisfy the rules for a task.
    Examples:
    - title is empty or whitespace only,
    - priority is not one of Low / Medium / High,
    - due date is not an ISO calendar date,
    - filter selector is unknown.
    Carries the offending `field` so the UI can point at it.
    """
    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(self.__str__())
    def __str__(self):
        return f"Invalid '{self.field}': {self.message}"


class TaskNotFoundError(DomainError):
    """Raised when a lookup that must succeed finds no task.
    The store itself never raises it for toggle/delete; the CLI uses it when an
    id (or id prefix) typed by the user matches nothing.
    """
    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(self.__str__())
    def __str__(self):
        return f"Task with ID {self.task_id} does not exist."


class PersistenceError(DomainError):
    """Raised when the task list cannot be read from or written to storage,
    or when the stored payload is not a valid task list."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.__str__())
    def __str__(self):
        return f"Storage error: {self.message}"
