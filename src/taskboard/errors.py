from __future__ import annotations

from typing import List


class TaskNotFoundError(LookupError):
    """Raised by the API layer when a task id does not exist."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task {task_id} not found")
        self.task_id = task_id


class TaskConflictError(RuntimeError):
    """Raised when a compare-and-swap toggle sees a different completion value."""

    def __init__(self, task_id: str, expected: bool, actual: bool) -> None:
        super().__init__(f"Task {task_id} completed={actual}, expected {expected}")
        self.task_id = task_id
        self.expected = expected
        self.actual = actual


class TaskValidationError(ValueError):
    """Raised when task input breaks one or more field rules."""

    def __init__(self, errors: List[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = list(errors)


class TaskApiError(Exception):
    """
    Failure of a task API client call.

    `message` is a fixed, user-presentable string per operation; the
    underlying cause is logged, not shown.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
