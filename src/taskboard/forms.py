from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable, List

from .client.actions import ActionResult
from .validation import (
    DESCRIPTION_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    ValidationResult,
    validate_task_fields,
)

logger = logging.getLogger(__name__)

CREATE_FAILED = "Failed to create task"
UNEXPECTED_ERROR = "An unexpected error occurred"


class FormState(str, enum.Enum):
    EDITING = "editing"
    CONFIRMING = "confirming"
    SUBMITTING = "submitting"
    CONFIRM_FAILED = "confirm_failed"


@dataclass
class TaskFormData:
    title: str = ""
    description: str = ""


class TaskForm:
    """
    Transient input state for creating a task.

    Flow: EDITING -> submit() -> CONFIRMING -> confirm() -> SUBMITTING ->
    EDITING (fields reset) on success, or CONFIRM_FAILED (fields kept,
    errors set) on failure. Typing clears errors.
    """

    def __init__(self) -> None:
        self.data = TaskFormData()
        self.errors: List[str] = []
        self.state = FormState.EDITING

    @property
    def show_confirm(self) -> bool:
        return self.state in (FormState.CONFIRMING, FormState.SUBMITTING, FormState.CONFIRM_FAILED)

    @property
    def is_submitting(self) -> bool:
        return self.state is FormState.SUBMITTING

    def update_field(self, name: str, value: str) -> None:
        if name not in ("title", "description"):
            raise ValueError(f"unknown form field: {name!r}")
        setattr(self.data, name, value)
        self.errors = []
        if self.state is FormState.CONFIRM_FAILED:
            self.state = FormState.EDITING

    def validate(self) -> ValidationResult:
        result = validate_task_fields(self.data.title, self.data.description)
        self.errors = list(result.errors)
        return result

    def submit(self) -> ValidationResult:
        """Validate; open the confirmation only when the input is valid."""
        result = self.validate()
        if result.is_valid:
            self.state = FormState.CONFIRMING
        return result

    def confirm(self, on_confirm: Callable[[TaskFormData], ActionResult]) -> ActionResult:
        """
        Hand the current data to `on_confirm` and settle the form from its result.
        """
        if self.state not in (FormState.CONFIRMING, FormState.CONFIRM_FAILED):
            raise RuntimeError(f"cannot confirm from state {self.state.value}")
        self.state = FormState.SUBMITTING
        try:
            result = on_confirm(TaskFormData(self.data.title, self.data.description))
        except Exception:
            logger.exception("form.confirm_failed", extra={"event": "form.confirm_failed"})
            self.errors = [UNEXPECTED_ERROR]
            self.state = FormState.CONFIRM_FAILED
            return ActionResult.failed(UNEXPECTED_ERROR)

        if result.success:
            self.data = TaskFormData()
            self.errors = []
            self.state = FormState.EDITING
        else:
            self.errors = [result.error or CREATE_FAILED]
            self.state = FormState.CONFIRM_FAILED
        return result

    def cancel(self) -> None:
        self.errors = []
        self.state = FormState.EDITING

    def reset(self) -> None:
        self.data = TaskFormData()
        self.errors = []
        self.state = FormState.EDITING

    # Character counters for the inputs

    @property
    def title_length(self) -> int:
        return len(self.data.title)

    @property
    def description_length(self) -> int:
        return len(self.data.description)

    @property
    def title_at_limit(self) -> bool:
        return self.title_length >= TITLE_MAX_LENGTH

    @property
    def description_at_limit(self) -> bool:
        return self.description_length >= DESCRIPTION_MAX_LENGTH
