from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Mapping, Optional, Set

from ..errors import TaskApiError
from ..query import TaskFilters, TaskView, build_view
from ..schemas import Task
from ..validation import validate_task_fields
from .api import TaskApi
from .store import TaskStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActionResult:
    """
    Outcome of a task action. Callers branch on `success`; on failure
    `error` holds the message to show and `errors` every validation message.
    """
    success: bool
    task: Optional[Task] = None
    error: Optional[str] = None
    errors: List[str] = field(default_factory=list)

    @classmethod
    def ok(cls, task: Optional[Task] = None) -> "ActionResult":
        return cls(success=True, task=task)

    @classmethod
    def failed(cls, error: str, errors: Optional[List[str]] = None) -> "ActionResult":
        return cls(success=False, error=error, errors=list(errors or [error]))


class TaskActions:
    """
    Runs user intents against a TaskApi and mirrors the outcome into a
    TaskStore.

    Each action returns an ActionResult instead of raising for API failures.
    Toggle and delete are tracked per task while in flight, so a view can
    disable the matching control; other tasks stay usable. Deletion goes
    through a confirm step.
    """

    def __init__(self, store: TaskStore, api: TaskApi, filters: Optional[TaskFilters] = None) -> None:
        self.store = store
        self.api = api
        self.filters = filters or TaskFilters()
        self.pending_delete: Optional[str] = None
        self._toggling: Set[str] = set()
        self._deleting: Set[str] = set()

    def _fail(self, exc: TaskApiError) -> ActionResult:
        self.store.set_error(exc.message)
        return ActionResult.failed(exc.message)

    # ---- loading ----

    def load_tasks(self) -> ActionResult:
        self.store.set_loading(True)
        self.store.clear_error()
        try:
            self.store.set_tasks(self.api.get_tasks())
        except TaskApiError as exc:
            return self._fail(exc)
        finally:
            self.store.set_loading(False)
        return ActionResult.ok()

    # ---- mutations ----

    def create_task(self, title: str, description: Optional[str] = None) -> ActionResult:
        """Validate, then create. Invalid input never reaches the API."""
        validation = validate_task_fields(title, description)
        if not validation.is_valid:
            return ActionResult.failed(validation.errors[0], validation.errors)
        try:
            task = self.api.create_task(title.strip(), (description or "").strip() or None)
        except TaskApiError as exc:
            return self._fail(exc)
        self.store.add_task(task)
        logger.info("task.added", extra={"event": "task.added", "task_id": task.id})
        return ActionResult.ok(task)

    def update_task(self, task_id: str, patch: Mapping[str, Any]) -> ActionResult:
        try:
            task = self.api.update_task(task_id, patch)
        except TaskApiError as exc:
            return self._fail(exc)
        self.store.replace_task(task)
        return ActionResult.ok(task)

    def toggle_task(self, task_id: str) -> ActionResult:
        self._toggling.add(task_id)
        try:
            task = self.api.toggle_task(task_id)
        except TaskApiError as exc:
            return self._fail(exc)
        finally:
            self._toggling.discard(task_id)
        self.store.replace_task(task)
        return ActionResult.ok(task)

    def remove_task(self, task_id: str) -> ActionResult:
        self._deleting.add(task_id)
        try:
            self.api.delete_task(task_id)
        except TaskApiError as exc:
            return self._fail(exc)
        finally:
            self._deleting.discard(task_id)
        self.store.delete_task(task_id)
        return ActionResult.ok()

    # ---- delete confirmation ----

    def request_delete(self, task_id: str) -> None:
        self.pending_delete = task_id

    def cancel_delete(self) -> None:
        self.pending_delete = None

    def confirm_delete(self) -> ActionResult:
        """Delete the task awaiting confirmation; the prompt stays open on failure."""
        if self.pending_delete is None:
            return ActionResult.failed("No task selected for deletion")
        result = self.remove_task(self.pending_delete)
        if result.success:
            self.pending_delete = None
        return result

    # ---- in-flight state ----

    def is_toggling(self, task_id: str) -> bool:
        return task_id in self._toggling

    def is_deleting(self, task_id: str) -> bool:
        return task_id in self._deleting

    def is_busy(self) -> bool:
        return bool(self._toggling or self._deleting)

    # ---- view ----

    def update_filters(self, **changes) -> TaskFilters:
        self.filters = self.filters.update(**changes)
        return self.filters

    def reset_filters(self) -> TaskFilters:
        self.filters = TaskFilters()
        return self.filters

    def view(self, now: Optional[datetime] = None) -> TaskView:
        return build_view(self.store.tasks, self.filters, now)
