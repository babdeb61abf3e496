from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter, ValidationError

from ..errors import TaskApiError
from ..fixtures import sample_tasks
from ..models import next_timestamp, utcnow
from ..schemas import Task
from ..settings import get_settings

logger = logging.getLogger(__name__)

FETCH_TASKS_FAILED = "Failed to fetch tasks"
FETCH_TASK_FAILED = "Failed to fetch task"
CREATE_TASK_FAILED = "Failed to create task"
UPDATE_TASK_FAILED = "Failed to update task"
DELETE_TASK_FAILED = "Failed to delete task"
TOGGLE_TASK_FAILED = "Failed to toggle task"

_TaskList = TypeAdapter(List[Task])


@contextmanager
def _reported(message: str, **context: Any) -> Iterator[None]:
    """Log any transport or decoding failure and re-raise it as TaskApiError(message)."""
    try:
        yield
    except (httpx.HTTPError, ValidationError, ValueError) as exc:
        logger.error(message, extra={"event": "api.error", **context}, exc_info=True)
        raise TaskApiError(message) from exc


# PUBLIC_INTERFACE
class TaskApi(ABC):
    """
    Contract shared by the task API backends.

    Every method raises TaskApiError with a fixed message on failure.
    """

    @abstractmethod
    def get_tasks(self) -> List[Task]:
        """Return every task, newest first."""

    @abstractmethod
    def get_task(self, task_id: str) -> Task:
        """Return one task."""

    @abstractmethod
    def create_task(self, title: str, description: Optional[str] = None) -> Task:
        """Create a task; the backend assigns id and timestamps."""

    @abstractmethod
    def update_task(self, task_id: str, patch: Mapping[str, Any]) -> Task:
        """Apply a partial update and return the new record."""

    @abstractmethod
    def delete_task(self, task_id: str) -> None:
        """Delete a task."""

    @abstractmethod
    def toggle_task(self, task_id: str) -> Task:
        """Flip a task's completion flag and return the new record."""


class HttpTaskApi(TaskApi):
    """
    Client for the `/api/tasks` endpoints.

    Pass an `httpx.Client` (or a FastAPI TestClient) to control transport;
    otherwise one is built against TASK_API_BASE_URL.
    """

    prefix = "/api/tasks"

    def __init__(self, client: Optional[httpx.Client] = None, base_url: Optional[str] = None) -> None:
        self._owns_client = client is None
        self._client = client or httpx.Client(base_url=base_url or get_settings().task_api_base_url)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpTaskApi":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _path(self, task_id: Optional[str] = None, action: Optional[str] = None) -> str:
        path = self.prefix
        if task_id is not None:
            path += "/" + quote(task_id, safe="")
        if action:
            path += f"/{action}"
        return path

    def get_tasks(self) -> List[Task]:
        with _reported(FETCH_TASKS_FAILED):
            response = self._client.get(self._path())
            response.raise_for_status()
            return _TaskList.validate_python(response.json())

    def get_task(self, task_id: str) -> Task:
        with _reported(FETCH_TASK_FAILED, task_id=task_id):
            response = self._client.get(self._path(task_id))
            response.raise_for_status()
            return Task.model_validate(response.json())

    def create_task(self, title: str, description: Optional[str] = None) -> Task:
        body: Dict[str, Any] = {"title": title}
        if description is not None:
            body["description"] = description
        with _reported(CREATE_TASK_FAILED):
            response = self._client.post(self._path(), json=body)
            response.raise_for_status()
            return Task.model_validate(response.json())

    def update_task(self, task_id: str, patch: Mapping[str, Any]) -> Task:
        with _reported(UPDATE_TASK_FAILED, task_id=task_id):
            response = self._client.patch(self._path(task_id), json=dict(patch))
            response.raise_for_status()
            return Task.model_validate(response.json())

    def delete_task(self, task_id: str) -> None:
        with _reported(DELETE_TASK_FAILED, task_id=task_id):
            response = self._client.delete(self._path(task_id))
            response.raise_for_status()

    def toggle_task(self, task_id: str) -> Task:
        """
        Read the current flag, then ask the server to flip it only if it
        still has that value. A concurrent flip in between makes the server
        answer 409 and this call fail instead of undoing the other toggle.
        """
        with _reported(TOGGLE_TASK_FAILED, task_id=task_id):
            current = self._client.get(self._path(task_id))
            current.raise_for_status()
            seen = Task.model_validate(current.json())
            response = self._client.post(
                self._path(task_id, "toggle"),
                json={"expectedCompleted": seen.completed},
            )
            response.raise_for_status()
            return Task.model_validate(response.json())


class FixtureTaskApi(TaskApi):
    """
    In-memory stand-in for the HTTP API with artificial latency.

    Delays are scaled by `latency_scale` (FIXTURE_LATENCY_SCALE by default);
    tests pass 0 to run without sleeping.
    """

    delays = {
        "list": 0.5,
        "create": 0.3,
        "get": 0.2,
        "update": 0.2,
        "delete": 0.2,
        "toggle": 0.2,
    }

    def __init__(
        self,
        tasks: Optional[List[Task]] = None,
        latency_scale: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._tasks: List[Task] = list(sample_tasks() if tasks is None else tasks)
        self._scale = get_settings().fixture_latency_scale if latency_scale is None else latency_scale
        self._sleep = sleep

    def _wait(self, operation: str) -> None:
        seconds = self.delays[operation] * self._scale
        if seconds > 0:
            self._sleep(seconds)

    def _find(self, task_id: str, message: str) -> int:
        for index, task in enumerate(self._tasks):
            if task.id == task_id:
                return index
        logger.error(message, extra={"event": "api.error", "task_id": task_id, "reason": "not_found"})
        raise TaskApiError(message)

    def _new_id(self) -> str:
        taken = {t.id for t in self._tasks}
        candidate = int(time.time() * 1000)
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)

    def get_tasks(self) -> List[Task]:
        self._wait("list")
        return list(self._tasks)

    def get_task(self, task_id: str) -> Task:
        self._wait("get")
        return self._tasks[self._find(task_id, FETCH_TASK_FAILED)]

    def create_task(self, title: str, description: Optional[str] = None) -> Task:
        self._wait("create")
        now = utcnow()
        with _reported(CREATE_TASK_FAILED):
            task = Task(
                id=self._new_id(),
                title=title.strip(),
                description=(description or "").strip() or None,
                completed=False,
                created_at=now,
                updated_at=now,
            )
        self._tasks.insert(0, task)
        return task

    def update_task(self, task_id: str, patch: Mapping[str, Any]) -> Task:
        self._wait("update")
        index = self._find(task_id, UPDATE_TASK_FAILED)
        current = self._tasks[index]
        data = current.model_dump()
        data.update({k: v for k, v in patch.items() if k in {"title", "description", "completed"}})
        data["updated_at"] = next_timestamp(current.updated_at)
        with _reported(UPDATE_TASK_FAILED, task_id=task_id):
            updated = Task.model_validate(data)
        self._tasks[index] = updated
        return updated

    def delete_task(self, task_id: str) -> None:
        self._wait("delete")
        del self._tasks[self._find(task_id, DELETE_TASK_FAILED)]

    def toggle_task(self, task_id: str) -> Task:
        self._wait("toggle")
        index = self._find(task_id, TOGGLE_TASK_FAILED)
        current = self._tasks[index]
        updated = current.model_copy(
            update={"completed": not current.completed, "updated_at": next_timestamp(current.updated_at)}
        )
        self._tasks[index] = updated
        return updated


# PUBLIC_INTERFACE
def get_task_api(backend: str = "http", **kwargs) -> TaskApi:
    """
    Build a task API client: 'http' for HttpTaskApi, 'fixture' for FixtureTaskApi.
    """
    if backend == "fixture":
        return FixtureTaskApi(**kwargs)
    if backend == "http":
        return HttpTaskApi(**kwargs)
    raise ValueError(f"unknown task api backend: {backend!r}")
