from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from threading import RLock
from typing import Iterable, List, Optional

from .errors import TaskConflictError
from .models import TaskEntity, next_timestamp, utcnow
from .schemas import TaskCreate, TaskReplace, TaskUpdate
from .settings import get_settings
from .validation import normalize_description

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for task storage backends."""

    name: str = "abstract"

    @abstractmethod
    def list(self) -> List[TaskEntity]:
        """Return every task, newest first."""

    @abstractmethod
    def get(self, task_id: str) -> Optional[TaskEntity]:
        """Return a TaskEntity by id, or None if not found."""

    @abstractmethod
    def create(self, data: TaskCreate) -> TaskEntity:
        """Create a task at the head of the collection and return it."""

    @abstractmethod
    def update(self, task_id: str, data: TaskUpdate) -> Optional[TaskEntity]:
        """Update provided fields of a task. Return the updated entity or None if not found."""

    @abstractmethod
    def replace(self, task_id: str, data: TaskReplace) -> Optional[TaskEntity]:
        """Replace the editable fields of a task. Return the updated entity or None if not found."""

    @abstractmethod
    def toggle(self, task_id: str, expected_completed: Optional[bool] = None) -> Optional[TaskEntity]:
        """
        Flip `completed` atomically. Return the updated entity or None if not found.

        Raises TaskConflictError when `expected_completed` is given and differs
        from the stored value.
        """

    @abstractmethod
    def delete(self, task_id: str) -> bool:
        """Delete a task by id. Return True if deleted, False if not found."""


def _allocate_id(existing: Iterable[str]) -> str:
    taken = set(existing)
    candidate = int(time.time() * 1000)
    while str(candidate) in taken:
        candidate += 1
    return str(candidate)


def _find(items: List[TaskEntity], task_id: str) -> int:
    for index, item in enumerate(items):
        if item["id"] == task_id:
            return index
    return -1


class ListRepository(Repository):
    """
    Repository over an ordered list of entities, newest first.

    Subclasses decide where the list lives by overriding `_load` and `_save`;
    every operation runs load, mutate, save under one lock.
    """

    def __init__(self) -> None:
        self._lock = RLock()

    @abstractmethod
    def _load(self) -> List[TaskEntity]:
        """Return the current list of entities."""

    @abstractmethod
    def _save(self, items: List[TaskEntity]) -> None:
        """Persist the list of entities."""

    def list(self) -> List[TaskEntity]:
        with self._lock:
            return [t.copy() for t in self._load()]

    def get(self, task_id: str) -> Optional[TaskEntity]:
        with self._lock:
            items = self._load()
            index = _find(items, task_id)
            return None if index < 0 else items[index].copy()

    def create(self, data: TaskCreate) -> TaskEntity:
        with self._lock:
            items = self._load()
            now = utcnow()
            entity: TaskEntity = {
                "id": _allocate_id(t["id"] for t in items),
                "title": (data.title or "").strip(),
                "description": normalize_description(data.description),
                "completed": False,
                "created_at": now,
                "updated_at": now,
            }
            items.insert(0, entity)
            self._save(items)
        logger.info("task.created", extra={"event": "task.created", "task_id": entity["id"]})
        return entity.copy()

    def _mutate(self, task_id: str, changes: dict) -> Optional[TaskEntity]:
        with self._lock:
            items = self._load()
            index = _find(items, task_id)
            if index < 0:
                return None
            updated = items[index].copy()
            updated.update(changes)  # type: ignore[typeddict-item]
            updated["updated_at"] = next_timestamp(updated["updated_at"])
            items[index] = updated
            self._save(items)
            return updated.copy()

    def update(self, task_id: str, data: TaskUpdate) -> Optional[TaskEntity]:
        changes: dict = {}
        if data.title is not None:
            changes["title"] = data.title.strip()
        if "description" in data.model_fields_set:
            # Respect explicit nulling of description
            changes["description"] = normalize_description(data.description)
        if data.completed is not None:
            changes["completed"] = data.completed
        return self._mutate(task_id, changes)

    def replace(self, task_id: str, data: TaskReplace) -> Optional[TaskEntity]:
        return self._mutate(
            task_id,
            {
                "title": (data.title or "").strip(),
                "description": normalize_description(data.description),
                "completed": data.completed,
            },
        )

    def toggle(self, task_id: str, expected_completed: Optional[bool] = None) -> Optional[TaskEntity]:
        with self._lock:
            current = self.get(task_id)
            if current is None:
                return None
            if expected_completed is not None and current["completed"] != expected_completed:
                raise TaskConflictError(task_id, expected_completed, current["completed"])
            return self._mutate(task_id, {"completed": not current["completed"]})

    def delete(self, task_id: str) -> bool:
        with self._lock:
            items = self._load()
            index = _find(items, task_id)
            if index < 0:
                return False
            del items[index]
            self._save(items)
        logger.info("task.deleted", extra={"event": "task.deleted", "task_id": task_id})
        return True


class InMemoryRepository(ListRepository):
    """
    Thread-safe in-memory repository suitable for testing and default runtime.
    """

    name = "memory"

    def __init__(self, items: Optional[Iterable[TaskEntity]] = None) -> None:
        super().__init__()
        self._items: List[TaskEntity] = [t.copy() for t in items or []]

    def _load(self) -> List[TaskEntity]:
        return self._items

    def _save(self, items: List[TaskEntity]) -> None:
        self._items = items


_repository: Optional[Repository] = None


# PUBLIC_INTERFACE
def get_repository() -> Repository:
    """
    Return the configured repository, building it on first use.
    - memory: InMemoryRepository
    - file: JsonFileRepository at TASKS_DB_PATH
    """
    global _repository
    if _repository is None:
        settings = get_settings()
        if settings.task_backend == "file":
            from .db import JsonFileRepository

            _repository = JsonFileRepository(settings.tasks_db_path)
        else:
            _repository = InMemoryRepository()
        logger.info(
            "repository.ready",
            extra={"event": "repository.ready", "backend": _repository.name},
        )
    return _repository


def reset_repository() -> None:
    """Drop the cached repository so the next call re-reads settings."""
    global _repository
    _repository = None
