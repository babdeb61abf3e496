from __future__ import annotations

import uuid
from typing import Any, Iterable, List, Mapping, Optional, Union

from ..models import next_timestamp
from ..schemas import Task

_IMMUTABLE_FIELDS = {"id", "created_at", "createdAt"}


class TaskStore:
    """
    Session-local, authoritative collection of tasks plus loading/error flags.

    The collection is kept newest first and holds at most one record per id.
    Every mutation is synchronous: operations on an unknown id do nothing,
    while a patch that would break a Task invariant (blank title) raises
    `ValueError` and leaves the collection as it was. Records are replaced,
    never edited in place, so a list handed out by `tasks` is a stable
    snapshot.
    """

    def __init__(self, tasks: Optional[Iterable[Task]] = None) -> None:
        self._tasks: List[Task] = _unique(tasks or [])
        self.loading: bool = False
        self.error: Optional[str] = None

    @property
    def tasks(self) -> List[Task]:
        return list(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def get_task(self, task_id: str) -> Optional[Task]:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def set_tasks(self, tasks: Iterable[Task]) -> None:
        """Replace the collection; of records sharing an id only the first is kept."""
        self._tasks = _unique(tasks)

    def add_task(self, task: Union[Task, Mapping[str, Any]]) -> Task:
        """
        Insert a task at the head of the collection.

        A mapping is treated as a partial record: a missing id, completion
        flag or timestamp is filled in locally, and a missing updated_at is
        never earlier than created_at. A record whose id is already present
        replaces the old one, which is dropped from its previous position.
        """
        if not isinstance(task, Task):
            given = _snake_case(task)
            now = next_timestamp()
            data = {"id": uuid.uuid4().hex, "completed": False, "created_at": now, **given}
            data.setdefault("updated_at", data["created_at"])
            task = Task.model_validate(data)
            if "updated_at" not in given and task.updated_at < now:
                task = task.model_copy(update={"updated_at": now})
        self._tasks = [task, *(t for t in self._tasks if t.id != task.id)]
        return task

    def update_task(self, task_id: str, patch: Mapping[str, Any]) -> Optional[Task]:
        """
        Merge `patch` into the task and refresh updated_at; id and created_at
        are kept. Raises `ValueError` if the result is not a valid Task.
        """
        changes = {k: v for k, v in patch.items() if k not in _IMMUTABLE_FIELDS}
        changes.pop("updatedAt", None)
        changes.pop("updated_at", None)
        return self._replace(task_id, changes)

    def replace_task(self, task: Task) -> bool:
        """Swap in a record returned by the backend, keeping its position."""
        for index, current in enumerate(self._tasks):
            if current.id == task.id:
                self._tasks = [*self._tasks[:index], task, *self._tasks[index + 1:]]
                return True
        return False

    def toggle_task(self, task_id: str) -> Optional[Task]:
        task = self.get_task(task_id)
        if task is None:
            return None
        return self._replace(task_id, {"completed": not task.completed})

    def delete_task(self, task_id: str) -> bool:
        if self.get_task(task_id) is None:
            return False
        self._tasks = [t for t in self._tasks if t.id != task_id]
        return True

    def set_loading(self, loading: bool) -> None:
        self.loading = loading

    def set_error(self, error: Optional[str]) -> None:
        self.error = error

    def clear_error(self) -> None:
        self.error = None

    def _replace(self, task_id: str, changes: Mapping[str, Any]) -> Optional[Task]:
        for index, task in enumerate(self._tasks):
            if task.id != task_id:
                continue
            merged = task.model_dump()
            merged.update(_snake_case(changes))
            merged["updated_at"] = next_timestamp(task.updated_at)
            updated = Task.model_validate(merged)
            self._tasks = [*self._tasks[:index], updated, *self._tasks[index + 1:]]
            return updated
        return None


def _unique(tasks: Iterable[Task]) -> List[Task]:
    seen = set()
    kept = []
    for task in tasks:
        if task.id not in seen:
            seen.add(task.id)
            kept.append(task)
    return kept


def _snake_case(changes: Mapping[str, Any]) -> dict:
    # Accept both wire (camelCase) and attribute names in patches.
    fields = {}
    by_alias = {f.alias: name for name, f in Task.model_fields.items() if f.alias}
    for key, value in changes.items():
        fields[by_alias.get(key, key)] = value
    return fields
