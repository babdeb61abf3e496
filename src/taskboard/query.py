from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Iterable, List, Literal, Optional, Sequence, Tuple

from .models import utcnow
from .schemas import Task

StatusFilter = Literal["all", "completed", "pending", "new"]
SortKey = Literal["created", "updated", "title"]

NEW_TASK_WINDOW = timedelta(hours=24)


@dataclass(frozen=True)
class TaskFilters:
    """
    User-supplied view criteria for the task list.
    """
    search_term: str = ""
    filter: StatusFilter = "all"
    sort_by: SortKey = "created"
    show_completed: bool = True

    def update(self, **changes) -> "TaskFilters":
        """Return a copy with the given criteria changed."""
        return replace(self, **changes)


@dataclass(frozen=True)
class TaskStatistics:
    total: int = 0
    completed: int = 0
    pending: int = 0
    new: int = 0


@dataclass(frozen=True)
class TaskView:
    """Derived view: the filtered/sorted list plus its new/old split."""
    tasks: List[Task] = field(default_factory=list)
    new_tasks: List[Task] = field(default_factory=list)
    old_tasks: List[Task] = field(default_factory=list)
    statistics: TaskStatistics = field(default_factory=TaskStatistics)


# PUBLIC_INTERFACE
def is_new(task: Task, now: Optional[datetime] = None) -> bool:
    """True if the task was created strictly within the last 24 hours."""
    now = now or utcnow()
    return task.created_at > now - NEW_TASK_WINDOW


def _matches_search(task: Task, term: str) -> bool:
    needle = term.strip().lower()
    return needle in task.title.lower() or needle in (task.description or "").lower()


def _sort_key(sort_by: SortKey):
    # Incomplete tasks always come first, whatever the key.
    if sort_by == "title":
        return lambda t: (t.completed, t.title.casefold(), t.title)
    if sort_by == "updated":
        return lambda t: (t.completed, -t.updated_at.timestamp())
    return lambda t: (t.completed, -t.created_at.timestamp())


# PUBLIC_INTERFACE
def filter_and_sort(
    tasks: Iterable[Task],
    filters: Optional[TaskFilters] = None,
    now: Optional[datetime] = None,
) -> List[Task]:
    """
    Apply search, status filter and show_completed, then sort.

    Search is a case-insensitive substring match over title and description.
    """
    f = filters or TaskFilters()
    now = now or utcnow()
    selected: List[Task] = []
    for task in tasks:
        if f.search_term and not _matches_search(task, f.search_term):
            continue
        if f.filter == "completed" and not task.completed:
            continue
        if f.filter == "pending" and task.completed:
            continue
        if f.filter == "new" and not is_new(task, now):
            continue
        if not f.show_completed and task.completed:
            continue
        selected.append(task)
    return sorted(selected, key=_sort_key(f.sort_by))


# PUBLIC_INTERFACE
def split_new_old(tasks: Sequence[Task], now: Optional[datetime] = None) -> Tuple[List[Task], List[Task]]:
    """Partition tasks into (new, old), keeping their order."""
    now = now or utcnow()
    new_tasks = [t for t in tasks if is_new(t, now)]
    old_tasks = [t for t in tasks if not is_new(t, now)]
    return new_tasks, old_tasks


def compute_statistics(tasks: Sequence[Task], new_count: int) -> TaskStatistics:
    completed = sum(1 for t in tasks if t.completed)
    return TaskStatistics(
        total=len(tasks),
        completed=completed,
        pending=len(tasks) - completed,
        new=new_count,
    )


# PUBLIC_INTERFACE
def build_view(
    tasks: Sequence[Task],
    filters: Optional[TaskFilters] = None,
    now: Optional[datetime] = None,
) -> TaskView:
    """
    Derive the full view of `tasks` under `filters`.

    `now` defaults to the current time on every call, so a task drifts from
    new to old as time passes. Totals in the statistics count all tasks;
    the new count follows the filtered view.
    """
    now = now or utcnow()
    visible = filter_and_sort(tasks, filters, now)
    new_tasks, old_tasks = split_new_old(visible, now)
    return TaskView(
        tasks=visible,
        new_tasks=new_tasks,
        old_tasks=old_tasks,
        statistics=compute_statistics(tasks, len(new_tasks)),
    )
