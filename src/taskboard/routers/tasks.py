from __future__ import annotations

from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from ..errors import TaskNotFoundError, TaskValidationError
from ..query import SortKey, StatusFilter, TaskFilters, build_view
from ..repositories import Repository, get_repository
from ..schemas import (
    ErrorOut,
    MessageOut,
    Task,
    TaskCreate,
    TaskReplace,
    TaskStatisticsOut,
    TaskToggle,
    TaskUpdate,
    TaskViewOut,
)
from ..validation import validate_description, validate_task_fields, validate_title

router = APIRouter(
    prefix="/api/tasks",
    tags=["tasks"],
)

_NOT_FOUND = {404: {"model": ErrorOut, "description": "Task not found"}}
_INVALID = {400: {"model": ErrorOut, "description": "Validation error"}}


def _get_repo(repo: Repository = Depends(get_repository)) -> Repository:
    """
    Dependency wrapper for repository to keep signatures clean.
    """
    return repo


def _require(entity, task_id: str) -> Task:
    if not entity:
        raise TaskNotFoundError(task_id)
    return Task(**entity)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[Task],
    summary="List Tasks",
    description="Return every task, newest first.",
)
def list_tasks(repo: Repository = Depends(_get_repo)) -> List[Task]:
    """
    List all tasks in store order.
    """
    return [Task(**t) for t in repo.list()]


# PUBLIC_INTERFACE
@router.get(
    "/view",
    response_model=TaskViewOut,
    summary="Task View",
    description=(
        "Filtered, sorted and bucketed view of the tasks.\n\n"
        "Query parameters:\n"
        "- q: case-insensitive search over title and description\n"
        "- filter: all, completed, pending or new\n"
        "- sortBy: created, updated or title (completed tasks always sort last)\n"
        "- showCompleted: include completed tasks"
    ),
)
def view_tasks(
    q: Optional[str] = Query(None, description="Search text for title/description"),
    filter: StatusFilter = Query("all", description="Status filter"),
    sort_by: SortKey = Query("created", alias="sortBy", description="Sort key"),
    show_completed: bool = Query(True, alias="showCompleted", description="Include completed tasks"),
    repo: Repository = Depends(_get_repo),
) -> TaskViewOut:
    """
    Build the derived view of the task list.
    """
    filters = TaskFilters(
        search_term=q or "",
        filter=filter,
        sort_by=sort_by,
        show_completed=show_completed,
    )
    view = build_view([Task(**t) for t in repo.list()], filters)
    return TaskViewOut(
        tasks=view.tasks,
        new_tasks=view.new_tasks,
        old_tasks=view.old_tasks,
        statistics=TaskStatisticsOut(**asdict(view.statistics)),
    )


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=Task,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description="Create a new task at the head of the list and return it.",
    responses={201: {"description": "Task created successfully"}, **_INVALID},
)
def create_task(payload: TaskCreate, repo: Repository = Depends(_get_repo)) -> Task:
    """
    Create a new Task. The server assigns id and timestamps.
    """
    result = validate_task_fields(payload.title, payload.description)
    if not result.is_valid:
        raise TaskValidationError(result.errors)
    return Task(**repo.create(payload))


# PUBLIC_INTERFACE
@router.get(
    "/{task_id}",
    response_model=Task,
    summary="Get Task",
    description="Get a single task by ID.",
    responses={200: {"description": "Task found"}, **_NOT_FOUND},
)
def get_task(task_id: str, repo: Repository = Depends(_get_repo)) -> Task:
    """
    Retrieve a single Task by its ID.
    """
    return _require(repo.get(task_id), task_id)


# PUBLIC_INTERFACE
@router.put(
    "/{task_id}",
    response_model=Task,
    summary="Replace Task",
    description="Replace title, description and completion flag of a task.",
    responses={200: {"description": "Task updated"}, **_INVALID, **_NOT_FOUND},
)
def put_task(task_id: str, payload: TaskReplace, repo: Repository = Depends(_get_repo)) -> Task:
    """
    Full update of the editable fields; omitted description is cleared.
    """
    result = validate_task_fields(payload.title, payload.description)
    if not result.is_valid:
        raise TaskValidationError(result.errors)
    return _require(repo.replace(task_id, payload), task_id)


# PUBLIC_INTERFACE
@router.patch(
    "/{task_id}",
    response_model=Task,
    summary="Update Task",
    description="Partially update fields of a task.",
    responses={200: {"description": "Task updated"}, **_INVALID, **_NOT_FOUND},
)
def patch_task(task_id: str, payload: TaskUpdate, repo: Repository = Depends(_get_repo)) -> Task:
    """
    Partial update of a Task; only provided fields are validated and changed.
    """
    errors: List[str] = []
    if "title" in payload.model_fields_set:
        errors += validate_title(payload.title)
    errors += validate_description(payload.description)
    if errors:
        raise TaskValidationError(errors)
    return _require(repo.update(task_id, payload), task_id)


# PUBLIC_INTERFACE
@router.post(
    "/{task_id}/toggle",
    response_model=Task,
    summary="Toggle Task",
    description=(
        "Flip the completion flag of a task in one atomic step. When "
        "expectedCompleted is given and no longer matches, answers 409."
    ),
    responses={
        200: {"description": "Task toggled"},
        409: {"model": ErrorOut, "description": "Task was modified concurrently"},
        **_NOT_FOUND,
    },
)
def toggle_task(
    task_id: str,
    payload: Optional[TaskToggle] = Body(None),
    repo: Repository = Depends(_get_repo),
) -> Task:
    """
    Compare-and-swap toggle of the completion flag.
    """
    expected = payload.expected_completed if payload else None
    return _require(repo.toggle(task_id, expected), task_id)


# PUBLIC_INTERFACE
@router.delete(
    "/{task_id}",
    response_model=MessageOut,
    summary="Delete Task",
    description="Delete a task by ID.",
    responses={200: {"description": "Task deleted"}, **_NOT_FOUND},
)
def delete_task(task_id: str, repo: Repository = Depends(_get_repo)) -> MessageOut:
    """
    Delete a Task. Returns 200 with a message on success, 404 if not found.
    """
    if not repo.delete(task_id):
        raise TaskNotFoundError(task_id)
    return MessageOut(message="Task deleted successfully")
