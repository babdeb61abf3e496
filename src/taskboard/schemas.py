from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

# Wire format is camelCase (createdAt, updatedAt); Python code uses snake_case.

# PUBLIC_INTERFACE
class TaskCreate(BaseModel):
    """
    Schema for creating a new Task.

    Field rules (length limits, required title) are checked by
    `taskboard.validation` so that every failing rule can be reported at once.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
            }
        },
    )

    title: Optional[str] = Field(default=None, description="Short title for the task (3..100 chars)")
    description: Optional[str] = Field(default=None, description="Optional detailed description (<= 500 chars)")


# PUBLIC_INTERFACE
class TaskReplace(BaseModel):
    """
    Schema for replacing the editable fields of an existing Task.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "title": "Buy groceries and supplies",
                "description": None,
                "completed": True,
            }
        },
    )

    title: Optional[str] = Field(default=None, description="Short title for the task (3..100 chars)")
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    completed: bool = Field(default=False, description="Completion status flag")


# PUBLIC_INTERFACE
class TaskUpdate(BaseModel):
    """
    Schema for patching an existing Task.
    All fields are optional; only provided fields will be updated.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "title": "Buy groceries",
                "completed": True,
            }
        },
    )

    title: Optional[str] = Field(default=None, description="Short title for the task (3..100 chars)")
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    completed: Optional[bool] = Field(default=None, description="Completion status flag")


# PUBLIC_INTERFACE
class TaskToggle(BaseModel):
    """
    Body of a toggle request.

    When `expectedCompleted` is given the flip only happens if the stored
    value still matches it; otherwise the server answers 409.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    expected_completed: Optional[bool] = Field(
        default=None, description="Completion value the caller last saw"
    )


# PUBLIC_INTERFACE
class Task(BaseModel):
    """
    A Task as returned by the API and held by the client store.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "1705314600000",
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
                "completed": False,
                "createdAt": "2024-01-15T10:30:00Z",
                "updatedAt": "2024-01-16T14:20:00Z",
            }
        },
    )

    id: str = Field(..., description="Unique identifier of the task")
    title: str = Field(..., description="Short title for the task")
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    completed: bool = Field(default=False, description="Completion status flag")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    @field_validator("created_at", "updated_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        """
        Treat naive timestamps as UTC so they compare with aware ones.
        """
        return v if v.tzinfo is not None else v.replace(tzinfo=timezone.utc)

    @model_validator(mode="after")
    def check_invariants(self) -> "Task":
        """
        A Task always has a non-blank title and was not updated before it
        was created.
        """
        if not self.title.strip():
            raise ValueError("title must not be blank")
        if self.created_at > self.updated_at:
            raise ValueError("updatedAt must not be earlier than createdAt")
        return self


class TaskStatisticsOut(BaseModel):
    total: int = Field(..., description="Number of tasks in the store")
    completed: int = Field(..., description="Number of completed tasks")
    pending: int = Field(..., description="Number of incomplete tasks")
    new: int = Field(..., description="Tasks in the view created within the last 24 hours")


# PUBLIC_INTERFACE
class TaskViewOut(BaseModel):
    """
    Filtered and sorted task list, split into new and old tasks.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    tasks: List[Task] = Field(..., description="Filtered and sorted tasks")
    new_tasks: List[Task] = Field(..., description="Tasks created in the last 24 hours")
    old_tasks: List[Task] = Field(..., description="Older tasks")
    statistics: TaskStatisticsOut


class ErrorOut(BaseModel):
    """Error body returned by the task endpoints."""

    error: str = Field(..., description="Human readable error message")
    errors: Optional[List[str]] = Field(default=None, description="Every failing validation rule")


class MessageOut(BaseModel):
    message: str = Field(..., description="Outcome of the operation")
