from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional, TypedDict


# PUBLIC_INTERFACE
class TaskEntity(TypedDict):
    """
    A lightweight domain model representing a Task for the storage backends.

    Fields:
    - id: Unique string identifier (millisecond epoch assigned at creation)
    - title: Short title (3..100 chars, trimmed on input)
    - description: Optional detailed description (0..500 chars, trimmed)
    - completed: Boolean completion flag
    - created_at: UTC creation timestamp, never changed afterwards
    - updated_at: UTC timestamp of the last mutation
    """

    id: str
    title: str
    description: Optional[str]
    completed: bool
    created_at: datetime
    updated_at: datetime


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# PUBLIC_INTERFACE
def next_timestamp(previous: Optional[datetime] = None) -> datetime:
    """
    Return the current UTC time, nudged forward so it is strictly later
    than `previous`.

    Mutations that land within the clock's resolution still get a distinct
    updated_at.
    """
    now = utcnow()
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now
