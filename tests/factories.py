from datetime import datetime, timedelta, timezone

from taskboard.schemas import Task

NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_task(
    task_id="1",
    title="Sample task",
    description=None,
    completed=False,
    created_at=NOW,
    updated_at=None,
) -> Task:
    return Task(
        id=task_id,
        title=title,
        description=description,
        completed=completed,
        created_at=created_at,
        updated_at=updated_at or created_at,
    )


def hours_ago(hours: float, now: datetime = NOW) -> datetime:
    return now - timedelta(hours=hours)
