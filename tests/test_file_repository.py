import json

import pytest

from taskboard.db import JsonFileRepository
from taskboard.errors import TaskConflictError
from taskboard.schemas import TaskCreate, TaskUpdate


@pytest.fixture()
def db_path(tmp_path):
    return tmp_path / "data" / "db.json"


@pytest.fixture()
def file_repo(db_path):
    return JsonFileRepository(str(db_path))


def test_missing_file_reads_as_empty(file_repo):
    assert file_repo.list() == []
    assert file_repo.get("1") is None


def test_create_writes_pretty_camel_case_document(file_repo, db_path):
    created = file_repo.create(TaskCreate(title="  Buy milk ", description="   "))
    assert created["title"] == "Buy milk"
    assert created["description"] is None

    raw = db_path.read_text(encoding="utf-8")
    assert raw.startswith('{\n  "tasks": [')
    document = json.loads(raw)
    (stored,) = document["tasks"]
    assert stored["id"] == created["id"]
    assert stored["completed"] is False
    assert "createdAt" in stored and "updatedAt" in stored


def test_tasks_survive_a_new_repository_instance(file_repo, db_path):
    older = file_repo.create(TaskCreate(title="Older"))
    newer = file_repo.create(TaskCreate(title="Newer"))

    reopened = JsonFileRepository(str(db_path))
    assert [t["id"] for t in reopened.list()] == [newer["id"], older["id"]]


def test_update_toggle_and_delete(file_repo):
    created = file_repo.create(TaskCreate(title="Write tests", description="pytest"))

    updated = file_repo.update(created["id"], TaskUpdate(description=None))
    assert updated["description"] is None
    assert updated["title"] == "Write tests"
    assert updated["updated_at"] > created["updated_at"]

    toggled = file_repo.toggle(created["id"], expected_completed=False)
    assert toggled["completed"] is True
    with pytest.raises(TaskConflictError):
        file_repo.toggle(created["id"], expected_completed=False)

    assert file_repo.delete(created["id"]) is True
    assert file_repo.delete(created["id"]) is False
    assert file_repo.list() == []


def test_corrupt_file_reads_as_empty(file_repo, db_path):
    db_path.parent.mkdir(parents=True, exist_ok=True)
    db_path.write_text("{not json", encoding="utf-8")
    assert file_repo.list() == []


def test_invalid_records_are_skipped(file_repo, db_path):
    db_path.parent.mkdir(parents=True, exist_ok=True)
    db_path.write_text(
        json.dumps(
            {
                "tasks": [
                    {"id": "1", "title": "Kept", "completed": False,
                     "createdAt": "2024-01-15T10:30:00.000Z", "updatedAt": "2024-01-15T10:30:00.000Z"},
                    {"id": "2"},
                ]
            }
        ),
        encoding="utf-8",
    )
    assert [t["title"] for t in file_repo.list()] == ["Kept"]


def test_missing_ids_are_no_ops(file_repo):
    assert file_repo.update("nope", TaskUpdate(completed=True)) is None
    assert file_repo.toggle("nope") is None
    assert file_repo.delete("nope") is False
