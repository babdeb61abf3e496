import json
import logging

from taskboard.generate_openapi import generate_openapi
from taskboard.logging_setup import JsonFormatter, setup_logging
from taskboard.repositories import InMemoryRepository, get_repository, reset_repository
from taskboard.settings import get_settings


def test_defaults(monkeypatch):
    for name in ("TASK_BACKEND", "TASKS_DB_PATH", "CORS_ALLOW_ORIGINS", "FIXTURE_LATENCY_SCALE", "LOG_DIR"):
        monkeypatch.delenv(name, raising=False)
    settings = get_settings()
    assert settings.task_backend == "memory"
    assert settings.tasks_db_path == "./db.json"
    assert settings.cors_allow_origins == ["*"]
    assert settings.fixture_latency_scale == 1.0
    assert settings.log_dir is None


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("TASK_BACKEND", "FILE")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.test, http://b.test")
    monkeypatch.setenv("FIXTURE_LATENCY_SCALE", "0")
    monkeypatch.setenv("PORT", "not-a-port")
    settings = get_settings()
    assert settings.task_backend == "file"
    assert settings.cors_allow_origins == ["http://a.test", "http://b.test"]
    assert settings.fixture_latency_scale == 0.0
    assert settings.port == 8000


def test_unknown_backend_falls_back_to_memory(monkeypatch):
    monkeypatch.setenv("TASK_BACKEND", "postgres")
    assert get_settings().task_backend == "memory"


def test_repository_factory_follows_settings(monkeypatch, tmp_path):
    monkeypatch.setenv("TASK_BACKEND", "file")
    monkeypatch.setenv("TASKS_DB_PATH", str(tmp_path / "db.json"))
    reset_repository()
    try:
        repo = get_repository()
        assert repo.name == "file"
        assert get_repository() is repo
    finally:
        reset_repository()
    monkeypatch.setenv("TASK_BACKEND", "memory")
    assert isinstance(get_repository(), InMemoryRepository)


def test_json_formatter_includes_extras():
    record = logging.LogRecord("taskboard.test", logging.INFO, __file__, 1, "task.created", None, None)
    record.task_id = "42"
    payload = json.loads(JsonFormatter().format(record))
    assert payload["msg"] == "task.created"
    assert payload["level"] == "INFO"
    assert payload["task_id"] == "42"
    assert payload["ts"].endswith("Z")
    assert "lineno" not in payload


def test_setup_logging_writes_json_file(tmp_path):
    setup_logging("INFO", str(tmp_path))
    try:
        logging.getLogger("taskboard.test").info("task.created", extra={"task_id": "7"})
        for handler in logging.getLogger().handlers:
            handler.flush()
        lines = (tmp_path / "taskboard.jsonl").read_text(encoding="utf-8").splitlines()
        assert json.loads(lines[-1])["task_id"] == "7"
    finally:
        for handler in logging.getLogger().handlers:
            handler.close()
        setup_logging("INFO", None)


def test_generate_openapi(tmp_path):
    out = generate_openapi(str(tmp_path / "interfaces" / "openapi.json"))
    schema = json.loads(open(out, encoding="utf-8").read())
    assert "/api/tasks" in schema["paths"]
    assert "/api/tasks/{task_id}/toggle" in schema["paths"]
    assert {t["name"] for t in schema["tags"]} >= {"health", "tasks"}
