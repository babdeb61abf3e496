from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - TASK_BACKEND: 'memory' (default) or 'file'
    - TASKS_DB_PATH: path to the flat JSON task file. Default './db.json'
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: root log level (default: INFO)
    - LOG_DIR: directory for the rotating JSON log file; console only when unset
    - TASK_API_BASE_URL: base URL the HTTP task client talks to
    - FIXTURE_LATENCY_SCALE: multiplier for the fixture backend's artificial delays
    - HOST / PORT: bind address for `python -m taskboard`
    """

    task_backend: str
    tasks_db_path: str
    cors_allow_origins: List[str]
    log_level: str
    log_dir: Optional[str]
    task_api_base_url: str
    fixture_latency_scale: float
    host: str
    port: int


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_float(value: str, default: float) -> float:
    try:
        parsed = float(value)
    except ValueError:
        return default
    return parsed if parsed >= 0 else default


def _parse_int(value: str, default: int) -> int:
    try:
        return int(value)
    except ValueError:
        return default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("TASK_BACKEND", "memory").strip().lower()
    if backend not in {"memory", "file"}:
        # Fallback to memory if unsupported
        backend = "memory"

    log_dir = os.getenv("LOG_DIR") or None

    return Settings(
        task_backend=backend,
        tasks_db_path=_get_env("TASKS_DB_PATH", "./db.json").strip(),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
        log_dir=log_dir.strip() if log_dir else None,
        task_api_base_url=_get_env("TASK_API_BASE_URL", "http://127.0.0.1:8000").strip(),
        fixture_latency_scale=_parse_float(_get_env("FIXTURE_LATENCY_SCALE", "1.0"), 1.0),
        host=_get_env("HOST", "127.0.0.1").strip(),
        port=_parse_int(_get_env("PORT", "8000"), 8000),
    )
