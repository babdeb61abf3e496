from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Optional

from .settings import get_settings

# Attributes every LogRecord carries; anything else arrived through `extra`.
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}

LOG_FILE_NAME = "taskboard.jsonl"
LOG_FILE_MAX_BYTES = 10_000_000
LOG_FILE_BACKUPS = 10


class JsonFormatter(logging.Formatter):
    """
    One JSON object per line: timestamp, level, logger, message, then the
    structured fields passed with `extra={...}`.
    """

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: Dict[str, Any] = {
            "ts": stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        payload.update({k: v for k, v in vars(record).items() if k not in _STANDARD_ATTRS})
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _handlers(log_dir: Optional[str]) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_dir:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                directory / LOG_FILE_NAME,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
        )
    return handlers


# PUBLIC_INTERFACE
def setup_logging(level: Optional[str] = None, log_dir: Optional[str] = None) -> None:
    """
    Route the root logger to JSON lines on stderr and, when a log directory
    is configured, to a rotating `taskboard.jsonl` file.

    Calling it again replaces the handlers instead of stacking them.
    """
    settings = get_settings()
    level = (level or settings.log_level).upper()

    root = logging.getLogger()
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    formatter = JsonFormatter()
    for handler in _handlers(log_dir or settings.log_dir):
        handler.setFormatter(formatter)
        root.addHandler(handler)

    # Requests are logged by AccessLogMiddleware.
    logging.getLogger("uvicorn.access").disabled = True
    logging.getLogger("uvicorn.error").setLevel(level)
