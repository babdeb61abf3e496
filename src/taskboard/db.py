from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, List

from pydantic import ValidationError

from .models import TaskEntity
from .repositories import ListRepository
from .schemas import Task

logger = logging.getLogger(__name__)


class JsonFileRepository(ListRepository):
    """
    Flat-file repository keeping every task in one JSON document:

        {"tasks": [ {...newest...}, ..., {...oldest...} ]}

    The file is read on every operation and rewritten after every mutation.
    A missing or unreadable file reads as an empty collection.
    """

    name = "file"

    def __init__(self, db_path: str) -> None:
        super().__init__()
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path

    @property
    def path(self) -> str:
        return self._db_path

    def _read_document(self) -> Dict[str, Any]:
        try:
            with open(self._db_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {"tasks": []}
        except (OSError, ValueError):
            logger.warning(
                "db.unreadable",
                extra={"event": "db.unreadable", "db_path": self._db_path},
                exc_info=True,
            )
            return {"tasks": []}
        if not isinstance(data, dict) or not isinstance(data.get("tasks"), list):
            return {"tasks": []}
        return data

    def _load(self) -> List[TaskEntity]:
        items: List[TaskEntity] = []
        for raw in self._read_document()["tasks"]:
            try:
                task = Task.model_validate(raw)
            except ValidationError:
                logger.warning(
                    "db.bad_record",
                    extra={"event": "db.bad_record", "db_path": self._db_path, "record": raw},
                )
                continue
            items.append(task.model_dump())  # type: ignore[arg-type]
        return items

    def _save(self, items: List[TaskEntity]) -> None:
        document = {
            "tasks": [Task(**t).model_dump(mode="json", by_alias=True) for t in items],
        }
        with open(self._db_path, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=2, ensure_ascii=False)
