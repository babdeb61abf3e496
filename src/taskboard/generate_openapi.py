"""
Utility script to generate and write the OpenAPI schema for the FastAPI app.

This script imports the FastAPI application instance and serializes its OpenAPI
schema to interfaces/openapi.json so that API clients and documentation
tools can consume a stable spec without running the server.

Usage:
    python -m taskboard.generate_openapi [output-path]
"""
from __future__ import annotations

import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional

from .main import app, openapi_tags

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = os.path.join("interfaces", "openapi.json")


def _ensure_tags(schema: Dict[str, Any]) -> None:
    """
    Ensure the OpenAPI schema contains the expected tags metadata without
    overriding existing tag definitions.
    """
    existing_tags: List[Dict[str, Any]] = schema.get("tags", []) or []
    existing_names = {t.get("name") for t in existing_tags if isinstance(t, dict)}
    for tag in openapi_tags:
        if tag.get("name") not in existing_names:
            existing_tags.append(tag)
    if existing_tags:
        schema["tags"] = existing_tags


# PUBLIC_INTERFACE
def generate_openapi(out_path: Optional[str] = None) -> str:
    """Write the OpenAPI schema to `out_path` and return the written file path."""
    out_path = out_path or DEFAULT_OUTPUT
    schema = app.openapi()
    _ensure_tags(schema)

    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2, ensure_ascii=False)
    logger.info("openapi.written", extra={"event": "openapi.written", "out_path": out_path})
    return out_path


def main() -> None:
    generate_openapi(sys.argv[1] if len(sys.argv) > 1 else None)


if __name__ == "__main__":
    main()
