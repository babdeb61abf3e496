"""
Run the API server.

Usage:
    python -m taskboard
"""
import uvicorn

from .settings import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run("taskboard.main:app", host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
