import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import TaskConflictError, TaskNotFoundError, TaskValidationError
from .logging_setup import setup_logging
from .middleware import AccessLogMiddleware
from .repositories import get_repository
from .routers import tasks as tasks_router
from .settings import get_settings

logger = logging.getLogger("taskboard.system")

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "tasks",
        "description": "Create, list, view, toggle and delete tasks.",
    },
]


# PUBLIC_INTERFACE
def create_app() -> FastAPI:
    """
    Build the FastAPI application: logging, CORS, error handlers and routes.
    """
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_dir)
    logger.info("system.start", extra={"event": "system.start", "backend": settings.task_backend})

    app = FastAPI(
        title="Taskboard",
        description="Task management API backed by memory or a flat JSON file.",
        version="0.1.0",
        openapi_tags=openapi_tags,
    )

    # Configure CORS based on settings (CORS_ALLOW_ORIGINS), with '*' fallback
    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=not allow_all,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(AccessLogMiddleware)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Return a consistent JSON structure for malformed requests.

        Response format:
            {
                "error": "ValidationError",
                "detail": [... pydantic/fastapi error details ...],
                "message": "Request validation failed"
            }
        """
        return JSONResponse(
            status_code=422,
            content={
                "error": "ValidationError",
                "message": "Request validation failed",
                "detail": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(TaskValidationError)
    async def task_validation_handler(request: Request, exc: TaskValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": exc.errors[0], "errors": exc.errors})

    @app.exception_handler(TaskNotFoundError)
    async def not_found_handler(request: Request, exc: TaskNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"error": "Task not found"})

    @app.exception_handler(TaskConflictError)
    async def conflict_handler(request: Request, exc: TaskConflictError) -> JSONResponse:
        logger.warning(
            "task.conflict",
            extra={"event": "task.conflict", "task_id": exc.task_id, "expected": exc.expected},
        )
        return JSONResponse(status_code=409, content={"error": "Task was modified concurrently"})

    @app.exception_handler(Exception)
    async def unhandled_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("request.unhandled", extra={"event": "request.unhandled", "path": request.url.path}, exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    # PUBLIC_INTERFACE
    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health and the active backend.
        """
        return {"message": "Healthy", "backend": get_repository().name}

    app.include_router(tasks_router.router)
    return app


app = create_app()
