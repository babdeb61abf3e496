import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger("taskboard.access")

REQUEST_ID_HEADER = "X-Request-ID"


class AccessLogMiddleware(BaseHTTPMiddleware):
    """
    Logs one `request.end` line per request, or `request.error` when the
    handler raised, and echoes the caller's X-Request-ID (a fresh one if
    none was sent).
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        fields = {"request_id": request_id, "method": request.method, "path": request.url.path}
        started = time.perf_counter()

        def elapsed_ms() -> float:
            return round((time.perf_counter() - started) * 1000, 2)

        try:
            response = await call_next(request)
        except Exception:
            logger.exception("request.error", extra={"event": "request.error", **fields, "duration_ms": elapsed_ms()})
            raise

        response.headers[REQUEST_ID_HEADER] = request_id
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "request.end",
            extra={"event": "request.end", **fields, "status_code": response.status_code, "duration_ms": elapsed_ms()},
        )
        return response
