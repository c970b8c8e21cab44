import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    One log line per request, tagged with a request id.

    The id comes from the caller's X-Request-ID header when present, otherwise a
    fresh uuid4. It is stored on request.state and echoed in the response. Only
    the method, path, role header, status and timing are logged; the bearer
    token is a live Google credential and stays out of the log.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        start = time.monotonic()

        response = await call_next(request)

        elapsed_ms = (time.monotonic() - start) * 1000
        response.headers[REQUEST_ID_HEADER] = request_id
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "[%s] %s %s role=%s status=%s %.0fms",
            request_id,
            request.method,
            request.url.path,
            request.headers.get("x-user-role", "-"),
            response.status_code,
            elapsed_ms,
        )

        return response
