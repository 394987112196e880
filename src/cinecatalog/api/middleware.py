"""Request logging middleware."""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from cinecatalog.utils.logger import get_logger

logger = get_logger(__name__)
stdlib_logger = logging.getLogger(__name__)

LOGGED_PREFIXES = ("/api/media/import", "/api/media/validate-json")
BODY_PREVIEW_LENGTH = 500


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log catalog upload requests, which carry large and often malformed bodies."""

    async def dispatch(self, request: Request, call_next):
        """Log request before processing and response after."""
        if not request.url.path.startswith(LOGGED_PREFIXES):
            return await call_next(request)

        start_time = time.time()
        body = await request.body()
        should_log_body = stdlib_logger.isEnabledFor(logging.DEBUG)

        log_data = {
            "method": request.method,
            "path": request.url.path,
            "content_length": len(body),
        }
        if should_log_body:
            log_data["body_preview"] = body.decode("utf-8", errors="replace")[:BODY_PREVIEW_LENGTH]

        logger.info("Incoming upload request", **log_data)

        response = await call_next(request)

        duration_ms = (time.time() - start_time) * 1000
        response_log_data = {
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round(duration_ms, 2),
        }

        # Keep a preview of rejected bodies even at info level
        if response.status_code >= 400 and not should_log_body:
            response_log_data["request_body"] = (
                body.decode("utf-8", errors="replace")[:BODY_PREVIEW_LENGTH] if body else "<empty>"
            )

        logger.info("Upload request completed", **response_log_data)

        return response
