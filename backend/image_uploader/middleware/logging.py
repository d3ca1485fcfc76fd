"""
Image Uploader Backend - Access Log Middleware
===============================================

What:  One access-log line per HTTP request, tagged with the image
       operation it performed (upload, list, delete, replace) and the
       image id when the path carries one.
How:   Timed from middleware entry to response return; the level follows
       the status class (5xx ERROR, 4xx WARNING, else INFO).

Request bodies are never logged: they carry whole base64 images.
"""

import logging
import time
from typing import Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from image_uploader.middleware.request_id import request_id_var

logger = logging.getLogger("image_uploader.access")

IMAGE_PATH_PREFIX = "/api/image/"

_OPERATIONS = {
    ("POST", "/api/upload"): "upload",
    ("GET", "/api/allImages"): "list",
    ("DELETE", IMAGE_PATH_PREFIX): "delete",
    ("PUT", IMAGE_PATH_PREFIX): "replace",
}


def classify_request(method: str, path: str) -> Tuple[Optional[str], Optional[str]]:
    """Return (operation, image_id) for an image API request, or (None, None)."""
    if path.startswith(IMAGE_PATH_PREFIX):
        image_id = path[len(IMAGE_PATH_PREFIX):] or None
        return _OPERATIONS.get((method, IMAGE_PATH_PREFIX)), image_id
    return _OPERATIONS.get((method, path)), None


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access log for the image API."""

    # Probed every few seconds by orchestrators
    SKIPPED_PATHS = {"/health"}

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in self.SKIPPED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        operation, image_id = classify_request(request.method, path)
        rid = request_id_var.get("")
        client_ip = request.client.host if request.client else "unknown"

        logger.log(
            _level_for(response.status_code),
            "%s %s %d %.1fms [%s] op=%s image=%s from %s",
            request.method,
            path,
            response.status_code,
            duration_ms,
            rid,
            operation or "-",
            image_id or "-",
            client_ip,
            extra={
                "request_id": rid,
                "operation": operation,
                "image_id": image_id,
                "status": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return response
