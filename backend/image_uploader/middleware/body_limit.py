"""
Image Uploader Backend - Request Body Size Guard
=================================================

What:  Rejects requests whose body exceeds settings.max_body_size with
       413 Payload Too Large, before any handler sees them.
How:   A declared Content-Length is checked up front. Bodies sent without
       one (chunked) are read here, counting bytes as they arrive, and
       refused as soon as the running total passes the limit; otherwise
       the buffered messages are replayed to the application.
When:  First middleware in the chain.

Written against the raw ASGI interface: BaseHTTPMiddleware cannot wrap
`receive` for the downstream app.
"""

import logging
from typing import List, Optional

from starlette.datastructures import Headers
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from image_uploader.config import settings
from image_uploader.exceptions import PayloadTooLargeError

logger = logging.getLogger(__name__)


class BodySizeLimitMiddleware:
    """Request size limit for both declared and streamed bodies."""

    def __init__(self, app: ASGIApp, max_body_size: Optional[int] = None):
        self.app = app
        self.max_body_size = max_body_size or settings.max_body_size

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        declared = Headers(scope=scope).get("content-length")
        if declared is not None:
            try:
                size = int(declared)
            except ValueError:
                response = JSONResponse(
                    status_code=400,
                    content={
                        "error": "validation_error",
                        "message": "Invalid Content-Length header",
                    },
                )
                await response(scope, receive, send)
                return

            if size > self.max_body_size:
                await self._reject(scope, receive, send, size)
                return

            await self.app(scope, receive, send)
            return

        messages: List[Message] = []
        received = 0
        while True:
            message = await receive()
            messages.append(message)
            if message["type"] != "http.request":
                break
            received += len(message.get("body", b""))
            if received > self.max_body_size:
                await self._reject(scope, receive, send, received)
                return
            if not message.get("more_body", False):
                break

        pending = iter(messages)

        async def replay() -> Message:
            for message in pending:
                return message
            return await receive()

        await self.app(scope, replay, send)

    async def _reject(self, scope: Scope, receive: Receive, send: Send, size: int) -> None:
        error = PayloadTooLargeError(max_size=self.max_body_size, context={"size": size})
        logger.warning(
            "Rejected %s %s: body of %d bytes exceeds %d",
            scope["method"],
            scope["path"],
            size,
            self.max_body_size,
        )
        response = JSONResponse(
            status_code=413,
            content={
                "error": "payload_too_large",
                "message": error.message,
                "details": error.context,
            },
        )
        await response(scope, receive, send)
