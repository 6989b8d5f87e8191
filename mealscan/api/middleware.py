"""ASGI middleware for the HTTP surface."""

from typing import List

import structlog
from fastapi import status
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from mealscan.api.errors import PAYLOAD_TOO_LARGE_CODE, error_response

logger = structlog.get_logger(__name__)


class BodySizeLimitMiddleware:
    """
    Reject request bodies over ``max_body_bytes`` with 413.

    A declared Content-Length is checked up front. Otherwise the body is
    read chunk by chunk, counting bytes, and replayed to the app once it
    is complete; at most ``max_body_bytes`` plus one chunk is buffered.
    """

    def __init__(self, app: ASGIApp, max_body_bytes: int) -> None:
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        length = Headers(scope=scope).get("content-length")
        if length and length.isdigit() and int(length) > self.max_body_bytes:
            await self._reject(scope, receive, send, int(length))
            return

        buffered: List[Message] = []
        received = 0
        more_body = True
        while more_body:
            message = await receive()
            buffered.append(message)
            if message["type"] != "http.request":
                break
            received += len(message.get("body", b""))
            if received > self.max_body_bytes:
                await self._reject(scope, receive, send, received)
                return
            more_body = message.get("more_body", False)

        async def replay() -> Message:
            if buffered:
                return buffered.pop(0)
            return await receive()

        await self.app(scope, replay, send)

    async def _reject(self, scope: Scope, receive: Receive, send: Send, size: int) -> None:
        logger.warning(
            "request.too_large",
            path=scope.get("path"),
            received_bytes=size,
            limit=self.max_body_bytes,
        )
        response = error_response(
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            f"Request body exceeds {self.max_body_bytes} bytes.",
            PAYLOAD_TOO_LARGE_CODE,
        )
        await response(scope, receive, send)
