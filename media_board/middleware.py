from __future__ import annotations

import logging

from starlette.datastructures import Headers
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)


class RequestBodyTooLarge(Exception):
    pass


def _too_large() -> JSONResponse:
    return JSONResponse(
        status_code=413,
        content={"success": False, "message": "request entity too large"},
    )


class BodySizeLimitMiddleware:
    """
    Caps non-multipart request bodies at ``max_bytes``.

    The declared ``Content-Length`` is checked up front; bodies without one
    are counted as they are received. Multipart uploads are bounded per file
    by their upload policy instead.
    """

    def __init__(self, app: ASGIApp, max_bytes: int = 10 * 1024 * 1024) -> None:
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        if headers.get("content-type", "").lower().startswith("multipart/"):
            await self.app(scope, receive, send)
            return

        length = headers.get("content-length")
        try:
            size = int(length) if length is not None else None
        except ValueError:
            size = None
        if size is not None and size > self.max_bytes:
            await _too_large()(scope, receive, send)
            return

        received = 0

        async def _limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message.get("type") == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    raise RequestBodyTooLarge()
            return message

        try:
            await self.app(scope, _limited_receive, send)
        except RequestBodyTooLarge:
            await _too_large()(scope, receive, send)


class CatchAllExceptionMiddleware:
    """
    Turns unhandled exceptions into ``500 {success: false, message}``.

    Installed inside the CORS layer so these responses still carry CORS
    headers.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def _send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, _send)
        except Exception as exc:
            if response_started:
                raise
            logger.error(
                "%s on %s: %s", type(exc).__name__, scope.get("path"), exc, exc_info=exc
            )
            response = JSONResponse(
                status_code=500, content={"success": False, "message": str(exc)}
            )
            await response(scope, receive, send)
