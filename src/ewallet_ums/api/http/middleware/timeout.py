"""Per-request deadline enforced around the downstream ASGI app."""

import asyncio
import json

from loguru import logger
from starlette.types import ASGIApp, Message, Receive, Scope, Send


class RequestTimeoutMiddleware:
    """Cancel the handler once ``timeout`` seconds elapse.

    Cancellation reaches the handler's pending awaits (including database round
    trips). If nothing was sent yet the client receives a 504 error envelope;
    otherwise the connection is left to the server to close.
    """

    def __init__(self, app: ASGIApp, timeout: float) -> None:
        self.app = app
        self.timeout = timeout

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await asyncio.wait_for(self.app(scope, receive, send_wrapper), self.timeout)
        except TimeoutError:
            logger.warning(
                "Request exceeded {}s timeout: {} {}",
                self.timeout,
                scope.get("method"),
                scope.get("path"),
            )
            if response_started:
                raise
            await self._send_timeout(scope, send)

    async def _send_timeout(self, scope: Scope, send: Send) -> None:
        request_id = scope.get("state", {}).get("request_id")
        payload = {"success": False, "message": "Request timed out"}
        if request_id:
            payload["request_id"] = request_id
        body = json.dumps(payload).encode("utf-8")

        headers = [
            (b"content-type", b"application/json"),
            (b"content-length", str(len(body)).encode("latin-1")),
        ]
        if request_id:
            headers.append((b"x-request-id", request_id.encode("latin-1")))

        await send({"type": "http.response.start", "status": 504, "headers": headers})
        await send({"type": "http.response.body", "body": body})
