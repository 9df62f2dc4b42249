"""ASGI middleware: per-request logging context and timing headers."""

from __future__ import annotations

import time
import uuid

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from core.logger import bind_contextvars, clear_contextvars, get_logger

logger = get_logger(__name__)


class RequestLoggingMiddleware:
    """Binds request context for structlog and emits one line per request.

    Adds ``x-request-id`` and ``x-request-duration-ms`` response headers.
    Successful fast requests log at DEBUG; errors and slow requests at INFO.
    """

    SLOW_REQUEST_MS = 1000

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        request_id = str(uuid.uuid4())
        client = scope.get("client")

        clear_contextvars()
        bind_contextvars(
            request_id=request_id,
            http_method=scope.get("method", "UNKNOWN"),
            http_path=scope.get("path", ""),
            http_client_ip=client[0] if client else "unknown",
        )

        response_status: int | None = None

        async def send_wrapper(message: Message) -> None:
            nonlocal response_status

            if message.get("type") == "http.response.start":
                response_status = int(message.get("status", 0))
                duration_ms = (time.perf_counter() - start_time) * 1000
                headers: list[tuple[bytes, bytes]] = list(message.get("headers", []))
                headers.append(
                    (b"x-request-duration-ms", f"{duration_ms:.2f}".encode())
                )
                headers.append((b"x-request-id", request_id.encode()))
                message["headers"] = headers

            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
            route = scope.get("route")
            fields = {
                "http_route": getattr(route, "path", None) or scope.get("path", ""),
                "http_status_code": response_status,
                "duration_ms": duration_ms,
            }
            if (
                response_status is None
                or response_status >= 400
                or duration_ms > self.SLOW_REQUEST_MS
            ):
                logger.info("request.completed", **fields)
            else:
                logger.debug("request.completed", **fields)
            clear_contextvars()
