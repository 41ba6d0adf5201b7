"""Pure ASGI middleware for correlation IDs and request logging."""

import time

import structlog
from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from pagegen.common.logging import set_correlation_id

logger = structlog.get_logger()

CORRELATION_HEADER = b"x-correlation-id"


class RequestContextMiddleware:
    """Tags each HTTP request with a correlation ID and logs it on completion.

    The ID is taken from ``X-Correlation-ID`` when the client sends one and is
    echoed back on the response.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        incoming_cid = next(
            (value.decode("latin-1") for name, value in scope.get("headers", []) if name == CORRELATION_HEADER),
            None,
        )
        cid = set_correlation_id(incoming_cid)

        start = time.perf_counter()
        status_code = 0

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                MutableHeaders(scope=message).append("X-Correlation-ID", cid)
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            logger.info(
                "http_request",
                method=scope["method"],
                path=scope["path"],
                status_code=status_code,
                latency_ms=round((time.perf_counter() - start) * 1000, 1),
            )
