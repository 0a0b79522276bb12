"""Structured logging setup and request middlewares for doodle-py.

Every module logs through structlog with key/value fields. The two ASGI
middlewares bind a correlation id for each HTTP request or WebSocket
connection and log completed HTTP requests.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from litestar.types import ASGIApp, Message, Receive, Scope, Send

CORRELATION_HEADER = b"x-correlation-id"
REQUEST_ID_HEADER = b"x-request-id"
DEFAULT_EXCLUDED_PATHS = frozenset({"/health", "/ready", "/favicon.ico"})


def configure_logging(*, debug: bool = False, json_logs: bool = False) -> None:
    """Configure structlog for the application.

    Args:
        debug: Log at DEBUG instead of INFO.
        json_logs: Render JSON lines instead of coloured console output.
    """
    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_logs:
        processors.extend(
            [
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ]
        )
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG if debug else logging.INFO),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _incoming_correlation_id(scope: Scope) -> str:
    headers = dict(scope.get("headers", []))
    return (
        headers.get(CORRELATION_HEADER, b"").decode()
        or headers.get(REQUEST_ID_HEADER, b"").decode()
        or uuid.uuid4().hex
    )


class CorrelationIdMiddleware:
    """Binds a correlation id to the structlog context of each connection.

    The id comes from the ``X-Correlation-ID`` or ``X-Request-ID`` header
    when present. HTTP responses echo it back; WebSocket connections keep it
    bound for as long as the socket is open.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return

        correlation_id = _incoming_correlation_id(scope)
        scope.setdefault("state", {})["correlation_id"] = correlation_id

        structlog.contextvars.clear_contextvars()
        if scope["type"] == "websocket":
            structlog.contextvars.bind_contextvars(correlation_id=correlation_id, ws_path=scope.get("path", ""))
        else:
            structlog.contextvars.bind_contextvars(
                correlation_id=correlation_id,
                path=scope.get("path", ""),
                method=scope.get("method", ""),
            )

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                headers.append((CORRELATION_HEADER, correlation_id.encode()))
                message["headers"] = headers
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            structlog.contextvars.clear_contextvars()


class RequestLoggingMiddleware:
    """Logs status and duration of each HTTP request.

    5xx responses log at ERROR, 4xx at WARNING, the rest at INFO. Health
    check paths are skipped.
    """

    def __init__(self, app: ASGIApp, *, exclude_paths: set[str] | frozenset[str] | None = None) -> None:
        """Initialize the middleware.

        Args:
            app: The ASGI application.
            exclude_paths: Paths not to log. Defaults to the health checks.
        """
        self.app = app
        self.exclude_paths = exclude_paths if exclude_paths is not None else DEFAULT_EXCLUDED_PATHS

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope.get("path", "") in self.exclude_paths:
            await self.app(scope, receive, send)
            return

        logger = structlog.get_logger(__name__)
        start_time = time.perf_counter()
        status_code = 500
        client = scope.get("client")
        client_ip = client[0] if client else "unknown"

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 500)
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception:
            logger.exception("Request failed with exception", client_ip=client_ip)
            raise
        finally:
            if status_code >= 500:
                log_method = logger.error
            elif status_code >= 400:
                log_method = logger.warning
            else:
                log_method = logger.info
            log_method(
                "Request completed",
                status_code=status_code,
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
                client_ip=client_ip,
            )


def get_middleware() -> list:
    """Logging middlewares, outermost first."""
    return [CorrelationIdMiddleware, RequestLoggingMiddleware]
