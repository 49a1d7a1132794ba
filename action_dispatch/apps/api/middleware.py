"""Request middleware: correlation ids and one completion log line per request."""

from __future__ import annotations

import time
import uuid
from typing import Any

from action_dispatch.core.logging import (
    bind_correlation_id,
    get_logger,
    reset_correlation_id,
)

logger = get_logger(__name__)


class CorrelationIdMiddleware:  # pylint: disable=too-few-public-methods
    """Bind a correlation id for each HTTP request and echo it in responses.

    The completion log carries the dispatch route (origin, controller and
    action) when the dispatch endpoint stored one on ``request.state``.
    """

    header_names = ("X-Request-ID", "X-Correlation-ID")

    def __init__(self, app) -> None:  # type: ignore[no-untyped-def]
        self.app = app

    async def __call__(self, scope, receive, send):  # type: ignore[no-untyped-def]
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        incoming = {k.decode().lower(): v.decode() for k, v in scope.get("headers", [])}
        correlation_id = next(
            (incoming[h.lower()] for h in self.header_names if incoming.get(h.lower())),
            uuid.uuid4().hex,
        )
        echoed = [(h.encode(), correlation_id.encode()) for h in self.header_names]
        state = scope.setdefault("state", {})
        token = bind_correlation_id(correlation_id)
        started = time.perf_counter()
        status_code = 500

        async def send_with_ids(message):  # type: ignore[no-untyped-def]
            nonlocal status_code
            if message.get("type") == "http.response.start":
                status_code = int(message.get("status") or 500)
                present = {key.decode().lower() for key, _ in message.get("headers", [])}
                message["headers"] = list(message.get("headers", [])) + [
                    pair for pair in echoed if pair[0].decode().lower() not in present
                ]
            await send(message)

        try:
            await self.app(scope, receive, send_with_ids)
        finally:
            extra: dict[str, Any] = {
                "event": "http_request",
                "method": scope.get("method", ""),
                "path": scope.get("path", ""),
                "status_code": status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000.0, 2),
            }
            extra.update(state.get("dispatch") or {})
            logger.info("request completed", extra=extra)
            reset_correlation_id(token)


__all__ = ["CorrelationIdMiddleware"]
