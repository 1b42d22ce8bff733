"""Request logging middleware.

One ``request_started`` and one ``request_completed`` event per request.
401 and 403 responses are flagged ``denied`` and logged at warning level
with the caller's user and session ids, as resolved by the user-context
middleware, so refused access attempts are easy to pull out of the log.
"""

import time
from collections.abc import Iterable
from typing import Any

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint


logger = structlog.get_logger()

DEFAULT_EXCLUDED = ("/health/live", "/docs", "/redoc", "/openapi.json")


def _level_for(status_code: int) -> str:
    if status_code >= 500:
        return "error"
    if status_code >= 400:
        return "warning"
    return "info"


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each request through a logger bound to its method and path."""

    def __init__(self, app: Any, exclude_paths: Iterable[str] | None = None) -> None:
        super().__init__(app)
        self.exclude_paths = tuple(exclude_paths) if exclude_paths is not None else DEFAULT_EXCLUDED

    def _skipped(self, path: str) -> bool:
        return path.startswith(self.exclude_paths)

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        if self._skipped(request.url.path):
            return await call_next(request)

        log = logger.bind(method=request.method, path=request.url.path)
        started = time.perf_counter()
        log.info(
            "request_started",
            client_ip=get_client_ip(request),
            query=str(request.url.query) or None,
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            log.exception("request_failed", duration_ms=_elapsed_ms(started), error=str(exc))
            raise

        status = response.status_code
        fields: dict[str, Any] = {"status_code": status, "duration_ms": _elapsed_ms(started)}
        for key in ("user_id", "session_id"):
            value = getattr(request.state, key, None)
            if value:
                fields[key] = str(value)
        if status in (401, 403):
            fields["denied"] = True

        getattr(log, _level_for(status))("request_completed", **fields)
        return response


def get_client_ip(request: Request) -> str | None:
    """Best guess at the caller's address.

    A proxy's X-Forwarded-For (first hop) wins over X-Real-IP, which wins
    over the socket peer.
    """
    forwarded = request.headers.get("X-Forwarded-For", "")
    first_hop = forwarded.split(",", 1)[0].strip()
    if first_hop:
        return first_hop
    return request.headers.get("X-Real-IP") or (request.client.host if request.client else None)
