"""Middleware that puts request, user and session ids into the log context."""

import uuid
from collections.abc import Iterable
from typing import TYPE_CHECKING

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from clinicdesk.core.auth.backend import decode_token


if TYPE_CHECKING:
    from starlette.types import ASGIApp


_CONTEXT_KEYS = ("request_id", "user_id", "session_id")


def _bearer_token(request: Request) -> str | None:
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme == "Bearer" and token:
        return token
    return None


class UserContextMiddleware(BaseHTTPMiddleware):
    """Copy the token's ``sub`` and ``sid`` onto ``request.state`` and the log context.

    Only the signature is checked. Whether the session is still live is up
    to the auth dependencies, so a revoked token still gets its ids logged.
    """

    def __init__(self, app: "ASGIApp", exclude_paths: Iterable[str] | None = None) -> None:
        super().__init__(app)
        self.exclude_paths = tuple(
            exclude_paths
            if exclude_paths is not None
            else ("/health", "/docs", "/redoc", "/openapi.json", "/api/v1/auth/login")
        )

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        token = None if request.url.path.startswith(self.exclude_paths) else _bearer_token(request)
        token_data = decode_token(token) if token else None

        if token_data is not None:
            request.state.user_id = token_data.user_id
            request.state.session_id = token_data.session_id
            structlog.contextvars.bind_contextvars(
                user_id=token_data.user_id,
                session_id=token_data.session_id,
            )

        return await call_next(request)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Give each request an id, reusing the caller's ``X-Request-ID`` if sent.

    The id is echoed in the response header, bound to the log context, and
    stored as ``request.state.trace_id`` for problem documents.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = request.state.trace_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)

        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars(*_CONTEXT_KEYS)

        response.headers["X-Request-ID"] = request_id
        return response
