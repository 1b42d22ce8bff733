"""RFC 7807 problem documents for every error the API returns.

Service errors, permission denials, request validation failures and
router misses all come out in one shape:

    {
        "type": "https://api.example.com/errors/permission_denied",
        "title": "Permission Denied",
        "status": 403,
        "detail": "Missing required permission: manage_users",
        "instance": "/api/v1/users",
        "trace_id": "4f0c...",
        "required_permissions": ["manage_users"]
    }

Members from ``AppException.details`` are appended after the standard
ones and cannot replace them.
"""

from typing import TYPE_CHECKING, Any, cast

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from starlette.exceptions import HTTPException as StarletteHTTPException

from clinicdesk.config import settings
from clinicdesk.core.errors.exceptions import AppException


if TYPE_CHECKING:
    from starlette.types import ExceptionHandler


logger = structlog.get_logger()

# Location prefixes FastAPI puts in front of field names
_LOCATION_PREFIXES = frozenset({"body", "query", "path", "header"})

_ROUTER_ERROR_CODES = {
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
}


class FieldError(BaseModel):
    field: str
    message: str
    type: str | None = None


class ProblemDetail(BaseModel):
    """Problem document body. Unknown members are kept as extensions."""

    model_config = ConfigDict(extra="allow")

    type: str
    title: str
    status: int
    detail: str
    instance: str | None = None
    errors: list[FieldError] | None = None
    trace_id: str | None = None

    @classmethod
    def build(
        cls,
        request: Request,
        status_code: int,
        error_code: str,
        detail: str,
        errors: list[FieldError] | None = None,
    ) -> "ProblemDetail":
        return cls(
            type=f"{settings.api_docs_base_url}/errors/{error_code}",
            title=error_code.replace("_", " ").title(),
            status=status_code,
            detail=detail,
            instance=request.url.path,
            errors=errors,
            trace_id=getattr(request.state, "trace_id", None),
        )

    def to_response(
        self,
        extensions: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> JSONResponse:
        body = self.model_dump(exclude_none=True)
        body.update({k: v for k, v in (extensions or {}).items() if k not in body})
        return JSONResponse(status_code=self.status, content=body, headers=headers)


def _field_name(loc: tuple[Any, ...]) -> str:
    parts = [str(part) for part in loc if part not in _LOCATION_PREFIXES]
    return ".".join(parts) or "unknown"


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    logger.warning(
        "app_exception",
        error_code=exc.error_code,
        status_code=exc.status_code,
        message=exc.message,
        path=request.url.path,
        details=exc.details,
    )
    problem = ProblemDetail.build(request, exc.status_code, exc.error_code, exc.message)
    return problem.to_response(extensions=exc.details)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """One ``errors`` entry per rejected field."""
    errors = [
        FieldError(
            field=_field_name(tuple(error.get("loc", ()))),
            message=error.get("msg", "Invalid value"),
            type=error.get("type"),
        )
        for error in exc.errors()
    ]
    logger.warning("validation_error", path=request.url.path, fields=[e.field for e in errors])
    problem = ProblemDetail.build(
        request,
        422,
        "validation_error",
        "Request validation failed",
        errors=errors,
    )
    return problem.to_response()


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Unknown paths and unsupported methods."""
    error_code = _ROUTER_ERROR_CODES.get(exc.status_code, "http_error")
    problem = ProblemDetail.build(request, exc.status_code, error_code, str(exc.detail))
    return problem.to_response(headers=exc.headers)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the traceback; the client only learns that something failed."""
    logger.exception("unhandled_exception", path=request.url.path, error_type=type(exc).__name__)
    problem = ProblemDetail.build(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "internal_error",
        "An unexpected error occurred",
    )
    return problem.to_response()


def register_exception_handlers(app: FastAPI) -> None:
    handlers: list[tuple[type[Exception], Any]] = [
        (AppException, app_exception_handler),
        (RequestValidationError, validation_exception_handler),
        (StarletteHTTPException, http_exception_handler),
        (Exception, generic_exception_handler),
    ]
    for exc_class, handler in handlers:
        app.add_exception_handler(exc_class, cast("ExceptionHandler", handler))
