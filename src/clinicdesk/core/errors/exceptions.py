"""Application exceptions.

Each subclass fixes an HTTP status and a default ``error_code``; the
exception handlers render any of them as an RFC 7807 problem document,
with ``details`` merged in as extension members.
"""

from collections.abc import Sequence
from typing import Any


class AppException(Exception):
    """Base exception for all application errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for clients
        status_code: HTTP status code for the response
        details: Extra members for the problem document
    """

    status_code: int = 500
    error_code: str = "internal_error"
    message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.details = dict(details or {})
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.error_code!r}, status={self.status_code})"


def _with(details: dict[str, Any] | None, **extra: Any) -> dict[str, Any]:
    merged = dict(details or {})
    merged.update({k: v for k, v in extra.items() if v is not None})
    return merged


class BadRequestError(AppException):
    """The request is well-formed but cannot be carried out.

    Example:
        raise BadRequestError("You cannot deactivate your own account")
    """

    status_code = 400
    error_code = "bad_request"
    message = "Bad request"


class UnauthorizedError(AppException):
    """No usable credentials: missing or bad token, ended session, wrong password."""

    status_code = 401
    error_code = "unauthorized"
    message = "Authentication required"


class ForbiddenError(AppException):
    """The caller is known but may not do this (e.g. an inactive account)."""

    status_code = 403
    error_code = "forbidden"
    message = "Access forbidden"


class AccessDeniedError(ForbiddenError):
    """A role or permission requirement was not met.

    The requirement is echoed back so the client can explain the denial.

    Example:
        raise AccessDeniedError(
            "Missing required permission: manage_users",
            required_permissions=["manage_users"],
        )
    """

    error_code = "permission_denied"

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        *,
        required_roles: Sequence[str] | None = None,
        required_permissions: Sequence[str] | None = None,
        require_all: bool | None = None,
    ) -> None:
        super().__init__(
            message,
            error_code,
            details=_with(
                None,
                required_roles=list(required_roles) if required_roles else None,
                required_permissions=(
                    list(required_permissions) if required_permissions else None
                ),
                require_all=require_all,
            ),
        )


class NotFoundError(AppException):
    """Raised when a requested resource does not exist.

    Example:
        raise NotFoundError("User not found", resource="user", resource_id=user_id)
    """

    status_code = 404
    error_code = "not_found"
    message = "Resource not found"

    def __init__(
        self,
        message: str | None = None,
        resource: str | None = None,
        resource_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = _with(kwargs.pop("details", None), resource=resource, resource_id=resource_id)
        super().__init__(message=message, details=details, **kwargs)


class ConflictError(AppException):
    """Raised when a write clashes with existing data (e.g. a taken username)."""

    status_code = 409
    error_code = "conflict"
    message = "Resource conflict"


class ValidationError(AppException):
    """Raised when input outside the request body fails validation.

    Request bodies are validated by FastAPI; this covers the users file.

    Example:
        raise ValidationError(
            "Invalid users file",
            errors=[{"field": "[1].role", "message": "Input should be 'admin', ..."}],
        )
    """

    status_code = 422
    error_code = "validation_error"
    message = "Validation error"

    def __init__(
        self,
        message: str | None = None,
        errors: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> None:
        details = _with(kwargs.pop("details", None), errors=errors or None)
        super().__init__(message=message, details=details, **kwargs)
