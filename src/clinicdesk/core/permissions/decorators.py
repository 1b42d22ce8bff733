"""Permission decorators for route protection.

These decorators enforce the same precedence as ``check_access`` on
FastAPI routes. The decorated handler must accept a ``current_user``
keyword (usually ``OptionalUser`` so a missing token reaches the guard as
``None``); denials surface as RFC 7807 responses via the registered
exception handlers.

Usage:
    @router.get("/payroll")
    @require_permission(Permission.VIEW_PAYROLL)
    async def list_payroll(current_user: OptionalUser):
        ...
"""

from collections.abc import Awaitable, Callable, Iterable
from functools import wraps
from typing import TYPE_CHECKING, Any, ParamSpec, TypeVar, cast

import structlog

from clinicdesk.core.errors import AccessDeniedError, ForbiddenError, UnauthorizedError
from clinicdesk.core.permissions.evaluator import PermissionLike, RoleLike, get_evaluator
from clinicdesk.core.permissions.guard import (
    AccessDecision,
    AccessOutcome,
    AccessRequirement,
    check_access,
)
from clinicdesk.core.permissions.models import UserRecord


if TYPE_CHECKING:
    from fastapi import Request


logger = structlog.get_logger()

P = ParamSpec("P")
R = TypeVar("R")


def _get_user_and_request(
    kwargs: dict[str, Any],
) -> tuple[UserRecord | None, "Request | None"]:
    user = cast("UserRecord | None", kwargs.get("current_user"))
    request = cast("Request | None", kwargs.get("request"))
    return user, request


def _raise_for(decision: AccessDecision) -> None:
    """Translate a denied decision into the matching HTTP error."""
    requirement = decision.requirement

    if decision.outcome is AccessOutcome.AUTHENTICATION_REQUIRED:
        raise UnauthorizedError(decision.message, error_code="auth_required")

    if decision.outcome is AccessOutcome.ACCOUNT_INACTIVE:
        raise ForbiddenError(decision.message, error_code="account_inactive")

    if decision.outcome is AccessOutcome.MISSING_ROLE:
        raise AccessDeniedError(
            f"Role not allowed. Need one of: {', '.join(requirement.roles)}",
            error_code="missing_role",
            required_roles=requirement.roles,
        )

    if decision.outcome is AccessOutcome.MISSING_PERMISSION:
        raise AccessDeniedError(
            f"Missing required permission: {requirement.permission}",
            required_permissions=[requirement.permission],
        )

    joiner = "all of" if decision.outcome is AccessOutcome.MISSING_ALL_PERMISSIONS else "one of"
    raise AccessDeniedError(
        f"Missing required permissions. Need {joiner}: {', '.join(requirement.permissions)}",
        required_permissions=requirement.permissions,
        require_all=requirement.require_all,
    )


def enforce(
    user: UserRecord | None,
    requirement: AccessRequirement,
    request: "Request | None" = None,
) -> None:
    """Raise unless ``user`` satisfies ``requirement``.

    Denials are logged as ``access_denied``. An admin passing a permission
    check is logged as ``admin_bypass`` at warning level for auditing.

    Args:
        user: Session user, or None for an anonymous caller
        requirement: Roles and permissions the route needs
        request: Current request, used for the logged endpoint

    Raises:
        UnauthorizedError: No authenticated user
        ForbiddenError: Inactive account
        AccessDeniedError: Wrong role or missing permissions
    """
    decision = check_access(user, requirement)
    path = request.url.path if request else "unknown"

    if not decision.allowed:
        logger.warning(
            "access_denied",
            user_id=user.id if user else None,
            outcome=decision.outcome.value,
            endpoint=path,
        )
        _raise_for(decision)

    if user is not None and get_evaluator(user).is_admin and (
        requirement.permission or requirement.permissions
    ):
        logger.warning(
            "admin_bypass",
            user_id=user.id,
            permissions=[p for p in (requirement.permission, *requirement.permissions) if p],
            endpoint=path,
        )


def require_access(
    requirement: AccessRequirement,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator enforcing an arbitrary ``AccessRequirement``."""

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            user, request = _get_user_and_request(kwargs)
            enforce(user, requirement, request)
            return await func(*args, **kwargs)

        return wrapper

    return decorator


def require_permission(
    permission: PermissionLike,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator that requires a single permission tag."""
    return require_access(AccessRequirement.build(permission=permission))


def require_any_permission(
    permissions: Iterable[PermissionLike],
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator that requires at least one of the given tags."""
    return require_access(AccessRequirement.build(permissions=permissions))


def require_all_permissions(
    permissions: Iterable[PermissionLike],
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator that requires every one of the given tags."""
    return require_access(
        AccessRequirement.build(permissions=permissions, require_all=True)
    )


def require_role(
    role: RoleLike | Iterable[RoleLike],
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator that requires one of the given roles. Admins get no bypass."""
    return require_access(AccessRequirement.build(role=role))


def require_self_or_permission(
    permission: PermissionLike,
    param: str = "user_id",
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Let users reach their own record; anyone else needs ``permission``.

    The target id is read from the ``param`` keyword (the path parameter).
    An inactive caller is refused even for their own record.
    """
    requirement = AccessRequirement.build(permission=permission)

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            user, request = _get_user_and_request(kwargs)
            target_id = kwargs.get(param)

            self_access = check_access(user, AccessRequirement())
            if (
                self_access.allowed
                and user is not None
                and target_id is not None
                and str(target_id) == user.id
            ):
                return await func(*args, **kwargs)

            enforce(user, requirement, request)
            return await func(*args, **kwargs)

        return wrapper

    return decorator
