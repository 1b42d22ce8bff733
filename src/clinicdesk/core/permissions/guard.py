"""Access guards.

``check_access`` turns a user record and an ``AccessRequirement`` into
exactly one ``AccessDecision``. The checks run in a fixed order and the
first failing one wins:

1. no user                      -> AUTHENTICATION_REQUIRED
2. inactive user                -> ACCOUNT_INACTIVE
3. required role(s) not held    -> MISSING_ROLE
4. required permission not held -> MISSING_PERMISSION
5. permission list not satisfied
   (all / any per require_all)  -> MISSING_ALL_PERMISSIONS / MISSING_ANY_PERMISSION
6. otherwise                    -> GRANTED

``AccessGuard`` picks between protected content, a fallback and a
``Denial`` for whole views; ``PermissionGate`` applies the same order but
always degrades silently to its fallback.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, field_validator

from clinicdesk.core.permissions.evaluator import PermissionLike, RoleLike, get_evaluator
from clinicdesk.core.permissions.models import UserRecord


T = TypeVar("T")
F = TypeVar("F")


class AccessOutcome(StrEnum):
    GRANTED = "granted"
    AUTHENTICATION_REQUIRED = "authentication_required"
    ACCOUNT_INACTIVE = "account_inactive"
    MISSING_ROLE = "missing_role"
    MISSING_PERMISSION = "missing_permission"
    MISSING_ANY_PERMISSION = "missing_any_permission"
    MISSING_ALL_PERMISSIONS = "missing_all_permissions"


DENIAL_MESSAGES: dict[AccessOutcome, str] = {
    AccessOutcome.AUTHENTICATION_REQUIRED: "You must sign in to access this page",
    AccessOutcome.ACCOUNT_INACTIVE: "Your account is inactive. Please contact the administration",
    AccessOutcome.MISSING_ROLE: "You do not have the role required to access this page",
    AccessOutcome.MISSING_PERMISSION: "You do not have permission to access this feature",
    AccessOutcome.MISSING_ANY_PERMISSION: (
        "You do not have any of the permissions required to access this feature"
    ),
    AccessOutcome.MISSING_ALL_PERMISSIONS: (
        "You do not have all of the permissions required to access this feature"
    ),
}

# Outcomes where a caller-supplied fallback replaces the denial
_FALLBACK_OUTCOMES = frozenset(
    {
        AccessOutcome.MISSING_ROLE,
        AccessOutcome.MISSING_PERMISSION,
        AccessOutcome.MISSING_ANY_PERMISSION,
        AccessOutcome.MISSING_ALL_PERMISSIONS,
    }
)


def _as_list(value: object) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Iterable):
        return [str(v) for v in value]
    return []


class AccessRequirement(BaseModel):
    """What a view, route or UI affordance needs from its user.

    Attributes:
        roles: Accepted roles; empty means no role check
        permission: A single required tag
        permissions: A list of tags checked with any/all semantics
        require_all: Use all-of instead of any-of for ``permissions``
    """

    model_config = ConfigDict(frozen=True)

    roles: tuple[str, ...] = ()
    permission: str | None = None
    permissions: tuple[str, ...] = ()
    require_all: bool = False

    @field_validator("roles", "permissions", mode="before")
    @classmethod
    def listify(cls, v: object) -> tuple[str, ...]:
        return tuple(_as_list(v))

    @classmethod
    def build(
        cls,
        *,
        role: RoleLike | Iterable[RoleLike] | None = None,
        permission: PermissionLike | None = None,
        permissions: Iterable[PermissionLike] | None = None,
        require_all: bool = False,
    ) -> "AccessRequirement":
        """Keyword constructor mirroring the guard's call-site vocabulary.

        Args:
            role: One role or several; the user must hold one of them
            permission: A single tag the user must hold
            permissions: Tags checked as a group
            require_all: Need every tag in ``permissions`` rather than any one

        Returns:
            A frozen requirement with roles and tags stored as strings
        """
        return cls(
            roles=role,
            permission=str(permission) if permission is not None else None,
            permissions=permissions,
            require_all=require_all,
        )


@dataclass(frozen=True)
class AccessDecision:
    outcome: AccessOutcome
    requirement: AccessRequirement

    @property
    def allowed(self) -> bool:
        return self.outcome is AccessOutcome.GRANTED

    @property
    def message(self) -> str | None:
        return DENIAL_MESSAGES.get(self.outcome)


@dataclass(frozen=True)
class Denial:
    """What an ``AccessGuard`` renders instead of the protected content."""

    outcome: AccessOutcome
    message: str


def check_access(
    user: UserRecord | None,
    requirement: AccessRequirement | None = None,
) -> AccessDecision:
    """Evaluate ``requirement`` for ``user``; never raises.

    Checks run in a fixed order and the first failure wins: missing user,
    inactive account, role, single permission, then the permission group.

    Args:
        user: Session user, or None for an anonymous caller
        requirement: What is needed; None means any active user

    Returns:
        The decision, carrying its outcome and the requirement checked
    """
    requirement = requirement or AccessRequirement()
    evaluator = get_evaluator(user)

    def decide(outcome: AccessOutcome) -> AccessDecision:
        return AccessDecision(outcome=outcome, requirement=requirement)

    if user is None:
        return decide(AccessOutcome.AUTHENTICATION_REQUIRED)

    if not user.is_active:
        return decide(AccessOutcome.ACCOUNT_INACTIVE)

    if requirement.roles and not evaluator.has_role(requirement.roles):
        return decide(AccessOutcome.MISSING_ROLE)

    if requirement.permission and not evaluator.has_permission(requirement.permission):
        return decide(AccessOutcome.MISSING_PERMISSION)

    if requirement.permissions:
        if requirement.require_all:
            if not evaluator.has_all_permissions(requirement.permissions):
                return decide(AccessOutcome.MISSING_ALL_PERMISSIONS)
        elif not evaluator.has_any_permission(requirement.permissions):
            return decide(AccessOutcome.MISSING_ANY_PERMISSION)

    return decide(AccessOutcome.GRANTED)


class AccessGuard:
    """Route-level guard: protected content, a fallback, or a ``Denial``.

    The fallback only replaces role and permission denials. A missing or
    inactive user always gets the matching ``Denial``.
    """

    def __init__(
        self,
        user: UserRecord | None,
        requirement: AccessRequirement | None = None,
    ) -> None:
        self.user = user
        self.requirement = requirement or AccessRequirement()

    def decide(self) -> AccessDecision:
        return check_access(self.user, self.requirement)

    def render(self, content: T, fallback: F | None = None) -> T | F | Denial:
        decision = self.decide()
        if decision.allowed:
            return content
        if fallback is not None and decision.outcome in _FALLBACK_OUTCOMES:
            return fallback
        return Denial(outcome=decision.outcome, message=decision.message or "")


class PermissionGate(Generic[F]):
    """Inline guard for UI affordances: content or a silent fallback."""

    def __init__(
        self,
        user: UserRecord | None,
        requirement: AccessRequirement | None = None,
        fallback: F | None = None,
    ) -> None:
        self.user = user
        self.requirement = requirement or AccessRequirement()
        self.fallback = fallback

    def allows(self) -> bool:
        return check_access(self.user, self.requirement).allowed

    def render(self, content: T) -> T | F | None:
        return content if self.allows() else self.fallback
