"""Permission evaluation.

This module answers access questions about a single user record. Every
check is a pure function of the record: no I/O, no logging, no hidden
state, and no exceptions. Anything unexpected (no user, inactive user,
unknown tag or role) evaluates to ``False``.

The admin bypass lives in exactly one place, ``_bypass``, and every
permission predicate goes through ``_evaluate``.
"""

from collections.abc import Callable, Iterable
from functools import lru_cache

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from clinicdesk.core.permissions.catalog import ADMIN_ROLE, ALL_PERMISSIONS, Permission, Role
from clinicdesk.core.permissions.models import UserRecord


PermissionLike = Permission | str
RoleLike = Role | str


class Capabilities(BaseModel):
    """Resolved capability set handed to the front end.

    Serialized with camelCase keys (``canViewPatients``) to match the
    client's existing flags.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    is_active: bool
    is_admin: bool
    current_role: Role | None
    permissions: list[Permission]

    can_view_patients: bool
    can_manage_patients: bool
    can_view_staff: bool
    can_manage_staff: bool
    can_view_finance: bool
    can_manage_finance: bool
    can_view_payroll: bool
    can_manage_payroll: bool
    can_view_users: bool
    can_manage_users: bool
    can_view_reports: bool
    can_manage_settings: bool
    can_manage_database: bool


def _as_tuple(values: object) -> tuple[object, ...]:
    # A bare string is one value, not a sequence of characters
    if isinstance(values, str):
        return (values,)
    if isinstance(values, Iterable):
        return tuple(values)
    return ()


def _holds(granted: frozenset[Permission], tag: object) -> bool:
    try:
        return tag in granted
    except TypeError:
        # Unhashable input is not a tag
        return False


def _single_tag_predicate(permission: Permission) -> property:
    def predicate(self: "PermissionEvaluator") -> bool:
        return self.has_permission(permission)

    predicate.__doc__ = f"True if the user holds ``{permission.value}``."
    return property(predicate)


class PermissionEvaluator:
    """Capability checks for one user record (or no user at all).

    Example:
        evaluator = PermissionEvaluator(user)
        if evaluator.can_manage_payroll:
            ...
        evaluator.has_any_permission(["view_finance", "view_payroll"])
    """

    __slots__ = ("_user",)

    def __init__(self, user: UserRecord | None) -> None:
        self._user = user

    @property
    def user(self) -> UserRecord | None:
        return self._user

    # ------------------------------------------------------------
    # Core rules
    # ------------------------------------------------------------

    def _active_user(self) -> UserRecord | None:
        if self._user is None or not self._user.is_active:
            return None
        return self._user

    @staticmethod
    def _bypass(user: UserRecord) -> bool:
        return user.role == ADMIN_ROLE

    def _evaluate(self, check: Callable[[frozenset[Permission]], bool]) -> bool:
        user = self._active_user()
        if user is None:
            return False
        if self._bypass(user):
            return True
        return check(user.permissions)

    # ------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------

    def has_permission(self, permission: PermissionLike) -> bool:
        """Check a single permission tag."""
        return self._evaluate(lambda granted: _holds(granted, permission))

    def has_any_permission(self, permissions: Iterable[PermissionLike]) -> bool:
        """Check that at least one tag is held. An empty list is never satisfied."""
        tags = _as_tuple(permissions)
        return self._evaluate(lambda granted: any(_holds(granted, t) for t in tags))

    def has_all_permissions(self, permissions: Iterable[PermissionLike]) -> bool:
        """Check that every tag is held. An empty list is always satisfied."""
        tags = _as_tuple(permissions)
        return self._evaluate(lambda granted: all(_holds(granted, t) for t in tags))

    def has_role(self, roles: RoleLike | Iterable[RoleLike]) -> bool:
        """Check the user's role against one role or a collection of roles.

        No bypass applies here: an admin only matches when ``admin`` is
        among the requested roles.
        """
        user = self._active_user()
        if user is None or user.role is None:
            return False
        return user.role in _as_tuple(roles)

    can_view_patients = _single_tag_predicate(Permission.VIEW_PATIENTS)
    can_manage_patients = _single_tag_predicate(Permission.MANAGE_PATIENTS)
    can_view_staff = _single_tag_predicate(Permission.VIEW_STAFF)
    can_manage_staff = _single_tag_predicate(Permission.MANAGE_STAFF)
    can_view_finance = _single_tag_predicate(Permission.VIEW_FINANCE)
    can_manage_finance = _single_tag_predicate(Permission.MANAGE_FINANCE)
    can_view_payroll = _single_tag_predicate(Permission.VIEW_PAYROLL)
    can_manage_payroll = _single_tag_predicate(Permission.MANAGE_PAYROLL)
    can_view_users = _single_tag_predicate(Permission.VIEW_USERS)
    can_manage_users = _single_tag_predicate(Permission.MANAGE_USERS)
    can_view_reports = _single_tag_predicate(Permission.VIEW_REPORTS)
    can_manage_settings = _single_tag_predicate(Permission.MANAGE_SETTINGS)
    can_manage_database = _single_tag_predicate(Permission.MANAGE_DATABASE)

    # ------------------------------------------------------------
    # Informational
    # ------------------------------------------------------------

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    @property
    def is_active(self) -> bool:
        return self._user is not None and self._user.is_active

    @property
    def is_admin(self) -> bool:
        return self._user is not None and self._bypass(self._user)

    @property
    def current_role(self) -> Role | None:
        return self._user.role if self._user is not None else None

    def effective_permissions(self) -> frozenset[Permission]:
        """Every tag that ``has_permission`` would accept from the catalog."""
        user = self._active_user()
        if user is None:
            return frozenset()
        if self._bypass(user):
            return ALL_PERMISSIONS
        return user.permissions

    def capabilities(self) -> Capabilities:
        """Resolve the full capability set in one go."""
        return Capabilities(
            is_active=self.is_active,
            is_admin=self.is_admin,
            current_role=self.current_role,
            permissions=sorted(self.effective_permissions()),
            can_view_patients=self.can_view_patients,
            can_manage_patients=self.can_manage_patients,
            can_view_staff=self.can_view_staff,
            can_manage_staff=self.can_manage_staff,
            can_view_finance=self.can_view_finance,
            can_manage_finance=self.can_manage_finance,
            can_view_payroll=self.can_view_payroll,
            can_manage_payroll=self.can_manage_payroll,
            can_view_users=self.can_view_users,
            can_manage_users=self.can_manage_users,
            can_view_reports=self.can_view_reports,
            can_manage_settings=self.can_manage_settings,
            can_manage_database=self.can_manage_database,
        )


@lru_cache(maxsize=1024)
def get_evaluator(user: UserRecord | None) -> PermissionEvaluator:
    """Return the (shared) evaluator for a user record.

    Records are immutable, so the evaluator never needs invalidating; a
    permission change produces a new record and therefore a new entry.
    """
    return PermissionEvaluator(user)
