"""Session-scoped user record consumed by the permission evaluator."""

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from clinicdesk.core.permissions.catalog import Permission, Role, parse_permission, parse_role


class UserRecord(BaseModel):
    """Immutable snapshot of an authenticated user.

    Accepts both the camelCase wire shape (``fullName``, ``isActive``) and
    attribute names. Unknown roles become ``None`` and unknown permission
    tags are dropped, so a malformed record can only ever under-grant.

    Attributes:
        id: Opaque user identifier
        username: Login name
        full_name: Display name
        role: Catalog role, or None when the stored role is not recognised
        permissions: Explicitly granted tags (ignored for admins)
        is_active: Inactive records fail every capability check
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str
    username: str
    full_name: str = ""
    role: Role | None = None
    permissions: frozenset[Permission] = frozenset()
    is_active: bool = False

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        return str(v)

    @field_validator("role", mode="before")
    @classmethod
    def coerce_role(cls, v: Any) -> Role | None:
        if isinstance(v, Role) or v is None:
            return v
        if isinstance(v, str):
            return parse_role(v)
        return None

    @field_validator("permissions", mode="before")
    @classmethod
    def drop_unknown_permissions(cls, v: Any) -> frozenset[Permission]:
        if v is None:
            return frozenset()
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, Iterable):
            return frozenset()
        parsed = (parse_permission(str(tag)) for tag in v)
        return frozenset(p for p in parsed if p is not None)

    @field_serializer("permissions")
    def serialize_permissions(self, permissions: frozenset[Permission]) -> list[str]:
        return sorted(p.value for p in permissions)
