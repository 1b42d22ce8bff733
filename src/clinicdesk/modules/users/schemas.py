"""Pydantic schemas for user administration and the role catalog."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from clinicdesk.core.constants import (
    MAX_NAME_LENGTH,
    MAX_PASSWORD_LENGTH,
    MAX_USERNAME_LENGTH,
    MIN_PASSWORD_LENGTH,
)
from clinicdesk.core.permissions.catalog import Permission, Role
from clinicdesk.modules.users.models import StoredUser


class CamelModel(BaseModel):
    """Accepts snake_case or camelCase, emits camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================
# User Schemas
# ============================================================


class UserCreate(CamelModel):
    """Schema for creating an account.

    ``permissions`` left out means "use the role's default bundle".
    """

    username: str = Field(..., min_length=1, max_length=MAX_USERNAME_LENGTH)
    full_name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    password: str = Field(
        ..., min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH
    )
    role: Role
    permissions: list[Permission] | None = None
    is_active: bool = True


class PermissionsUpdate(CamelModel):
    """Replace an account's grants, optionally moving it to another role."""

    permissions: list[Permission]
    role: Role | None = None


class StatusUpdate(CamelModel):
    is_active: bool


class UserUpdate(CamelModel):
    """Profile fields; anything left out stays as it is."""

    username: str | None = Field(None, min_length=1, max_length=MAX_USERNAME_LENGTH)
    full_name: str | None = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    password: str | None = Field(
        None, min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH
    )


class UserResponse(CamelModel):
    """Schema for user response data. Never carries the password hash."""

    id: str
    username: str
    full_name: str
    role: Role
    permissions: list[Permission]
    is_active: bool
    created_at: datetime
    last_login_at: datetime | None = None

    @classmethod
    def from_stored(cls, user: StoredUser) -> "UserResponse":
        return cls(
            id=user.id,
            username=user.username,
            full_name=user.full_name,
            role=user.role,
            permissions=sorted(user.permissions),
            is_active=user.is_active,
            created_at=user.created_at,
            last_login_at=user.last_login_at,
        )


class UserListResponse(CamelModel):
    items: list[UserResponse]
    total: int


# ============================================================
# Catalog Schemas
# ============================================================


class PermissionResponse(CamelModel):
    permission: Permission
    label: str


class RoleResponse(CamelModel):
    role: Role
    label: str
    default_permissions: list[Permission]
    implicit_all: bool = Field(
        False, description="True for the role that holds every permission"
    )
