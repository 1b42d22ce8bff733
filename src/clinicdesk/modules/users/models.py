"""Stored user accounts."""

from datetime import UTC, datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from clinicdesk.core.constants import MAX_NAME_LENGTH, MAX_USERNAME_LENGTH
from clinicdesk.core.permissions.catalog import Permission, Role
from clinicdesk.core.permissions.models import UserRecord


def _new_id() -> str:
    return str(uuid4())


class StoredUser(BaseModel):
    """A user account as kept by the repository.

    Unlike ``UserRecord`` this model is strict: an unknown role or
    permission tag is a validation error, so a broken users file fails at
    startup instead of silently under-granting.

    Attributes:
        id: Opaque identifier
        username: Unique login name (compared case-insensitively)
        full_name: Display name
        password_hash: Bcrypt hash
        role: Job-function role
        permissions: Explicit grants
        is_active: Whether the account may sign in
        created_at: When the account was created
        last_login_at: Time of the last successful sign-in, None if never
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    username: str = Field(..., min_length=1, max_length=MAX_USERNAME_LENGTH)
    full_name: str = Field("", max_length=MAX_NAME_LENGTH)
    password_hash: str
    role: Role
    permissions: frozenset[Permission] = frozenset()
    is_active: bool = True
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    last_login_at: datetime | None = None

    def to_record(self) -> UserRecord:
        """Snapshot the account for a session."""
        return UserRecord(
            id=self.id,
            username=self.username,
            full_name=self.full_name,
            role=self.role,
            permissions=self.permissions,
            is_active=self.is_active,
        )
