"""User repository.

Accounts live in memory for the life of the process, optionally seeded
from a YAML users file:

    - username: admin
      full_name: Clinic Administrator
      password_hash: "$2b$12$..."
      role: admin
    - username: reception
      full_name: Front Desk
      password_hash: "$2b$12$..."
      role: receptionist
      permissions: [view_patients, manage_patients]

``permissions`` defaults to the role's bundle when omitted.
"""

from collections.abc import Iterable
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any

import pydantic
import structlog
import yaml
from fastapi import Depends

from clinicdesk.config import settings
from clinicdesk.core.errors import ConflictError, ValidationError
from clinicdesk.core.permissions.catalog import default_permissions, parse_role
from clinicdesk.modules.users.models import StoredUser


logger = structlog.get_logger()


class UserRepository:
    """Repository for user accounts, keyed by id."""

    def __init__(self, users: Iterable[StoredUser] = ()) -> None:
        self._users: dict[str, StoredUser] = {}
        for user in users:
            self._insert(user)

    def _insert(self, user: StoredUser) -> None:
        if user.id in self._users:
            raise ConflictError(
                "User id already exists",
                error_code="user_id_exists",
                details={"user_id": user.id},
            )
        if self._find_username(user.username) is not None:
            raise ConflictError(
                "Username already taken",
                error_code="username_exists",
                details={"username": user.username},
            )
        self._users[user.id] = user

    def _find_username(self, username: str) -> StoredUser | None:
        wanted = username.casefold()
        for user in self._users.values():
            if user.username.casefold() == wanted:
                return user
        return None

    async def create(self, user: StoredUser) -> StoredUser:
        """Add a new account.

        Raises:
            ConflictError: If the id or username is already used
        """
        self._insert(user)
        return user

    async def get_by_id(self, user_id: str) -> StoredUser | None:
        return self._users.get(user_id)

    async def get_by_username(self, username: str) -> StoredUser | None:
        return self._find_username(username)

    async def list_all(self, include_inactive: bool = True) -> list[StoredUser]:
        """All accounts, ordered by username."""
        users = sorted(self._users.values(), key=lambda u: u.username.casefold())
        if include_inactive:
            return users
        return [u for u in users if u.is_active]

    async def update(self, user: StoredUser) -> StoredUser:
        """Replace a stored account with an updated copy."""
        if user.id not in self._users:
            raise ConflictError(
                "Cannot update an unknown user",
                error_code="user_missing",
                details={"user_id": user.id},
            )
        self._users[user.id] = user
        return user

    async def delete(self, user_id: str) -> bool:
        """Remove an account. Returns False if there was nothing to remove."""
        return self._users.pop(user_id, None) is not None

    async def count(self) -> int:
        return len(self._users)


def _with_role_defaults(entry: dict[str, Any]) -> dict[str, Any]:
    if "permissions" in entry or not isinstance(entry.get("role"), str):
        return entry
    role = parse_role(entry["role"])
    if role is None:
        return entry
    return {**entry, "permissions": default_permissions(role)}


def load_users_file(path: Path) -> list[StoredUser]:
    """Parse a YAML users file.

    Raises:
        ValidationError: If the file is not a list of valid accounts
    """
    with path.open(encoding="utf-8") as f:
        raw = yaml.safe_load(f) or []

    if not isinstance(raw, list):
        raise ValidationError(
            "Users file must contain a list of users",
            details={"path": str(path)},
        )

    users: list[StoredUser] = []
    errors: list[dict[str, Any]] = []
    for index, entry in enumerate(raw):
        if not isinstance(entry, dict):
            errors.append({"field": f"[{index}]", "message": "Expected a mapping"})
            continue
        try:
            users.append(StoredUser.model_validate(_with_role_defaults(entry)))
        except pydantic.ValidationError as exc:
            errors.extend(
                {
                    "field": f"[{index}]." + ".".join(str(p) for p in err["loc"]),
                    "message": err["msg"],
                }
                for err in exc.errors()
            )

    if errors:
        raise ValidationError(
            "Invalid users file",
            errors=errors,
            details={"path": str(path)},
        )

    return users


@lru_cache
def get_user_repository() -> UserRepository:
    """Process-wide repository, seeded from ``settings.users_file`` if set."""
    if settings.users_file is None:
        logger.warning("users_file_not_configured")
        return UserRepository()

    users = load_users_file(settings.users_file)
    logger.info("users_loaded", path=str(settings.users_file), count=len(users))
    return UserRepository(users)


# Type alias for dependency injection
UserRepo = Annotated[UserRepository, Depends(get_user_repository)]
