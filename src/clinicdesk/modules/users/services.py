"""User service for account administration.

Every change to an account's access (grants, role, activation) ends the
account's open sessions: a session's user record is a snapshot, so the
only way for new access to take effect is a fresh login.
"""

from typing import Annotated

import structlog
from fastapi import Depends

from clinicdesk.core.auth.backend import hash_password
from clinicdesk.core.auth.session import SessionStoreDep
from clinicdesk.core.errors import BadRequestError, ConflictError, NotFoundError
from clinicdesk.core.permissions.catalog import Permission, Role, default_permissions
from clinicdesk.core.permissions.models import UserRecord
from clinicdesk.modules.users.models import StoredUser
from clinicdesk.modules.users.repos import UserRepo
from clinicdesk.modules.users.schemas import UserCreate, UserUpdate


logger = structlog.get_logger()


class UserService:
    """Business logic for listing, creating, editing and removing users."""

    def __init__(self, repo: UserRepo, sessions: SessionStoreDep) -> None:
        self.repo = repo
        self.sessions = sessions

    async def list_users(self, active_only: bool = False) -> list[StoredUser]:
        return await self.repo.list_all(include_inactive=not active_only)

    async def get_user(self, user_id: str) -> StoredUser:
        """Get a user by id.

        Raises:
            NotFoundError: If no such user exists
        """
        user = await self.repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found", resource="user", resource_id=user_id)
        return user

    async def create_user(self, data: UserCreate, actor: UserRecord) -> StoredUser:
        """Create an account, defaulting its grants to the role bundle.

        Raises:
            ConflictError: If the username is taken
        """
        if await self.repo.get_by_username(data.username):
            raise ConflictError(
                "Username already taken",
                error_code="username_exists",
                details={"username": data.username},
            )

        permissions = (
            frozenset(data.permissions)
            if data.permissions is not None
            else default_permissions(data.role)
        )
        user = await self.repo.create(
            StoredUser(
                username=data.username,
                full_name=data.full_name,
                password_hash=hash_password(data.password),
                role=data.role,
                permissions=permissions,
                is_active=data.is_active,
            )
        )
        logger.info(
            "user_created",
            user_id=user.id,
            role=user.role.value,
            created_by=actor.id,
        )
        return user

    async def update_permissions(
        self,
        user_id: str,
        permissions: list[Permission],
        actor: UserRecord,
        role: Role | None = None,
    ) -> StoredUser:
        """Replace an account's grants (and optionally its role)."""
        user = await self.get_user(user_id)
        changes: dict[str, object] = {"permissions": frozenset(permissions)}
        if role is not None:
            changes["role"] = role

        updated = await self.repo.update(user.model_copy(update=changes))
        ended = self.sessions.invalidate_user(user.id)
        logger.info(
            "user_permissions_updated",
            user_id=user.id,
            role=updated.role.value,
            permissions=sorted(updated.permissions),
            updated_by=actor.id,
            sessions_ended=ended,
        )
        return updated

    async def set_active(self, user_id: str, is_active: bool, actor: UserRecord) -> StoredUser:
        """Activate or deactivate an account.

        Raises:
            BadRequestError: If an administrator tries to deactivate themselves
        """
        if user_id == actor.id and not is_active:
            raise BadRequestError(
                "You cannot deactivate your own account",
                error_code="self_deactivation",
            )

        user = await self.get_user(user_id)
        updated = await self.repo.update(user.model_copy(update={"is_active": is_active}))
        ended = self.sessions.invalidate_user(user.id)
        logger.info(
            "user_status_updated",
            user_id=user.id,
            is_active=is_active,
            updated_by=actor.id,
            sessions_ended=ended,
        )
        return updated


    async def update_profile(self, user_id: str, data: UserUpdate, actor: UserRecord) -> StoredUser:
        """Change an account's username, display name or password.

        Sessions hold the old name, so the account has to sign in again.

        Args:
            user_id: Account to change
            data: Fields to change; unset fields are kept
            actor: Administrator making the change

        Returns:
            The updated account

        Raises:
            NotFoundError: If no such user exists
            ConflictError: If the new username belongs to another account
        """
        user = await self.get_user(user_id)
        changes: dict[str, object] = data.model_dump(
            exclude_unset=True, exclude_none=True, exclude={"password"}
        )
        if data.password is not None:
            changes["password_hash"] = hash_password(data.password)

        if "username" in changes:
            holder = await self.repo.get_by_username(data.username or "")
            if holder is not None and holder.id != user.id:
                raise ConflictError(
                    "Username already taken",
                    error_code="username_exists",
                    details={"username": data.username},
                )

        updated = await self.repo.update(user.model_copy(update=changes))
        ended = self.sessions.invalidate_user(user.id)
        logger.info(
            "user_profile_updated",
            user_id=user.id,
            fields=sorted("password" if k == "password_hash" else k for k in changes),
            updated_by=actor.id,
            sessions_ended=ended,
        )
        return updated

    async def delete_user(self, user_id: str, actor: UserRecord) -> None:
        """Remove an account and end its sessions.

        Raises:
            BadRequestError: If an administrator tries to delete themselves
            NotFoundError: If no such user exists
        """
        if user_id == actor.id:
            raise BadRequestError(
                "You cannot delete your own account",
                error_code="self_deletion",
            )

        user = await self.get_user(user_id)
        await self.repo.delete(user.id)
        ended = self.sessions.invalidate_user(user.id)
        logger.info(
            "user_deleted",
            user_id=user.id,
            username=user.username,
            deleted_by=actor.id,
            sessions_ended=ended,
        )


# Type alias for dependency injection
UserSvc = Annotated[UserService, Depends(UserService)]
