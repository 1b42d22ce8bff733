"""User administration and catalog routes.

Note: login, logout and the caller's own record are in the auth module.
"""

from typing import cast

from fastapi import Response, status

from clinicdesk.core.auth.dependencies import OptionalUser
from clinicdesk.core.permissions.catalog import (
    ADMIN_ROLE,
    PERMISSION_LABELS,
    ROLE_LABELS,
    ROLE_PERMISSIONS,
    Permission,
    Role,
)
from clinicdesk.core.permissions.decorators import (
    require_access,
    require_permission,
    require_self_or_permission,
)
from clinicdesk.core.permissions.guard import AccessRequirement
from clinicdesk.core.permissions.models import UserRecord
from clinicdesk.modules.users import router
from clinicdesk.modules.users.schemas import (
    PermissionResponse,
    PermissionsUpdate,
    RoleResponse,
    StatusUpdate,
    UserCreate,
    UserListResponse,
    UserResponse,
    UserUpdate,
)
from clinicdesk.modules.users.services import UserSvc


# ============================================================
# Catalog Routes
# ============================================================


@router.get(
    "/roles",
    response_model=list[RoleResponse],
    summary="List roles",
    description="Roles with their labels and default permission bundles.",
)
@require_access(AccessRequirement())
async def list_roles(current_user: OptionalUser) -> list[RoleResponse]:
    return [
        RoleResponse(
            role=role,
            label=ROLE_LABELS[role],
            default_permissions=list(ROLE_PERMISSIONS[role]),
            implicit_all=role == ADMIN_ROLE,
        )
        for role in Role
    ]


@router.get(
    "/permissions",
    response_model=list[PermissionResponse],
    summary="List permissions",
    description="The permission tag catalog with display labels.",
)
@require_access(AccessRequirement())
async def list_permissions(current_user: OptionalUser) -> list[PermissionResponse]:
    return [
        PermissionResponse(permission=permission, label=PERMISSION_LABELS[permission])
        for permission in Permission
    ]


# ============================================================
# Accounts
# ============================================================


@router.get(
    "/users",
    response_model=UserListResponse,
    summary="List users",
    description="Requires view_users. `?active=true` leaves out deactivated accounts.",
)
@require_permission(Permission.VIEW_USERS)
async def list_users(
    service: UserSvc,
    current_user: OptionalUser,
    active: bool = False,
) -> UserListResponse:
    users = await service.list_users(active_only=active)
    return UserListResponse(
        items=[UserResponse.from_stored(u) for u in users],
        total=len(users),
    )


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
    description="Requires manage_users. Permissions default to the role's bundle.",
)
@require_permission(Permission.MANAGE_USERS)
async def create_user(
    data: UserCreate,
    service: UserSvc,
    current_user: OptionalUser,
) -> UserResponse:
    # require_permission has already rejected anonymous callers
    actor = cast("UserRecord", current_user)
    user = await service.create_user(data, actor=actor)
    return UserResponse.from_stored(user)


@router.get(
    "/users/{user_id}",
    response_model=UserResponse,
    summary="Get user",
    description="Users may read their own account; anyone else needs view_users.",
)
@require_self_or_permission(Permission.VIEW_USERS)
async def get_user(
    user_id: str,
    service: UserSvc,
    current_user: OptionalUser,
) -> UserResponse:
    return UserResponse.from_stored(await service.get_user(user_id))


@router.patch(
    "/users/{user_id}/permissions",
    response_model=UserResponse,
    summary="Update user permissions",
    description="Requires manage_users. Ends the user's open sessions.",
)
@require_permission(Permission.MANAGE_USERS)
async def update_user_permissions(
    user_id: str,
    data: PermissionsUpdate,
    service: UserSvc,
    current_user: OptionalUser,
) -> UserResponse:
    user = await service.update_permissions(
        user_id,
        data.permissions,
        actor=cast("UserRecord", current_user),
        role=data.role,
    )
    return UserResponse.from_stored(user)


@router.patch(
    "/users/{user_id}/status",
    response_model=UserResponse,
    summary="Activate or deactivate user",
    description="Requires manage_users. Ends the user's open sessions.",
)
@require_permission(Permission.MANAGE_USERS)
async def update_user_status(
    user_id: str,
    data: StatusUpdate,
    service: UserSvc,
    current_user: OptionalUser,
) -> UserResponse:
    user = await service.set_active(
        user_id, data.is_active, actor=cast("UserRecord", current_user)
    )
    return UserResponse.from_stored(user)


@router.patch(
    "/users/{user_id}",
    response_model=UserResponse,
    summary="Update user profile",
    description="Requires manage_users. Ends the user's open sessions.",
)
@require_permission(Permission.MANAGE_USERS)
async def update_user(
    user_id: str,
    data: UserUpdate,
    service: UserSvc,
    current_user: OptionalUser,
) -> UserResponse:
    user = await service.update_profile(user_id, data, actor=cast("UserRecord", current_user))
    return UserResponse.from_stored(user)


@router.delete(
    "/users/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete user",
    description="Requires manage_users. Accounts cannot delete themselves.",
)
@require_permission(Permission.MANAGE_USERS)
async def delete_user(
    user_id: str,
    service: UserSvc,
    current_user: OptionalUser,
) -> None:
    await service.delete_user(user_id, actor=cast("UserRecord", current_user))
