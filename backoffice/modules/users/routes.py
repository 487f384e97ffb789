from fastapi import APIRouter, Depends
from backoffice.database.supabase_client import get_supabase
from backoffice.modules.users.schemas import UserResponse
from backoffice.modules.users.service import UserService
from backoffice.modules.roles.schemas import UserRoleAssign, UserRoleLookup, UserRoleResponse
from backoffice.modules.roles.service import UserRoleService
from backoffice.modules.permissions.schemas import EffectiveTablePermission
from backoffice.modules.permissions.resolver import PermissionResolver
from backoffice.core.dependencies import get_permission_resolver, require_table_permission
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(prefix="/users", tags=["users"])


def get_user_service(supabase: Client = Depends(get_supabase)) -> UserService:
    return UserService(supabase)


def get_user_role_service(supabase: Client = Depends(get_supabase)) -> UserRoleService:
    return UserRoleService(supabase)


@router.get("", response_model=List[UserResponse])
async def list_users(
    limit: int = 50,
    offset: int = 0,
    user_data: Dict = Depends(require_table_permission("permissoes", "read")),
    service: UserService = Depends(get_user_service)
):
    """List users with their role"""
    return service.list_users(limit=limit, offset=offset)


@router.get("/roles", response_model=List[UserRoleResponse])
async def list_user_roles(
    role: Optional[str] = None,
    user_data: Dict = Depends(require_table_permission("permissoes", "read")),
    service: UserRoleService = Depends(get_user_role_service)
):
    """List role assignments, optionally for one role level"""
    return service.list_user_roles(role)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    user_data: Dict = Depends(require_table_permission("permissoes", "read")),
    service: UserService = Depends(get_user_service)
):
    return service.get_user(user_id)


@router.get("/{user_id}/permissions", response_model=List[EffectiveTablePermission])
async def get_user_permissions(
    user_id: str,
    user_data: Dict = Depends(require_table_permission("permissoes", "read")),
    resolver: PermissionResolver = Depends(get_permission_resolver)
):
    """Role grant, override and effective flags for every governed table"""
    return resolver.effective_permissions(user_id)


@router.get("/{user_id}/role", response_model=UserRoleLookup)
async def get_user_role(
    user_id: str,
    user_data: Dict = Depends(require_table_permission("permissoes", "read")),
    service: UserRoleService = Depends(get_user_role_service)
):
    return UserRoleLookup(user_id=user_id, role=service.get_user_role(user_id))


@router.put("/{user_id}/role", response_model=UserRoleResponse)
async def assign_user_role(
    user_id: str,
    body: UserRoleAssign,
    user_data: Dict = Depends(require_table_permission("permissoes", "update")),
    service: UserRoleService = Depends(get_user_role_service)
):
    """Assign the user's role, replacing any previous one"""
    return service.assign_user_role(user_id, body.role)


@router.delete("/{user_id}/role", status_code=204)
async def remove_user_role(
    user_id: str,
    user_data: Dict = Depends(require_table_permission("permissoes", "delete")),
    service: UserRoleService = Depends(get_user_role_service)
):
    """Remove the user's role; the user is denied everything not overridden"""
    service.remove_user_role(user_id)
    return None
