from fastapi import APIRouter, Depends
from backoffice.database.supabase_client import get_supabase
from backoffice.modules.permissions.schemas import (
    Operation, RolePermissionUpsert, RolePermissionResponse,
    UserPermissionUpsert, UserPermissionResponse, EffectivePermissionResponse
)
from backoffice.modules.permissions.service import RolePermissionService, UserPermissionService
from backoffice.modules.permissions.resolver import PermissionResolver
from backoffice.core.dependencies import (
    get_current_user_id,
    get_permission_resolver,
    is_super_user,
    require_table_permission,
)
from backoffice.core.exceptions import ForbiddenError
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/permissions", tags=["permissions"])


def get_role_permission_service(supabase: Client = Depends(get_supabase)) -> RolePermissionService:
    return RolePermissionService(supabase)


def get_user_permission_service(supabase: Client = Depends(get_supabase)) -> UserPermissionService:
    return UserPermissionService(supabase)


@router.get("/effective", response_model=EffectivePermissionResponse)
async def get_effective_permission(
    table_name: str,
    operation: Operation,
    user_id: Optional[str] = None,
    current_user: Dict = Depends(get_current_user_id),
    resolver: PermissionResolver = Depends(get_permission_resolver)
):
    """Resolve one permission. Checking another user requires read access to the permission matrix."""
    target = user_id or current_user["id"]
    if target != current_user["id"] and not is_super_user(current_user):
        if not resolver.get_effective_permission(current_user["id"], "permissoes", "read"):
            raise ForbiddenError()
    return EffectivePermissionResponse(
        user_id=target,
        table_name=table_name,
        operation=operation,
        allowed=resolver.get_effective_permission(target, table_name, operation),
    )


# Role matrix endpoints
@router.get("/roles", response_model=List[RolePermissionResponse])
async def list_role_permissions(
    role: Optional[str] = None,
    user_data: Dict = Depends(require_table_permission("permissoes", "read")),
    service: RolePermissionService = Depends(get_role_permission_service)
):
    """List the role x table matrix, optionally for one role"""
    return service.list_role_permissions(role)


@router.put("/roles", response_model=RolePermissionResponse)
async def upsert_role_permission(
    body: RolePermissionUpsert,
    user_data: Dict = Depends(require_table_permission("permissoes", "update")),
    service: RolePermissionService = Depends(get_role_permission_service)
):
    """Insert or replace the four flags of a (role, table) grant"""
    return service.upsert_role_permission(body.role, body.table_name, body)


# User override endpoints
@router.get("/users/{user_id}", response_model=List[UserPermissionResponse])
async def list_user_overrides(
    user_id: str,
    user_data: Dict = Depends(require_table_permission("permissoes", "read")),
    service: UserPermissionService = Depends(get_user_permission_service)
):
    """List a user's per-table overrides"""
    return service.list_user_overrides(user_id)


@router.put("/users/{user_id}", response_model=UserPermissionResponse)
async def upsert_user_override(
    user_id: str,
    body: UserPermissionUpsert,
    user_data: Dict = Depends(require_table_permission("permissoes", "update")),
    service: UserPermissionService = Depends(get_user_permission_service)
):
    """Insert or replace a user's override for one table"""
    return service.upsert_user_override(user_id, body.table_name, body, created_by=user_data["id"])


@router.delete("/users/{user_id}/{table_name}", status_code=204)
async def delete_user_override(
    user_id: str,
    table_name: str,
    user_data: Dict = Depends(require_table_permission("permissoes", "delete")),
    service: UserPermissionService = Depends(get_user_permission_service)
):
    """Remove a user's override; the role grant applies again"""
    service.delete_user_override(user_id, table_name)
    return None
