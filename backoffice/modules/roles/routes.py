from fastapi import APIRouter, Depends
from backoffice.database.supabase_client import get_supabase
from backoffice.modules.roles.schemas import RoleCreate, RoleUpdate, RoleResponse
from backoffice.modules.roles.service import RoleService
from backoffice.core.dependencies import require_table_permission
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/roles", tags=["roles"])


def get_role_service(supabase: Client = Depends(get_supabase)) -> RoleService:
    return RoleService(supabase)


@router.get("", response_model=List[RoleResponse])
async def list_roles(
    user_data: Dict = Depends(require_table_permission("permissoes", "read")),
    service: RoleService = Depends(get_role_service)
):
    """List role levels"""
    return service.list_roles()


@router.post("", response_model=RoleResponse, status_code=201)
async def create_role(
    role_data: RoleCreate,
    user_data: Dict = Depends(require_table_permission("permissoes", "create")),
    service: RoleService = Depends(get_role_service)
):
    """Create a new role level"""
    return service.create_role(role_data)


@router.get("/{role_id}", response_model=RoleResponse)
async def get_role(
    role_id: str,
    user_data: Dict = Depends(require_table_permission("permissoes", "read")),
    service: RoleService = Depends(get_role_service)
):
    return service.get_role_by_id(role_id)


@router.put("/{role_id}", response_model=RoleResponse)
async def update_role(
    role_id: str,
    role_data: RoleUpdate,
    user_data: Dict = Depends(require_table_permission("permissoes", "update")),
    service: RoleService = Depends(get_role_service)
):
    return service.update_role(role_id, role_data)


@router.delete("/{role_id}", status_code=204)
async def delete_role(
    role_id: str,
    user_data: Dict = Depends(require_table_permission("permissoes", "delete")),
    service: RoleService = Depends(get_role_service)
):
    service.delete_role(role_id)
    return None
