from fastapi import APIRouter, Depends
from backoffice.database.supabase_client import get_supabase
from backoffice.modules.tables.schemas import (
    GovernedTableCreate, GovernedTableUpdate, GovernedTableResponse
)
from backoffice.modules.tables.service import TableService
from backoffice.core.dependencies import require_table_permission
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/tables", tags=["tables"])


def get_table_service(supabase: Client = Depends(get_supabase)) -> TableService:
    return TableService(supabase)


@router.get("", response_model=List[GovernedTableResponse])
async def list_tables(
    user_data: Dict = Depends(require_table_permission("permissoes", "read")),
    service: TableService = Depends(get_table_service)
):
    """List governed tables"""
    return service.list_tables()


@router.post("", response_model=GovernedTableResponse, status_code=201)
async def create_table(
    table_data: GovernedTableCreate,
    user_data: Dict = Depends(require_table_permission("permissoes", "create")),
    service: TableService = Depends(get_table_service)
):
    """Register a table under permission control"""
    return service.create_table(table_data)


@router.put("/{table_id}", response_model=GovernedTableResponse)
async def update_table(
    table_id: str,
    table_data: GovernedTableUpdate,
    user_data: Dict = Depends(require_table_permission("permissoes", "update")),
    service: TableService = Depends(get_table_service)
):
    return service.update_table(table_id, table_data)


@router.delete("/{table_id}", status_code=204)
async def delete_table(
    table_id: str,
    user_data: Dict = Depends(require_table_permission("permissoes", "delete")),
    service: TableService = Depends(get_table_service)
):
    service.delete_table(table_id)
    return None
