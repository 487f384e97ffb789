from fastapi import APIRouter, Body, Depends
from backoffice.database.supabase_client import get_supabase, get_service_supabase
from backoffice.modules.audit.schemas import (
    AuditAction, AuditLogCreate, AuditLogFilter, AuditLogList, GovernedMutationResult
)
from backoffice.modules.audit.service import AuditService
from backoffice.modules.audit.governed import GovernedMutationService
from backoffice.modules.permissions.resolver import PermissionResolver
from backoffice.core.dependencies import (
    get_current_user_id,
    get_permission_resolver,
    is_super_user,
    require_table_permission,
)
from backoffice.core.exceptions import AuditWriteFailure, ForbiddenError
from supabase import Client
from datetime import datetime
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/audit-logs", tags=["audit"])
records_router = APIRouter(prefix="/records", tags=["records"])


def get_audit_service(supabase: Client = Depends(get_service_supabase)) -> AuditService:
    return AuditService(supabase)


def get_governed_service(
    supabase: Client = Depends(get_supabase),
    resolver: PermissionResolver = Depends(get_permission_resolver),
    audit_service: AuditService = Depends(get_audit_service),
) -> GovernedMutationService:
    return GovernedMutationService(supabase, resolver, audit_service)


@router.get("", response_model=AuditLogList)
async def list_audit_logs(
    table_name: Optional[str] = None,
    user_id: Optional[str] = None,
    action: Optional[AuditAction] = None,
    record_id: Optional[str] = None,
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
    limit: Optional[int] = None,
    user_data: Dict = Depends(require_table_permission("audit_log", "read")),
    service: AuditService = Depends(get_audit_service)
):
    """List audit entries, newest first"""
    filters = AuditLogFilter(
        table_name=table_name, user_id=user_id, action=action, record_id=record_id,
        since=since, until=until, limit=limit
    )
    return service.list_audit_logs(filters)


@router.post("", status_code=202)
async def record_audit_log(
    entry: AuditLogCreate,
    current_user: Dict = Depends(require_table_permission("audit_log", "create")),
    resolver: PermissionResolver = Depends(get_permission_resolver),
    service: AuditService = Depends(get_audit_service)
):
    """Record a mutation committed elsewhere. Best-effort: a failed write is reported, not raised."""
    # the actor must hold the right they claim to have exercised
    if not is_super_user(current_user) and not resolver.get_effective_permission(
        current_user["id"], entry.table_name, entry.action.value
    ):
        logger.info(f"Denied audit entry {entry.action.value} on {entry.table_name} for user {current_user['id']}")
        raise ForbiddenError()
    try:
        saved = service.record(
            entry.action, entry.table_name, entry.record_id, current_user["id"],
            entry.old_record_data, entry.new_record_data
        )
    except AuditWriteFailure as e:
        logger.exception(f"Audit write failed: {e}")
        return {"recorded": False, "id": None}
    return {"recorded": True, "id": saved.id}


@records_router.post("/{table_name}", response_model=GovernedMutationResult, status_code=201)
async def create_record(
    table_name: str,
    data: Dict[str, Any] = Body(...),
    current_user: Dict = Depends(get_current_user_id),
    service: GovernedMutationService = Depends(get_governed_service)
):
    """Create a row in a governed table"""
    return service.create_record(current_user, table_name, data)


@records_router.put("/{table_name}/{record_id}", response_model=GovernedMutationResult)
async def update_record(
    table_name: str,
    record_id: str,
    data: Dict[str, Any] = Body(...),
    current_user: Dict = Depends(get_current_user_id),
    service: GovernedMutationService = Depends(get_governed_service)
):
    """Update a row in a governed table"""
    return service.update_record(current_user, table_name, record_id, data)


@records_router.delete("/{table_name}/{record_id}", response_model=GovernedMutationResult)
async def delete_record(
    table_name: str,
    record_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: GovernedMutationService = Depends(get_governed_service)
):
    """Delete a row from a governed table"""
    return service.delete_record(current_user, table_name, record_id)
