"""
Permission-governed mutations on registered tables.

Each call walks Requested -> Authorized | Denied, then Authorized ->
Committed -> Audited. A denial raises ForbiddenError before the store is
touched. The audit write happens after the commit and its failure only
downgrades the result to state="committed", audited=False.
"""

from supabase import Client
from backoffice.config.permissions_config import LEDGER_TABLES
from backoffice.core.dependencies import is_super_user
from backoffice.core.exceptions import AuditWriteFailure, ForbiddenError, NotFoundError, require_key
from backoffice.modules.audit.schemas import AuditAction, GovernedMutationResult
from backoffice.modules.audit.service import AuditService
from backoffice.modules.permissions.resolver import PermissionResolver
from backoffice.modules.tables.service import TableService
from fastapi import HTTPException
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)


class GovernedMutationService:
    def __init__(
        self,
        supabase: Client,
        resolver: PermissionResolver,
        audit_service: AuditService,
    ):
        self.supabase = supabase
        self.resolver = resolver
        self.audit_service = audit_service
        self.table_service = TableService(supabase)

    def _authorize(self, user_data: dict, table_name: str, operation: str) -> None:
        require_key(table_name=table_name)
        if table_name in LEDGER_TABLES:
            logger.warning(f"Rejected {operation} on ledger table {table_name}")
            raise ForbiddenError()
        try:
            governed = self.table_service.get_table(table_name) is not None
        except Exception as e:
            logger.error(f"Error checking table registry for {table_name}: {e}")
            governed = False
        if not governed:
            logger.warning(f"Rejected {operation} on unregistered table {table_name}")
            raise ForbiddenError()
        if is_super_user(user_data):
            return
        if not self.resolver.get_effective_permission(user_data["id"], table_name, operation):
            logger.info(f"Denied {operation} on {table_name} for user {user_data['id']}")
            raise ForbiddenError()

    def _audit(
        self,
        action: AuditAction,
        table_name: str,
        record: Optional[Dict[str, Any]],
        record_id: str,
        actor_id: str,
        old: Optional[Dict[str, Any]] = None,
        new: Optional[Dict[str, Any]] = None,
    ) -> GovernedMutationResult:
        try:
            self.audit_service.record(action, table_name, record_id, actor_id, old, new)
        except AuditWriteFailure:
            logger.exception(
                f"Mutation {action.value} on {table_name}/{record_id} committed but not audited"
            )
            return GovernedMutationResult(record=record, state="committed", audited=False)
        return GovernedMutationResult(record=record, state="audited", audited=True)

    def create_record(self, user_data: dict, table_name: str, data: Dict[str, Any]) -> GovernedMutationResult:
        self._authorize(user_data, table_name, "create")
        try:
            result = self.supabase.table(table_name).insert(data).execute()
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))
        if not result.data:
            raise HTTPException(status_code=500, detail=f"Failed to create record in {table_name}")
        record = result.data[0]
        if record.get("id") is None:
            logger.warning(f"Created row in {table_name} has no id; audit entry skipped")
            return GovernedMutationResult(record=record, state="committed", audited=False)
        return self._audit(
            AuditAction.CREATE, table_name, record, str(record["id"]), user_data["id"], new=record
        )

    def update_record(
        self, user_data: dict, table_name: str, record_id: str, data: Dict[str, Any]
    ) -> GovernedMutationResult:
        self._authorize(user_data, table_name, "update")
        try:
            before = self.supabase.table(table_name)\
                .select("*")\
                .eq("id", record_id)\
                .limit(1)\
                .execute()
            if not before.data:
                raise NotFoundError("Record not found")
            result = self.supabase.table(table_name)\
                .update(data)\
                .eq("id", record_id)\
                .execute()
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))
        if not result.data:
            raise NotFoundError("Record not found")
        record = result.data[0]
        return self._audit(
            AuditAction.UPDATE, table_name, record, record_id, user_data["id"],
            old=before.data[0], new=record
        )

    def delete_record(self, user_data: dict, table_name: str, record_id: str) -> GovernedMutationResult:
        self._authorize(user_data, table_name, "delete")
        try:
            result = self.supabase.table(table_name)\
                .delete()\
                .eq("id", record_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))
        if not result.data:
            raise NotFoundError("Record not found")
        return self._audit(
            AuditAction.DELETE, table_name, None, record_id, user_data["id"], old=result.data[0]
        )
