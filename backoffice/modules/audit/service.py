from supabase import Client
from backoffice.core.exceptions import AuditWriteFailure, ValidationError, require_key
from backoffice.modules.audit.schemas import (
    AuditAction, AuditLogEntry, AuditLogFilter, AuditLogList
)
from typing import Any, Dict, Optional, Union
import logging

logger = logging.getLogger(__name__)


class AuditService:
    """Append-only audit trail of governed mutations."""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def record(
        self,
        action: Union[AuditAction, str],
        table_name: str,
        record_id: str,
        actor_id: str,
        old_record_data: Optional[Dict[str, Any]] = None,
        new_record_data: Optional[Dict[str, Any]] = None,
    ) -> AuditLogEntry:
        """
        Insert one audit row. Raises AuditWriteFailure when the store rejects
        the write; callers on the mutation path catch it and report it, the
        mutation itself is already committed.
        """
        require_key(table_name=table_name, record_id=record_id, user_id=actor_id)
        try:
            action_value = AuditAction(action).value
        except ValueError:
            raise ValidationError(f"Unknown audit action: {action}")
        try:
            result = self.supabase.table("audit_log").insert({
                "user_id": actor_id,
                "action": action_value,
                "table_name": table_name,
                "record_id": str(record_id),
                "old_record_data": old_record_data,
                "new_record_data": new_record_data
            }).execute()
        except Exception as e:
            raise AuditWriteFailure(table_name, str(record_id), e) from e

        if not result.data:
            raise AuditWriteFailure(table_name, str(record_id), RuntimeError("no row returned"))
        return AuditLogEntry(**result.data[0])

    def _full_names(self, user_ids) -> Dict[str, str]:
        if not user_ids:
            return {}
        result = self.supabase.table("profiles")\
            .select("user_id, full_name")\
            .in_("user_id", list(user_ids))\
            .execute()
        return {p["user_id"]: p.get("full_name") for p in result.data or []}

    def list_audit_logs(self, filters: Optional[AuditLogFilter] = None) -> AuditLogList:
        """Newest first. Read failures come back as an empty list with the error message."""
        filters = filters or AuditLogFilter()
        try:
            query = self.supabase.table("audit_log").select("*")
            if filters.table_name:
                query = query.eq("table_name", filters.table_name)
            if filters.user_id:
                query = query.eq("user_id", filters.user_id)
            if filters.action:
                query = query.eq("action", AuditAction(filters.action).value)
            if filters.record_id:
                query = query.eq("record_id", filters.record_id)
            if filters.since:
                query = query.gte("timestamp", filters.since.isoformat())
            if filters.until:
                query = query.lte("timestamp", filters.until.isoformat())
            query = query.order("timestamp", desc=True)
            if filters.limit:
                query = query.limit(filters.limit)
            rows = query.execute().data or []

            names = self._full_names({row["user_id"] for row in rows})
            logs = [
                AuditLogEntry(**{**row, "user_full_name": names.get(row["user_id"])})
                for row in rows
            ]
            return AuditLogList(logs=logs)
        except Exception as e:
            logger.error(f"Error listing audit logs: {e}")
            return AuditLogList(logs=[], error=str(e))
