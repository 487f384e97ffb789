from supabase import Client
from backoffice.core.exceptions import require_key
from backoffice.modules.permissions.schemas import (
    PermissionFlags, RolePermissionResponse, UserPermissionResponse
)
from datetime import datetime, timezone
from typing import List, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class RolePermissionService:
    """Role x table CRUD matrix. Writes are single keyed upserts of all four flags."""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def upsert_role_permission(self, role: str, table_name: str, flags: PermissionFlags) -> RolePermissionResponse:
        """Insert or replace the grant for (role, table_name)"""
        require_key(role=role, table_name=table_name)
        try:
            result = self.supabase.table("role_table_permissions")\
                .upsert({
                    "role": role.strip(),
                    "table_name": table_name.strip(),
                    "can_create": flags.can_create,
                    "can_read": flags.can_read,
                    "can_update": flags.can_update,
                    "can_delete": flags.can_delete,
                    "updated_at": _now()
                }, on_conflict="role,table_name")\
                .execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to save role permission")

            logger.info(f"Role permission saved: {role}/{table_name}")
            return RolePermissionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))

    def list_role_permissions(self, role: Optional[str] = None) -> List[RolePermissionResponse]:
        try:
            query = self.supabase.table("role_table_permissions").select("*")
            if role:
                query = query.eq("role", role)
            result = query.order("role").execute()
            return [RolePermissionResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))


class UserPermissionService:
    """Per-user overrides. A row fully replaces the role grant for its table."""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def upsert_user_override(
        self,
        user_id: str,
        table_name: str,
        flags: PermissionFlags,
        created_by: Optional[str] = None
    ) -> UserPermissionResponse:
        """Insert or replace the override for (user_id, table_name)"""
        require_key(user_id=user_id, table_name=table_name)
        try:
            result = self.supabase.table("user_table_permissions")\
                .upsert({
                    "user_id": user_id,
                    "table_name": table_name.strip(),
                    "can_create": flags.can_create,
                    "can_read": flags.can_read,
                    "can_update": flags.can_update,
                    "can_delete": flags.can_delete,
                    "created_by": created_by,
                    "updated_at": _now()
                }, on_conflict="user_id,table_name")\
                .execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to save user permission")

            logger.info(f"User override saved: {user_id}/{table_name} by {created_by}")
            return UserPermissionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))

    def delete_user_override(self, user_id: str, table_name: str) -> bool:
        """Remove the override; resolution falls back to the user's role"""
        require_key(user_id=user_id, table_name=table_name)
        try:
            result = self.supabase.table("user_table_permissions")\
                .delete()\
                .eq("user_id", user_id)\
                .eq("table_name", table_name.strip())\
                .execute()
            removed = len(result.data or []) > 0
            if removed:
                logger.info(f"User override removed: {user_id}/{table_name}")
            return removed
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_user_overrides(self, user_id: str) -> List[UserPermissionResponse]:
        try:
            result = self.supabase.table("user_table_permissions")\
                .select("*")\
                .eq("user_id", user_id)\
                .execute()
            return [UserPermissionResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
