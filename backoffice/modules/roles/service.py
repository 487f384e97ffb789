from supabase import Client
from backoffice.config.permissions_config import ROLES
from backoffice.core.exceptions import NotFoundError, ValidationError, require_key
from backoffice.modules.roles.schemas import (
    RoleCreate, RoleUpdate, RoleResponse, UserRoleResponse
)
from typing import List, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


def _to_role(row: dict) -> RoleResponse:
    return RoleResponse(id=row["id"], level=row["level"], label=ROLES.get(row["level"], row["level"]))


class RoleService:
    """Role Registry: the permission levels available in the system."""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_roles(self) -> List[RoleResponse]:
        """List roles ordered by level"""
        try:
            result = self.supabase.table("permissoes")\
                .select("*")\
                .order("level")\
                .execute()
            return [_to_role(row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_role_by_id(self, role_id: str) -> RoleResponse:
        try:
            result = self.supabase.table("permissoes")\
                .select("*")\
                .eq("id", role_id)\
                .limit(1)\
                .execute()
            if not result.data:
                raise NotFoundError("Role not found")
            return _to_role(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def role_exists(self, level: str) -> bool:
        result = self.supabase.table("permissoes")\
            .select("id")\
            .eq("level", level)\
            .limit(1)\
            .execute()
        return bool(result.data)

    def create_role(self, role_data: RoleCreate) -> RoleResponse:
        """Create a new role level"""
        require_key(level=role_data.level)
        try:
            result = self.supabase.table("permissoes").insert({
                "level": role_data.level.strip()
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create role")

            return _to_role(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))

    def update_role(self, role_id: str, role_data: RoleUpdate) -> RoleResponse:
        require_key(level=role_data.level)
        try:
            result = self.supabase.table("permissoes")\
                .update({"level": role_data.level.strip()})\
                .eq("id", role_id)\
                .execute()

            if not result.data:
                raise NotFoundError("Role not found")

            return _to_role(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))

    def delete_role(self, role_id: str) -> bool:
        """Delete role. Assignments and grants referencing the level are left to the store's FK rules."""
        try:
            result = self.supabase.table("permissoes")\
                .delete()\
                .eq("id", role_id)\
                .execute()
            if not result.data:
                raise NotFoundError("Role not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))


class UserRoleService:
    """User-Role Assignment: at most one role per user."""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def assign_user_role(self, user_id: str, role: str) -> UserRoleResponse:
        """Upsert keyed on user_id; a second assignment replaces the first"""
        require_key(user_id=user_id, role=role)
        try:
            # Verify role exists
            if not RoleService(self.supabase).role_exists(role.strip()):
                raise ValidationError(f"Unknown role: {role}")

            result = self.supabase.table("user_roles")\
                .upsert({"user_id": user_id, "role": role.strip()}, on_conflict="user_id")\
                .execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to assign role")

            logger.info(f"Assigned role {role} to user {user_id}")
            return UserRoleResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))

    def get_user_role(self, user_id: str) -> Optional[str]:
        """Assigned role level, or None when the user has no role"""
        require_key(user_id=user_id)
        try:
            result = self.supabase.table("user_roles")\
                .select("role")\
                .eq("user_id", user_id)\
                .limit(1)\
                .execute()
            return result.data[0]["role"] if result.data else None
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_user_roles(self, role: Optional[str] = None) -> List[UserRoleResponse]:
        try:
            query = self.supabase.table("user_roles").select("*")
            if role:
                query = query.eq("role", role)
            result = query.order("created_at", desc=True).execute()
            return [UserRoleResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def remove_user_role(self, user_id: str) -> bool:
        require_key(user_id=user_id)
        try:
            result = self.supabase.table("user_roles")\
                .delete()\
                .eq("user_id", user_id)\
                .execute()
            return len(result.data or []) > 0
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
