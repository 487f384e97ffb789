from supabase import Client
from backoffice.core.exceptions import NotFoundError
from backoffice.modules.users.schemas import UserResponse
from typing import Dict, List
from fastapi import HTTPException


class UserService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _roles_for(self, user_ids: List[str]) -> Dict[str, str]:
        if not user_ids:
            return {}
        result = self.supabase.table("user_roles")\
            .select("user_id, role")\
            .in_("user_id", user_ids)\
            .execute()
        return {r["user_id"]: r["role"] for r in result.data or []}

    def list_users(self, limit: int = 50, offset: int = 0) -> List[UserResponse]:
        """List user profiles with their assigned role (None when unassigned)"""
        try:
            result = self.supabase.table("profiles")\
                .select("user_id, full_name, email, status, created_at")\
                .order("created_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
            profiles = result.data or []
            roles = self._roles_for([p["user_id"] for p in profiles])
            return [UserResponse(**p, role=roles.get(p["user_id"])) for p in profiles]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_user(self, user_id: str) -> UserResponse:
        try:
            result = self.supabase.table("profiles")\
                .select("user_id, full_name, email, status, created_at")\
                .eq("user_id", user_id)\
                .limit(1)\
                .execute()
            if not result.data:
                raise NotFoundError("User not found")
            roles = self._roles_for([user_id])
            return UserResponse(**result.data[0], role=roles.get(user_id))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
