"""
Effective Permission Resolver

Combines per-user overrides, the user's role and the role x table matrix
into one allow/deny decision. Precedence, highest first:

1. a user_table_permissions row for (user, table): its four flags are the answer
2. no user_roles row for the user: deny
3. no role_table_permissions row for (role, table): deny
4. the role grant's flag for the operation

Every caller goes through this module; no route reads the matrix tables to
decide access on its own.
"""

from supabase import Client
from backoffice.config.permissions_config import OPERATIONS
from backoffice.modules.permissions.schemas import (
    PermissionFlags, EffectiveTablePermission
)
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

FLAG_COLUMNS = "can_create, can_read, can_update, can_delete"


def resolve_permission(
    override: Optional[Dict[str, Any]],
    role: Optional[str],
    grant: Optional[Dict[str, Any]],
    operation: str,
) -> bool:
    """Pure precedence rule. Rows are plain dicts as returned by the store."""
    if operation not in OPERATIONS:
        return False
    flag = f"can_{operation}"
    if override is not None:
        return bool(override.get(flag, False))
    if not role or grant is None:
        return False
    return bool(grant.get(flag, False))


def _flags(row: Optional[Dict[str, Any]]) -> Optional[PermissionFlags]:
    if row is None:
        return None
    return PermissionFlags(**{f"can_{op}": bool(row.get(f"can_{op}", False)) for op in OPERATIONS})


class PermissionResolver:
    def __init__(self, supabase: Client, cache: Optional[Dict[str, Any]] = None):
        self.supabase = supabase
        # request-scoped; keyed per user/table so one request never refetches a pair
        self.cache = cache

    def _fetch_override(self, user_id: str, table_name: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table("user_table_permissions")\
            .select(FLAG_COLUMNS)\
            .eq("user_id", user_id)\
            .eq("table_name", table_name)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def _fetch_role(self, user_id: str) -> Optional[str]:
        if self.cache is not None and f"role:{user_id}" in self.cache:
            return self.cache[f"role:{user_id}"]
        result = self.supabase.table("user_roles")\
            .select("role")\
            .eq("user_id", user_id)\
            .limit(1)\
            .execute()
        role = result.data[0]["role"] if result.data else None
        if self.cache is not None:
            self.cache[f"role:{user_id}"] = role
        return role

    def _fetch_grant(self, role: str, table_name: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table("role_table_permissions")\
            .select(FLAG_COLUMNS)\
            .eq("role", role)\
            .eq("table_name", table_name)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def _fetch_inputs(self, user_id: str, table_name: str):
        key = f"perm:{user_id}:{table_name}"
        if self.cache is not None and key in self.cache:
            return self.cache[key]
        override = self._fetch_override(user_id, table_name)
        role = None
        grant = None
        if override is None:
            role = self._fetch_role(user_id)
            if role:
                grant = self._fetch_grant(role, table_name)
        inputs = (override, role, grant)
        if self.cache is not None:
            self.cache[key] = inputs
        return inputs

    def get_effective_permission(self, user_id: str, table_name: str, operation: str) -> bool:
        """Never raises: unknown ids and store failures resolve to False."""
        table_name = (table_name or "").strip()
        if not user_id or not table_name or operation not in OPERATIONS:
            return False
        try:
            override, role, grant = self._fetch_inputs(user_id, table_name)
        except Exception as e:
            logger.error(f"Error resolving permission {operation} on {table_name} for {user_id}: {e}")
            return False
        allowed = resolve_permission(override, role, grant, operation)
        logger.debug(
            f"Resolved {operation} on {table_name} for {user_id}: {allowed} "
            f"(override={override is not None}, role={role})"
        )
        return allowed

    def effective_permissions(self, user_id: str) -> List[EffectiveTablePermission]:
        """Full matrix for one user across every governed table."""
        try:
            tables_result = self.supabase.table("permission_tables")\
                .select("table_name, display_name")\
                .order("display_name")\
                .execute()
            overrides_result = self.supabase.table("user_table_permissions")\
                .select(f"table_name, {FLAG_COLUMNS}")\
                .eq("user_id", user_id)\
                .execute()
            role = self._fetch_role(user_id)
            grants: Dict[str, Dict[str, Any]] = {}
            if role:
                grants_result = self.supabase.table("role_table_permissions")\
                    .select(f"table_name, {FLAG_COLUMNS}")\
                    .eq("role", role)\
                    .execute()
                grants = {g["table_name"]: g for g in grants_result.data or []}
        except Exception as e:
            logger.error(f"Error building permission matrix for {user_id}: {e}")
            return []

        overrides = {o["table_name"]: o for o in overrides_result.data or []}
        matrix = []
        for table in tables_result.data or []:
            name = table["table_name"]
            override = overrides.get(name)
            grant = grants.get(name) if role else None
            if override is not None:
                source = "override"
            elif grant is not None:
                source = "role"
            else:
                source = "none"
            matrix.append(EffectiveTablePermission(
                table_name=name,
                display_name=table.get("display_name"),
                role=role,
                role_grant=_flags(grant),
                override=_flags(override),
                effective=PermissionFlags(**{
                    f"can_{op}": resolve_permission(override, role, grant, op) for op in OPERATIONS
                }),
                source=source,
            ))
        return matrix
