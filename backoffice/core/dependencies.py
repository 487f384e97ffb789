"""
Core dependencies for route protection and permission checking
"""

from fastapi import Depends, Request, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from backoffice.core.exceptions import ForbiddenError
from backoffice.database.supabase_client import get_supabase
from backoffice.modules.auth.service import AuthService
from backoffice.modules.permissions.resolver import PermissionResolver
from supabase import Client
from typing import Dict, Any
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()


def _get_request_cache(request: Request) -> Dict[str, Any]:
    """Return request-scoped cache for resolver lookups (role, override, grant per table)."""
    if not hasattr(request.state, "access_cache"):
        request.state.access_cache = {}
    return request.state.access_cache


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    token = credentials.credentials
    user_data = auth_service.get_current_user(token)
    return user_data


def is_super_user(user_data: dict) -> bool:
    """Check if user is a super user from app_metadata"""
    # app_metadata is set server-side and cannot be modified by users
    app_metadata = user_data.get("app_metadata") or {}
    return app_metadata.get("type") == "super_user"


def get_permission_resolver(
    request: Request,
    supabase: Client = Depends(get_supabase)
) -> PermissionResolver:
    return PermissionResolver(supabase, cache=_get_request_cache(request))


def require_table_permission(table_name: str, operation: str):
    """Factory function to create a table/operation permission check dependency"""
    def check_permission(
        user_data: dict = Depends(get_current_user_id),
        resolver: PermissionResolver = Depends(get_permission_resolver)
    ) -> dict:
        if is_super_user(user_data):
            return user_data
        if not resolver.get_effective_permission(user_data["id"], table_name, operation):
            logger.info(f"Denied {operation} on {table_name} for user {user_data['id']}")
            raise ForbiddenError()
        return user_data
    return check_permission
