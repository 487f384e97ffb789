from fastapi import APIRouter, Depends
from backoffice.modules.auth.schemas import CurrentUserResponse
from backoffice.core.dependencies import get_current_user_id, get_permission_resolver, is_super_user
from backoffice.modules.permissions.resolver import PermissionResolver
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me", response_model=CurrentUserResponse)
async def get_current_user(
    current_user: Dict = Depends(get_current_user_id),
    resolver: PermissionResolver = Depends(get_permission_resolver),
):
    """Get current authenticated user and their effective table permissions (for frontend UI)."""
    return CurrentUserResponse(
        **current_user,
        is_super_user=is_super_user(current_user),
        permissions=resolver.effective_permissions(current_user["id"]),
    )
