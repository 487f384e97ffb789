from pydantic import BaseModel
from typing import Optional, List, Dict, Any
from backoffice.modules.permissions.schemas import EffectiveTablePermission


class CurrentUserResponse(BaseModel):
    id: str
    email: Optional[str] = None
    user_metadata: Dict[str, Any] = {}
    app_metadata: Dict[str, Any] = {}
    is_super_user: bool = False
    permissions: List[EffectiveTablePermission] = []
