from pydantic import BaseModel
from typing import Optional, Literal
from datetime import datetime

Operation = Literal["create", "read", "update", "delete"]
PermissionSource = Literal["override", "role", "none"]


class PermissionFlags(BaseModel):
    can_create: bool = False
    can_read: bool = False
    can_update: bool = False
    can_delete: bool = False


class RolePermissionUpsert(PermissionFlags):
    role: str
    table_name: str


class RolePermissionResponse(PermissionFlags):
    id: str
    role: str
    table_name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserPermissionUpsert(PermissionFlags):
    table_name: str


class UserPermissionResponse(PermissionFlags):
    id: str
    user_id: str
    table_name: str
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EffectivePermissionResponse(BaseModel):
    user_id: str
    table_name: str
    operation: Operation
    allowed: bool


class EffectiveTablePermission(BaseModel):
    table_name: str
    display_name: Optional[str] = None
    role: Optional[str] = None
    role_grant: Optional[PermissionFlags] = None
    override: Optional[PermissionFlags] = None
    effective: PermissionFlags
    source: PermissionSource
