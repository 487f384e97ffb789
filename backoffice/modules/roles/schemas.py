from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class RoleCreate(BaseModel):
    level: str


class RoleUpdate(BaseModel):
    level: str


class RoleResponse(BaseModel):
    id: str
    level: str
    label: Optional[str] = None

    class Config:
        from_attributes = True


class UserRoleAssign(BaseModel):
    role: str


class UserRoleResponse(BaseModel):
    user_id: str
    role: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserRoleLookup(BaseModel):
    user_id: str
    role: Optional[str] = None
