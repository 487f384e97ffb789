from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class GovernedTableCreate(BaseModel):
    table_name: str
    display_name: str
    description: Optional[str] = None


class GovernedTableUpdate(BaseModel):
    display_name: Optional[str] = None
    description: Optional[str] = None


class GovernedTableResponse(BaseModel):
    id: str
    table_name: str
    display_name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
