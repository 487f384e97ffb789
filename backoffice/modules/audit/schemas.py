from enum import Enum
from pydantic import BaseModel
from typing import Optional, List, Dict, Any, Literal
from datetime import datetime


class AuditAction(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


class AuditLogCreate(BaseModel):
    action: AuditAction
    table_name: str
    record_id: str
    old_record_data: Optional[Dict[str, Any]] = None
    new_record_data: Optional[Dict[str, Any]] = None


class AuditLogEntry(BaseModel):
    id: str
    timestamp: datetime
    user_id: str
    user_full_name: Optional[str] = None
    action: str
    table_name: str
    record_id: str
    old_record_data: Optional[Dict[str, Any]] = None
    new_record_data: Optional[Dict[str, Any]] = None

    class Config:
        from_attributes = True


class AuditLogFilter(BaseModel):
    table_name: Optional[str] = None
    user_id: Optional[str] = None
    action: Optional[AuditAction] = None
    record_id: Optional[str] = None
    since: Optional[datetime] = None
    until: Optional[datetime] = None
    limit: Optional[int] = None


class AuditLogList(BaseModel):
    logs: List[AuditLogEntry]
    error: Optional[str] = None


class GovernedMutationResult(BaseModel):
    record: Optional[Dict[str, Any]] = None
    state: Literal["committed", "audited"]
    audited: bool
