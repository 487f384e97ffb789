from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any, Literal
from datetime import datetime


class DeliveryAttemptCreate(BaseModel):
    subscription_id: Optional[str] = None
    attempt: int = Field(1, ge=1)
    request_body: Any
    status_code: Optional[int] = None
    success: Optional[bool] = None
    error_message: Optional[str] = None
    response_body: Optional[str] = None


class DeliveryLogResponse(BaseModel):
    id: str
    subscription_id: Optional[str] = None
    status_code: Optional[int] = None
    success: Optional[bool] = None
    attempt: int
    error_message: Optional[str] = None
    request_body: Any = None
    response_body: Optional[str] = None
    dispatched_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DeliveryLogList(BaseModel):
    logs: List[DeliveryLogResponse]
    error: Optional[str] = None


class WebhookSubscriptionCreate(BaseModel):
    endpoint_url: str
    topic: str
    secret: Optional[str] = None
    enabled: bool = True


class WebhookSubscriptionUpdate(BaseModel):
    endpoint_url: Optional[str] = None
    topic: Optional[str] = None
    secret: Optional[str] = None
    enabled: Optional[bool] = None


class WebhookSubscriptionResponse(BaseModel):
    id: str
    endpoint_url: str
    topic: str
    secret: Optional[str] = None
    enabled: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class WebhookToggle(BaseModel):
    enabled: bool


class DispatchRequest(BaseModel):
    topic: str
    payload: Dict[str, Any]


class DeliveryResult(BaseModel):
    subscription_id: str
    endpoint_url: str
    success: bool
    status_code: Optional[int] = None
    attempts: int
    error: Optional[str] = None
    duration_ms: int


class DispatchSummary(BaseModel):
    topic: str
    dispatched: int
    total: int
    results: List[DeliveryResult]


class CommunicationCreate(BaseModel):
    event_type: str
    user_action: str = "system"
    canal: Literal["whatsapp", "email", "sms"]
    destinatario: str
    conteudo: str
    assunto: Optional[str] = None
    status: Literal["enviado", "erro", "pendente"] = "pendente"
    external_id: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class CommunicationResponse(CommunicationCreate):
    id: str
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None

    class Config:
        from_attributes = True


class CommunicationList(BaseModel):
    logs: List[CommunicationResponse]
    error: Optional[str] = None
