from fastapi import APIRouter, Depends
from backoffice.database.supabase_client import get_supabase, get_service_supabase
from backoffice.modules.notifications.schemas import (
    DeliveryAttemptCreate, DeliveryLogResponse, DeliveryLogList,
    WebhookSubscriptionCreate, WebhookSubscriptionUpdate, WebhookSubscriptionResponse,
    WebhookToggle, DispatchRequest, DispatchSummary,
    CommunicationCreate, CommunicationResponse, CommunicationList
)
from backoffice.modules.notifications.service import (
    DeliveryLogService, WebhookSubscriptionService, CommunicationLogService
)
from backoffice.modules.notifications.dispatcher import WebhookDispatcher
from backoffice.core.dependencies import require_table_permission
from supabase import Client
from typing import List, Optional, Dict

delivery_router = APIRouter(prefix="/delivery-logs", tags=["delivery-logs"])
webhooks_router = APIRouter(prefix="/webhooks", tags=["webhooks"])
communications_router = APIRouter(prefix="/communications", tags=["communications"])


def get_delivery_log_service(supabase: Client = Depends(get_service_supabase)) -> DeliveryLogService:
    return DeliveryLogService(supabase)


def get_subscription_service(supabase: Client = Depends(get_supabase)) -> WebhookSubscriptionService:
    return WebhookSubscriptionService(supabase)


def get_communication_service(supabase: Client = Depends(get_service_supabase)) -> CommunicationLogService:
    return CommunicationLogService(supabase)


def get_dispatcher(
    subscriptions: WebhookSubscriptionService = Depends(get_subscription_service),
    delivery_logs: DeliveryLogService = Depends(get_delivery_log_service),
) -> WebhookDispatcher:
    return WebhookDispatcher(subscriptions, delivery_logs)


# Delivery log endpoints
@delivery_router.get("", response_model=DeliveryLogList)
async def list_delivery_logs(
    subscription_id: Optional[str] = None,
    user_data: Dict = Depends(require_table_permission("webhook_delivery_logs", "read")),
    service: DeliveryLogService = Depends(get_delivery_log_service)
):
    """List delivery attempts, newest first"""
    return service.list_delivery_logs(subscription_id)


@delivery_router.post("", response_model=DeliveryLogResponse, status_code=201)
async def record_delivery_attempt(
    body: DeliveryAttemptCreate,
    user_data: Dict = Depends(require_table_permission("webhook_delivery_logs", "create")),
    service: DeliveryLogService = Depends(get_delivery_log_service)
):
    """Record one delivery attempt made by an external sender"""
    return service.record_attempt(**body.model_dump())


@delivery_router.delete("/{log_id}", status_code=204)
async def delete_delivery_log(
    log_id: str,
    user_data: Dict = Depends(require_table_permission("webhook_delivery_logs", "delete")),
    service: DeliveryLogService = Depends(get_delivery_log_service)
):
    service.delete_delivery_log(log_id)
    return None


@delivery_router.delete("")
async def delete_all_delivery_logs(
    user_data: Dict = Depends(require_table_permission("webhook_delivery_logs", "delete")),
    service: DeliveryLogService = Depends(get_delivery_log_service)
):
    """Irreversibly remove every delivery log row"""
    return {"deleted": service.delete_all_delivery_logs()}


# Webhook subscription endpoints
@webhooks_router.get("", response_model=List[WebhookSubscriptionResponse])
async def list_webhooks(
    user_data: Dict = Depends(require_table_permission("webhook_subscriptions", "read")),
    service: WebhookSubscriptionService = Depends(get_subscription_service)
):
    return service.list_subscriptions()


@webhooks_router.post("", response_model=WebhookSubscriptionResponse, status_code=201)
async def create_webhook(
    body: WebhookSubscriptionCreate,
    user_data: Dict = Depends(require_table_permission("webhook_subscriptions", "create")),
    service: WebhookSubscriptionService = Depends(get_subscription_service)
):
    return service.create_subscription(body)


@webhooks_router.post("/dispatch", response_model=DispatchSummary)
async def dispatch_webhook(
    body: DispatchRequest,
    user_data: Dict = Depends(require_table_permission("webhook_subscriptions", "update")),
    dispatcher: WebhookDispatcher = Depends(get_dispatcher)
):
    """Send a topic payload to all matching subscriptions"""
    return await dispatcher.dispatch(body.topic, body.payload)


@webhooks_router.put("/{subscription_id}", response_model=WebhookSubscriptionResponse)
async def update_webhook(
    subscription_id: str,
    body: WebhookSubscriptionUpdate,
    user_data: Dict = Depends(require_table_permission("webhook_subscriptions", "update")),
    service: WebhookSubscriptionService = Depends(get_subscription_service)
):
    return service.update_subscription(subscription_id, body)


@webhooks_router.patch("/{subscription_id}/toggle", response_model=WebhookSubscriptionResponse)
async def toggle_webhook(
    subscription_id: str,
    body: WebhookToggle,
    user_data: Dict = Depends(require_table_permission("webhook_subscriptions", "update")),
    service: WebhookSubscriptionService = Depends(get_subscription_service)
):
    return service.toggle_subscription(subscription_id, body.enabled)


@webhooks_router.delete("/{subscription_id}", status_code=204)
async def delete_webhook(
    subscription_id: str,
    user_data: Dict = Depends(require_table_permission("webhook_subscriptions", "delete")),
    service: WebhookSubscriptionService = Depends(get_subscription_service)
):
    service.delete_subscription(subscription_id)
    return None


# Communication log endpoints
@communications_router.get("", response_model=CommunicationList)
async def list_communications(
    canal: Optional[str] = None,
    user_data: Dict = Depends(require_table_permission("comunicacoes", "read")),
    service: CommunicationLogService = Depends(get_communication_service)
):
    return service.list_communications(canal)


@communications_router.post("", response_model=CommunicationResponse, status_code=201)
async def record_communication(
    body: CommunicationCreate,
    user_data: Dict = Depends(require_table_permission("comunicacoes", "create")),
    service: CommunicationLogService = Depends(get_communication_service)
):
    return service.record_communication(body, created_by=user_data["id"])
