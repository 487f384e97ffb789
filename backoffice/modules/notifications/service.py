from supabase import Client
from backoffice.core.exceptions import NotFoundError, ValidationError, require_key
from backoffice.modules.notifications.schemas import (
    DeliveryLogResponse, DeliveryLogList,
    WebhookSubscriptionCreate, WebhookSubscriptionUpdate, WebhookSubscriptionResponse,
    CommunicationCreate, CommunicationResponse, CommunicationList
)
from datetime import datetime, timezone
from typing import Any, List, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

# webhook_delivery_logs.id is a uuid; no row carries the nil uuid
_NIL_UUID = "00000000-0000-0000-0000-000000000000"


class DeliveryLogService:
    """Passive ledger of delivery attempts. Retrying is the sender's job."""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def record_attempt(
        self,
        attempt: int,
        request_body: Any,
        subscription_id: Optional[str] = None,
        status_code: Optional[int] = None,
        success: Optional[bool] = None,
        error_message: Optional[str] = None,
        response_body: Optional[str] = None,
    ) -> DeliveryLogResponse:
        """Append one attempt. A failed delivery is data (success=False), not an error."""
        if attempt is None or attempt < 1:
            raise ValidationError("attempt must be >= 1")
        try:
            result = self.supabase.table("webhook_delivery_logs").insert({
                "subscription_id": subscription_id,
                "attempt": attempt,
                "request_body": request_body,
                "status_code": status_code,
                "success": success,
                "error_message": error_message,
                "response_body": response_body
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to record delivery attempt")

            return DeliveryLogResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_delivery_logs(self, subscription_id: Optional[str] = None) -> DeliveryLogList:
        """Newest first. Read failures come back as an empty list with the error message."""
        try:
            query = self.supabase.table("webhook_delivery_logs").select("*")
            if subscription_id:
                query = query.eq("subscription_id", subscription_id)
            result = query.order("dispatched_at", desc=True).execute()
            return DeliveryLogList(logs=[DeliveryLogResponse(**row) for row in result.data or []])
        except Exception as e:
            logger.error(f"Error listing delivery logs: {e}")
            return DeliveryLogList(logs=[], error=str(e))

    def delete_delivery_log(self, log_id: str) -> bool:
        try:
            result = self.supabase.table("webhook_delivery_logs")\
                .delete()\
                .eq("id", log_id)\
                .execute()
            if not result.data:
                raise NotFoundError("Delivery log not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_all_delivery_logs(self) -> int:
        """Hard delete of every row. Returns how many rows were removed."""
        try:
            # PostgREST refuses an unfiltered delete
            result = self.supabase.table("webhook_delivery_logs")\
                .delete()\
                .neq("id", _NIL_UUID)\
                .execute()
            deleted = len(result.data or [])
            logger.warning(f"Deleted all delivery logs ({deleted} rows)")
            return deleted
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))


class WebhookSubscriptionService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_subscriptions(self) -> List[WebhookSubscriptionResponse]:
        try:
            result = self.supabase.table("webhook_subscriptions")\
                .select("*")\
                .order("created_at", desc=True)\
                .execute()
            return [WebhookSubscriptionResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def active_for_topic(self, topic: str, generic_topic: str) -> List[WebhookSubscriptionResponse]:
        """Enabled subscriptions for the topic plus the catch-all topic"""
        result = self.supabase.table("webhook_subscriptions")\
            .select("*")\
            .eq("enabled", True)\
            .in_("topic", [topic, generic_topic])\
            .execute()
        return [WebhookSubscriptionResponse(**row) for row in result.data or []]

    def create_subscription(self, data: WebhookSubscriptionCreate) -> WebhookSubscriptionResponse:
        require_key(endpoint_url=data.endpoint_url, topic=data.topic)
        try:
            result = self.supabase.table("webhook_subscriptions").insert({
                "endpoint_url": data.endpoint_url,
                "topic": data.topic,
                "secret": data.secret,
                "enabled": data.enabled
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create webhook")

            return WebhookSubscriptionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))

    def update_subscription(self, subscription_id: str, data: WebhookSubscriptionUpdate) -> WebhookSubscriptionResponse:
        try:
            update_data = data.model_dump(exclude_none=True)
            update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

            result = self.supabase.table("webhook_subscriptions")\
                .update(update_data)\
                .eq("id", subscription_id)\
                .execute()

            if not result.data:
                raise NotFoundError("Webhook not found")

            return WebhookSubscriptionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def toggle_subscription(self, subscription_id: str, enabled: bool) -> WebhookSubscriptionResponse:
        return self.update_subscription(subscription_id, WebhookSubscriptionUpdate(enabled=enabled))

    def delete_subscription(self, subscription_id: str) -> bool:
        try:
            result = self.supabase.table("webhook_subscriptions")\
                .delete()\
                .eq("id", subscription_id)\
                .execute()
            if not result.data:
                raise NotFoundError("Webhook not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))


class CommunicationLogService:
    """Log of e-mail / WhatsApp / SMS messages sent by the notification senders."""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def record_communication(self, data: CommunicationCreate, created_by: Optional[str] = None) -> CommunicationResponse:
        require_key(destinatario=data.destinatario, event_type=data.event_type)
        try:
            result = self.supabase.table("comunicacoes").insert({
                **data.model_dump(),
                "created_by": created_by
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to record communication")

            return CommunicationResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_communications(self, canal: Optional[str] = None) -> CommunicationList:
        try:
            query = self.supabase.table("comunicacoes").select("*")
            if canal:
                query = query.eq("canal", canal)
            result = query.order("created_at", desc=True).execute()
            return CommunicationList(logs=[CommunicationResponse(**row) for row in result.data or []])
        except Exception as e:
            logger.error(f"Error listing communications: {e}")
            return CommunicationList(logs=[], error=str(e))
