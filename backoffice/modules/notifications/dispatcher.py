"""
Outbound webhook dispatch.

Posts an event payload to every enabled subscription of its topic (and of
the generic topic) and writes one webhook_delivery_logs row per try.
"""

import asyncio
import hashlib
import json
import logging
import time
from typing import Any, Dict, Optional

import httpx

from backoffice.config import settings
from backoffice.modules.notifications.schemas import (
    DeliveryResult, DispatchSummary, WebhookSubscriptionResponse
)
from backoffice.modules.notifications.service import DeliveryLogService, WebhookSubscriptionService

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Webhook-Signature"
# other 4xx answers are permanent; only throttling and server errors are retried
RETRYABLE_STATUS = {408, 429}


def sign_payload(secret: str, body: str) -> str:
    """Hex sha256 of secret + body, the signature receivers already verify."""
    return hashlib.sha256((secret + body).encode()).hexdigest()


class WebhookDispatcher:
    def __init__(
        self,
        subscriptions: WebhookSubscriptionService,
        delivery_logs: DeliveryLogService,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        max_attempts: Optional[int] = None,
    ):
        self.subscriptions = subscriptions
        self.delivery_logs = delivery_logs
        self.transport = transport
        self.max_attempts = max_attempts or settings.webhook_max_attempts

    def _log_attempt(self, subscription_id: str, attempt: int, payload: Dict[str, Any], **outcome) -> None:
        try:
            self.delivery_logs.record_attempt(
                attempt=attempt,
                request_body=payload,
                subscription_id=subscription_id,
                **outcome
            )
        except Exception as e:
            logger.exception(f"Failed to record delivery attempt {attempt} for subscription {subscription_id}: {e}")

    async def _deliver(
        self,
        client: httpx.AsyncClient,
        subscription: WebhookSubscriptionResponse,
        payload: Dict[str, Any],
    ) -> DeliveryResult:
        body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
        headers = {"Content-Type": "application/json"}
        if subscription.secret:
            headers[SIGNATURE_HEADER] = sign_payload(subscription.secret, body)

        start = time.monotonic()
        status_code = None
        success = False
        error = None
        attempt = 0
        retryable = True
        while attempt < self.max_attempts and not success and retryable:
            attempt += 1
            try:
                response = await client.post(subscription.endpoint_url, content=body.encode(), headers=headers)
                status_code = response.status_code
                success = response.is_success
                error = None if success else f"HTTP {status_code}"
                retryable = status_code in RETRYABLE_STATUS or status_code >= 500
                self._log_attempt(
                    subscription.id, attempt, payload,
                    status_code=status_code, success=success, response_body=response.text
                )
            except httpx.HTTPError as e:
                status_code = None
                error = str(e) or e.__class__.__name__
                logger.warning(f"Webhook {subscription.endpoint_url} attempt {attempt} failed: {error}")
                self._log_attempt(
                    subscription.id, attempt, payload,
                    status_code=None, success=False, error_message=error
                )

        duration_ms = int((time.monotonic() - start) * 1000)
        if success:
            logger.info(f"Webhook delivered to {subscription.endpoint_url} ({duration_ms}ms, attempt {attempt})")
        else:
            logger.error(f"Webhook to {subscription.endpoint_url} failed after {attempt} attempt(s): {error}")
        return DeliveryResult(
            subscription_id=subscription.id,
            endpoint_url=subscription.endpoint_url,
            success=success,
            status_code=status_code,
            attempts=attempt,
            error=error,
            duration_ms=duration_ms,
        )

    async def dispatch(self, topic: str, payload: Dict[str, Any]) -> DispatchSummary:
        subscriptions = self.subscriptions.active_for_topic(topic, settings.webhook_generic_topic)
        if not subscriptions:
            logger.info(f"No active webhook subscriptions for topic {topic}")
            return DispatchSummary(topic=topic, dispatched=0, total=0, results=[])

        logger.info(f"Dispatching {topic} to {len(subscriptions)} subscription(s)")
        async with httpx.AsyncClient(timeout=settings.webhook_timeout, transport=self.transport) as client:
            results = await asyncio.gather(
                *(self._deliver(client, subscription, payload) for subscription in subscriptions)
            )

        dispatched = sum(1 for r in results if r.success)
        logger.info(f"Dispatch of {topic} finished: {dispatched}/{len(results)} delivered")
        return DispatchSummary(topic=topic, dispatched=dispatched, total=len(results), results=list(results))
