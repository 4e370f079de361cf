#   Copyright 2026 UCP Authors
#
#   Licensed under the Apache License, Version 2.0 (the "License");
#   you may not use this file except in compliance with the License.
#   You may obtain a copy of the License at
#
#       http://www.apache.org/licenses/LICENSE-2.0
#
#   Unless required by applicable law or agreed to in writing, software
#   distributed under the License is distributed on an "AS IS" BASIS,
#   WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#   See the License for the specific language governing permissions and
#   limitations under the License.

"""Webhook service for Stripe event notifications.

Stripe delivers events at least once, so handling must be idempotent. A
`checkout.session.completed` event completes the order linked to the session;
redeliveries find the order already completed and leave it alone. Other event
types are logged only.
"""

import logging
from typing import Any, Dict, Optional

from enums import WebhookEventType
from exceptions import ConfigurationError
from exceptions import PaymentProviderError
from models import WebhookAck
from services.order_service import OrderService
from services.payment_client import StripeCheckoutClient

logger = logging.getLogger(__name__)


class WebhookService:
  """Verifies and dispatches Stripe webhook events."""

  def __init__(
      self,
      payment_client: StripeCheckoutClient,
      order_service: OrderService,
      webhook_secret: Optional[str],
  ):
    self.payment_client = payment_client
    self.order_service = order_service
    self.webhook_secret = webhook_secret

  async def handle_event(
      self, payload: bytes, signature: Optional[str]
  ) -> WebhookAck:
    """Verifies a raw webhook payload and acts on it.

    Raises:
      ConfigurationError: No webhook signing secret is configured.
      InvalidSignatureError: The payload failed verification; nothing was
        processed.
    """
    if not self.webhook_secret:
      logger.error("Stripe webhook secret is required but not configured")
      raise ConfigurationError("Webhook secret not configured")

    event = self.payment_client.construct_event(
        payload, signature, self.webhook_secret
    )
    event_type = event["type"]
    obj = (event.get("data") or {}).get("object") or {}

    if event_type == WebhookEventType.CHECKOUT_SESSION_COMPLETED:
      await self._on_session_completed(obj)
    elif event_type == WebhookEventType.CHECKOUT_SESSION_EXPIRED:
      logger.info("Session expired: %s", obj.get("id"))
    elif event_type == WebhookEventType.PAYMENT_INTENT_SUCCEEDED:
      logger.info("Payment succeeded: %s", obj.get("id"))
    elif event_type == WebhookEventType.PAYMENT_INTENT_FAILED:
      logger.warning("Payment failed: %s", obj.get("id"))
    else:
      logger.info("Unhandled event type: %s", event_type)

    return WebhookAck(received=True, type=event_type)

  async def _on_session_completed(self, session: Dict[str, Any]) -> None:
    session_id = session.get("id")
    if not session_id:
      logger.warning("Completed session event without a session id")
      return
    logger.info("Payment successful for session: %s", session_id)

    payment_status = session.get("payment_status")
    if payment_status and payment_status != "paid":
      logger.info(
          "Session %s is %s; leaving its order pending",
          session_id,
          payment_status,
      )
      return

    try:
      details = await self.payment_client.retrieve_session(session_id)
      logger.info(
          "Session %s paid %s for %d line items",
          session_id,
          details.amount_total,
          len(details.line_items),
      )
    except (PaymentProviderError, ConfigurationError) as e:
      logger.warning(
          "Could not retrieve line items for session %s: %s",
          session_id,
          e.message,
      )

    metadata = session.get("metadata") or {}
    fallback_order_id = metadata.get("order_id") or session.get(
        "client_reference_id"
    )
    order = await self.order_service.complete_order_for_session(
        session_id, fallback_order_id=fallback_order_id
    )
    if order:
      logger.info("Order %s is %s", order.id, order.status.value)
