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

"""Stripe client for hosted checkout sessions and webhook verification.

All Stripe calls pass the API key explicitly instead of setting the global
`stripe.api_key`, so a client only ever talks to Stripe with the key it was
configured with.
"""

from decimal import Decimal
from decimal import ROUND_HALF_UP
import json
import logging
from typing import Any, Dict, List, Optional

from exceptions import ConfigurationError
from exceptions import InvalidSignatureError
from exceptions import PaymentProviderError
from models import CartItem
from models import CheckoutLineItem
from models import CheckoutSession
import stripe

logger = logging.getLogger(__name__)


def to_minor_units(price: float) -> int:
  """Converts a unit price to cents, rounding halves up."""
  return int(
      (Decimal(str(price)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
  )


class StripeCheckoutClient:
  """Thin wrapper over the Stripe checkout session API."""

  def __init__(self, api_key: Optional[str], currency: str = "usd"):
    self.api_key = api_key
    self.currency = currency

  def _require_api_key(self) -> str:
    if not self.api_key:
      raise ConfigurationError("Stripe secret key not configured")
    return self.api_key

  def build_line_items(self, items: List[CartItem]) -> List[Dict[str, Any]]:
    """Builds Stripe `line_items` entries from cart items."""
    line_items = []
    for item in items:
      product_data: Dict[str, Any] = {"name": item.name}
      if item.description:
        product_data["description"] = item.description
      line_items.append({
          "price_data": {
              "currency": self.currency,
              "product_data": product_data,
              "unit_amount": to_minor_units(item.price),
          },
          "quantity": item.quantity,
      })
    return line_items

  async def create_session(
      self,
      line_items: List[Dict[str, Any]],
      success_url: str,
      cancel_url: str,
      metadata: Optional[Dict[str, str]] = None,
      client_reference_id: Optional[str] = None,
  ) -> CheckoutSession:
    """Creates a hosted checkout session.

    Args:
      line_items: Entries as returned by `build_line_items`.
      success_url: Where Stripe redirects after payment.
      cancel_url: Where Stripe redirects when the buyer abandons payment.
      metadata: Optional key/value pairs stored on the session.
      client_reference_id: Optional id Stripe echoes back in webhook events.

    Returns:
      The created session.

    Raises:
      ConfigurationError: No Stripe secret key is configured.
      PaymentProviderError: Stripe rejected the request or was unreachable.
    """
    params: Dict[str, Any] = {
        "payment_method_types": ["card"],
        "line_items": line_items,
        "mode": "payment",
        "success_url": success_url,
        "cancel_url": cancel_url,
    }
    if metadata:
      params["metadata"] = metadata
    if client_reference_id:
      params["client_reference_id"] = client_reference_id

    try:
      session = await stripe.checkout.Session.create_async(
          api_key=self._require_api_key(), **params
      )
    except stripe.StripeError as e:
      logger.error("Stripe Error: %s", e)
      raise PaymentProviderError(str(e.user_message or e)) from e
    return self._to_checkout_session(session)

  async def retrieve_session(self, session_id: str) -> CheckoutSession:
    """Retrieves a checkout session together with its line items."""
    try:
      session = await stripe.checkout.Session.retrieve_async(
          session_id,
          api_key=self._require_api_key(),
          expand=["line_items"],
      )
    except stripe.StripeError as e:
      logger.error("Stripe Error retrieving session %s: %s", session_id, e)
      raise PaymentProviderError(str(e.user_message or e)) from e
    return self._to_checkout_session(session)

  def construct_event(
      self, payload: bytes, signature: Optional[str], secret: str
  ) -> Dict[str, Any]:
    """Verifies a webhook payload's signature and decodes it.

    Raises:
      InvalidSignatureError: The signature header is missing or does not match,
        or the payload is not JSON.
    """
    if not signature:
      raise InvalidSignatureError(
          "Webhook Error: Missing Stripe-Signature header"
      )
    try:
      body = payload.decode("utf-8")
      stripe.WebhookSignature.verify_header(
          body, signature, secret, stripe.Webhook.DEFAULT_TOLERANCE
      )
      event = json.loads(body)
    except stripe.SignatureVerificationError as e:
      raise InvalidSignatureError(f"Webhook Error: {e.user_message}") from e
    except ValueError as e:
      raise InvalidSignatureError(f"Webhook Error: Invalid payload: {e}") from e
    if not isinstance(event, dict) or "type" not in event:
      raise InvalidSignatureError("Webhook Error: Payload is not an event")
    return event

  def _to_checkout_session(self, session: Any) -> CheckoutSession:
    line_items = []
    expanded = getattr(session, "line_items", None)
    for line in getattr(expanded, "data", None) or []:
      line_items.append(
          CheckoutLineItem(
              description=getattr(line, "description", None),
              quantity=getattr(line, "quantity", None),
              amount_total=getattr(line, "amount_total", None),
          )
      )
    return CheckoutSession(
        session_id=session.id,
        hosted_url=getattr(session, "url", None),
        payment_status=getattr(session, "payment_status", None),
        amount_total=getattr(session, "amount_total", None),
        line_items=line_items,
    )
