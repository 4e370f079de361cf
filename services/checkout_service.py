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

"""Checkout service for creating Stripe hosted checkout sessions.

A session can be created for a bare cart, or for a recorded order by passing
its id. In the latter case the session carries the order id as metadata and
`client_reference_id`, and the order remembers the session id once Stripe has
accepted the request, so the webhook can complete the right order.
"""

import logging
from typing import List, Optional

from enums import OrderStatus
from exceptions import InvalidRequestError
from exceptions import InvalidStateError
from models import CartItem
from models import CheckoutSessionResponse
from services.order_service import INVALID_ITEMS_MESSAGE
from services.order_service import OrderService
from services.payment_client import StripeCheckoutClient

logger = logging.getLogger(__name__)


class CheckoutService:
  """Service for starting payment of a cart or an order."""

  def __init__(
      self,
      payment_client: StripeCheckoutClient,
      order_service: OrderService,
      success_url: str,
      cancel_url: str,
  ):
    self.payment_client = payment_client
    self.order_service = order_service
    self.success_url = success_url
    self.cancel_url = cancel_url

  async def create_checkout_session(
      self,
      items: Optional[List[CartItem]],
      order_id: Optional[str] = None,
  ) -> CheckoutSessionResponse:
    """Creates a hosted checkout session for `items`.

    Args:
      items: The cart items to charge for; must be non-empty and named.
      order_id: Optional recorded order this payment is for.

    Returns:
      The session id and the hosted payment page URL.

    Raises:
      InvalidRequestError: The items are missing or unnamed.
      ResourceNotFoundError: `order_id` does not match an order.
      InvalidStateError: The order is no longer pending.
      PaymentProviderError: Stripe rejected the request.
    """
    if not items:
      raise InvalidRequestError(INVALID_ITEMS_MESSAGE)
    for index, item in enumerate(items):
      if not item.name:
        raise InvalidRequestError(f"Missing name for item {index}")

    metadata = None
    if order_id:
      # Validate before calling Stripe so a bad id costs no session.
      order = await self.order_service.get_order(order_id)
      if order.status != OrderStatus.PENDING:
        raise InvalidStateError("Can only pay for pending orders")
      if order.stripe_session_id:
        logger.info(
            "Order %s already had session %s; starting a new one",
            order_id,
            order.stripe_session_id,
        )
      metadata = {"order_id": order_id}

    session = await self.payment_client.create_session(
        self.payment_client.build_line_items(items),
        success_url=self.success_url,
        cancel_url=self.cancel_url,
        metadata=metadata,
        client_reference_id=order_id,
    )
    logger.info("Created checkout session %s", session.session_id)

    if order_id:
      await self.order_service.attach_checkout_session(
          order_id, session.session_id
      )

    return CheckoutSessionResponse(id=session.session_id, url=session.hosted_url)
