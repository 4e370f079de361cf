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

"""Order service implementing the order lifecycle.

An order is created `pending` and leaves that state exactly once, either to
`completed` (payment confirmed) or to `cancelled` (buyer request). Both
transitions are written with the store's compare-and-set on `pending`, so a
late payment confirmation can never revive a cancelled order and a
cancellation can never undo a completed one.
"""

import logging
import math
from typing import List, Optional

from enums import OrderStatus
from exceptions import InvalidRequestError
from exceptions import InvalidStateError
from exceptions import ResourceNotFoundError
from models import CartItem
from models import CreateOrderResponse
from models import Order
from models import OrderItem
from models import ShippingAddress
from services.completion_scheduler import CompletionScheduler
from storage import OrderStore

logger = logging.getLogger(__name__)

INVALID_ITEMS_MESSAGE = "Invalid items array in request"


class OrderService:
  """Service for creating, completing, cancelling and reading orders."""

  def __init__(
      self,
      order_store: OrderStore,
      completion_scheduler: Optional[CompletionScheduler] = None,
  ):
    self.order_store = order_store
    self.completion_scheduler = completion_scheduler

  async def create_order(
      self,
      user_id: Optional[str],
      items: Optional[List[CartItem]],
      shipping_address: Optional[ShippingAddress] = None,
  ) -> CreateOrderResponse:
    """Records a new pending order.

    Args:
      user_id: The purchaser. Not checked against any user registry.
      items: The cart items; must be non-empty.
      shipping_address: Optional delivery address, stored as given.

    Returns:
      The new order's id and status.

    Raises:
      InvalidRequestError: `items` is empty, their total is not a finite
        number, or `user_id` is missing.
    """
    if not items:
      raise InvalidRequestError(INVALID_ITEMS_MESSAGE)
    if not user_id or not user_id.strip():
      raise InvalidRequestError("Missing userId in request")

    order = Order.new(
        user_id=user_id,
        items=[OrderItem.from_cart_item(item) for item in items],
        shipping_address=shipping_address,
    )
    if not math.isfinite(order.total):
      raise InvalidRequestError(INVALID_ITEMS_MESSAGE)
    await self.order_store.append(order)
    logger.info(
        "Created order %s for user %s (total %.2f)",
        order.id,
        user_id,
        order.total,
    )

    if self.completion_scheduler:
      self.completion_scheduler.schedule(order.id, self.complete_order)

    return CreateOrderResponse(
        order_id=order.id,
        status=OrderStatus.PENDING,
        message="Order created successfully",
    )

  async def complete_order(self, order_id: str) -> Optional[Order]:
    """Marks a pending order completed; a no-op for any other order."""
    order = await self.order_store.find_by_id(order_id)
    if order is None:
      logger.warning("Cannot complete unknown order %s", order_id)
      return None
    if order.status.is_terminal:
      logger.info(
          "Order %s is already %s; not completing", order_id, order.status.value
      )
      return order

    applied = await self.order_store.update_status(
        order_id, OrderStatus.COMPLETED, expected_status=OrderStatus.PENDING
    )
    if applied:
      logger.info("Completed order %s", order_id)
    return await self.order_store.find_by_id(order_id)

  async def cancel_order(self, order_id: str) -> Order:
    """Cancels a pending order.

    Raises:
      ResourceNotFoundError: No order has this id.
      InvalidStateError: The order is no longer pending.
    """
    order = await self.get_order(order_id)
    if order.status != OrderStatus.PENDING:
      raise InvalidStateError("Can only cancel pending orders")

    applied = await self.order_store.update_status(
        order_id, OrderStatus.CANCELLED, expected_status=OrderStatus.PENDING
    )
    if not applied:
      raise InvalidStateError("Can only cancel pending orders")
    logger.info("Cancelled order %s", order_id)
    return order.model_copy(update={"status": OrderStatus.CANCELLED})

  async def get_order(self, order_id: str) -> Order:
    """Retrieves an order."""
    order = await self.order_store.find_by_id(order_id)
    if order is None:
      raise ResourceNotFoundError("Order not found")
    return order

  async def get_orders_for_user(self, user_id: str) -> List[Order]:
    return await self.order_store.find_by_user(user_id)

  async def attach_checkout_session(self, order_id: str, session_id: str) -> None:
    """Links a pending order to the Stripe session that will pay for it."""
    order = await self.get_order(order_id)
    if order.status != OrderStatus.PENDING:
      raise InvalidStateError("Can only pay for pending orders")
    await self.order_store.attach_session(order_id, session_id)
    logger.info("Linked order %s to checkout session %s", order_id, session_id)

  async def complete_order_for_session(
      self, session_id: str, fallback_order_id: Optional[str] = None
  ) -> Optional[Order]:
    """Completes the order paid for by a checkout session.

    The order is looked up by its stored session id first. If none is linked,
    `fallback_order_id` (the order id the session carried in its metadata) is
    used instead.

    Returns:
      The order after the transition, or None if no order matches.
    """
    order = await self.order_store.find_by_session_id(session_id)
    if order is None and fallback_order_id:
      order = await self.order_store.find_by_id(fallback_order_id)
    if order is None:
      logger.warning("No order linked to checkout session %s", session_id)
      return None
    return await self.complete_order(order.id)
