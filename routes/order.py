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

"""Order management routes."""

from typing import List

import dependencies
from fastapi import APIRouter
from fastapi import Body
from fastapi import Depends
from fastapi import Path
from models import CreateOrderRequest
from models import CreateOrderResponse
from models import MessageResponse
from models import Order
from services.order_service import OrderService

router = APIRouter()


@router.post(
    "/create-order",
    response_model=CreateOrderResponse,
    response_model_by_alias=True,
    operation_id="create_order",
)
async def create_order(
    order_req: CreateOrderRequest = Body(...),
    order_service: OrderService = Depends(dependencies.get_order_service),
) -> CreateOrderResponse:
  """Record a new pending order."""
  return await order_service.create_order(
      order_req.user_id, order_req.items, order_req.shipping_address
  )


@router.get(
    "/order/{orderId}",
    response_model=Order,
    response_model_by_alias=True,
    operation_id="get_order",
)
async def get_order(
    order_id: str = Path(..., alias="orderId"),
    order_service: OrderService = Depends(dependencies.get_order_service),
) -> Order:
  """Get an order by ID."""
  return await order_service.get_order(order_id)


@router.get(
    "/orders/{userId}",
    response_model=List[Order],
    response_model_by_alias=True,
    operation_id="get_user_orders",
)
async def get_user_orders(
    user_id: str = Path(..., alias="userId"),
    order_service: OrderService = Depends(dependencies.get_order_service),
) -> List[Order]:
  """List a user's orders, oldest first."""
  return await order_service.get_orders_for_user(user_id)


@router.post(
    "/cancel-order/{orderId}",
    response_model=MessageResponse,
    operation_id="cancel_order",
)
async def cancel_order(
    order_id: str = Path(..., alias="orderId"),
    order_service: OrderService = Depends(dependencies.get_order_service),
) -> MessageResponse:
  """Cancel a pending order."""
  await order_service.cancel_order(order_id)
  return MessageResponse(message="Order cancelled successfully")
