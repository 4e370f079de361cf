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

"""Request, response and storage models for the checkout order server.

Field names are snake_case in Python and camelCase on the wire, matching what
the storefront client sends and what previously stored orders contain.
"""

import datetime
from decimal import Decimal
from typing import Any, List, Optional, Union
import uuid

from enums import OrderStatus
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
  model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CartItem(CamelModel):
  """An item as sent by the storefront cart."""

  id: Optional[Union[int, str]] = None
  name: Optional[str] = None
  description: Optional[str] = None
  price: float = Field(..., ge=0, allow_inf_nan=False)
  quantity: int = Field(default=1, ge=1)
  image: Optional[str] = None

  @field_validator("quantity", mode="before")
  @classmethod
  def _default_quantity(cls, value: Any) -> Any:
    # Carts omit or null the quantity for single items.
    return 1 if value is None else value


class OrderItem(CamelModel):
  """A line of a stored order; `price` is the unit price."""

  product_id: Optional[Union[int, str]] = None
  name: Optional[str] = None
  price: float
  quantity: int = 1
  image: Optional[str] = None

  @classmethod
  def from_cart_item(cls, item: CartItem) -> "OrderItem":
    return cls(
        product_id=item.id,
        name=item.name,
        price=item.price,
        quantity=item.quantity,
        image=item.image,
    )


class ShippingAddress(CamelModel):
  model_config = ConfigDict(extra="allow")

  street: Optional[str] = None
  city: Optional[str] = None
  state: Optional[str] = None
  zip_code: Optional[str] = None
  country: Optional[str] = None


class Order(CamelModel):
  """A recorded order."""

  id: str
  user_id: str
  items: List[OrderItem]
  total: float
  status: OrderStatus = OrderStatus.PENDING
  shipping_address: Optional[ShippingAddress] = None
  stripe_session_id: Optional[str] = None
  created_at: str

  @classmethod
  def new(
      cls,
      user_id: str,
      items: List[OrderItem],
      shipping_address: Optional[ShippingAddress] = None,
  ) -> "Order":
    """Creates a pending order with a fresh id and a fixed total."""
    return cls(
        id=str(uuid.uuid4()),
        user_id=user_id,
        items=items,
        total=compute_total(items),
        status=OrderStatus.PENDING,
        shipping_address=shipping_address,
        created_at=datetime.datetime.now(datetime.timezone.utc).isoformat(),
    )

  def to_document(self) -> dict[str, Any]:
    return self.model_dump(mode="json", by_alias=True)


def compute_total(items: List[OrderItem]) -> float:
  """Sums `price * quantity` using decimal arithmetic."""
  total = sum(
      (Decimal(str(item.price)) * item.quantity for item in items),
      Decimal("0"),
  )
  return float(total)


class CreateOrderRequest(CamelModel):
  user_id: Optional[str] = None
  items: Optional[List[CartItem]] = None
  shipping_address: Optional[ShippingAddress] = None


class CreateOrderResponse(CamelModel):
  order_id: str
  status: OrderStatus
  message: str


class MessageResponse(BaseModel):
  message: str


class CheckoutSessionRequest(CamelModel):
  items: Optional[List[CartItem]] = None
  order_id: Optional[str] = None


class CheckoutSessionResponse(BaseModel):
  id: str
  url: Optional[str] = None


class CheckoutLineItem(CamelModel):
  description: Optional[str] = None
  quantity: Optional[int] = None
  amount_total: Optional[int] = None


class CheckoutSession(CamelModel):
  """The parts of a Stripe checkout session this server relies on."""

  session_id: str
  hosted_url: Optional[str] = None
  payment_status: Optional[str] = None
  amount_total: Optional[int] = None
  line_items: List[CheckoutLineItem] = []


class WebhookAck(BaseModel):
  received: bool = True
  type: str
