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

"""Storage interface shared by the order store backends."""

import abc
from typing import List, Optional

from enums import OrderStatus
from models import Order


class OrderStore(abc.ABC):
  """Durable keyed storage for orders.

  Every write is persisted before the coroutine returns. Status updates accept
  an `expected_status` so callers can move an order out of `pending` exactly
  once, even when two transitions race.
  """

  @abc.abstractmethod
  async def append(self, order: Order) -> None:
    """Persists a new order."""

  @abc.abstractmethod
  async def find_by_id(self, order_id: str) -> Optional[Order]:
    """Returns the order with this id, or None."""

  @abc.abstractmethod
  async def find_by_user(self, user_id: str) -> List[Order]:
    """Returns a user's orders in creation order."""

  @abc.abstractmethod
  async def find_by_session_id(self, session_id: str) -> Optional[Order]:
    """Returns the order linked to a Stripe checkout session, or None."""

  @abc.abstractmethod
  async def update_status(
      self,
      order_id: str,
      status: OrderStatus,
      expected_status: Optional[OrderStatus] = None,
  ) -> bool:
    """Sets the status of an order.

    Args:
      order_id: The order to update.
      status: The new status.
      expected_status: If given, the update only applies when the stored status
        still equals this value.

    Returns:
      True if the update was applied, False if `expected_status` did not match.

    Raises:
      ResourceNotFoundError: No order has this id.
      StorageUnavailableError: The backend could not be read or written.
    """

  @abc.abstractmethod
  async def attach_session(self, order_id: str, session_id: str) -> None:
    """Records the Stripe checkout session id of an order."""

  @abc.abstractmethod
  async def list_all(self) -> List[Order]:
    """Returns every stored order in creation order."""

  async def close(self) -> None:
    """Releases backend resources."""
