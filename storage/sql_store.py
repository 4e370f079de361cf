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

"""Order store backed by the SQL document collection in `db`."""

import contextlib
import logging
from typing import AsyncIterator, List, Optional

import db
from enums import OrderStatus
from exceptions import ResourceNotFoundError
from exceptions import StorageUnavailableError
from models import Order
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from storage.base import OrderStore

logger = logging.getLogger(__name__)


class SqlOrderStore(OrderStore):
  """Stores each order as one JSON document row, committing per operation."""

  def __init__(self, manager: db.DatabaseManager):
    self.manager = manager

  @contextlib.asynccontextmanager
  async def _session(self) -> AsyncIterator[AsyncSession]:
    if self.manager.session_factory is None:
      raise StorageUnavailableError("Order database is not initialized")
    try:
      async with self.manager.session_factory() as session:
        yield session
    except SQLAlchemyError as e:
      logger.error("Order database error: %s", e)
      raise StorageUnavailableError("Order storage unavailable") from e

  async def append(self, order: Order) -> None:
    async with self._session() as session:
      await db.insert_order(session, order.id, order.to_document())
      await session.commit()

  async def find_by_id(self, order_id: str) -> Optional[Order]:
    async with self._session() as session:
      document = await db.get_order(session, order_id)
    return Order.model_validate(document) if document else None

  async def find_by_user(self, user_id: str) -> List[Order]:
    async with self._session() as session:
      documents = await db.get_orders_for_user(session, user_id)
    return [Order.model_validate(document) for document in documents]

  async def find_by_session_id(self, session_id: str) -> Optional[Order]:
    async with self._session() as session:
      document = await db.get_order_by_session(session, session_id)
    return Order.model_validate(document) if document else None

  async def update_status(
      self,
      order_id: str,
      status: OrderStatus,
      expected_status: Optional[OrderStatus] = None,
  ) -> bool:
    async with self._session() as session:
      updated = await db.update_order_status(
          session,
          order_id,
          status.value,
          expected_status.value if expected_status else None,
      )
      if updated:
        await session.commit()
        return True
      # Nothing matched: tell a missing order apart from a lost race.
      if await db.get_order(session, order_id) is None:
        raise ResourceNotFoundError("Order not found")
      return False

  async def attach_session(self, order_id: str, session_id: str) -> None:
    async with self._session() as session:
      if not await db.set_order_session(session, order_id, session_id):
        raise ResourceNotFoundError("Order not found")
      await session.commit()

  async def list_all(self) -> List[Order]:
    async with self._session() as session:
      documents = await db.list_orders(session)
    return [Order.model_validate(document) for document in documents]

  async def close(self) -> None:
    await self.manager.close()
