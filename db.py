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

"""Database management and persistence layer for the document-store backend.

Orders are kept as JSON documents in a single SQLAlchemy table on SQLite (via
aiosqlite). The fields the server queries on (`user_id`, `status` and
`stripe_session_id`) are also stored as indexed columns. The `status` column is
authoritative and is written with a conditional UPDATE, so a pending order can
reach a terminal state only once.

Key features include:
- `DatabaseManager`: Handles asynchronous engine initialization and session
  factory setup for the orders database.
- WAL Mode: Enables SQLite Write-Ahead Logging so the dump script can read while
  the server writes.
- Data Access Helpers: Asynchronous functions for the order operations.
"""

import logging
import os
from typing import Any
from typing import Dict
from typing import List
from typing import Optional

from sqlalchemy import Column
from sqlalchemy import JSON
from sqlalchemy import select
from sqlalchemy import String
from sqlalchemy import text
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import sessionmaker

logger = logging.getLogger(__name__)

OrderBase = declarative_base()


class DatabaseManager:
  """Manages the orders database engine and sessions."""

  def __init__(self) -> None:
    self.engine: Optional[AsyncEngine] = None
    self.session_factory: Optional[sessionmaker] = None

  async def init_db(self, database_path: str) -> None:
    """Initializes the database engine and creates tables."""
    directory = os.path.dirname(database_path)
    if directory:
      os.makedirs(directory, exist_ok=True)

    url = f"sqlite+aiosqlite:///{database_path}"
    self.engine = create_async_engine(url, echo=False)

    async with self.engine.connect() as conn:
      await conn.execute(text("PRAGMA journal_mode=WAL"))

    self.session_factory = sessionmaker(
        self.engine, expire_on_commit=False, class_=AsyncSession
    )

    async with self.engine.begin() as conn:
      await conn.run_sync(OrderBase.metadata.create_all)

  async def close(self) -> None:
    """Closes the database engine."""
    if self.engine:
      await self.engine.dispose()
      self.engine = None
      self.session_factory = None


class OrderRecord(OrderBase):
  __tablename__ = "orders"

  id = Column(String, primary_key=True)
  user_id = Column(String, index=True)
  status = Column(String)
  stripe_session_id = Column(String, nullable=True, index=True)
  created_at = Column(String)
  # SQLAlchemy JSON type handles serialization automatically
  data = Column(JSON)

  def to_document(self) -> Dict[str, Any]:
    """Returns the stored document with the authoritative columns applied."""
    document = dict(self.data or {})
    document["status"] = self.status
    document["stripeSessionId"] = self.stripe_session_id
    return document


# --- Data Access Helpers ---


async def insert_order(
    session: AsyncSession, order_id: str, document: Dict[str, Any]
) -> None:
  """Adds a new order document."""
  session.add(
      OrderRecord(
          id=order_id,
          user_id=document.get("userId"),
          status=document.get("status"),
          stripe_session_id=document.get("stripeSessionId"),
          created_at=document.get("createdAt"),
          data=document,
      )
  )


async def get_order(
    session: AsyncSession, order_id: str
) -> Optional[Dict[str, Any]]:
  """Retrieves an order document by ID."""
  record = await session.get(OrderRecord, order_id)
  if record:
    return record.to_document()
  return None


async def get_orders_for_user(
    session: AsyncSession, user_id: str
) -> List[Dict[str, Any]]:
  """Retrieves a user's order documents, oldest first."""
  result = await session.execute(
      select(OrderRecord)
      .where(OrderRecord.user_id == user_id)
      .order_by(OrderRecord.created_at)
  )
  return [record.to_document() for record in result.scalars().all()]


async def get_order_by_session(
    session: AsyncSession, stripe_session_id: str
) -> Optional[Dict[str, Any]]:
  """Retrieves the order linked to a Stripe checkout session."""
  result = await session.execute(
      select(OrderRecord).where(
          OrderRecord.stripe_session_id == stripe_session_id
      )
  )
  record = result.scalars().first()
  if record:
    return record.to_document()
  return None


async def update_order_status(
    session: AsyncSession,
    order_id: str,
    status: str,
    expected_status: Optional[str] = None,
) -> bool:
  """Sets an order's status, optionally only if it still has another one.

  Args:
    session: The database session to use.
    order_id: The order to update.
    status: The new status.
    expected_status: If given, the update only applies when the stored status
      equals this value.

  Returns:
    True if a row was updated.
  """
  stmt = update(OrderRecord).where(OrderRecord.id == order_id)
  if expected_status is not None:
    stmt = stmt.where(OrderRecord.status == expected_status)
  result = await session.execute(stmt.values(status=status))
  return result.rowcount > 0


async def set_order_session(
    session: AsyncSession, order_id: str, stripe_session_id: str
) -> bool:
  """Links an order to a Stripe checkout session."""
  result = await session.execute(
      update(OrderRecord)
      .where(OrderRecord.id == order_id)
      .values(stripe_session_id=stripe_session_id)
  )
  return result.rowcount > 0


async def list_orders(session: AsyncSession) -> List[Dict[str, Any]]:
  """Retrieves every order document, oldest first."""
  result = await session.execute(
      select(OrderRecord).order_by(OrderRecord.created_at)
  )
  return [record.to_document() for record in result.scalars().all()]
