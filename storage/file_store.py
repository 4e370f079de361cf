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

"""Order store backed by a single JSON file.

The file holds a JSON array of order documents. Every change rewrites the whole
file through a temporary file and `os.replace`, so readers see either the old
or the new contents. All read-modify-write cycles run under one
`asyncio.Lock`, which makes concurrent status updates to the same order
serialize instead of overwriting each other. The lock is per process: two
servers must not share one file.
"""

import asyncio
import json
import logging
import os
import tempfile
from typing import Any, Callable, Dict, List, Optional

from enums import OrderStatus
from exceptions import ResourceNotFoundError
from exceptions import StorageUnavailableError
from models import Order
from storage.base import OrderStore

logger = logging.getLogger(__name__)


class JsonFileOrderStore(OrderStore):
  """Stores orders as a JSON array in one file."""

  def __init__(self, path: str):
    self.path = path
    self._lock = asyncio.Lock()

  def _load(self) -> List[Dict[str, Any]]:
    try:
      with open(self.path, "r", encoding="utf-8") as f:
        documents = json.load(f)
    except FileNotFoundError:
      return []
    except (OSError, ValueError) as e:
      logger.error("Failed to read orders from %s: %s", self.path, e)
      raise StorageUnavailableError("Order storage unavailable") from e
    if not isinstance(documents, list):
      logger.error("Orders file %s does not hold a JSON array", self.path)
      raise StorageUnavailableError("Order storage unavailable")
    return documents

  def _save(self, documents: List[Dict[str, Any]]) -> None:
    directory = os.path.dirname(os.path.abspath(self.path))
    try:
      os.makedirs(directory, exist_ok=True)
      fd, tmp_path = tempfile.mkstemp(
          dir=directory, prefix=".orders-", suffix=".tmp"
      )
      try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
          json.dump(documents, f, indent=2)
        os.replace(tmp_path, self.path)
      except BaseException:
        os.unlink(tmp_path)
        raise
    except OSError as e:
      logger.error("Failed to write orders to %s: %s", self.path, e)
      raise StorageUnavailableError("Order storage unavailable") from e

  async def _modify(
      self, order_id: str, mutate: Callable[[Dict[str, Any]], bool]
  ) -> bool:
    """Applies `mutate` to one stored document and saves if it reports a change."""
    async with self._lock:
      documents = self._load()
      for document in documents:
        if document.get("id") == order_id:
          break
      else:
        raise ResourceNotFoundError("Order not found")
      if not mutate(document):
        return False
      self._save(documents)
      return True

  async def append(self, order: Order) -> None:
    async with self._lock:
      documents = self._load()
      documents.append(order.to_document())
      self._save(documents)

  async def find_by_id(self, order_id: str) -> Optional[Order]:
    for document in self._load():
      if document.get("id") == order_id:
        return Order.model_validate(document)
    return None

  async def find_by_user(self, user_id: str) -> List[Order]:
    return [
        Order.model_validate(document)
        for document in self._load()
        if document.get("userId") == user_id
    ]

  async def find_by_session_id(self, session_id: str) -> Optional[Order]:
    for document in self._load():
      if document.get("stripeSessionId") == session_id:
        return Order.model_validate(document)
    return None

  async def update_status(
      self,
      order_id: str,
      status: OrderStatus,
      expected_status: Optional[OrderStatus] = None,
  ) -> bool:
    def set_status(document: Dict[str, Any]) -> bool:
      if expected_status and document.get("status") != expected_status.value:
        return False
      document["status"] = status.value
      return True

    return await self._modify(order_id, set_status)

  async def attach_session(self, order_id: str, session_id: str) -> None:
    def set_session(document: Dict[str, Any]) -> bool:
      document["stripeSessionId"] = session_id
      return True

    await self._modify(order_id, set_session)

  async def list_all(self) -> List[Order]:
    return [Order.model_validate(document) for document in self._load()]
