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

"""Contract tests shared by both order store backends."""

import asyncio
import os
import shutil
import tempfile
from typing import Awaitable, Callable, Optional

from absl.testing import absltest
from absl.testing import parameterized
import db
from enums import OrderStatus
from enums import StorageBackend
from exceptions import ResourceNotFoundError
from exceptions import StorageUnavailableError
from models import Order
from models import OrderItem
from models import ShippingAddress
import storage

BACKENDS = (
    ("database", StorageBackend.DATABASE),
    ("file", StorageBackend.FILE),
)


def make_order(
    user_id: str = "user-1", created_at: Optional[str] = None
) -> Order:
  """Builds a pending order with two roses."""
  order = Order.new(
      user_id=user_id,
      items=[OrderItem(product_id=1, name="Red Rose", price=10.0, quantity=2)],
      shipping_address=ShippingAddress(
          street="1 Main St", city="Springfield", zip_code="12345"
      ),
  )
  if created_at:
    order = order.model_copy(update={"created_at": created_at})
  return order


class OrderStoreTest(parameterized.TestCase):
  """Runs the same scenarios against each storage backend."""

  def setUp(self) -> None:
    super().setUp()
    self.test_dir = tempfile.mkdtemp()
    self.database_path = os.path.join(self.test_dir, "orders.db")
    self.orders_file_path = os.path.join(self.test_dir, "orders.json")

  def tearDown(self) -> None:
    shutil.rmtree(self.test_dir)
    super().tearDown()

  async def _open(self, backend: StorageBackend) -> storage.OrderStore:
    return await storage.open_order_store(
        backend,
        database_path=self.database_path,
        orders_file_path=self.orders_file_path,
    )

  def _run(
      self,
      backend: StorageBackend,
      scenario: Callable[[storage.OrderStore], Awaitable[None]],
  ) -> None:
    """Runs `scenario` against a freshly opened store."""

    async def run() -> None:
      order_store = await self._open(backend)
      try:
        await scenario(order_store)
      finally:
        await order_store.close()

    asyncio.run(run())

  @parameterized.named_parameters(*BACKENDS)
  def test_append_then_find_by_id(self, backend: StorageBackend) -> None:
    order = make_order()

    async def scenario(order_store: storage.OrderStore) -> None:
      await order_store.append(order)
      found = await order_store.find_by_id(order.id)
      self.assertEqual(found, order)
      self.assertEqual(found.status, OrderStatus.PENDING)
      self.assertEqual(found.total, 20.0)
      self.assertEqual(found.shipping_address.zip_code, "12345")
      self.assertIsNone(await order_store.find_by_id("missing"))

    self._run(backend, scenario)

  @parameterized.named_parameters(*BACKENDS)
  def test_find_by_user_in_creation_order(
      self, backend: StorageBackend
  ) -> None:
    first = make_order("alice", created_at="2026-01-01T10:00:00+00:00")
    other = make_order("bob", created_at="2026-01-01T10:30:00+00:00")
    second = make_order("alice", created_at="2026-01-01T11:00:00+00:00")

    async def scenario(order_store: storage.OrderStore) -> None:
      for order in (first, other, second):
        await order_store.append(order)
      orders = await order_store.find_by_user("alice")
      self.assertEqual([o.id for o in orders], [first.id, second.id])
      self.assertEmpty(await order_store.find_by_user("carol"))
      self.assertLen(await order_store.list_all(), 3)

    self._run(backend, scenario)

  @parameterized.named_parameters(*BACKENDS)
  def test_update_status_compare_and_set(
      self, backend: StorageBackend
  ) -> None:
    order = make_order()

    async def scenario(order_store: storage.OrderStore) -> None:
      await order_store.append(order)
      applied = await order_store.update_status(
          order.id, OrderStatus.CANCELLED, expected_status=OrderStatus.PENDING
      )
      self.assertTrue(applied)
      applied = await order_store.update_status(
          order.id, OrderStatus.COMPLETED, expected_status=OrderStatus.PENDING
      )
      self.assertFalse(applied)
      found = await order_store.find_by_id(order.id)
      self.assertEqual(found.status, OrderStatus.CANCELLED)

    self._run(backend, scenario)

  @parameterized.named_parameters(*BACKENDS)
  def test_update_status_unconditional(self, backend: StorageBackend) -> None:
    order = make_order()

    async def scenario(order_store: storage.OrderStore) -> None:
      await order_store.append(order)
      self.assertTrue(
          await order_store.update_status(order.id, OrderStatus.COMPLETED)
      )
      found = await order_store.find_by_id(order.id)
      self.assertEqual(found.status, OrderStatus.COMPLETED)

    self._run(backend, scenario)

  @parameterized.named_parameters(*BACKENDS)
  def test_update_status_unknown_order(self, backend: StorageBackend) -> None:

    async def scenario(order_store: storage.OrderStore) -> None:
      with self.assertRaises(ResourceNotFoundError):
        await order_store.update_status("missing", OrderStatus.COMPLETED)
      with self.assertRaises(ResourceNotFoundError):
        await order_store.attach_session("missing", "cs_test_1")

    self._run(backend, scenario)

  @parameterized.named_parameters(*BACKENDS)
  def test_attach_and_find_by_session(self, backend: StorageBackend) -> None:
    order = make_order()

    async def scenario(order_store: storage.OrderStore) -> None:
      await order_store.append(order)
      self.assertIsNone(await order_store.find_by_session_id("cs_test_1"))
      await order_store.attach_session(order.id, "cs_test_1")
      found = await order_store.find_by_session_id("cs_test_1")
      self.assertEqual(found.id, order.id)
      self.assertEqual(found.stripe_session_id, "cs_test_1")

    self._run(backend, scenario)

  @parameterized.named_parameters(*BACKENDS)
  def test_writes_survive_reopen(self, backend: StorageBackend) -> None:
    order = make_order()

    async def write(order_store: storage.OrderStore) -> None:
      await order_store.append(order)
      await order_store.update_status(order.id, OrderStatus.COMPLETED)

    async def read(order_store: storage.OrderStore) -> None:
      found = await order_store.find_by_id(order.id)
      self.assertEqual(found.status, OrderStatus.COMPLETED)

    self._run(backend, write)
    self._run(backend, read)

  @parameterized.named_parameters(*BACKENDS)
  def test_racing_transitions_apply_once(
      self, backend: StorageBackend
  ) -> None:
    order = make_order()

    async def scenario(order_store: storage.OrderStore) -> None:
      await order_store.append(order)
      results = await asyncio.gather(
          order_store.update_status(
              order.id,
              OrderStatus.COMPLETED,
              expected_status=OrderStatus.PENDING,
          ),
          order_store.update_status(
              order.id,
              OrderStatus.CANCELLED,
              expected_status=OrderStatus.PENDING,
          ),
      )
      self.assertEqual(sorted(results), [False, True])
      found = await order_store.find_by_id(order.id)
      expected = OrderStatus.COMPLETED if results[0] else OrderStatus.CANCELLED
      self.assertEqual(found.status, expected)

    self._run(backend, scenario)


class JsonFileOrderStoreTest(absltest.TestCase):
  """Behavior specific to the flat-file backend."""

  def setUp(self) -> None:
    super().setUp()
    self.test_dir = tempfile.mkdtemp()
    self.path = os.path.join(self.test_dir, "data", "orders.json")

  def tearDown(self) -> None:
    shutil.rmtree(self.test_dir)
    super().tearDown()

  def test_missing_file_reads_as_empty(self) -> None:
    order_store = storage.JsonFileOrderStore(self.path)
    self.assertEmpty(asyncio.run(order_store.list_all()))
    self.assertFalse(os.path.exists(self.path))

  def test_append_creates_directory(self) -> None:
    order_store = storage.JsonFileOrderStore(self.path)
    asyncio.run(order_store.append(make_order()))
    self.assertTrue(os.path.exists(self.path))
    self.assertEqual(
        [f for f in os.listdir(os.path.dirname(self.path))], ["orders.json"]
    )

  def test_corrupt_file_is_storage_unavailable(self) -> None:
    os.makedirs(os.path.dirname(self.path))
    with open(self.path, "w", encoding="utf-8") as f:
      f.write("{not json")
    order_store = storage.JsonFileOrderStore(self.path)
    with self.assertRaises(StorageUnavailableError):
      asyncio.run(order_store.find_by_id("anything"))


class SqlOrderStoreTest(absltest.TestCase):

  def test_uninitialized_database_is_storage_unavailable(self) -> None:
    order_store = storage.SqlOrderStore(db.DatabaseManager())
    with self.assertRaises(StorageUnavailableError):
      asyncio.run(order_store.find_by_id("anything"))


if __name__ == "__main__":
  absltest.main()
