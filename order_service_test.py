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

"""Tests for the order lifecycle and the simulated completion trigger."""

import asyncio
import os
import shutil
import tempfile

from absl.testing import absltest
from absl.testing import parameterized
from enums import OrderStatus
from exceptions import InvalidRequestError
from exceptions import InvalidStateError
from exceptions import ResourceNotFoundError
from models import CartItem
import pydantic
from services.completion_scheduler import CompletionScheduler
from services.order_service import OrderService
import storage


class OrderServiceTest(parameterized.TestCase):
  """Tests for OrderService over the flat-file store."""

  def setUp(self) -> None:
    super().setUp()
    self.test_dir = tempfile.mkdtemp()
    self.order_store = storage.JsonFileOrderStore(
        os.path.join(self.test_dir, "orders.json")
    )
    self.service = OrderService(self.order_store)

  def tearDown(self) -> None:
    shutil.rmtree(self.test_dir)
    super().tearDown()

  def _create(self, *items: CartItem) -> str:
    items = list(items) or [CartItem(id=1, name="Red Rose", price=10)]
    response = asyncio.run(self.service.create_order("user-1", items))
    return response.order_id

  def _status(self, order_id: str) -> OrderStatus:
    return asyncio.run(self.service.get_order(order_id)).status

  @parameterized.named_parameters(
      ("single", [(10, 2)], 20.0),
      ("mixed", [(19.99, 3), (0.1, 3), (5, 1)], 65.27),
      ("free", [(0, 4)], 0.0),
  )
  def test_total_is_exact_sum(self, lines, expected_total) -> None:
    items = [
        CartItem(id=i, name=f"item-{i}", price=price, quantity=quantity)
        for i, (price, quantity) in enumerate(lines)
    ]
    order_id = self._create(*items)
    order = asyncio.run(self.service.get_order(order_id))
    self.assertEqual(order.total, expected_total)

  def test_create_order_is_pending(self) -> None:
    response = asyncio.run(
        self.service.create_order(
            "user-1", [CartItem(id=7, name="Tulip", price=8, image="t.png")]
        )
    )
    self.assertEqual(response.status, OrderStatus.PENDING)
    self.assertEqual(response.message, "Order created successfully")

    order = asyncio.run(self.service.get_order(response.order_id))
    self.assertEqual(order.status, OrderStatus.PENDING)
    self.assertEqual(order.user_id, "user-1")
    self.assertEqual(order.items[0].product_id, 7)
    self.assertEqual(order.items[0].quantity, 1)
    self.assertEqual(order.items[0].image, "t.png")
    self.assertNotEmpty(order.created_at)

  @parameterized.named_parameters(("empty", []), ("missing", None))
  def test_create_order_rejects_missing_items(self, items) -> None:
    with self.assertRaisesRegex(
        InvalidRequestError, "Invalid items array in request"
    ):
      asyncio.run(self.service.create_order("user-1", items))
    self.assertEmpty(asyncio.run(self.order_store.list_all()))

  def test_create_order_requires_user(self) -> None:
    with self.assertRaisesRegex(InvalidRequestError, "Missing userId"):
      asyncio.run(
          self.service.create_order(" ", [CartItem(name="Rose", price=1)])
      )

  def test_create_order_rejects_overflowing_total(self) -> None:
    with self.assertRaisesRegex(
        InvalidRequestError, "Invalid items array in request"
    ):
      asyncio.run(
          self.service.create_order(
              "user-1", [CartItem(name="Rose", price=1e308, quantity=2)]
          )
      )
    self.assertEmpty(asyncio.run(self.order_store.list_all()))

  @parameterized.parameters(float("inf"), float("nan"))
  def test_cart_item_rejects_non_finite_price(self, price: float) -> None:
    with self.assertRaises(pydantic.ValidationError):
      CartItem(name="Rose", price=price)

  def test_cancel_pending_order(self) -> None:
    order_id = self._create()
    order = asyncio.run(self.service.cancel_order(order_id))
    self.assertEqual(order.status, OrderStatus.CANCELLED)
    self.assertEqual(self._status(order_id), OrderStatus.CANCELLED)

  def test_cancel_unknown_order(self) -> None:
    with self.assertRaisesRegex(ResourceNotFoundError, "Order not found"):
      asyncio.run(self.service.cancel_order("missing"))

  @parameterized.named_parameters(
      ("completed", OrderStatus.COMPLETED),
      ("cancelled", OrderStatus.CANCELLED),
  )
  def test_cancel_terminal_order_fails(self, status: OrderStatus) -> None:
    order_id = self._create()
    asyncio.run(self.order_store.update_status(order_id, status))
    with self.assertRaisesRegex(
        InvalidStateError, "Can only cancel pending orders"
    ):
      asyncio.run(self.service.cancel_order(order_id))
    self.assertEqual(self._status(order_id), status)

  def test_complete_order_is_idempotent(self) -> None:
    order_id = self._create()
    first = asyncio.run(self.service.complete_order(order_id))
    second = asyncio.run(self.service.complete_order(order_id))
    self.assertEqual(first.status, OrderStatus.COMPLETED)
    self.assertEqual(second.status, OrderStatus.COMPLETED)

  def test_complete_unknown_order_is_noop(self) -> None:
    self.assertIsNone(asyncio.run(self.service.complete_order("missing")))

  def test_completion_after_cancel_keeps_cancelled(self) -> None:
    order_id = self._create(CartItem(id=1, name="Rose", price=10, quantity=2))
    order = asyncio.run(self.service.get_order(order_id))
    self.assertEqual(order.total, 20.0)

    asyncio.run(self.service.cancel_order(order_id))
    result = asyncio.run(self.service.complete_order(order_id))
    self.assertEqual(result.status, OrderStatus.CANCELLED)
    self.assertEqual(self._status(order_id), OrderStatus.CANCELLED)

  def test_get_orders_for_user(self) -> None:
    first = self._create()
    second = self._create()
    asyncio.run(
        self.service.create_order("user-2", [CartItem(name="x", price=1)])
    )
    orders = asyncio.run(self.service.get_orders_for_user("user-1"))
    self.assertEqual([o.id for o in orders], [first, second])

  def test_attach_checkout_session_requires_pending(self) -> None:
    order_id = self._create()
    asyncio.run(self.service.attach_checkout_session(order_id, "cs_test_1"))
    order = asyncio.run(self.service.get_order(order_id))
    self.assertEqual(order.stripe_session_id, "cs_test_1")

    asyncio.run(self.service.cancel_order(order_id))
    with self.assertRaises(InvalidStateError):
      asyncio.run(self.service.attach_checkout_session(order_id, "cs_test_2"))

  def test_complete_order_for_session(self) -> None:
    linked = self._create()
    asyncio.run(self.service.attach_checkout_session(linked, "cs_test_1"))
    unlinked = self._create()

    order = asyncio.run(self.service.complete_order_for_session("cs_test_1"))
    self.assertEqual(order.id, linked)
    self.assertEqual(order.status, OrderStatus.COMPLETED)

    order = asyncio.run(
        self.service.complete_order_for_session(
            "cs_test_2", fallback_order_id=unlinked
        )
    )
    self.assertEqual(order.id, unlinked)
    self.assertEqual(order.status, OrderStatus.COMPLETED)

    self.assertIsNone(
        asyncio.run(self.service.complete_order_for_session("cs_unknown"))
    )


class CompletionSchedulerTest(absltest.TestCase):
  """Tests for the simulated payment completion."""

  def setUp(self) -> None:
    super().setUp()
    self.test_dir = tempfile.mkdtemp()
    self.order_store = storage.JsonFileOrderStore(
        os.path.join(self.test_dir, "orders.json")
    )

  def tearDown(self) -> None:
    shutil.rmtree(self.test_dir)
    super().tearDown()

  def test_disabled_by_default(self) -> None:
    scheduler = CompletionScheduler()
    self.assertFalse(scheduler.enabled)

    async def noop(order_id: str) -> None:
      del order_id  # Unused.

    async def scenario() -> None:
      self.assertIsNone(scheduler.schedule("order-1", noop))

    asyncio.run(scenario())

  def test_scheduled_completion_completes_pending_order(self) -> None:

    async def scenario() -> None:
      scheduler = CompletionScheduler(0.01)
      service = OrderService(self.order_store, scheduler)
      response = await service.create_order(
          "user-1", [CartItem(name="Rose", price=10)]
      )
      self.assertEqual(scheduler.pending_count, 1)
      await asyncio.sleep(0.1)
      order = await service.get_order(response.order_id)
      self.assertEqual(order.status, OrderStatus.COMPLETED)
      self.assertEqual(scheduler.pending_count, 0)

    asyncio.run(scenario())

  def test_scheduled_completion_after_cancel_is_noop(self) -> None:

    async def scenario() -> None:
      scheduler = CompletionScheduler(0.05)
      service = OrderService(self.order_store, scheduler)
      response = await service.create_order(
          "user-1", [CartItem(name="Rose", price=10, quantity=2)]
      )
      await service.cancel_order(response.order_id)
      await asyncio.sleep(0.2)
      order = await service.get_order(response.order_id)
      self.assertEqual(order.status, OrderStatus.CANCELLED)

    asyncio.run(scenario())

  def test_callback_errors_are_logged(self) -> None:

    async def failing(order_id: str) -> None:
      raise RuntimeError(f"boom {order_id}")

    async def scenario() -> None:
      scheduler = CompletionScheduler(0)
      task = scheduler.schedule("order-1", failing)
      with self.assertLogs(level="ERROR") as logs:
        await task
      self.assertIn("boom order-1", logs.output[0])

    asyncio.run(scenario())

  def test_shutdown_cancels_outstanding_completions(self) -> None:
    calls = []

    async def record(order_id: str) -> None:
      calls.append(order_id)

    async def scenario() -> None:
      scheduler = CompletionScheduler(60)
      task = scheduler.schedule("order-1", record)
      await scheduler.shutdown()
      self.assertTrue(task.cancelled())

    asyncio.run(scenario())
    self.assertEmpty(calls)


if __name__ == "__main__":
  absltest.main()
