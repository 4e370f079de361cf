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

"""Delayed, best-effort completion of pending orders.

This stands in for the payment confirmation that Stripe delivers by webhook,
for local development without a Stripe account. It is disabled unless a delay
is configured. A scheduled completion is never withdrawn when the order is
cancelled, so the callback must re-check that the order is still pending.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Set

logger = logging.getLogger(__name__)


class CompletionScheduler:
  """Runs a completion callback for an order after a fixed delay."""

  def __init__(self, delay_seconds: Optional[float] = None):
    self.delay_seconds = delay_seconds
    self._tasks: Set[asyncio.Task] = set()

  @property
  def enabled(self) -> bool:
    return self.delay_seconds is not None and self.delay_seconds >= 0

  @property
  def pending_count(self) -> int:
    return len(self._tasks)

  def schedule(
      self, order_id: str, callback: Callable[[str], Awaitable[object]]
  ) -> Optional[asyncio.Task]:
    """Schedules `callback(order_id)`; returns None when disabled."""
    if not self.enabled:
      return None
    task = asyncio.get_running_loop().create_task(
        self._run(order_id, callback), name=f"complete-order-{order_id}"
    )
    # The loop only keeps weak references to tasks.
    self._tasks.add(task)
    task.add_done_callback(self._tasks.discard)
    return task

  async def _run(
      self, order_id: str, callback: Callable[[str], Awaitable[object]]
  ) -> None:
    await asyncio.sleep(self.delay_seconds)
    try:
      await callback(order_id)
    except Exception as e:  # pylint: disable=broad-exception-caught
      logger.error("Simulated completion of order %s failed: %s", order_id, e)

  async def shutdown(self) -> None:
    """Cancels completions that have not run yet."""
    tasks = list(self._tasks)
    for task in tasks:
      task.cancel()
    if tasks:
      await asyncio.gather(*tasks, return_exceptions=True)
      logger.info("Cancelled %d scheduled order completions", len(tasks))
