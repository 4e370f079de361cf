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

"""Utility script to dump stored orders.

This script reads every order from either storage backend and prints its
status, items and total. It is useful for checking what the server recorded
and which orders a webhook has completed.

Usage:
  uv run dump_orders.py --storage_backend=database --database_path=...
  uv run dump_orders.py --storage_backend=file --orders_file_path=...
"""

import asyncio

from absl import app as absl_app
from absl import flags
from enums import StorageBackend
import storage

FLAGS = flags.FLAGS
flags.DEFINE_enum(
    "storage_backend",
    StorageBackend.DATABASE.value,
    [backend.value for backend in StorageBackend],
    "Which backend to read orders from",
)
flags.DEFINE_string("database_path", "data/orders.db", "Path to orders DB")
flags.DEFINE_string(
    "orders_file_path", "data/orders.json", "Path to orders JSON file"
)
flags.DEFINE_string("user_id", None, "Only show orders of this user")


async def dump_orders():
  """Loads orders from the configured backend and prints them."""
  order_store = await storage.open_order_store(
      StorageBackend(FLAGS.storage_backend),
      database_path=FLAGS.database_path,
      orders_file_path=FLAGS.orders_file_path,
  )
  try:
    if FLAGS.user_id:
      orders = await order_store.find_by_user(FLAGS.user_id)
    else:
      orders = await order_store.list_all()
  finally:
    await order_store.close()

  if not orders:
    print("No orders found.")
    return

  for order in orders:
    print(f"Order: {order.id} [{order.status.value}] user={order.user_id}")
    print(f"  Created: {order.created_at}")
    if order.stripe_session_id:
      print(f"  Stripe session: {order.stripe_session_id}")
    for item in order.items:
      name = item.name or "Unknown Item"
      print(
          f"  - {name} (ID: {item.product_id}) x{item.quantity} @"
          f" ${item.price:.2f}"
      )
    print(f"  Total: ${order.total:.2f}")
    print("-" * 60)


def main(argv):
  """Main entry point for the order dump script."""
  del argv
  asyncio.run(dump_orders())


if __name__ == "__main__":
  absl_app.run(main)
