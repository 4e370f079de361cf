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

"""Configuration and startup logic for the checkout order server.

Command-line flags are read exactly once, by `settings_from_flags`, and folded
into an explicit `Settings` object. The FastAPI app carries that object on its
state and every service receives what it needs through dependencies, so request
handlers never consult flags or the environment directly.
"""

import contextlib
import logging
import os
from typing import Optional

from absl import flags
from enums import StorageBackend
from fastapi import FastAPI
from pydantic import BaseModel
from services.completion_scheduler import CompletionScheduler
import storage

FLAGS = flags.FLAGS

logger = logging.getLogger(__name__)

DEFAULT_PORT = 4100
DEFAULT_CLIENT_URL = "http://localhost:4200"

# Define flags only if they haven't been defined yet (to avoid duplicates
# during tests or re-imports)
try:
  flags.DEFINE_integer(
      "port", int(os.environ.get("PORT", DEFAULT_PORT)), "Port to listen on"
  )
  flags.DEFINE_string(
      "client_url",
      os.environ.get("CLIENT_URL", DEFAULT_CLIENT_URL),
      "Origin of the storefront client; the only origin allowed by CORS",
  )
  flags.DEFINE_string(
      "stripe_secret_key",
      os.environ.get("STRIPE_SECRET_KEY"),
      "Stripe secret API key",
  )
  flags.DEFINE_string(
      "stripe_webhook_secret",
      os.environ.get("STRIPE_WEBHOOK_SECRET"),
      "Signing secret for the Stripe webhook endpoint",
  )
  flags.DEFINE_string(
      "success_url",
      os.environ.get("SUCCESS_URL"),
      "Redirect URL after a successful payment",
  )
  flags.DEFINE_string(
      "cancel_url",
      os.environ.get("CANCEL_URL"),
      "Redirect URL after an abandoned payment",
  )
  flags.DEFINE_string("currency", "usd", "Currency for checkout line items")
  flags.DEFINE_enum(
      "storage_backend",
      StorageBackend.DATABASE.value,
      [backend.value for backend in StorageBackend],
      "Where orders are persisted",
  )
  flags.DEFINE_string(
      "database_path", "data/orders.db", "Path to the orders SQLite DB"
  )
  flags.DEFINE_string(
      "orders_file_path", "data/orders.json", "Path to the orders JSON file"
  )
  flags.DEFINE_float(
      "simulated_completion_delay",
      None,
      "If set, complete pending orders after this many seconds without"
      " waiting for a Stripe webhook. For local development only.",
  )
except flags.DuplicateFlagError:
  pass


class Settings(BaseModel):
  """Explicit server configuration passed to the app factory."""

  port: int = DEFAULT_PORT
  client_url: str = DEFAULT_CLIENT_URL
  stripe_secret_key: Optional[str] = None
  stripe_webhook_secret: Optional[str] = None
  success_url: Optional[str] = None
  cancel_url: Optional[str] = None
  currency: str = "usd"
  storage_backend: StorageBackend = StorageBackend.DATABASE
  database_path: str = "data/orders.db"
  orders_file_path: str = "data/orders.json"
  simulated_completion_delay: Optional[float] = None

  @property
  def checkout_success_url(self) -> str:
    if self.success_url:
      return self.success_url
    # Stripe substitutes the literal {CHECKOUT_SESSION_ID} placeholder.
    return f"{self.client_url}/thank-you?session_id={{CHECKOUT_SESSION_ID}}"

  @property
  def checkout_cancel_url(self) -> str:
    return self.cancel_url or f"{self.client_url}/cancel"


def settings_from_flags() -> Settings:
  """Builds `Settings` from parsed command-line flags."""
  return Settings(
      port=FLAGS.port,
      client_url=FLAGS.client_url,
      stripe_secret_key=FLAGS.stripe_secret_key or None,
      stripe_webhook_secret=FLAGS.stripe_webhook_secret or None,
      success_url=FLAGS.success_url or None,
      cancel_url=FLAGS.cancel_url or None,
      currency=FLAGS.currency,
      storage_backend=StorageBackend(FLAGS.storage_backend),
      database_path=FLAGS.database_path,
      orders_file_path=FLAGS.orders_file_path,
      simulated_completion_delay=FLAGS.simulated_completion_delay,
  )


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
  """Opens the order store and the completion scheduler for the app."""
  settings: Settings = app.state.settings
  order_store = await storage.open_order_store(
      settings.storage_backend,
      database_path=settings.database_path,
      orders_file_path=settings.orders_file_path,
  )
  scheduler = CompletionScheduler(settings.simulated_completion_delay)
  if scheduler.enabled:
    logger.warning(
        "Simulated payment completion is enabled (%.1fs delay); orders will"
        " complete without a Stripe webhook",
        settings.simulated_completion_delay,
    )
  app.state.order_store = order_store
  app.state.completion_scheduler = scheduler
  yield
  await scheduler.shutdown()
  await order_store.close()
