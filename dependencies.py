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

"""FastAPI dependencies for the checkout order server.

This module contains dependency injection logic for FastAPI endpoints,
including:
- Access to the `Settings`, order store and completion scheduler held on the
  application state.
- Service instantiation (OrderService, CheckoutService, WebhookService).
- The Stripe client, built from the configured secret key.
"""

from typing import Optional

from config import Settings
from fastapi import Depends
from fastapi import Request
from services.checkout_service import CheckoutService
from services.completion_scheduler import CompletionScheduler
from services.order_service import OrderService
from services.payment_client import StripeCheckoutClient
from services.webhook_service import WebhookService
from storage import OrderStore


def get_settings(request: Request) -> Settings:
  """Dependency provider for the server settings."""
  return request.app.state.settings


def get_order_store(request: Request) -> OrderStore:
  """Dependency provider for the order store opened by the lifespan."""
  return request.app.state.order_store


def get_completion_scheduler(request: Request) -> Optional[CompletionScheduler]:
  """Dependency provider for the simulated completion scheduler."""
  scheduler = getattr(request.app.state, "completion_scheduler", None)
  if scheduler is not None and scheduler.enabled:
    return scheduler
  return None


def get_payment_client(
    settings: Settings = Depends(get_settings),
) -> StripeCheckoutClient:
  """Dependency provider for the Stripe client."""
  return StripeCheckoutClient(settings.stripe_secret_key, settings.currency)


def get_order_service(
    order_store: OrderStore = Depends(get_order_store),
    scheduler: Optional[CompletionScheduler] = Depends(
        get_completion_scheduler
    ),
) -> OrderService:
  """Dependency provider for OrderService."""
  return OrderService(order_store, scheduler)


def get_checkout_service(
    settings: Settings = Depends(get_settings),
    payment_client: StripeCheckoutClient = Depends(get_payment_client),
    order_service: OrderService = Depends(get_order_service),
) -> CheckoutService:
  """Dependency provider for CheckoutService."""
  return CheckoutService(
      payment_client,
      order_service,
      success_url=settings.checkout_success_url,
      cancel_url=settings.checkout_cancel_url,
  )


def get_webhook_service(
    settings: Settings = Depends(get_settings),
    payment_client: StripeCheckoutClient = Depends(get_payment_client),
    order_service: OrderService = Depends(get_order_service),
) -> WebhookService:
  """Dependency provider for WebhookService."""
  return WebhookService(
      payment_client, order_service, settings.stripe_webhook_secret
  )
