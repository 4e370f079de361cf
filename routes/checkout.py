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

"""Stripe checkout and webhook routes."""

from typing import Optional

import dependencies
from fastapi import APIRouter
from fastapi import Body
from fastapi import Depends
from fastapi import Header
from fastapi import Request
from models import CheckoutSessionRequest
from models import CheckoutSessionResponse
from models import WebhookAck
from services.checkout_service import CheckoutService
from services.webhook_service import WebhookService

router = APIRouter()


@router.post(
    "/create-checkout-session",
    response_model=CheckoutSessionResponse,
    operation_id="create_checkout_session",
)
async def create_checkout_session(
    checkout_req: CheckoutSessionRequest = Body(...),
    checkout_service: CheckoutService = Depends(
        dependencies.get_checkout_service
    ),
) -> CheckoutSessionResponse:
  """Create a Stripe hosted checkout session for a cart or an order."""
  return await checkout_service.create_checkout_session(
      checkout_req.items, checkout_req.order_id
  )


@router.post(
    "/webhook",
    response_model=WebhookAck,
    operation_id="stripe_webhook",
)
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None, alias="Stripe-Signature"),
    webhook_service: WebhookService = Depends(dependencies.get_webhook_service),
) -> WebhookAck:
  """Receive a Stripe event. The body is read raw for signature checks."""
  payload = await request.body()
  return await webhook_service.handle_event(payload, stripe_signature)
