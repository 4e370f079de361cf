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

"""Enumerations for the checkout order server.

This module defines the order lifecycle states, the supported storage
backends, and the Stripe webhook event types the server dispatches on.
"""

import enum


class OrderStatus(str, enum.Enum):
  PENDING = "pending"
  COMPLETED = "completed"
  CANCELLED = "cancelled"

  @property
  def is_terminal(self) -> bool:
    return self is not OrderStatus.PENDING


class StorageBackend(str, enum.Enum):
  DATABASE = "database"
  FILE = "file"


class WebhookEventType(str, enum.Enum):
  CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"
  CHECKOUT_SESSION_EXPIRED = "checkout.session.expired"
  PAYMENT_INTENT_SUCCEEDED = "payment_intent.succeeded"
  PAYMENT_INTENT_FAILED = "payment_intent.payment_failed"
