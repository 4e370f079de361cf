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

"""Utility script to trigger Stripe webhook deliveries in test mode.

This script creates a PaymentIntent with Stripe's test Visa card and confirms
it, which makes Stripe send `payment_intent.succeeded` to the configured
webhook endpoint. Run it with a test-mode secret key only.

Usage:
  STRIPE_SECRET_KEY=sk_test_... uv run trigger_test_payment.py \
      [--order_id=...] [--amount=2000]
"""

import os
import sys

from absl import app as absl_app
from absl import flags
import stripe

FLAGS = flags.FLAGS
flags.DEFINE_string(
    "stripe_secret_key",
    os.environ.get("STRIPE_SECRET_KEY"),
    "Stripe test-mode secret API key",
)
flags.DEFINE_integer("amount", 2000, "Amount to charge, in cents")
flags.DEFINE_string("currency", "usd", "Currency of the payment")
flags.DEFINE_string(
    "order_id", "test-order-123", "Order id recorded in the metadata"
)


def trigger_payment() -> None:
  """Creates and confirms a test PaymentIntent."""
  if not FLAGS.stripe_secret_key:
    print("Error: --stripe_secret_key or STRIPE_SECRET_KEY is required.")
    sys.exit(1)
  if not FLAGS.stripe_secret_key.startswith("sk_test_"):
    print("Error: refusing to charge with a live secret key.")
    sys.exit(1)

  try:
    payment_intent = stripe.PaymentIntent.create(
        api_key=FLAGS.stripe_secret_key,
        amount=FLAGS.amount,
        currency=FLAGS.currency,
        payment_method_types=["card"],
        metadata={"order_id": FLAGS.order_id},
    )
    print(f"Created PaymentIntent: {payment_intent.id}")

    confirmed_intent = stripe.PaymentIntent.confirm(
        payment_intent.id,
        api_key=FLAGS.stripe_secret_key,
        payment_method="pm_card_visa",
    )
    print(f"Payment status: {confirmed_intent.status}")
  except stripe.StripeError as e:
    print(f"Error: {e.user_message or e}")
    sys.exit(1)


def main(argv):
  """Main entry point for the test payment script."""
  del argv
  trigger_payment()


if __name__ == "__main__":
  absl_app.run(main)
