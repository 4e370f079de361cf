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

"""Checkout Order Server (Python/FastAPI)."""

import logging
import sys
from typing import Optional, Sequence

from absl import app as absl_app
import config
from config import Settings
from exceptions import OrderServiceError
from fastapi import FastAPI
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from routes.checkout import router as checkout_router
from routes.order import router as order_router
from routes.status import router as status_router
from services.order_service import INVALID_ITEMS_MESSAGE
import uvicorn

# --- App Setup ---

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def order_service_exception_handler(
    request: Request, exc: OrderServiceError
) -> JSONResponse:
  """Converts service exceptions to JSON error responses."""
  if exc.status_code >= 500:
    logger.error(
        "%s %s failed: %s", request.method, request.url.path, exc.message
    )
  return JSONResponse(
      status_code=exc.status_code,
      content={"error": exc.message, "code": exc.code},
  )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
  """Reports malformed request bodies as 400 INVALID_REQUEST."""
  del request  # Unused.
  message = "Invalid request body"
  for error in exc.errors():
    if "items" in error.get("loc", ()):
      message = INVALID_ITEMS_MESSAGE
      break
  return JSONResponse(
      status_code=400,
      content={"error": message, "code": "INVALID_REQUEST"},
  )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
  """Builds the FastAPI application for `settings`."""
  settings = settings or Settings()
  app = FastAPI(
      title="Checkout Order Server",
      description="Creates Stripe checkout sessions and tracks orders",
      lifespan=config.lifespan,
  )
  app.state.settings = settings

  app.add_middleware(
      CORSMiddleware,
      allow_origins=[settings.client_url],
      allow_methods=["GET", "POST"],
      allow_headers=["Content-Type", "Authorization"],
  )
  app.add_exception_handler(OrderServiceError, order_service_exception_handler)
  app.add_exception_handler(
      RequestValidationError, validation_exception_handler
  )

  app.include_router(status_router)
  app.include_router(order_router)
  app.include_router(checkout_router)
  return app


def main(argv: Sequence[str]) -> None:
  """Main entry point for the Checkout Order Server."""
  del argv  # Unused.

  try:
    settings = config.settings_from_flags()
  except ValueError as e:
    logger.error("Invalid configuration: %s", e)
    print("\nUsage:")
    print(config.FLAGS.main_module_help())
    sys.exit(1)

  if not settings.stripe_secret_key:
    logger.warning(
        "STRIPE_SECRET_KEY is not set; checkout sessions cannot be created"
    )
  if not settings.stripe_webhook_secret:
    logger.warning(
        "STRIPE_WEBHOOK_SECRET is not set; webhook events will be rejected"
    )

  app = create_app(settings)
  logger.info("Payment server listening on port %d", settings.port)
  uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
  absl_app.run(main)
