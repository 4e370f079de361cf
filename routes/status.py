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

"""Status route for the checkout order server."""

import datetime
from typing import Any

import dependencies
from config import Settings
from fastapi import APIRouter
from fastapi import Depends

router = APIRouter()


@router.get("/", summary="Server status")
async def get_status(
    settings: Settings = Depends(dependencies.get_settings),
) -> dict[str, Any]:
  """Reports that the server is up and which client it serves."""
  return {
      "message": "Checkout order server is running",
      "status": "OK",
      "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
      "client": settings.client_url,
  }
