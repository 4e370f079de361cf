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

"""Order store backends and the factory that selects one."""

import logging

import db
from enums import StorageBackend
from storage.base import OrderStore
from storage.file_store import JsonFileOrderStore
from storage.sql_store import SqlOrderStore

logger = logging.getLogger(__name__)

__all__ = [
    "JsonFileOrderStore",
    "OrderStore",
    "SqlOrderStore",
    "open_order_store",
]


async def open_order_store(
    backend: StorageBackend,
    database_path: str,
    orders_file_path: str,
) -> OrderStore:
  """Creates and initializes the order store for `backend`."""
  if backend == StorageBackend.DATABASE:
    logger.info("Storing orders in database %s", database_path)
    manager = db.DatabaseManager()
    await manager.init_db(database_path)
    return SqlOrderStore(manager)
  logger.info("Storing orders in file %s", orders_file_path)
  return JsonFileOrderStore(orders_file_path)
