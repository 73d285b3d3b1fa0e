"""MongoDB implementation of KeyValueStore.

One document per record: ``{'_id': key, 'value': str, 'updated_at': datetime}``.
The synchronous driver runs in a worker thread so the event loop never blocks,
including the connect-and-ping done on first use.
"""

import asyncio
import os
from datetime import datetime, timezone
from logging import getLogger
from typing import Optional

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from domain.model.errors import StorageError

logger = getLogger(__name__)

MONGO_URL = os.getenv('MONGO_URL', '')
DATABASE_NAME = os.getenv('MONGODB_DATABASE', 'authapp')
RECORDS_COLLECTION_NAME = 'kv_records'


class MongoKeyValueStore:
    def __init__(self, url: str = MONGO_URL, database: str = DATABASE_NAME, client: Optional[MongoClient] = None):
        self.url = url
        self.database = database
        self._client_cache: Optional[MongoClient] = client

    def _connect(self) -> MongoClient:
        if self._client_cache is not None:
            try:
                self._client_cache.admin.command('ping')
                return self._client_cache
            except PyMongoError:
                self._client_cache = None
                logger.debug("[MONGODB] Cached client failed ping, reconnecting")

        if not self.url:
            logger.error("[MONGODB] MONGO_URL not configured")
            raise StorageError("MongoDB storage is not configured")

        try:
            client = MongoClient(
                self.url,
                serverSelectionTimeoutMS=5000,
                connectTimeoutMS=5000,
                retryWrites=True,
                retryReads=True,
            )
            client.admin.command('ping')
        except PyMongoError as e:
            logger.error("[MONGODB] Connection failed", extra={"error": str(e)[:200]})
            raise StorageError("MongoDB storage is unavailable") from e

        logger.info("[MONGODB] Connected", extra={"database": self.database})
        self._client_cache = client
        return client

    def _collection(self) -> Collection:
        return self._connect()[self.database][RECORDS_COLLECTION_NAME]

    # ── KeyValueStore implementation ─────────────────────────

    def _find(self, key: str) -> dict | None:
        return self._collection().find_one({'_id': key})

    def _upsert(self, key: str, value: str) -> None:
        update = {'$set': {'value': value, 'updated_at': datetime.now(timezone.utc)}}
        self._collection().update_one({'_id': key}, update, upsert=True)

    def _delete(self, key: str) -> None:
        self._collection().delete_one({'_id': key})

    async def get(self, key: str) -> str | None:
        try:
            doc = await asyncio.to_thread(self._find, key)
        except PyMongoError as e:
            logger.error("[MONGODB] Failed to read record", extra={"key": key, "error": str(e)})
            raise StorageError(f"Failed to read {key}") from e
        if not doc:
            return None
        return doc.get('value')

    async def set(self, key: str, value: str) -> None:
        try:
            await asyncio.to_thread(self._upsert, key, value)
        except PyMongoError as e:
            logger.error("[MONGODB] Failed to write record", extra={"key": key, "error": str(e)})
            raise StorageError(f"Failed to write {key}") from e

    async def remove(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._delete, key)
        except PyMongoError as e:
            logger.error("[MONGODB] Failed to delete record", extra={"key": key, "error": str(e)})
            raise StorageError(f"Failed to delete {key}") from e

    async def close(self) -> None:
        if self._client_cache is not None:
            await asyncio.to_thread(self._client_cache.close)
            self._client_cache = None
