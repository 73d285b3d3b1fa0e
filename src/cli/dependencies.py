"""Builds the configured KeyValueStore backend."""

import os

from adapter.fake.key_value_store import FakeKeyValueStore
from adapter.file.key_value_store import FileKeyValueStore
from adapter.mongodb.key_value_store import MongoKeyValueStore
from adapter.redis.key_value_store import RedisKeyValueStore
from port.key_value_store import KeyValueStore

STORE_BACKEND = os.getenv('AUTH_STORE_BACKEND', 'file')


def get_key_value_store(backend: str | None = None) -> KeyValueStore:
    """Return the store for ``backend`` (defaults to AUTH_STORE_BACKEND).

    No backend connects here; network stores connect on first use and
    raise StorageError from there when unreachable.

    Raises:
        ValueError: unknown backend name
    """
    backend = (backend or STORE_BACKEND).lower()
    if backend == 'file':
        return FileKeyValueStore()
    if backend == 'redis':
        return RedisKeyValueStore()
    if backend == 'mongodb':
        return MongoKeyValueStore()
    if backend == 'memory':
        return FakeKeyValueStore()
    raise ValueError(f"Unknown store backend: {backend}")
