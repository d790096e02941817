"""Record store backend selector.

Provides :func:`create_store`, which builds a :class:`RecordStore` over the
memory, SQL or Redis backend named by ``Settings.store_backend``.
"""

from __future__ import annotations

from config import Settings, StoreBackend

from .errors import QuotaExceededError, StorageError
from .keys import (
    MENUS,
    ORDERS,
    RESERVATIONS,
    SHOPS,
    TABLES,
    USER,
)
from .record_store import RecordStore, StorageBackend


def create_store(settings: Settings) -> RecordStore:
    """Return a record store for the configured backend."""

    if settings.store_backend == StoreBackend.SQL:
        from .sql_backend import SQLBackend

        backend: StorageBackend = SQLBackend(settings.database_url)
    elif settings.store_backend == StoreBackend.REDIS:
        from .redis_backend import RedisBackend

        backend = RedisBackend(settings.redis_url, prefix=settings.store_prefix)
    else:
        from .memory_backend import MemoryBackend

        backend = MemoryBackend(quota_bytes=settings.store_quota_bytes)
    return RecordStore(backend)


__all__ = [
    "create_store",
    "RecordStore",
    "StorageBackend",
    "StorageError",
    "QuotaExceededError",
    "USER",
    "SHOPS",
    "MENUS",
    "RESERVATIONS",
    "TABLES",
    "ORDERS",
]
