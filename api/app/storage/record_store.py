"""Keyed JSON record store.

Every entity collection of the application (shops, menus, tables,
reservations, orders) is a list of JSON objects stored under one key, plus a
few single-value slots such as the current user. Writes are full
read-modify-write cycles of one key performed under a per-key lock, so no
caller ever observes a partially written collection. There is no transaction
across keys or across processes: concurrent writers to the same key on
different processes resolve as last write wins.

Values are serialized on write and parsed on read, so callers always receive
a private copy and mutating it has no effect until it is written back.
"""

from __future__ import annotations

import json
import logging
import threading
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional, Protocol

logger = logging.getLogger("store")

Record = Dict[str, Any]


class StorageBackend(Protocol):
    """Minimal protocol implemented by storage backends."""

    def read(self, key: str) -> Optional[str]:
        """Return the serialized value for ``key`` or ``None``."""

    def write(self, key: str, value: str) -> None:
        """Replace the serialized value for ``key``."""

    def delete(self, key: str) -> None:
        """Drop ``key`` if present."""

    def clear(self) -> None:
        """Drop every key owned by the backend."""


class RecordStore:
    """Read/modify/write access to named collections over a backend.

    No method raises on backend or serialization failures: reads fall back
    to the supplied default and writes return ``False`` after logging.
    """

    def __init__(self, backend: StorageBackend) -> None:
        self.backend = backend
        self._locks: Dict[str, threading.RLock] = defaultdict(threading.RLock)
        self._locks_guard = threading.Lock()

    def _lock(self, key: str) -> threading.RLock:
        with self._locks_guard:
            return self._locks[key]

    # Single values

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value stored under ``key`` or ``default``."""

        try:
            raw = self.backend.read(key)
        except Exception:
            logger.exception("store read failed key=%s", key)
            return default
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError:
            logger.error("store value for key=%s is not valid JSON", key)
            return default

    def set(self, key: str, value: Any) -> bool:
        """Replace the value under ``key``; return ``False`` if not written."""

        try:
            raw = json.dumps(value)
        except (TypeError, ValueError):
            logger.exception("store value for key=%s is not serializable", key)
            return False
        with self._lock(key):
            try:
                self.backend.write(key, raw)
            except Exception:
                logger.exception("store write failed key=%s", key)
                return False
        return True

    def remove(self, key: str) -> bool:
        with self._lock(key):
            try:
                self.backend.delete(key)
            except Exception:
                logger.exception("store delete failed key=%s", key)
                return False
        return True

    def clear_all(self) -> bool:
        """Wipe every key. Only meant for a full reset."""

        try:
            self.backend.clear()
        except Exception:
            logger.exception("store clear failed")
            return False
        logger.warning("store cleared")
        return True

    # Collections

    def get_collection(self, key: str) -> List[Record]:
        """Return the list stored under ``key``; empty when absent."""

        value = self.get(key, [])
        if not isinstance(value, list):
            logger.error("store key=%s does not hold a collection", key)
            return []
        return value

    def update_collection(
        self, key: str, fn: Callable[[List[Record]], List[Record]]
    ) -> bool:
        """Atomically replace the collection with ``fn(collection)``."""

        with self._lock(key):
            return self.set(key, fn(self.get_collection(key)))

    def upsert(self, key: str, item: Record) -> bool:
        """Replace the record with the same ``id`` or append ``item``."""

        return self.upsert_by(key, item, "id")

    def upsert_by(self, key: str, item: Record, field: str) -> bool:
        """Replace the record whose ``field`` equals ``item[field]`` or append.

        Used directly for collections whose effective key is not ``id``
        (one menu per shop is located by ``shopId``).
        """

        match = item[field]

        def apply(records: List[Record]) -> List[Record]:
            for idx, record in enumerate(records):
                if record.get(field) == match:
                    records[idx] = item
                    return records
            records.append(item)
            return records

        return self.update_collection(key, apply)

    def find_by(
        self, key: str, predicate: Callable[[Record], bool]
    ) -> Optional[Record]:
        """Return the first record of ``key`` matching ``predicate``."""

        return next((r for r in self.get_collection(key) if predicate(r)), None)

    def filter_by(
        self, key: str, predicate: Callable[[Record], bool]
    ) -> List[Record]:
        return [r for r in self.get_collection(key) if predicate(r)]
