"""Process-local backend keeping serialized values in a dict."""

from __future__ import annotations

from typing import Dict, Optional

from .errors import QuotaExceededError


class MemoryBackend:
    """Hold JSON text per key, optionally capped at ``quota_bytes`` in total."""

    def __init__(self, quota_bytes: int | None = None) -> None:
        self.quota_bytes = quota_bytes
        self._data: Dict[str, str] = {}

    def used_bytes(self, exclude: str | None = None) -> int:
        """UTF-8 size of every stored value, skipping ``exclude``."""
        return sum(len(v.encode()) for k, v in self._data.items() if k != exclude)

    def read(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def write(self, key: str, value: str) -> None:
        if self.quota_bytes is not None:
            if self.used_bytes(exclude=key) + len(value.encode()) > self.quota_bytes:
                raise QuotaExceededError(f"writing {key!r} exceeds {self.quota_bytes} bytes")
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()
