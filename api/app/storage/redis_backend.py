"""Redis backend sharing the store between processes and hosts."""

from __future__ import annotations

from typing import Optional

import redis


class RedisBackend:
    """Keep each store key as a Redis string under ``prefix``."""

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        prefix: str = "smartorder:",
        client: redis.Redis | None = None,
    ) -> None:
        self.prefix = prefix
        self.client = client or redis.Redis.from_url(url, decode_responses=True)

    def _k(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def read(self, key: str) -> Optional[str]:
        value = self.client.get(self._k(key))
        if isinstance(value, bytes):
            value = value.decode()
        return value

    def write(self, key: str, value: str) -> None:
        self.client.set(self._k(key), value)

    def delete(self, key: str) -> None:
        self.client.delete(self._k(key))

    def clear(self) -> None:
        # keys under this store's prefix only
        keys = list(self.client.scan_iter(match=f"{self.prefix}*"))
        if keys:
            self.client.delete(*keys)
