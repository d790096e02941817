"""Test doubles shared by the test modules."""

from __future__ import annotations

import asyncio
import pathlib
import sys
from datetime import datetime, timedelta

sys.path.append(str(pathlib.Path(__file__).resolve().parents[2]))

from api.app.providers.menu_parser import MenuParseError  # noqa: E402
from api.app.schemas import ParsedMenu  # noqa: E402

UA_STAFF = "Mozilla/5.0 (iPad; staff tablet)"
UA_GUEST = "Mozilla/5.0 (iPhone; guest phone)"

CAFE_MENU = {
    "brandName": "Cafe",
    "categories": ["Drinks"],
    "items": [{"name": "Tea", "price": 60, "category": "Drinks"}],
}


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2026, 10, 19, 12, 30)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class StaticMenuParser:
    def __init__(self, parsed: dict) -> None:
        self.parsed = ParsedMenu.model_validate(parsed)
        self.calls: list[tuple[bytes, str, str]] = []

    async def parse(self, image: bytes, mime_type: str, shop_name: str) -> ParsedMenu:
        self.calls.append((image, mime_type, shop_name))
        return self.parsed


class FailingMenuParser:
    async def parse(self, image: bytes, mime_type: str, shop_name: str) -> ParsedMenu:
        raise MenuParseError("boom")


class SlowMenuParser:
    async def parse(self, image: bytes, mime_type: str, shop_name: str) -> ParsedMenu:
        await asyncio.sleep(10)
        raise AssertionError("parse should have timed out")


def freeze_quota(store) -> None:
    """Cap a memory-backed store at its current size so any growing write fails."""

    store.backend.quota_bytes = store.backend.used_bytes()
