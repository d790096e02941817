"""Shared fixtures: a fresh in-memory store and services per test."""

from __future__ import annotations

import pathlib
import sys

import pytest
from fastapi.testclient import TestClient

sys.path.append(str(pathlib.Path(__file__).resolve().parents[2]))
sys.path.append(str(pathlib.Path(__file__).resolve().parent))

from _fakes import CAFE_MENU, FrozenClock, StaticMenuParser  # noqa: E402
from config import Settings  # noqa: E402
from api.app.events import EventBus  # noqa: E402
from api.app.main import create_app  # noqa: E402
from api.app.services import (  # noqa: E402
    MenuLifecycle,
    OrderLifecycle,
    ReservationLifecycle,
    ShopDirectory,
)
from api.app.storage import RecordStore  # noqa: E402
from api.app.storage.memory_backend import MemoryBackend  # noqa: E402


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def store() -> RecordStore:
    return RecordStore(MemoryBackend())


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def parser() -> StaticMenuParser:
    return StaticMenuParser(CAFE_MENU)


@pytest.fixture
def shops(store, bus, clock) -> ShopDirectory:
    return ShopDirectory(store, bus, clock=clock)


@pytest.fixture
def menus(store, bus, parser) -> MenuLifecycle:
    return MenuLifecycle(store, bus, parser, parse_timeout=0.5)


@pytest.fixture
def orders(store, bus, menus, clock) -> OrderLifecycle:
    return OrderLifecycle(store, bus, menus, clock=clock)


@pytest.fixture
def reservations(store, bus, clock) -> ReservationLifecycle:
    return ReservationLifecycle(store, bus, clock=clock)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        store_backend="memory",
        public_base_url="https://shop.example.com",
        menu_parser_url=None,
        menu_parse_timeout_secs=0.5,
    )


@pytest.fixture
def app(settings, store, parser, clock):
    return create_app(
        settings=settings, store=store, parser=parser, clock=clock, configure_logs=False
    )


@pytest.fixture
def client(app) -> TestClient:
    with TestClient(app) as c:
        yield c
