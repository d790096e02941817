"""Dependency helpers resolving services from ``app.state``.

Every service is built once per application in :func:`api.app.main.create_app`
and shared by all requests; tests swap them by building an app around their
own store.
"""

from fastapi import Header, HTTPException, Request

from ..events import EventBus
from ..schemas import Shop
from ..security.table_link import LinkAuthenticator
from ..services import MenuLifecycle, OrderLifecycle, ReservationLifecycle, ShopDirectory


def get_bus(request: Request) -> EventBus:
    return request.app.state.bus


def get_shops(request: Request) -> ShopDirectory:
    return request.app.state.shops


def get_menus(request: Request) -> MenuLifecycle:
    return request.app.state.menus


def get_orders(request: Request) -> OrderLifecycle:
    return request.app.state.orders


def get_reservations(request: Request) -> ReservationLifecycle:
    return request.app.state.reservations


def get_link_auth(request: Request) -> LinkAuthenticator:
    return request.app.state.link_auth


def get_fingerprint(user_agent: str | None = Header(default=None)) -> str:
    """Device fingerprint used by table tokens: the ``User-Agent`` header."""

    return user_agent or ""


def require_shop(shop_id: str, request: Request) -> Shop:
    """Resolve ``shop_id`` from the path or answer 404."""

    shop = get_shops(request).get_shop(shop_id)
    if shop is None:
        raise HTTPException(404, "Shop not found")
    return shop
