from __future__ import annotations

"""Customer ordering through the per-table link."""

from fastapi import APIRouter, Depends, HTTPException

from .deps.services import get_fingerprint, get_link_auth, get_orders
from .schemas import CartPayload, ShopMenu, to_record
from .security.table_link import LinkAuthenticator
from .services import Cart, OrderLifecycle
from .utils.responses import ok

router = APIRouter(prefix="/order")

ALL_CATEGORIES = "All"


def _require_link(
    table_no: str,
    token: str,
    link_auth: LinkAuthenticator = Depends(get_link_auth),
    fingerprint: str = Depends(get_fingerprint),
) -> None:
    """Reject stale or foreign links with 410; there is no retry path."""

    if not link_auth.validate_hash(table_no, token, fingerprint):
        raise HTTPException(410, "This order link has expired, please scan the table code again")


def _menu_or_404(orders: OrderLifecycle, shop_id: str) -> ShopMenu:
    menu = orders.customer_menu(shop_id)
    if menu is None:
        raise HTTPException(404, "Menu not found for this shop")
    return menu


@router.get("/{shop_id}/{table_no}/{token}", dependencies=[Depends(_require_link)])
def guest_menu(
    shop_id: str,
    table_no: str,
    category: str | None = None,
    orders: OrderLifecycle = Depends(get_orders),
) -> dict:
    """Return the published menu, optionally filtered by ``category``."""

    menu = _menu_or_404(orders, shop_id)
    items = [
        to_record(item)
        for item in menu.items
        if not category or category == ALL_CATEGORIES or item.category == category
    ]
    return ok({
        "shopId": shop_id,
        "tableNo": table_no,
        "brandName": menu.brand_name,
        "categories": [ALL_CATEGORIES, *menu.categories],
        "items": items,
    })


@router.post("/{shop_id}/{table_no}/{token}", status_code=201, dependencies=[Depends(_require_link)])
def guest_submit(
    shop_id: str,
    table_no: str,
    payload: CartPayload,
    orders: OrderLifecycle = Depends(get_orders),
) -> dict:
    """Submit the cart as a new order for this table."""

    _menu_or_404(orders, shop_id)
    cart = Cart.from_lines(payload.items)
    order = orders.submit(shop_id, table_no, cart)
    if order is None:
        raise HTTPException(400, "The cart is empty")
    return ok(to_record(order))


__all__ = ["router"]
