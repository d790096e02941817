from __future__ import annotations

"""Back-office menu routes: import, edit, publish and table codes."""

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile

from .deps.services import get_fingerprint, get_link_auth, get_menus, require_shop
from .qr import render_table_code
from .schemas import MenuItemIn, MenuItemPatch, MenuRename, PublishIn, Shop, to_record
from .security.table_link import LinkAuthenticator, order_link
from .services import MenuLifecycle, parse_table_numbers
from .utils.responses import ok

router = APIRouter(prefix="/api/shops/{shop_id}")


def _menu_or_404(menus: MenuLifecycle, shop_id: str):
    menu = menus.get_menu(shop_id)
    if menu is None:
        raise HTTPException(404, "Menu not found")
    return menu


@router.get("/menu")
def get_menu(shop: Shop = Depends(require_shop), menus: MenuLifecycle = Depends(get_menus)) -> dict:
    """Return the menu and its lifecycle state (``no_menu`` has ``menu: null``)."""

    menu = menus.get_menu(shop.id)
    return ok({
        "state": menus.state(shop.id).value,
        "menu": to_record(menu) if menu else None,
    })


@router.post("/menu/import")
async def import_menu(
    file: UploadFile = File(...),
    shop: Shop = Depends(require_shop),
    menus: MenuLifecycle = Depends(get_menus),
) -> dict:
    """Parse an uploaded menu photo into a draft, replacing the current menu."""

    image = await file.read()
    menu = await menus.import_menu(
        shop.id, image, file.content_type or "image/jpeg", shop_name=shop.name
    )
    if menu is None:
        raise HTTPException(503, "Menu could not be saved")
    return ok(to_record(menu))


@router.patch("/menu")
def rename_menu(
    payload: MenuRename,
    shop: Shop = Depends(require_shop),
    menus: MenuLifecycle = Depends(get_menus),
) -> dict:
    _menu_or_404(menus, shop.id)
    menu = menus.rename(shop.id, payload.brand_name)
    if menu is None:
        raise HTTPException(400, "Brand name is required")
    return ok(to_record(menu))


@router.post("/menu/items", status_code=201)
def add_item(
    payload: MenuItemIn,
    shop: Shop = Depends(require_shop),
    menus: MenuLifecycle = Depends(get_menus),
) -> dict:
    _menu_or_404(menus, shop.id)
    item = menus.add_item(shop.id, payload.name, payload.price, payload.category, payload.image)
    if item is None:
        raise HTTPException(400, "Item name is required")
    return ok(to_record(item))


@router.patch("/menu/items/{item_id}")
def update_item(
    item_id: str,
    payload: MenuItemPatch,
    shop: Shop = Depends(require_shop),
    menus: MenuLifecycle = Depends(get_menus),
) -> dict:
    menu = _menu_or_404(menus, shop.id)
    if menu.find_item(item_id) is None:
        raise HTTPException(404, "Item not found")
    item = menus.update_item(shop.id, item_id, **payload.model_dump(exclude_unset=True))
    if item is None:
        raise HTTPException(400, "Invalid item")
    return ok(to_record(item))


@router.delete("/menu/items/{item_id}")
def delete_item(
    item_id: str,
    shop: Shop = Depends(require_shop),
    menus: MenuLifecycle = Depends(get_menus),
) -> dict:
    _menu_or_404(menus, shop.id)
    menu = menus.delete_item(shop.id, item_id)
    if menu is None:
        raise HTTPException(404, "Item not found")
    return ok(to_record(menu))


@router.delete("/menu/items")
def clear_items(shop: Shop = Depends(require_shop), menus: MenuLifecycle = Depends(get_menus)) -> dict:
    _menu_or_404(menus, shop.id)
    menu = menus.clear_items(shop.id)
    if menu is None:
        raise HTTPException(503, "Menu could not be saved")
    return ok(to_record(menu))


@router.post("/menu/publish")
def publish_menu(
    payload: PublishIn,
    request: Request,
    shop: Shop = Depends(require_shop),
    menus: MenuLifecycle = Depends(get_menus),
) -> dict:
    """Publish the menu and replace the shop's tables."""

    _menu_or_404(menus, shop.id)
    tables = payload.tables
    if tables is None:
        tables = request.app.state.settings.default_tables
    if not parse_table_numbers(tables):
        raise HTTPException(400, "At least one table number is required")
    menu = menus.publish(shop.id, tables)
    if menu is None:
        raise HTTPException(503, "Menu could not be published")
    return ok({
        "menu": to_record(menu),
        "tables": [to_record(t) for t in menus.list_tables(shop.id)],
    })


@router.get("/tables")
def list_tables(
    request: Request,
    shop: Shop = Depends(require_shop),
    menus: MenuLifecycle = Depends(get_menus),
    link_auth: LinkAuthenticator = Depends(get_link_auth),
    fingerprint: str = Depends(get_fingerprint),
) -> dict:
    """Return each table with today's order link and its QR code.

    With device links the token is bound to the caller's ``User-Agent``.
    """

    base_url = request.app.state.settings.public_base_url
    cards = []
    for table in menus.list_tables(shop.id):
        token = link_auth.generate_table_hash(table.table_no, fingerprint)
        url = order_link(base_url, shop.id, table.table_no, token)
        cards.append({**to_record(table), "token": token, **render_table_code(url, table.table_no)})
    return ok(cards)


__all__ = ["router"]
