from __future__ import annotations

"""Device user and shop list routes."""

from fastapi import APIRouter, Depends, HTTPException

from .deps.services import get_shops, require_shop
from .schemas import Shop, ShopIn, to_record
from .services import ShopDirectory
from .utils.responses import ok

router = APIRouter()


@router.get("/api/me")
def get_me(shops: ShopDirectory = Depends(get_shops)) -> dict:
    """Return the device user, creating it on first call."""

    return ok(to_record(shops.get_or_create_user()))


@router.get("/api/shops")
def list_shops(shops: ShopDirectory = Depends(get_shops)) -> dict:
    return ok([to_record(s) for s in shops.list_shops()])


@router.post("/api/shops", status_code=201)
def create_shop(payload: ShopIn, shops: ShopDirectory = Depends(get_shops)) -> dict:
    """Create a shop owned by the device user."""

    user = shops.get_or_create_user()
    shop = shops.add_shop(payload.name, user.id)
    if shop is None:
        raise HTTPException(400, "Shop name is required")
    return ok(to_record(shop))


@router.get("/api/shops/{shop_id}")
def get_shop(shop: Shop = Depends(require_shop)) -> dict:
    return ok(to_record(shop))


__all__ = ["router"]
