# schemas.py

"""Pydantic models for stored records and API payloads.

Records are persisted and exchanged with camelCase field names
(``shopId``, ``tableNo``...). Python code uses the snake_case attributes;
:func:`to_record` produces the stored representation.
"""

from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .domain import OrderStatus, ReservationSource, ReservationStatus


def new_id() -> str:
    """Return a fresh opaque identifier."""

    return str(uuid.uuid4())


class Record(BaseModel):
    """Base for every stored entity."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def to_record(model: BaseModel) -> Dict[str, Any]:
    """Return the JSON-compatible stored form of ``model``."""

    return model.model_dump(mode="json", by_alias=True)


class User(Record):
    id: str = Field(default_factory=new_id)
    is_anonymous: bool = True
    name: str = "Anonymous"


class Shop(Record):
    id: str = Field(default_factory=new_id)
    name: str
    created_at: int
    owner_id: str


class MenuItem(Record):
    id: str = Field(default_factory=new_id)
    name: str
    price: float = Field(ge=0)
    category: str
    image: Optional[str] = None


class ShopMenu(Record):
    """The single menu of a shop; ``shop_id`` is its effective key."""

    id: str = Field(default_factory=new_id)
    shop_id: str
    brand_name: str
    categories: List[str] = Field(default_factory=list)
    items: List[MenuItem] = Field(default_factory=list)
    is_published: bool = False

    def find_item(self, item_id: str) -> Optional[MenuItem]:
        return next((item for item in self.items if item.id == item_id), None)


class Table(Record):
    id: str = Field(default_factory=new_id)
    shop_id: str
    table_no: str


class Reservation(Record):
    id: str = Field(default_factory=new_id)
    shop_id: str
    time: str
    table_no: str
    phone: str
    source: ReservationSource
    status: ReservationStatus = ReservationStatus.WAITING
    check_in_time: Optional[int] = None


class OrderItem(Record):
    """Line snapshot taken when the order is submitted."""

    menu_item_id: str
    name: str
    quantity: int = Field(ge=1)
    price: float = Field(ge=0)


class Order(Record):
    id: str = Field(default_factory=new_id)
    shop_id: str
    table_no: str
    items: List[OrderItem]
    total_price: float
    status: OrderStatus = OrderStatus.NEW
    created_at: int


# Menu parser collaborator output


class ParsedMenuItem(Record):
    name: str
    price: float = Field(ge=0)
    category: str = ""


class ParsedMenu(Record):
    brand_name: Optional[str] = None
    categories: List[str] = Field(default_factory=list)
    items: List[ParsedMenuItem] = Field(default_factory=list)


# Request payloads


class ShopIn(BaseModel):
    name: str


class MenuItemIn(Record):
    name: str
    price: float = Field(ge=0)
    category: str
    image: Optional[str] = None


class MenuItemPatch(Record):
    name: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    category: Optional[str] = None
    image: Optional[str] = None


class MenuRename(Record):
    brand_name: str


class PublishIn(BaseModel):
    """Table numbers as a list or as comma separated text (``"A1, A2"``).

    Omitted tables fall back to the configured ``default_tables``.
    """

    tables: List[str] | str | None = None


class ReservationIn(Record):
    phone: str
    table_no: str
    time: Optional[str] = None
    source: ReservationSource = ReservationSource.WALK_IN


class CartLine(Record):
    item_id: str
    qty: int


class CartPayload(BaseModel):
    items: List[CartLine]
