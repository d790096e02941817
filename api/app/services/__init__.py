"""Service layer for shops, menus, orders and reservations."""

from .menu_lifecycle import MenuLifecycle, MenuState, fallback_menu, parse_table_numbers
from .order_lifecycle import Cart, OrderLifecycle
from .reservation_lifecycle import ReservationLifecycle
from .shop_directory import ShopDirectory

__all__ = [
    "ShopDirectory",
    "MenuLifecycle",
    "MenuState",
    "fallback_menu",
    "parse_table_numbers",
    "Cart",
    "OrderLifecycle",
    "ReservationLifecycle",
]
