"""Customer carts, order submission and staff fulfillment.

A cart lives only on the customer's side. Submitting it is the single step
that writes to the store: the order snapshots each line's name, price and
quantity, so later menu edits never change past orders. Staff then move the
order forward one step at a time, ``new -> served -> paid``; attempts to go
further are ignored.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional

from ..domain import OrderStatus, can_transition, next_status
from ..events import ORDER_SUBMITTED, ORDER_UPDATED, EventBus
from ..schemas import CartLine, Order, OrderItem, ShopMenu, to_record
from ..storage import ORDERS, RecordStore
from .menu_lifecycle import MenuLifecycle

logger = logging.getLogger("orders")


class Cart:
    """Quantities per menu item id, never negative."""

    def __init__(self, quantities: Dict[str, int] | None = None) -> None:
        self.quantities: Dict[str, int] = {}
        for item_id, qty in (quantities or {}).items():
            self.set_quantity(item_id, qty)

    @classmethod
    def from_lines(cls, lines: Iterable[CartLine]) -> "Cart":
        cart = cls()
        for line in lines:
            cart.add(line.item_id, line.qty)
        return cart

    def quantity(self, item_id: str) -> int:
        return self.quantities.get(item_id, 0)

    def set_quantity(self, item_id: str, quantity: int) -> int:
        """Set the quantity of ``item_id``, clamped at zero."""

        qty = max(0, int(quantity))
        self.quantities[item_id] = qty
        return qty

    def add(self, item_id: str, delta: int) -> int:
        return self.set_quantity(item_id, self.quantity(item_id) + delta)

    def count(self) -> int:
        return sum(self.quantities.values())

    def is_empty(self) -> bool:
        return self.count() == 0

    def total(self, menu: ShopMenu) -> float:
        """Price of the cart against the current ``menu``."""

        return sum(item.price * self.quantity(item.id) for item in menu.items)

    def lines(self, menu: ShopMenu) -> List[OrderItem]:
        """Snapshot of the selected items, in menu order."""

        return [
            OrderItem(
                menu_item_id=item.id,
                name=item.name,
                quantity=self.quantity(item.id),
                price=item.price,
            )
            for item in menu.items
            if self.quantity(item.id) > 0
        ]


class OrderLifecycle:
    def __init__(
        self,
        store: RecordStore,
        bus: EventBus,
        menus: MenuLifecycle,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.store = store
        self.bus = bus
        self.menus = menus
        self.clock = clock

    def customer_menu(self, shop_id: str) -> Optional[ShopMenu]:
        """Menu shown to customers; drafts are not visible."""

        menu = self.menus.get_menu(shop_id)
        if menu is None or not menu.is_published:
            return None
        return menu

    def submit(self, shop_id: str, table_no: str, cart: Cart) -> Optional[Order]:
        """Turn ``cart`` into a stored ``new`` order.

        Returns ``None`` without writing anything when an identifier is
        missing, the cart is empty, none of its items are on the published
        menu, or the store rejects the write.
        """

        if not shop_id or not table_no or cart.is_empty():
            return None
        menu = self.customer_menu(shop_id)
        if menu is None:
            return None
        lines = cart.lines(menu)
        if not lines:
            return None

        order = Order(
            shop_id=shop_id,
            table_no=table_no,
            items=lines,
            total_price=sum(line.price * line.quantity for line in lines),
            created_at=int(self.clock().timestamp() * 1000),
        )
        if not self.store.upsert(ORDERS, to_record(order)):
            return None
        logger.info("order submitted shop=%s order=%s", shop_id, order.id)
        self.bus.publish(
            ORDER_SUBMITTED,
            {
                "shopId": shop_id,
                "tableNo": table_no,
                "orderId": order.id,
                "totalPrice": order.total_price,
            },
        )
        return order

    def get_order(self, order_id: str) -> Optional[Order]:
        record = self.store.find_by(ORDERS, lambda r: r.get("id") == order_id)
        return Order.model_validate(record) if record else None

    def list_orders(self, shop_id: str) -> List[Order]:
        """Orders of ``shop_id``, newest first."""

        records = self.store.filter_by(ORDERS, lambda r: r.get("shopId") == shop_id)
        orders = [Order.model_validate(r) for r in records]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    def _transition(
        self, order_id: str, target: Callable[[OrderStatus], Optional[OrderStatus]]
    ) -> Optional[Order]:
        """Apply ``target(status)`` atomically.

        Returns ``None`` when the order is unknown or the new status could not
        be stored; no event is published in either case.
        """

        found: List[Order] = []
        changed: List[bool] = []

        def apply(records: List[dict]) -> List[dict]:
            for record in records:
                if record.get("id") != order_id:
                    continue
                order = Order.model_validate(record)
                dst = target(order.status)
                if dst is not None:
                    order.status = dst
                    record["status"] = dst.value
                    changed.append(True)
                found.append(order)
                break
            return records

        saved = self.store.update_collection(ORDERS, apply)
        if not found:
            return None
        order = found[0]
        if changed and not saved:
            logger.warning("order %s not moved to %s: store write failed", order.id, order.status.value)
            return None
        if changed:
            logger.info("order %s -> %s", order.id, order.status.value)
            self.bus.publish(
                ORDER_UPDATED,
                {"shopId": order.shop_id, "orderId": order.id, "status": order.status.value},
            )
        return order

    def advance(self, order_id: str) -> Optional[Order]:
        """Move the order one step forward; a paid order stays paid."""

        return self._transition(order_id, next_status)

    def update_status(self, order_id: str, status: OrderStatus | str) -> Optional[Order]:
        """Apply ``status`` only if it is the next legal step.

        Illegal requests leave the order unchanged and return it as is.
        """

        try:
            dst = OrderStatus(status)
        except ValueError:
            return self.get_order(order_id)
        return self._transition(order_id, lambda src: dst if can_transition(src, dst) else None)
