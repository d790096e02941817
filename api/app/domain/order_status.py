"""Order status enumeration and allowed transitions."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class OrderStatus(str, Enum):
    """Enumerate the lifecycle states for an order."""

    NEW = "new"
    SERVED = "served"
    PAID = "paid"


TRANSITIONS: dict[OrderStatus, list[OrderStatus]] = {
    OrderStatus.NEW: [OrderStatus.SERVED],
    OrderStatus.SERVED: [OrderStatus.PAID],
    OrderStatus.PAID: [],
}


def can_transition(src: OrderStatus, dst: OrderStatus) -> bool:
    """Return ``True`` if an order can move from ``src`` to ``dst``."""

    return dst in TRANSITIONS.get(src, [])


def next_status(src: OrderStatus) -> Optional[OrderStatus]:
    """Return the single forward step from ``src`` or ``None`` when terminal."""

    steps = TRANSITIONS.get(src, [])
    return steps[0] if steps else None
