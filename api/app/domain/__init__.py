"""Domain models and helpers."""

from .order_status import OrderStatus, TRANSITIONS, can_transition, next_status
from .reservation_status import ReservationSource, ReservationStatus
from .reservation_status import can_transition as can_transition_reservation

__all__ = [
    "OrderStatus",
    "TRANSITIONS",
    "can_transition",
    "next_status",
    "ReservationSource",
    "ReservationStatus",
    "can_transition_reservation",
]
