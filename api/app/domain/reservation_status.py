"""Reservation source and status enumerations."""

from __future__ import annotations

from enum import Enum


class ReservationSource(str, Enum):
    BOOKED = "booked"
    WALK_IN = "walk-in"


class ReservationStatus(str, Enum):
    """``CANCELLED`` is terminal and currently not set by any operation."""

    WAITING = "waiting"
    SEATED = "seated"
    CANCELLED = "cancelled"


TRANSITIONS: dict[ReservationStatus, list[ReservationStatus]] = {
    ReservationStatus.WAITING: [ReservationStatus.SEATED, ReservationStatus.CANCELLED],
    # repeated check-in re-stamps the arrival time
    ReservationStatus.SEATED: [ReservationStatus.SEATED],
    ReservationStatus.CANCELLED: [],
}


def can_transition(src: ReservationStatus, dst: ReservationStatus) -> bool:
    """Return ``True`` if a reservation can move from ``src`` to ``dst``."""

    return dst in TRANSITIONS.get(src, [])
