from __future__ import annotations

"""Back-office reservation and walk-in routes."""

from fastapi import APIRouter, Depends, HTTPException

from .deps.services import get_reservations, require_shop
from .schemas import ReservationIn, Shop, to_record
from .services import ReservationLifecycle
from .utils.responses import ok

router = APIRouter()


@router.get("/api/shops/{shop_id}/reservations")
def list_reservations(
    shop: Shop = Depends(require_shop),
    reservations: ReservationLifecycle = Depends(get_reservations),
) -> dict:
    return ok([to_record(r) for r in reservations.list_reservations(shop.id)])


@router.post("/api/shops/{shop_id}/reservations", status_code=201)
def create_reservation(
    payload: ReservationIn,
    shop: Shop = Depends(require_shop),
    reservations: ReservationLifecycle = Depends(get_reservations),
) -> dict:
    """Add a booking or walk-in in the ``waiting`` state."""

    reservation = reservations.create(
        shop.id, payload.phone, payload.table_no, payload.time, payload.source
    )
    if reservation is None:
        raise HTTPException(400, "Phone, table number and a HH:MM time are required")
    return ok(to_record(reservation))


@router.post("/api/reservations/{reservation_id}/check-in")
def check_in(
    reservation_id: str,
    reservations: ReservationLifecycle = Depends(get_reservations),
) -> dict:
    reservation = reservations.check_in(reservation_id)
    if reservation is None:
        if reservations.get_reservation(reservation_id) is None:
            raise HTTPException(404, "Reservation not found")
        raise HTTPException(503, "Check-in could not be saved")
    return ok(to_record(reservation))


__all__ = ["router"]
