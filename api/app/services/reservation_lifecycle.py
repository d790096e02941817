"""Booking and walk-in intake with check-in.

Reservations start ``waiting`` and become ``seated`` on check-in. Their
table number is free text: walk-ins may use tables that are not registered.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Callable, List, Optional

from ..domain import ReservationSource, ReservationStatus, can_transition_reservation
from ..events import RESERVATION_CREATED, RESERVATION_UPDATED, EventBus
from ..schemas import Reservation, to_record
from ..storage import RESERVATIONS, RecordStore

logger = logging.getLogger("reservations")

TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class ReservationLifecycle:
    def __init__(
        self,
        store: RecordStore,
        bus: EventBus,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.store = store
        self.bus = bus
        self.clock = clock

    def create(
        self,
        shop_id: str,
        phone: str,
        table_no: str,
        time: str | None = None,
        source: ReservationSource | str = ReservationSource.WALK_IN,
    ) -> Optional[Reservation]:
        """Record a waiting party; ``None`` if any field is invalid.

        ``time`` defaults to the current ``HH:MM``.
        """

        phone = (phone or "").strip()
        table_no = (table_no or "").strip()
        if not shop_id or not phone or not table_no:
            return None
        time = (time or "").strip() or self.clock().strftime("%H:%M")
        if not TIME_RE.match(time):
            return None
        try:
            source = ReservationSource(source)
        except ValueError:
            return None

        reservation = Reservation(
            shop_id=shop_id,
            time=time,
            table_no=table_no,
            phone=phone,
            source=source,
        )
        if not self.store.upsert(RESERVATIONS, to_record(reservation)):
            return None
        self.bus.publish(
            RESERVATION_CREATED, {"shopId": shop_id, "reservationId": reservation.id}
        )
        return reservation

    def get_reservation(self, reservation_id: str) -> Optional[Reservation]:
        record = self.store.find_by(RESERVATIONS, lambda r: r.get("id") == reservation_id)
        return Reservation.model_validate(record) if record else None

    def list_reservations(self, shop_id: str) -> List[Reservation]:
        """Reservations of ``shop_id``, most recently added first."""

        records = self.store.filter_by(RESERVATIONS, lambda r: r.get("shopId") == shop_id)
        return [Reservation.model_validate(r) for r in reversed(records)]

    def check_in(self, reservation_id: str) -> Optional[Reservation]:
        """Seat the party and stamp the arrival time.

        Checking in a seated party again only refreshes ``checkInTime``.
        Returns ``None`` when the reservation is unknown or the check-in could
        not be stored.
        """

        found: List[Reservation] = []
        seated: List[bool] = []
        stamp = int(self.clock().timestamp() * 1000)

        def apply(records: List[dict]) -> List[dict]:
            for record in records:
                if record.get("id") != reservation_id:
                    continue
                reservation = Reservation.model_validate(record)
                if can_transition_reservation(reservation.status, ReservationStatus.SEATED):
                    reservation.status = ReservationStatus.SEATED
                    reservation.check_in_time = stamp
                    record.update(to_record(reservation))
                    seated.append(True)
                found.append(reservation)
                break
            return records

        saved = self.store.update_collection(RESERVATIONS, apply)
        if not found:
            return None
        reservation = found[0]
        if seated and not saved:
            logger.warning("reservation %s not checked in: store write failed", reservation.id)
            return None
        if seated:
            self.bus.publish(
                RESERVATION_UPDATED,
                {"shopId": reservation.shop_id, "reservationId": reservation.id, "status": "seated"},
            )
        return reservation
