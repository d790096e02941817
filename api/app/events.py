# events.py

"""Synchronous in-process publish/subscribe for change notification.

Events are broadcasts, not a queue: every handler subscribed at publish time
is called once, in registration order, on the publishing thread. Nothing is
retained for subscribers that register later.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from typing import Any, Callable, Dict, List

logger = logging.getLogger("events")

Handler = Callable[[Dict[str, Any]], None]

SHOP_CREATED = "shop.created"
MENU_IMPORTED = "menu.imported"
MENU_PUBLISHED = "menu.published"
ORDER_SUBMITTED = "order.submitted"
ORDER_UPDATED = "order.updated"
RESERVATION_CREATED = "reservation.created"
RESERVATION_UPDATED = "reservation.updated"


class Subscription:
    """Handle returned by :meth:`EventBus.subscribe`.

    Usable as a context manager so a view can tie the subscription to its
    active lifetime.
    """

    def __init__(self, bus: "EventBus", name: str, handler: Handler) -> None:
        self.bus = bus
        self.name = name
        self.handler = handler
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self.bus._remove(self)
            self.active = False

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc: object) -> None:
        self.unsubscribe()


class EventBus:
    """Dispatch events to subscribed callables."""

    def __init__(self) -> None:
        self._subs: Dict[str, List[Subscription]] = defaultdict(list)
        self._lock = threading.Lock()

    def subscribe(self, name: str, handler: Handler) -> Subscription:
        """Register ``handler`` for ``name`` events."""

        sub = Subscription(self, name, handler)
        with self._lock:
            self._subs[name].append(sub)
        return sub

    def _remove(self, sub: Subscription) -> None:
        with self._lock:
            subs = self._subs.get(sub.name, [])
            if sub in subs:
                subs.remove(sub)

    def subscriber_count(self, name: str) -> int:
        with self._lock:
            return len(self._subs.get(name, []))

    def publish(self, name: str, payload: Dict[str, Any]) -> int:
        """Call every current subscriber of ``name``; return how many ran.

        A failing handler is logged and does not prevent delivery to the
        remaining subscribers.
        """

        with self._lock:
            subs = list(self._subs.get(name, []))
        delivered = 0
        for sub in subs:
            try:
                sub.handler(dict(payload))
            except Exception:
                logger.exception("event handler failed event=%s", name)
                continue
            delivered += 1
        return delivered
