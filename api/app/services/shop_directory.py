"""Device user slot and the shop list."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List, Optional

from ..events import SHOP_CREATED, EventBus
from ..schemas import Shop, User, to_record
from ..storage import SHOPS, USER, RecordStore

logger = logging.getLogger("shops")


class ShopDirectory:
    def __init__(
        self,
        store: RecordStore,
        bus: EventBus,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.store = store
        self.bus = bus
        self.clock = clock

    def get_or_create_user(self) -> User:
        """Return the stored user, creating an anonymous one on first use."""

        saved = self.store.get(USER)
        if saved:
            try:
                return User.model_validate(saved)
            except ValueError:
                logger.error("stored user is malformed; creating a new one")
        user = User()
        self.store.set(USER, to_record(user))
        return user

    def list_shops(self) -> List[Shop]:
        return [Shop.model_validate(r) for r in self.store.get_collection(SHOPS)]

    def get_shop(self, shop_id: str) -> Optional[Shop]:
        record = self.store.find_by(SHOPS, lambda r: r.get("id") == shop_id)
        return Shop.model_validate(record) if record else None

    def add_shop(self, name: str, owner_id: str) -> Optional[Shop]:
        """Create a shop; ``None`` when the trimmed name or owner is empty."""

        name = (name or "").strip()
        if not name or not owner_id:
            return None
        shop = Shop(
            name=name,
            created_at=int(self.clock().timestamp() * 1000),
            owner_id=owner_id,
        )
        if not self.store.upsert(SHOPS, to_record(shop)):
            return None
        logger.info("shop created id=%s", shop.id)
        self.bus.publish(SHOP_CREATED, {"shopId": shop.id, "name": shop.name})
        return shop
