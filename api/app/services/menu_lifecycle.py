"""Menu import, editing and publishing.

A shop moves through ``no_menu -> draft -> published``. Importing always
yields a draft: when the parsing collaborator fails or runs past
``parse_timeout`` a fixed placeholder menu is used instead, so the flow never stops at
the import step. Items stay editable after publishing; publishing only fixes
the shop's table set, replacing whatever tables it had before.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Callable, List, Optional, Sequence

from ..events import MENU_IMPORTED, MENU_PUBLISHED, EventBus
from ..providers.menu_parser import MenuParser
from ..schemas import MenuItem, ParsedMenu, ParsedMenuItem, ShopMenu, Table, to_record
from ..storage import MENUS, TABLES, RecordStore

logger = logging.getLogger("menu")

DEFAULT_BRAND = "My Shop"
DEFAULT_CATEGORY = "Other"


class MenuState(str, Enum):
    NO_MENU = "no_menu"
    DRAFT = "draft"
    PUBLISHED = "published"


def fallback_menu(shop_name: str) -> ParsedMenu:
    """Placeholder used whenever parsing fails."""

    return ParsedMenu(
        brand_name=shop_name,
        categories=["Mains", "Drinks"],
        items=[
            ParsedMenuItem(name="Sample Beef Noodles", price=150, category="Mains"),
            ParsedMenuItem(name="Sample Bubble Tea", price=60, category="Drinks"),
        ],
    )


def parse_table_numbers(tables: Sequence[str] | str) -> List[str]:
    """Split ``"A1, A2"`` style input; trim entries, drop blanks and repeats."""

    raw = tables.split(",") if isinstance(tables, str) else tables
    seen: List[str] = []
    for entry in raw:
        table_no = str(entry).strip()
        if table_no and table_no not in seen:
            seen.append(table_no)
    return seen


class MenuLifecycle:
    """Operations on the single menu and the table set of each shop."""

    def __init__(
        self,
        store: RecordStore,
        bus: EventBus,
        parser: MenuParser,
        parse_timeout: float = 20.0,
    ) -> None:
        self.store = store
        self.bus = bus
        self.parser = parser
        self.parse_timeout = parse_timeout

    # Reads

    def get_menu(self, shop_id: str) -> Optional[ShopMenu]:
        """Return the menu of ``shop_id``; menus are keyed by shop, not by id."""

        record = self.store.find_by(MENUS, lambda r: r.get("shopId") == shop_id)
        if record is None:
            return None
        try:
            return ShopMenu.model_validate(record)
        except ValueError:
            logger.error("stored menu for shop=%s is malformed", shop_id)
            return None

    def state(self, shop_id: str) -> MenuState:
        menu = self.get_menu(shop_id)
        if menu is None:
            return MenuState.NO_MENU
        return MenuState.PUBLISHED if menu.is_published else MenuState.DRAFT

    def list_tables(self, shop_id: str) -> List[Table]:
        records = self.store.filter_by(TABLES, lambda r: r.get("shopId") == shop_id)
        return [Table.model_validate(r) for r in records]

    def _save(self, menu: ShopMenu) -> bool:
        return self.store.upsert_by(MENUS, to_record(menu), "shopId")

    # Import

    async def _parse(self, image: bytes, mime_type: str, shop_name: str) -> ParsedMenu:
        try:
            return await asyncio.wait_for(
                self.parser.parse(image, mime_type, shop_name), timeout=self.parse_timeout
            )
        except asyncio.TimeoutError:
            logger.warning("menu parse timed out after %ss; using placeholder", self.parse_timeout)
        except Exception:
            logger.warning("menu parse failed; using placeholder", exc_info=True)
        return fallback_menu(shop_name)

    async def import_menu(
        self,
        shop_id: str,
        image: bytes,
        mime_type: str = "image/jpeg",
        shop_name: str | None = None,
    ) -> Optional[ShopMenu]:
        """Parse ``image`` into a fresh draft, replacing any existing menu."""

        if not shop_id:
            return None
        shop_name = shop_name or DEFAULT_BRAND
        parsed = await self._parse(image, mime_type, shop_name)

        items = [
            MenuItem(name=it.name, price=it.price, category=it.category or DEFAULT_CATEGORY)
            for it in parsed.items
        ]
        categories = list(parsed.categories)
        for item in items:
            if item.category not in categories:
                categories.append(item.category)
        menu = ShopMenu(
            shop_id=shop_id,
            brand_name=parsed.brand_name or shop_name,
            categories=categories,
            items=items,
            is_published=False,
        )
        if not self._save(menu):
            return None
        logger.info("menu imported shop=%s items=%d", shop_id, len(items))
        self.bus.publish(MENU_IMPORTED, {"shopId": shop_id, "menuId": menu.id})
        return menu

    # Edits

    def _edit(self, shop_id: str, fn: Callable[[ShopMenu], bool]) -> Optional[ShopMenu]:
        menu = self.get_menu(shop_id)
        if menu is None or not fn(menu):
            return None
        return menu if self._save(menu) else None

    def add_item(
        self,
        shop_id: str,
        name: str,
        price: float,
        category: str,
        image: str | None = None,
    ) -> Optional[MenuItem]:
        name = (name or "").strip()
        if not name or price is None or price < 0:
            return None
        item = MenuItem(
            name=name, price=price, category=(category or "").strip() or DEFAULT_CATEGORY, image=image
        )

        def apply(menu: ShopMenu) -> bool:
            menu.items.append(item)
            if item.category not in menu.categories:
                menu.categories.append(item.category)
            return True

        return item if self._edit(shop_id, apply) else None

    def update_item(
        self,
        shop_id: str,
        item_id: str,
        name: str | None = None,
        price: float | None = None,
        category: str | None = None,
        image: str | None = None,
    ) -> Optional[MenuItem]:
        """Change fields of one item. Past orders keep their own snapshot."""

        if name is not None and not name.strip():
            return None
        if price is not None and price < 0:
            return None
        updated: List[MenuItem] = []

        def apply(menu: ShopMenu) -> bool:
            item = menu.find_item(item_id)
            if item is None:
                return False
            if name is not None:
                item.name = name.strip()
            if price is not None:
                item.price = price
            if category is not None and category.strip():
                item.category = category.strip()
                if item.category not in menu.categories:
                    menu.categories.append(item.category)
            if image is not None:
                item.image = image
            updated.append(item)
            return True

        return updated[0] if self._edit(shop_id, apply) else None

    def delete_item(self, shop_id: str, item_id: str) -> Optional[ShopMenu]:
        def apply(menu: ShopMenu) -> bool:
            kept = [it for it in menu.items if it.id != item_id]
            if len(kept) == len(menu.items):
                return False
            menu.items = kept
            return True

        return self._edit(shop_id, apply)

    def clear_items(self, shop_id: str) -> Optional[ShopMenu]:
        """Remove every item, keeping the category list."""

        def apply(menu: ShopMenu) -> bool:
            menu.items = []
            return True

        return self._edit(shop_id, apply)

    def rename(self, shop_id: str, brand_name: str) -> Optional[ShopMenu]:
        brand_name = (brand_name or "").strip()
        if not brand_name:
            return None

        def apply(menu: ShopMenu) -> bool:
            menu.brand_name = brand_name
            return True

        return self._edit(shop_id, apply)

    # Publish

    def publish(self, shop_id: str, tables: Sequence[str] | str) -> Optional[ShopMenu]:
        """Mark the menu published and replace the shop's tables with ``tables``.

        Republishing is allowed and supersedes the previous table set.
        Returns ``None`` when the shop has no menu, no usable table number
        was given, or either write failed. The table set is stored first, so a
        menu is never marked published over a stale set of tables.
        """

        table_nos = parse_table_numbers(tables)
        if not table_nos or self.get_menu(shop_id) is None:
            return None

        new_tables = [to_record(Table(shop_id=shop_id, table_no=no)) for no in table_nos]
        if not self.store.update_collection(
            TABLES,
            lambda records: [r for r in records if r.get("shopId") != shop_id] + new_tables,
        ):
            logger.warning("tables of shop=%s not replaced: store write failed", shop_id)
            return None

        def apply(menu: ShopMenu) -> bool:
            menu.is_published = True
            return True

        menu = self._edit(shop_id, apply)
        if menu is None:
            logger.warning("menu of shop=%s not marked published: store write failed", shop_id)
            return None
        logger.info("menu published shop=%s tables=%d", shop_id, len(table_nos))
        self.bus.publish(MENU_PUBLISHED, {"shopId": shop_id, "tables": table_nos})
        return menu
