import pathlib
import sys

import pytest

sys.path.append(str(pathlib.Path(__file__).resolve().parents[2]))

from _fakes import FailingMenuParser, SlowMenuParser, freeze_quota  # noqa: E402
from api.app.events import MENU_PUBLISHED  # noqa: E402
from api.app.services import MenuLifecycle, MenuState, parse_table_numbers  # noqa: E402
from api.app.storage import MENUS, TABLES  # noqa: E402


@pytest.mark.anyio
async def test_import_creates_unpublished_draft(menus, parser):
    assert menus.state("S1") == MenuState.NO_MENU

    menu = await menus.import_menu("S1", b"img", "image/png", shop_name="Corner Cafe")

    assert menu.brand_name == "Cafe"
    assert menu.is_published is False
    assert [it.name for it in menu.items] == ["Tea"]
    assert menu.items[0].price == 60
    assert menus.state("S1") == MenuState.DRAFT
    assert parser.calls == [(b"img", "image/png", "Corner Cafe")]


@pytest.mark.anyio
@pytest.mark.parametrize("parser_cls", [FailingMenuParser, SlowMenuParser])
async def test_parser_failure_falls_back_to_placeholder(store, bus, parser_cls):
    menus = MenuLifecycle(store, bus, parser_cls(), parse_timeout=0.05)

    menu = await menus.import_menu("S1", b"img", shop_name="Noodle Bar")

    assert menu is not None
    assert menu.brand_name == "Noodle Bar"
    assert menu.categories == ["Mains", "Drinks"]
    assert [(it.name, it.price) for it in menu.items] == [
        ("Sample Beef Noodles", 150),
        ("Sample Bubble Tea", 60),
    ]
    assert menus.publish("S1", "A1") is not None


@pytest.mark.anyio
async def test_reimport_overwrites_the_shop_menu(menus, store):
    first = await menus.import_menu("S1", b"img")
    menus.publish("S1", ["A1"])
    second = await menus.import_menu("S1", b"img")

    stored = store.get_collection(MENUS)
    assert len(stored) == 1
    assert stored[0]["id"] == second.id != first.id
    assert menus.state("S1") == MenuState.DRAFT


@pytest.mark.anyio
async def test_item_categories_are_collected(store, bus):
    from _fakes import StaticMenuParser

    parser = StaticMenuParser({
        "categories": [],
        "items": [
            {"name": "Soup", "price": 90, "category": "Mains"},
            {"name": "Cola", "price": 30, "category": ""},
        ],
    })
    menu = await MenuLifecycle(store, bus, parser).import_menu("S1", b"img")
    assert menu.brand_name == "My Shop"
    assert menu.categories == ["Mains", "Other"]
    assert len({it.id for it in menu.items}) == 2


@pytest.mark.anyio
async def test_edits_before_and_after_publish(menus):
    await menus.import_menu("S1", b"img")

    cake = menus.add_item("S1", "Cake", 80, "Desserts")
    assert cake is not None
    assert "Desserts" in menus.get_menu("S1").categories

    menus.publish("S1", "A1")
    assert menus.update_item("S1", cake.id, price=95).price == 95
    assert menus.rename("S1", "  Cafe Deluxe ").brand_name == "Cafe Deluxe"
    assert menus.delete_item("S1", cake.id) is not None
    assert menus.get_menu("S1").is_published is True
    assert [it.name for it in menus.get_menu("S1").items] == ["Tea"]

    assert menus.clear_items("S1").items == []


@pytest.mark.anyio
async def test_invalid_edits_are_rejected_without_changes(menus):
    assert menus.add_item("S1", "Cake", 80, "Desserts") is None
    await menus.import_menu("S1", b"img")
    before = menus.get_menu("S1")

    assert menus.add_item("S1", "  ", 10, "X") is None
    assert menus.add_item("S1", "Cake", -1, "X") is None
    assert menus.update_item("S1", "nope", price=1) is None
    assert menus.update_item("S1", before.items[0].id, name=" ") is None
    assert menus.delete_item("S1", "nope") is None
    assert menus.rename("S1", "") is None
    assert menus.get_menu("S1") == before


@pytest.mark.anyio
async def test_publish_replaces_table_set(menus, store, bus):
    published = []
    bus.subscribe(MENU_PUBLISHED, published.append)
    await menus.import_menu("S1", b"img")
    await menus.import_menu("S2", b"img")
    menus.publish("S2", ["Z9"])

    menus.publish("S1", " A1 , A2,, ")
    assert [t.table_no for t in menus.list_tables("S1")] == ["A1", "A2"]
    assert menus.state("S1") == MenuState.PUBLISHED

    menus.publish("S1", ["B1"])
    assert [t.table_no for t in menus.list_tables("S1")] == ["B1"]
    assert [t.table_no for t in menus.list_tables("S2")] == ["Z9"]
    assert len(store.get_collection(TABLES)) == 2
    assert [p["tables"] for p in published] == [["Z9"], ["A1", "A2"], ["B1"]]


@pytest.mark.anyio
async def test_publish_rejects_missing_menu_or_tables(menus):
    assert menus.publish("S1", "A1") is None
    await menus.import_menu("S1", b"img")
    assert menus.publish("S1", " , ") is None
    assert menus.state("S1") == MenuState.DRAFT
    assert menus.list_tables("S1") == []


def test_parse_table_numbers():
    assert parse_table_numbers("A1, A2, A3, B1, B2") == ["A1", "A2", "A3", "B1", "B2"]
    assert parse_table_numbers([" A1", "", "A1", "B2 "]) == ["A1", "B2"]
    assert parse_table_numbers("") == []


@pytest.mark.anyio
async def test_failed_table_write_leaves_publish_undone(menus, store, bus):
    published = []
    bus.subscribe(MENU_PUBLISHED, published.append)
    await menus.import_menu("S1", b"img")
    await menus.import_menu("S2", b"img")
    menus.publish("S1", ["A1"])
    freeze_quota(store)

    assert menus.publish("S1", ["B1", "B2", "B3"]) is None
    assert menus.publish("S2", ["C1"]) is None

    assert [t.table_no for t in menus.list_tables("S1")] == ["A1"]
    assert menus.list_tables("S2") == []
    assert menus.state("S2") == MenuState.DRAFT
    assert [p["tables"] for p in published] == [["A1"]]
