import pathlib
import sys

import pytest

sys.path.append(str(pathlib.Path(__file__).resolve().parents[2]))

from _fakes import freeze_quota  # noqa: E402
from api.app.domain import OrderStatus  # noqa: E402
from api.app.events import ORDER_SUBMITTED, ORDER_UPDATED  # noqa: E402
from api.app.services import Cart  # noqa: E402
from api.app.storage import ORDERS  # noqa: E402


@pytest.fixture
async def published(menus):
    menu = await menus.import_menu("S1", b"img")
    menus.publish("S1", "A1, A2")
    return menu


def _tea(menu):
    return menu.items[0]


def test_cart_clamps_and_counts():
    cart = Cart()
    assert cart.set_quantity("x", -3) == 0
    assert cart.add("x", 2) == 2
    assert cart.add("x", -5) == 0
    assert cart.is_empty()
    cart.add("y", 1)
    cart.add("y", 1)
    assert cart.count() == 2


@pytest.mark.anyio
async def test_submit_snapshots_items(orders, published, bus):
    seen = []
    bus.subscribe(ORDER_SUBMITTED, seen.append)
    tea = _tea(published)
    cart = Cart({tea.id: 2, "not-on-menu": 4})
    assert cart.total(published) == 120

    order = orders.submit("S1", "A1", cart)

    assert order.status == OrderStatus.NEW
    assert order.total_price == 120
    assert [(i.name, i.price, i.quantity) for i in order.items] == [("Tea", 60, 2)]
    assert seen == [
        {"shopId": "S1", "tableNo": "A1", "orderId": order.id, "totalPrice": 120}
    ]


@pytest.mark.anyio
async def test_price_edit_does_not_change_past_orders(orders, menus, published):
    tea = _tea(published)
    order = orders.submit("S1", "A1", Cart({tea.id: 2}))

    menus.update_item("S1", tea.id, price=999, name="Royal Tea")

    stored = orders.get_order(order.id)
    assert stored.total_price == 120
    assert stored.items[0].price == 60
    assert stored.items[0].name == "Tea"


@pytest.mark.anyio
async def test_submit_rejects_invalid_carts(orders, published, store):
    tea = _tea(published)
    assert orders.submit("S1", "A1", Cart()) is None
    assert orders.submit("S1", "A1", Cart({tea.id: 0})) is None
    assert orders.submit("S1", "A1", Cart({"ghost": 3})) is None
    assert orders.submit("", "A1", Cart({tea.id: 1})) is None
    assert orders.submit("S1", "", Cart({tea.id: 1})) is None
    assert orders.submit("S9", "A1", Cart({tea.id: 1})) is None
    assert store.get_collection(ORDERS) == []


@pytest.mark.anyio
async def test_draft_menu_is_not_orderable(orders, menus):
    menu = await menus.import_menu("S1", b"img")
    assert orders.customer_menu("S1") is None
    assert orders.submit("S1", "A1", Cart({menu.items[0].id: 1})) is None


@pytest.mark.anyio
async def test_advance_is_monotonic(orders, published, bus):
    updates = []
    bus.subscribe(ORDER_UPDATED, updates.append)
    order = orders.submit("S1", "A1", Cart({_tea(published).id: 1}))

    statuses = [orders.advance(order.id).status for _ in range(4)]

    assert statuses == [OrderStatus.SERVED, OrderStatus.PAID, OrderStatus.PAID, OrderStatus.PAID]
    assert [u["status"] for u in updates] == ["served", "paid"]
    assert orders.advance("missing") is None


@pytest.mark.anyio
async def test_update_status_only_allows_next_step(orders, published):
    order = orders.submit("S1", "A1", Cart({_tea(published).id: 1}))

    assert orders.update_status(order.id, "paid").status == OrderStatus.NEW
    assert orders.update_status(order.id, "bogus").status == OrderStatus.NEW
    assert orders.update_status(order.id, OrderStatus.SERVED).status == OrderStatus.SERVED
    assert orders.update_status(order.id, "new").status == OrderStatus.SERVED


@pytest.mark.anyio
async def test_list_orders_newest_first(orders, published, clock):
    tea = _tea(published)
    first = orders.submit("S1", "A1", Cart({tea.id: 1}))
    clock.advance(minutes=5)
    second = orders.submit("S1", "A2", Cart({tea.id: 1}))

    assert [o.id for o in orders.list_orders("S1")] == [second.id, first.id]
    assert orders.list_orders("S2") == []


@pytest.mark.anyio
async def test_end_to_end_scenario(shops, menus, orders):
    user = shops.get_or_create_user()
    shop = shops.add_shop("Cafe", user.id)

    menu = await menus.import_menu(shop.id, b"img")
    assert menu.is_published is False
    menus.publish(shop.id, "A1, A2")
    assert [t.table_no for t in menus.list_tables(shop.id)] == ["A1", "A2"]

    order = orders.submit(shop.id, "A1", Cart({menu.items[0].id: 2}))
    assert order.total_price == 120
    orders.advance(order.id)
    assert orders.advance(order.id).status == OrderStatus.PAID


@pytest.mark.anyio
async def test_failed_status_write_is_not_reported(orders, published, store, bus):
    updates = []
    bus.subscribe(ORDER_UPDATED, updates.append)
    order = orders.submit("S1", "A1", Cart({_tea(published).id: 1}))
    freeze_quota(store)

    assert orders.advance(order.id) is None
    assert orders.update_status(order.id, "served") is None

    assert orders.get_order(order.id).status == OrderStatus.NEW
    assert updates == []
