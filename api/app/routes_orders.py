from __future__ import annotations

"""Staff order routes and the live order stream."""

import asyncio
import json
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse

from .deps.services import get_bus, get_orders, require_shop
from .events import ORDER_SUBMITTED, ORDER_UPDATED, EventBus
from .schemas import Shop, to_record
from .services import OrderLifecycle
from .utils.responses import ok

KEEPALIVE_INTERVAL = 15

router = APIRouter()


@router.get("/api/shops/{shop_id}/orders")
def list_orders(
    shop: Shop = Depends(require_shop),
    orders: OrderLifecycle = Depends(get_orders),
) -> dict:
    """Orders of the shop, newest first."""

    return ok([to_record(o) for o in orders.list_orders(shop.id)])


@router.post("/api/orders/{order_id}/advance")
def advance_order(order_id: str, orders: OrderLifecycle = Depends(get_orders)) -> dict:
    """Move an order one step forward; paid orders are returned unchanged."""

    order = orders.advance(order_id)
    if order is None:
        if orders.get_order(order_id) is None:
            raise HTTPException(404, "Order not found")
        raise HTTPException(503, "Order status could not be saved")
    return ok(to_record(order))


@router.get(
    "/api/shops/{shop_id}/orders/stream",
    response_class=StreamingResponse,
    responses={200: {"content": {"text/event-stream": {}}}},
)
async def stream_orders(
    request: Request,
    shop: Shop = Depends(require_shop),
    bus: EventBus = Depends(get_bus),
) -> StreamingResponse:
    """Stream ``order.submitted``/``order.updated`` events of one shop via SSE.

    The subscriptions live as long as the connection; missed events are not
    replayed, so clients refetch the order list after reconnecting.
    """

    loop = asyncio.get_running_loop()
    queue: asyncio.Queue[str] = asyncio.Queue()

    def forward(name: str):
        def handler(payload: Dict[str, Any]) -> None:
            if payload.get("shopId") == shop.id:
                frame = f"event: {name}\ndata: {json.dumps(payload)}\n\n"
                loop.call_soon_threadsafe(queue.put_nowait, frame)

        return handler

    subs = [bus.subscribe(name, forward(name)) for name in (ORDER_SUBMITTED, ORDER_UPDATED)]

    async def event_gen():
        try:
            yield ": connected\n\n"
            while not await request.is_disconnected():
                try:
                    yield await asyncio.wait_for(queue.get(), timeout=KEEPALIVE_INTERVAL)
                except asyncio.TimeoutError:
                    yield ":keepalive\n\n"
        finally:
            for sub in subs:
                sub.unsubscribe()

    return StreamingResponse(event_gen(), media_type="text/event-stream")


__all__ = ["router"]
