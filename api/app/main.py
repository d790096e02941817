# main.py

"""FastAPI application for shop back-office and table ordering."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import Settings, get_settings

from .events import EventBus
from .middlewares import LoggingMiddleware, RequestIdMiddleware
from .middlewares.logging import mask_order_links
from .obs import configure_logging
from .providers.menu_parser import MenuParser, create_menu_parser
from .routes_admin_menu import router as admin_menu_router
from .routes_guest_order import router as guest_order_router
from .routes_orders import router as orders_router
from .routes_reservations import router as reservations_router
from .routes_shops import router as shops_router
from .security.table_link import LinkAuthenticator
from .services import MenuLifecycle, OrderLifecycle, ReservationLifecycle, ShopDirectory
from .storage import RecordStore, create_store
from .utils.responses import error_response

logger = logging.getLogger("api")


def create_app(
    settings: Settings | None = None,
    store: RecordStore | None = None,
    parser: MenuParser | None = None,
    clock: Callable[[], datetime] = datetime.now,
    configure_logs: bool = True,
) -> FastAPI:
    """Build the application and its services.

    ``store``, ``parser`` and ``clock`` default to what ``settings`` selects;
    tests pass their own to isolate each case.
    """

    settings = settings or get_settings()
    if configure_logs:
        configure_logging(settings.log_level.upper())

    store = store or create_store(settings)
    bus = EventBus()
    menus = MenuLifecycle(
        store,
        bus,
        parser or create_menu_parser(settings),
        parse_timeout=settings.menu_parse_timeout_secs,
    )

    app = FastAPI(title="SmartOrder")
    app.state.settings = settings
    app.state.store = store
    app.state.bus = bus
    app.state.shops = ShopDirectory(store, bus, clock=clock)
    app.state.menus = menus
    app.state.orders = OrderLifecycle(store, bus, menus, clock=clock)
    app.state.reservations = ReservationLifecycle(store, bus, clock=clock)
    app.state.link_auth = LinkAuthenticator.from_settings(settings, clock=clock)

    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(shops_router)
    app.include_router(admin_menu_router)
    app.include_router(reservations_router)
    app.include_router(orders_router)
    app.include_router(guest_order_router)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        logger.warning(
            exc.detail,
            extra={"status": exc.status_code, "route": mask_order_links(request.url.path)},
        )
        return error_response(exc.status_code, exc.detail)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        details = {"errors": [e.get("msg") for e in exc.errors()]}
        return error_response(422, "Invalid request", details)

    @app.exception_handler(Exception)
    async def general_error_handler(request: Request, exc: Exception):
        logger.exception(
            "unhandled_error",
            extra={"status": 500, "route": mask_order_links(request.url.path)},
        )
        return error_response(500, "Internal Server Error")

    @app.get("/health")
    def health() -> dict:
        return {"ok": True}

    logger.info(
        "app ready store=%s links=%s",
        settings.store_backend.value,
        settings.link_scheme.value,
    )
    return app


app = create_app()
