"""Menu image parsing collaborators.

A parser turns a photographed menu into a :class:`~api.app.schemas.ParsedMenu`.
Parsers may fail in any way; the menu lifecycle absorbs failures and timeouts
with a fixed placeholder menu.
"""

from __future__ import annotations

import base64
import logging
from typing import Protocol

import httpx

from config import Settings

from ..schemas import ParsedMenu

logger = logging.getLogger("menu")


class MenuParseError(Exception):
    """The collaborator could not produce a menu."""


class MenuParser(Protocol):
    async def parse(self, image: bytes, mime_type: str, shop_name: str) -> ParsedMenu:
        """Return the structured menu read from ``image``."""


class UnconfiguredMenuParser:
    """Used when no parsing service is configured; always fails."""

    async def parse(self, image: bytes, mime_type: str, shop_name: str) -> ParsedMenu:
        raise MenuParseError("no menu parser configured")


class HttpMenuParser:
    """POST the image to a parsing service and read its JSON reply.

    The request body is ``{"image": <base64>, "mimeType": ..., "shopName": ...}``
    and the reply must match ``{"brandName", "categories", "items"}``.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 20.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.transport = transport

    async def parse(self, image: bytes, mime_type: str, shop_name: str) -> ParsedMenu:
        payload = {
            "image": base64.b64encode(image).decode("ascii"),
            "mimeType": mime_type,
            "shopName": shop_name,
        }
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            resp = await client.post(self.url, json=payload)
        if resp.status_code >= 400:
            raise MenuParseError(f"parser returned HTTP {resp.status_code}")
        try:
            return ParsedMenu.model_validate(resp.json())
        except ValueError as exc:
            raise MenuParseError("parser reply is not a menu") from exc


def create_menu_parser(settings: Settings) -> MenuParser:
    """Return the parser configured by ``menu_parser_url``."""

    if settings.menu_parser_url:
        return HttpMenuParser(settings.menu_parser_url, timeout=settings.menu_parse_timeout_secs)
    logger.info("MENU_PARSER_URL not set; imports use the placeholder menu")
    return UnconfiguredMenuParser()


__all__ = [
    "MenuParser",
    "MenuParseError",
    "HttpMenuParser",
    "UnconfiguredMenuParser",
    "create_menu_parser",
]
