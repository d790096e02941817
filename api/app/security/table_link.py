"""Per-table, per-day tokens embedded in customer order links.

The default ``device`` scheme derives the token from the device fingerprint
(the ``User-Agent`` of the request), the local calendar day and the table
number, with no secret involved. Validation recomputes the token under the
*current* fingerprint and day, so a link only validates on the device that
generated it and only until midnight. This is link obfuscation, not access
control: the encoding is reversible in spirit and trivially forgeable.

The ``signed`` scheme replaces the fingerprint with an HMAC key held by the
server, which keeps links valid across devices for the rest of the day.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import re
import string
from datetime import datetime
from typing import Callable
from urllib.parse import quote

from config import LinkScheme, Settings

# base64 alphabet without the two symbols stripped from the encoding
ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits
_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")


def _fold(text: str, length: int) -> str:
    """Fold ``text`` onto ``length`` characters, summing alphabet positions.

    Every input character contributes to one output slot, so changing any
    single character (or a short run of them) always changes the result.
    """

    slots = [0] * length
    for idx, char in enumerate(text):
        slot = idx % length
        slots[slot] = (slots[slot] + ALPHABET.index(char)) % len(ALPHABET)
    return "".join(ALPHABET[s] for s in slots)


class LinkAuthenticator:
    """Generate and verify table tokens.

    Parameters
    ----------
    scheme:
        :class:`config.LinkScheme` value selecting device or signed tokens.
    secret:
        HMAC key, required by the signed scheme.
    length:
        Number of characters in a token.
    clock:
        Returns the current local time; the calendar day is taken from it.
    """

    def __init__(
        self,
        scheme: LinkScheme = LinkScheme.DEVICE,
        secret: str | None = None,
        length: int = 12,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        if scheme == LinkScheme.SIGNED and not secret:
            raise ValueError("signed table links require link_secret")
        self.scheme = scheme
        self.secret = secret
        self.length = length
        self.clock = clock

    @classmethod
    def from_settings(
        cls, settings: Settings, clock: Callable[[], datetime] = datetime.now
    ) -> "LinkAuthenticator":
        return cls(
            scheme=settings.link_scheme,
            secret=settings.link_secret,
            length=settings.link_token_length,
            clock=clock,
        )

    def _today(self) -> str:
        return self.clock().strftime("%Y-%m-%d")

    def generate_table_hash(self, table_no: str, fingerprint: str = "") -> str:
        """Return the token for ``table_no`` today on ``fingerprint``."""

        date = self._today()
        if self.scheme == LinkScheme.SIGNED:
            msg = f"{date}-{table_no}".encode()
            digest = hmac.new(self.secret.encode(), msg, hashlib.sha256).hexdigest()
            return digest[: self.length]
        raw = f"{fingerprint}-{date}-{table_no}"
        encoded = base64.b64encode(raw.encode("utf-8")).decode("ascii")
        return _fold(_NON_ALNUM.sub("", encoded), self.length)

    def validate_hash(self, table_no: str, token: object, fingerprint: str = "") -> bool:
        """Return ``True`` if ``token`` is today's token for ``table_no``."""

        if not isinstance(token, str) or len(token) != self.length:
            return False
        if not token.isascii():
            return False
        if not table_no:
            return False
        expected = self.generate_table_hash(table_no, fingerprint)
        return hmac.compare_digest(expected, token)


def order_link(base_url: str, shop_id: str, table_no: str, token: str) -> str:
    """Return ``<base>/order/<shopId>/<tableNo>/<token>``."""

    parts = [quote(part, safe="") for part in (shop_id, table_no, token)]
    return f"{base_url.rstrip('/')}/order/" + "/".join(parts)
