"""JSON log lines for the API process.

Messages can carry two kinds of sensitive text: reservation phone numbers
and the per-day token of a guest order link. Both are masked before a line
is written, including inside tracebacks.
"""

import json
import logging
import re
from datetime import datetime, timezone
from typing import Any

from ..middlewares.logging import mask_order_links
from ..middlewares.request_id import request_id_ctx

PHONE_RE = re.compile(r"\+?\d[\d\- ]{7,}\d")

# Set through ``extra=`` by the access log and the error handlers
CONTEXT_FIELDS = ("method", "route", "status", "latency_ms")


def redact(text: str) -> str:
    """Mask guest link tokens and phone-number-like runs."""
    return PHONE_RE.sub("***", mask_order_links(text))


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.req_id = request_id_ctx.get(None)
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record; context fields appear only when set."""

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": redact(record.getMessage()),
        }
        req_id = getattr(record, "req_id", None)
        if req_id:
            data["req_id"] = req_id
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                data[field] = value
        if record.exc_info:
            data["exc"] = redact(self.formatException(record.exc_info))
        return json.dumps(data)


def configure_logging(level: int | str = logging.INFO) -> None:
    """Send every logger through one JSON handler on stderr."""

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    handler.addFilter(RequestIdFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)
