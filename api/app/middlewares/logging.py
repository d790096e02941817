import logging
import re
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger("api")

ORDER_LINK_RE = re.compile(r"/order/[^/\s]+/[^/\s]+/[^/\s?#\"']+")
ORDER_LINK_TEMPLATE = "/order/{shop_id}/{table_no}/{token}"


def mask_order_links(text: str) -> str:
    return ORDER_LINK_RE.sub(ORDER_LINK_TEMPLATE, text)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Emit one access line per request.

    Guest order links carry the table token in the path, so those requests
    are logged under the route template.
    """

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        route = mask_order_links(request.url.path)
        level = logging.ERROR if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "%s %s %d",
            request.method,
            route,
            response.status_code,
            extra={
                "method": request.method,
                "route": route,
                "status": response.status_code,
                "latency_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return response
