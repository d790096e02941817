"""Envelope helpers shared by every route: ``{"ok": ..., "data"|"error": ...}``."""

from typing import Any, Dict

from fastapi.responses import JSONResponse

from ..middlewares.request_id import request_id_ctx


def ok(data: Any) -> Dict[str, Any]:
    """Wrap a successful payload."""
    return {"ok": True, "data": data}


def err(code: int, message: str, details: Dict[str, Any] | None = None) -> Dict[str, Any]:
    """Wrap a failure; the request id lets staff match it to the access log."""
    error: Dict[str, Any] = {"code": code, "message": message}
    if details:
        error["details"] = details
    return {"ok": False, "request_id": request_id_ctx.get(None), "error": error}


def error_response(
    status_code: int, message: str, details: Dict[str, Any] | None = None
) -> JSONResponse:
    return JSONResponse(err(status_code, message, details), status_code=status_code)
