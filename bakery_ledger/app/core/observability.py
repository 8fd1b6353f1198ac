"""
Request tracing for ledger calls.

Every request gets a correlation ID (taken from X-Correlation-ID or
generated). It is echoed back in the response headers and kept in a context
variable, so ledger log lines written while serving the request carry it
in their `extra=` fields.
"""

import logging
import time
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("bakery_ledger.requests")

CORRELATION_HEADER = "X-Correlation-ID"

_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def current_correlation_id() -> Optional[str]:
    """Correlation ID of the request being served, None outside a request."""
    return _correlation_id.get()


def log_context(**fields) -> dict:
    """`extra=` payload for ledger log records, tagged with the current correlation ID."""
    return {"correlation_id": current_correlation_id(), **fields}


class ObservabilityMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or uuid.uuid4().hex
        token = _correlation_id.set(correlation_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            _correlation_id.reset(token)

        duration_ms = round((time.perf_counter() - started) * 1000, 2)
        response.headers[CORRELATION_HEADER] = correlation_id
        response.headers["X-Process-Time"] = str(duration_ms)

        request_log = {
            "correlation_id": correlation_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        }

        if response.status_code >= 500:
            logger.error("Ledger request failed", extra=request_log)
        elif response.status_code >= 400:
            logger.warning("Ledger request rejected", extra=request_log)
        else:
            logger.info("Ledger request served", extra=request_log)

        return response
