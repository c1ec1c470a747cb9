"""Request ID middleware for the project quota webhook.

Reuses an incoming X-Request-ID header when the caller sends one, otherwise
generates a UUID4. The ID is stored in a ContextVar so log records and error
bodies can carry it, and is echoed as the X-Request-ID response header.
Admission handlers replace it with the AdmissionReview uid; a header already
set by the error handler is left alone.
"""

import logging
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def get_request_id() -> str:
    return request_id_var.get()


class RequestIDLogFilter(logging.Filter):
    """Adds the current request ID to every log record as ``request_id``."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        return True


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        req_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request_id_var.set(req_id)
        response = await call_next(request)
        response.headers.setdefault("X-Request-ID", req_id)
        return response
