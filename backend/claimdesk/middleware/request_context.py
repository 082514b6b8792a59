"""
Request context middleware.

Tags every request with an ``X-Request-ID`` (propagated from the caller or
generated) held in a ContextVar, so log lines from the import pipeline can be
tied back to the upload that produced them.
"""

import logging
import time
from contextvars import ContextVar
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)

_request_id_var: ContextVar[str] = ContextVar("request_id", default="")

QUIET_PATHS = {"/api/health"}


def get_request_id() -> str:
    return _request_id_var.get()


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid4().hex
        token = _request_id_var.set(request_id)

        started = time.perf_counter()
        response = None
        try:
            response = await call_next(request)
        finally:
            duration_ms = round((time.perf_counter() - started) * 1000, 2)
            if request.url.path not in QUIET_PATHS:
                # no response means the app raised
                logger.info(
                    "%s %s %s %.0fms",
                    request.method,
                    request.url.path,
                    response.status_code if response is not None else 500,
                    duration_ms,
                    extra={"duration_ms": duration_ms},
                )
            _request_id_var.reset(token)

        response.headers["X-Request-ID"] = request_id
        return response
