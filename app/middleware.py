"""
Request middleware.

:class:`RequestContextMiddleware` gives every request a trace ID
(``X-Request-ID``, honoured when the caller already sends one), measures its
wall-clock duration (``X-Process-Time``) and writes one access log line per
request carrying both.
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
PROCESS_TIME_HEADER = "X-Process-Time"

SLOW_REQUEST_MS = 500


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Tag, time and log every HTTP request."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers[PROCESS_TIME_HEADER] = f"{elapsed_ms:.2f}ms"

        extra = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "elapsed_ms": round(elapsed_ms, 2),
        }
        if elapsed_ms > SLOW_REQUEST_MS:
            logger.warning(
                "%s %s -> %d in %.2fms (SLOW)",
                request.method,
                request.url.path,
                response.status_code,
                elapsed_ms,
                extra=extra,
            )
        else:
            logger.info(
                "%s %s -> %d in %.2fms",
                request.method,
                request.url.path,
                response.status_code,
                elapsed_ms,
                extra=extra,
            )
        return response
