"""Access log for the sync bridge.

One line per request on the ``hcb.request`` logger. Each line shows the route,
the status, the latency and whether the sync core was answering from cache
while offline. The generated request id is stored on request.state, so the
id in the ApiResponse envelope matches the logged one; it is also
returned in the X-Request-ID response header.

    INFO [PUT] /api/v1/connectivity → 200 (1ms) req_5f0c9e2a7b1d offline=True
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("hcb.request")

REQUEST_ID_HEADER = "X-Request-ID"


def _serving_offline(request: Request) -> bool:
    context = getattr(request.app.state, "context", None)
    return context is not None and not context.monitor.is_online


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = f"req_{uuid.uuid4().hex[:12]}"
        request.state.request_id = request_id

        started = time.perf_counter()
        response: Response = await call_next(request)
        latency_ms = (time.perf_counter() - started) * 1000

        # The host shell correlates its own logs through this header
        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            "[%s] %s → %d (%.0fms) %s offline=%s",
            request.method,
            request.url.path,
            response.status_code,
            latency_ms,
            request_id,
            _serving_offline(request),
        )
        return response
