"""FastAPI middleware for request tracing and metrics"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from odysseus_gateway.infrastructure.observability.metrics import request_duration_histogram

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach a request ID, reusing the caller's X-Request-ID when present"""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def _route_label(request: Request) -> str:
    # Templated path keeps transaction ids out of metric labels
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class MetricsMiddleware(BaseHTTPMiddleware):
    """Record HTTP request latency per method, route and status"""

    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logging.exception(
                "Unhandled error while serving request",
                extra={"request_id": getattr(request.state, "request_id", None), "path": request.url.path},
            )
            request_duration_histogram.labels(
                method=request.method, endpoint=_route_label(request), status=500
            ).observe(time.perf_counter() - start_time)
            raise

        request_duration_histogram.labels(
            method=request.method,
            endpoint=_route_label(request),
            status=response.status_code,
        ).observe(time.perf_counter() - start_time)
        return response
