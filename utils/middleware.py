"""
Request context and metrics middleware
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from utils.monitoring import track_request_metrics
from utils.structured_logging import get_structured_logger, set_request_context


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assigns a request id, logs the request and records request metrics"""

    def __init__(self, app):
        super().__init__(app)
        self.logger = get_structured_logger("api")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        set_request_context(request_id)

        start_time = time.time()
        response = await call_next(request)
        duration = time.time() - start_time

        # Route template keeps metric cardinality bounded
        route = request.scope.get("route")
        endpoint = getattr(route, "path", request.url.path)

        track_request_metrics(request.method, endpoint, response.status_code, duration)
        self.logger.info(
            "API request",
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
            response_time_ms=int(duration * 1000)
        )

        response.headers["X-Request-ID"] = request_id
        return response
