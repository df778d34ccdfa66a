"""
HTTP middleware components for request/response processing.

This module provides middleware for centralized error handling and for
request timing.
"""

import logging
import time
import uuid
from typing import Any, Awaitable, Callable, Dict

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ...infrastructure.config.models import PerformanceConfig

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Turn unhandled exceptions into JSON 500 responses."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.exception(
                f"Unhandled error in {request.method} {request.url.path}: {e}")

            return JSONResponse(
                status_code=500,
                content={
                    "error": "Internal server error",
                    "message": str(e) if request.app.debug else "An unexpected error occurred",
                    "request_id": getattr(request.state, "request_id", None)
                }
            )


class PerformanceMiddleware(BaseHTTPMiddleware):
    """Tag requests with an id and record response times."""

    def __init__(self, app: Any, config: PerformanceConfig) -> None:
        super().__init__(app)
        self.config = config
        self.metrics: Dict[str, Any] = {
            "request_count": 0,
            "total_time": 0.0,
            "avg_response_time": 0.0,
            "slow_requests": 0
        }

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = request_id

        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        self.metrics["request_count"] += 1
        self.metrics["total_time"] += duration
        self.metrics["avg_response_time"] = (
            self.metrics["total_time"] / self.metrics["request_count"]
        )

        if duration > self.config.slow_request_threshold:
            self.metrics["slow_requests"] += 1
            logger.warning(
                f"Slow request {request.method} {request.url.path}: {duration:.3f}s "
                f"(request_id={request_id})")
        else:
            logger.debug(
                f"{request.method} {request.url.path} -> {response.status_code} "
                f"in {duration:.3f}s")

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration:.3f}s"
        return response
