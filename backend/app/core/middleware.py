"""
Request middleware: correlation ids, request logging and timeouts.
"""
import uuid
import time
import asyncio
import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from fastapi import status
from fastapi.responses import JSONResponse
from app.core.errors import ErrorCodes, get_error_response
from app.core.logging import correlation_id_var
from app.core.performance import PerformanceMonitor

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """Tag each request (and its log lines) with a correlation id."""

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id
        token = correlation_id_var.set(correlation_id)

        start_time = time.time()
        logger.info(f"Request started: {request.method} {request.url.path}")

        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.time() - start_time
            logger.error(
                f"Request failed: {request.method} {request.url.path} - {e} ({duration:.3f}s)",
                exc_info=True
            )
            error_info = get_error_response(ErrorCodes.UNKNOWN_ERROR)
            error_info['correlation_id'] = correlation_id
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=error_info,
                headers={CORRELATION_HEADER: correlation_id}
            )
        finally:
            correlation_id_var.reset(token)

        duration = time.time() - start_time
        PerformanceMonitor.record_metric(
            "request_duration",
            duration,
            {"method": request.method, "path": request.url.path, "status_code": response.status_code}
        )

        response.headers[CORRELATION_HEADER] = correlation_id
        response.headers["X-Response-Time"] = f"{duration:.3f}"

        logger.info(
            f"Request completed: {request.method} {request.url.path} - {response.status_code} ({duration:.3f}s)",
            extra={"correlation_id": correlation_id, "status_code": response.status_code, "duration": duration}
        )
        return response


class TimeoutMiddleware(BaseHTTPMiddleware):
    """Abort requests that run longer than the configured timeout with a 504."""

    def __init__(self, app, timeout_seconds: float):
        super().__init__(app)
        self.timeout_seconds = timeout_seconds

    async def dispatch(self, request: Request, call_next):
        try:
            return await asyncio.wait_for(call_next(request), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            correlation_id = getattr(request.state, 'correlation_id', 'unknown')
            logger.error(f"Request timeout after {self.timeout_seconds} seconds: {request.url.path}")
            error_info = get_error_response(ErrorCodes.TIMEOUT)
            error_info['correlation_id'] = correlation_id
            return JSONResponse(
                status_code=status.HTTP_504_GATEWAY_TIMEOUT,
                content=error_info,
                headers={CORRELATION_HEADER: correlation_id}
            )
