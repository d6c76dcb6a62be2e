"""
Request logging middleware: request ids, timing and slow-request warnings.
"""

from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
import logging
import time
import uuid

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Assigns each request a short id, times it and logs the outcome.
    Sets `X-Request-ID` and `X-Processing-Time` on every response.
    """

    def __init__(
        self,
        app: ASGIApp,
        slow_request_threshold: float = 2.0,  # seconds
        enable_detailed_logging: bool = False
    ):
        super().__init__(app)
        self.slow_request_threshold = slow_request_threshold
        self.enable_detailed_logging = enable_detailed_logging

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]
        request.state.request_id = request_id
        start_time = time.time()

        if self.enable_detailed_logging:
            logger.debug(
                f"Request [{request_id}]: {request.method} {request.url.path}",
                extra={"request_id": request_id, "query": str(request.query_params)}
            )

        try:
            response = await call_next(request)
        except Exception as exc:
            processing_time = time.time() - start_time
            logger.error(
                f"Request error [{request_id}]: {type(exc).__name__} - {str(exc)} "
                f"(processing_time: {processing_time:.3f}s)",
                extra={
                    "request_id": request_id,
                    "path": request.url.path,
                    "method": request.method,
                    "processing_time": processing_time,
                },
                exc_info=True
            )
            raise

        processing_time = time.time() - start_time
        log_extra = {
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "status_code": response.status_code,
            "processing_time": processing_time,
        }

        if processing_time > self.slow_request_threshold:
            logger.warning(
                f"Slow request [{request_id}]: {request.method} {request.url.path} "
                f"took {processing_time:.3f}s",
                extra=log_extra
            )
        else:
            logger.info(
                f"{request.method} {request.url.path} -> {response.status_code} "
                f"({processing_time:.3f}s) [{request_id}]",
                extra=log_extra
            )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Processing-Time"] = f"{processing_time:.3f}"
        return response
