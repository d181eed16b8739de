import time
import uuid
from typing import Callable

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from ..factory import get_data_sanitizer
from .context import RequestContextLogger


class RequestTrackingMiddleware(BaseHTTPMiddleware):
    """
    Request tracking middleware that adds logging
    and context to every API request. This middleware:

    1. Generates unique request IDs for tracing
    2. Logs request/response information with elapsed time
    3. Handles errors gracefully with context
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]
        sanitizer = await get_data_sanitizer()

        request_context = {
            "client_ip": self._get_client_ip(request),
            "user_agent": request.headers.get("user-agent", "Unknown")[:100],
            "method": request.method,
            "path": str(request.url.path),
        }

        async with RequestContextLogger(request_id=request_id, **request_context):
            logger.info(f"🔄 Incoming {request.method} request to {request.url.path} 🔄")
            started = time.perf_counter()

            try:
                response = await call_next(request)
            except Exception as e:
                logger.error(
                    sanitizer.sanitize_exception_for_logging(
                        f"💥 Request failed: {type(e).__name__}: {str(e)}"
                    )
                )
                raise

            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(
                f"🏁 Completed {request.method} {request.url.path} "
                f"with {response.status_code} in {elapsed_ms:.1f}ms"
            )
            response.headers["X-Request-ID"] = request_id
            return response

    def _get_client_ip(self, request: Request) -> str:
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip

        if request.client:
            return request.client.host

        return "unknown"
