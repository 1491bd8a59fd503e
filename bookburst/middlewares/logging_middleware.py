import time
import uuid
from typing import List, Optional

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

from bookburst.core.config import get_settings
from bookburst.logging.setup import get_logger

settings = get_settings()
logger = get_logger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Log every request with its status and duration.

    A correlation id is taken from the incoming header, or generated, and
    echoed back on the response.
    """

    def __init__(
        self,
        app: FastAPI,
        skip_paths: Optional[List[str]] = None,
        skip_methods: Optional[List[str]] = None,
        log_headers: bool = False,
        sensitive_headers: Optional[List[str]] = None,
        correlation_id_header: str = "X-Correlation-ID",
    ):
        """
        Args:
            app: FastAPI application
            skip_paths: Path prefixes that are not logged
            skip_methods: HTTP methods that are not logged
            log_headers: Whether to include request headers
            sensitive_headers: Headers masked when headers are logged
            correlation_id_header: Header name for correlation ID
        """
        super().__init__(app)
        self.skip_paths = (
            skip_paths
            if skip_paths is not None
            else settings.MIDDLEWARE_EXCLUDED_PATHS
        )
        self.skip_methods = skip_methods or ["OPTIONS"]
        self.log_headers = log_headers
        self.correlation_id_header = correlation_id_header
        self.sensitive_headers = [
            h.lower()
            for h in (sensitive_headers or settings.MIDDLEWARE_SENSITIVE_HEADERS)
        ]

    def _masked_headers(self, request: Request) -> dict:
        headers = dict(request.headers)
        for header in self.sensitive_headers:
            if header in headers:
                headers[header] = "***REDACTED***"
        return headers

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if request.method in self.skip_methods or any(
            path.startswith(skip) for skip in self.skip_paths
        ):
            return await call_next(request)

        correlation_id = request.headers.get(
            self.correlation_id_header, f"correlation-{uuid.uuid4()}"
        )
        start_time = time.time()

        log_data = {
            "correlation_id": correlation_id,
            "method": request.method,
            "path": path,
            "client_ip": request.client.host if request.client else "unknown",
        }
        if self.log_headers:
            log_data["headers"] = self._masked_headers(request)

        try:
            response = await call_next(request)
        except Exception as e:
            log_data["duration_ms"] = round((time.time() - start_time) * 1000, 2)
            logger.error(
                f"{request.method} {path} failed: {type(e).__name__}", extra=log_data
            )
            raise

        duration_ms = round((time.time() - start_time) * 1000, 2)
        log_data.update(status_code=response.status_code, duration_ms=duration_ms)

        message = f"{request.method} {path} {response.status_code} {duration_ms}ms"
        if response.status_code >= 500:
            logger.error(message, extra=log_data)
        elif response.status_code >= 400:
            logger.warning(message, extra=log_data)
        else:
            logger.info(message, extra=log_data)

        response.headers[self.correlation_id_header] = correlation_id
        return response
