"""
Logging middleware for the deploy dashboard.

Logs one line per request and response with timing, and stamps responses
with processing-time headers.
"""

import json
import logging
import time
from datetime import datetime
from typing import Any, Callable, Dict

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

# Polled endpoints that would flood the log at INFO
QUIET_PATHS = {"/health", "/favicon.ico"}


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for request/response logging.
    """

    def __init__(self, app, enable_detailed_logging: bool = False):
        """
        Initialize the logging middleware.

        Args:
            app: FastAPI application instance
            enable_detailed_logging: Whether to log request details at DEBUG
        """
        super().__init__(app)
        self.enable_detailed_logging = enable_detailed_logging

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        log = logger.debug if self._is_quiet(request) else logger.info

        log(f"📥 {request.method} {request.url.path} - {request.client.host if request.client else '-'}")
        if self.enable_detailed_logging:
            logger.debug(f"📋 Request details: {json.dumps(self._extract_request_info(request), indent=2)}")

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(f"💥 {request.method} {request.url.path} - ERROR - {process_time:.3f}s - {str(e)}")
            # Re-raise the exception for error handling middleware
            raise

        process_time = time.time() - start_time
        log(f"📤 {request.method} {request.url.path} - {response.status_code} - {process_time:.3f}s")

        response.headers["X-Process-Time"] = str(process_time)
        response.headers["X-Timestamp"] = datetime.now().isoformat()
        return response

    def _is_quiet(self, request: Request) -> bool:
        return any(request.url.path.endswith(path) for path in QUIET_PATHS)

    def _extract_request_info(self, request: Request) -> Dict[str, Any]:
        sensitive_headers = {"authorization", "cookie", "x-api-key", "x-auth-token"}
        return {
            "method": request.method,
            "path": str(request.url.path),
            "query_params": dict(request.query_params),
            "client_ip": request.client.host if request.client else None,
            "user_agent": request.headers.get("user-agent"),
            "headers": {k: v for k, v in request.headers.items() if k.lower() not in sensitive_headers},
            "timestamp": datetime.now().isoformat(),
        }
