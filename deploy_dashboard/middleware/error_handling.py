"""
Error handling middleware for the deploy dashboard.

Domain errors raised by routes and services are rendered as ``{"error": ...}``
with the status code carried by the error; anything unexpected becomes a
logged 500.
"""

import logging
import traceback
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from deploy_dashboard.domain.errors import DeployDashboardError
from deploy_dashboard.schemas.deploy import ErrorResponse

logger = logging.getLogger(__name__)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for centralized error handling.

    This middleware catches domain and unexpected exceptions, logs them,
    and returns the API's error body.
    """

    def __init__(self, app, enable_error_logging: bool = True):
        """
        Initialize the error handling middleware.

        Args:
            app: FastAPI application instance
            enable_error_logging: Whether to log full tracebacks for unexpected errors
        """
        super().__init__(app)
        self.enable_error_logging = enable_error_logging

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except DeployDashboardError as e:
            return self._handle_domain_error(request, e)
        except Exception as e:
            return self._handle_unexpected_exception(request, e)

    def _handle_domain_error(self, request: Request, exc: DeployDashboardError) -> JSONResponse:
        log = logger.warning if exc.status_code < 500 else logger.error
        log(f"🚨 HTTP {exc.status_code} for {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error=exc.message).model_dump(),
        )

    def _handle_unexpected_exception(self, request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"💥 Unexpected error for {request.method} {request.url.path}: {str(exc)}")
        if self.enable_error_logging:
            logger.error(f"📋 Full traceback:\n{traceback.format_exc()}")

        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error="Internal server error").model_dump(),
        )

