"""
Middleware package for the deploy dashboard.

Cross-cutting request handling: access logging and error rendering.
"""

from .error_handling import ErrorHandlingMiddleware
from .logging import LoggingMiddleware

__all__ = [
    "ErrorHandlingMiddleware",
    "LoggingMiddleware",
]
