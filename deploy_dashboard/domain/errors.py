"""Error taxonomy for the deploy dashboard.

Every error carries the HTTP status it maps to, so the error handling
middleware can render it without knowing the concrete type.
"""
from typing import Optional


class DeployDashboardError(Exception):
    """Base class for all errors raised by the deploy dashboard."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DeployDashboardError):
    """Missing or malformed input in a request payload."""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    @classmethod
    def missing_field(cls, field: str) -> "ValidationError":
        return cls(f"missing field: {field}", field=field)


class BackendUnavailableError(DeployDashboardError):
    """A storage tier or upstream service could not be reached."""

    status_code = 500

    def __init__(self, backend: str, message: str):
        super().__init__(f"{backend} backend unavailable: {message}")
        self.backend = backend


class NotConfiguredError(DeployDashboardError):
    """A feature was requested whose backing service is not configured."""

    status_code = 500
