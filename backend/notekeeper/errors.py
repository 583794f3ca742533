"""API error types.

Services raise these; the handlers installed in ``notekeeper.main`` turn them
into the standard ``{success: false, error, details}`` envelope with the
matching HTTP status. Clients branch on ``success`` and the status code,
never on exception names.
"""

from fastapi import status


class ConfigurationError(RuntimeError):
    """Startup configuration is missing or unusable."""


class ApiError(Exception):
    """Base class for errors that map directly to an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        details: dict | list | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details
        self.headers = headers


class ValidationFailed(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST


class Unauthorized(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str, details: dict | list | None = None):
        super().__init__(message, details, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(ApiError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(ApiError):
    """Missing resource. Also used for resources owned by someone else."""

    status_code = status.HTTP_404_NOT_FOUND


class Conflict(ApiError):
    status_code = status.HTTP_409_CONFLICT


class TooManyRequests(ApiError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS

    def __init__(self, message: str, retry_after: int):
        super().__init__(
            message,
            details={"retryAfter": retry_after},
            headers={"Retry-After": str(retry_after)},
        )
        self.retry_after = retry_after


class InternalError(ApiError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
