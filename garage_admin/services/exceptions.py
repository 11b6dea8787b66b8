class ServiceError(Exception):
    """Base exception for service layer failures."""

    def __init__(self, message: str, *, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class DownstreamServiceError(ServiceError):
    """Raised when the garage backend returns an error response or cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None, *, cause: Exception | None = None):
        super().__init__(message, cause=cause)
        self.status_code = status_code


class ValidationFailed(ServiceError):
    """Raised when form input is rejected before any request is sent."""

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.field = field


class NotFoundError(ServiceError):
    """Raised when a record or session is missing or has gone stale."""


class ConflictError(ServiceError):
    """Raised when an action collides with one already in flight or with the current state."""
