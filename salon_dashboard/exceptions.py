class DashboardError(Exception):
    """Base exception for dashboard failures."""

    def __init__(self, message: str, *, cause: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class DeletionFailed(DashboardError):
    """Raised when the appointments API refuses or fails a cancellation."""

    def __init__(self, message: str, status_code: int | None = None, *, cause: Exception | None = None):
        super().__init__(message, cause=cause)
        self.status_code = status_code


class SessionConfigError(DashboardError):
    """Raised when the Supabase URL or anon key is not configured."""


class CookieWriteError(DashboardError):
    """Raised by a cookie store that cannot accept writes in its context."""
