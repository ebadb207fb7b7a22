"""Dashboard exceptions.

Every failure a screen can hit is one of three kinds: the request never got
an answer, the server answered with an error, or a local check refused to
send the request at all.
"""


class DashboardError(Exception):
    """Base class for errors surfaced to staff as a toast."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ApiTransportError(DashboardError):
    """Raised when the backend could not be reached."""

    def __init__(self, endpoint: str, message: str):
        self.endpoint = endpoint
        super().__init__(message)


class ApiResponseError(DashboardError):
    """Raised when the backend reports an error or a business failure."""

    def __init__(self, endpoint: str, status_code: int, message: str):
        self.endpoint = endpoint
        self.status_code = status_code
        super().__init__(message)

    def __str__(self) -> str:
        return f"[{self.endpoint}] {self.status_code}: {self.message}"


class ActionValidationError(DashboardError):
    """Raised when a row action is missing a required local value."""


class AuthenticationError(DashboardError):
    """Raised when sign-in credentials do not match the configured list."""
