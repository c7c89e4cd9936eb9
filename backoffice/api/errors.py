"""
API Error Types
"""

from typing import Any, Optional

DEFAULT_MESSAGES = {
    401: "Authentication required",
    403: "Access denied",
    404: "Resource not found",
    500: "Internal server error",
    503: "Service temporarily unavailable",
}


class ApiException(Exception):
    """
    Failed call to the remote back-office API.

    ``status`` is the HTTP status code, or 0 when the request never got a
    response (connection error, timeout).
    """

    def __init__(
        self,
        status: int,
        message: str,
        code: Optional[str] = None,
        details: Any = None,
    ):
        super().__init__(message)
        self.status = status
        self.message = message
        self.code = code
        self.details = details

    @property
    def is_retryable(self) -> bool:
        return self.status == 0 or self.status >= 500

    def __repr__(self) -> str:
        return f"ApiException(status={self.status}, message={self.message!r})"


class AuthenticationRequired(Exception):
    """A gated call was made before authentication became ready."""
