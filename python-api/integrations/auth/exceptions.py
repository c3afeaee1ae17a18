"""
Credential Custom Exceptions

Error types for token issuing/verification failures. All exceptions carry a
machine-readable error code and the HTTP status the API should answer with.
"""

from datetime import datetime, timezone
from typing import Any, Optional


class AuthError(Exception):
    """Base exception for all credential errors"""

    def __init__(
        self,
        message: str,
        error_code: str,
        status_code: int = 401,
        details: Optional[dict[str, Any]] = None,
    ):
        """
        Initialize credential error

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code (e.g., "INVALID_TOKEN")
            status_code: HTTP status code (default: 401)
            details: Optional additional error context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}


class MissingTokenError(AuthError):
    """Raised when the request carries no access token"""

    def __init__(self, message: str = "No token, authorization denied"):
        super().__init__(message=message, error_code="MISSING_TOKEN", status_code=401)


class TokenExpiredError(AuthError):
    """Raised when the access token has expired"""

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message=message, error_code="TOKEN_EXPIRED", status_code=401)


class InvalidTokenError(AuthError):
    """Raised when the access token is malformed, tampered with or lacks a subject"""

    def __init__(self, message: str = "Token is not valid"):
        super().__init__(message=message, error_code="INVALID_TOKEN", status_code=401)


class TokenIssueError(AuthError):
    """Raised when a token cannot be signed (bad secret or algorithm)"""

    def __init__(self, message: str = "Failed to issue access token"):
        super().__init__(message=message, error_code="TOKEN_ISSUE_FAILED", status_code=500)


def format_error_response(error: AuthError, request_id: Optional[str] = None) -> dict[str, Any]:
    """
    Format a credential error as a consistent JSON payload

    Args:
        error: AuthError instance
        request_id: Optional request ID for tracing

    Returns:
        Dictionary with consistent error format:
        {
            "detail": "Human-readable error message",
            "error_code": "MACHINE_READABLE_CODE",
            "timestamp": "2026-01-01T12:34:56.789Z",
            "request_id": "req_123456" (optional)
        }
    """
    response = {
        "detail": error.message,
        "error_code": error.error_code,
        "timestamp": datetime.now(timezone.utc).replace(tzinfo=None).isoformat() + "Z",
    }

    if request_id:
        response["request_id"] = request_id

    if error.details:
        response.update(error.details)

    return response
