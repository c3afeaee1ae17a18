"""
ZeroDB Custom Exceptions

Error types raised by the document store client.
"""

from typing import Any, Optional


class ZeroDBError(Exception):
    """Base exception for all ZeroDB errors"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response = response


class ZeroDBAuthError(ZeroDBError):
    """Store rejected our API key (401, 403)"""

    def __init__(
        self,
        message: str = "Authentication failed",
        status_code: int = 401,
        response: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, status_code, response)


class ZeroDBNotFound(ZeroDBError):
    """Table or project does not exist (404)"""

    def __init__(
        self, message: str = "Resource not found", response: Optional[dict[str, Any]] = None
    ):
        super().__init__(message, 404, response)


class ZeroDBRateLimitError(ZeroDBError):
    """Store rate limit exceeded (429)"""

    def __init__(
        self, message: str = "Rate limit exceeded", response: Optional[dict[str, Any]] = None
    ):
        super().__init__(message, 429, response)


class ZeroDBTimeoutError(ZeroDBError):
    """Request did not complete within the configured timeout"""

    def __init__(self, message: str = "Request timed out", response: Optional[dict[str, Any]] = None):
        super().__init__(message, status_code=408, response=response)
