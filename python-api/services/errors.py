"""
Service Error Taxonomy

HTTP-aware exceptions raised by the service layer. Each one is a FastAPI
HTTPException so route handlers and the global handlers in main.py treat
them exactly like any other HTTP error, while tests and callers can still
match on the specific class or ``error_code``.
"""

from typing import Optional

from fastapi import HTTPException, status


class ServiceError(HTTPException):
    """Base class for domain errors with a machine-readable code."""

    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = "SERVER_ERROR"

    def __init__(self, detail: str, error_code: Optional[str] = None):
        super().__init__(status_code=self.default_status, detail=detail)
        self.error_code = error_code or self.default_code


class BadRequestError(ServiceError):
    """Missing or malformed input, or a violated challenge invariant (400)."""

    default_status = status.HTTP_400_BAD_REQUEST
    default_code = "VALIDATION_ERROR"


class AuthenticationError(ServiceError):
    """Credentials missing or wrong (401)."""

    default_status = status.HTTP_401_UNAUTHORIZED
    default_code = "AUTHENTICATION_FAILED"


class AuthorizationError(ServiceError):
    """Caller does not own the resource.

    Answers 401 rather than 403 to stay wire-compatible with existing clients.
    """

    default_status = status.HTTP_401_UNAUTHORIZED
    default_code = "NOT_AUTHORIZED"


class NotFoundError(ServiceError):
    """Identity does not resolve to a stored document (404)."""

    default_status = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"


class UpstreamServiceError(ServiceError):
    """External generative-text call failed or is not configured (500)."""

    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = "UPSTREAM_SERVICE_ERROR"
