"""
Gemini Custom Exceptions

Error types for the generative-text integration.
"""

from typing import Any, Optional


class GenerativeServiceError(Exception):
    """Base exception for all generative-text failures"""

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


class GenerativeConfigError(GenerativeServiceError):
    """Raised when the service has no API key configured"""

    def __init__(self, message: str = "GEMINI_API_KEY is not configured"):
        super().__init__(message)


class GenerativeTimeoutError(GenerativeServiceError):
    """Raised when the generation request times out"""

    def __init__(self, message: str = "Generation request timed out"):
        super().__init__(message, status_code=408)


class EmptyGenerationError(GenerativeServiceError):
    """Raised when the service answers without any candidate text"""

    def __init__(
        self,
        message: str = "Generation returned no text",
        response: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, response=response)
