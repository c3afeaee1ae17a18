"""
FastAPI Authentication Dependencies

Provides reusable dependencies for authenticating requests with the access
token issued on register/login, plus factories for the token service and the
AI text generator. The token travels in the header named by
``settings.AUTH_HEADER_NAME`` (``x-auth-token`` by default).
"""

import logging
from functools import lru_cache
from typing import Any, Optional

from config import settings
from fastapi import Depends, HTTPException, Request
from integrations.auth.exceptions import (
    AuthError,
    InvalidTokenError,
    MissingTokenError,
    TokenExpiredError,
    format_error_response,
)
from integrations.auth.tokens import AccessTokenService
from services.suggestion_service import GeminiTextGenerator, TextGenerator

# Configure structured logging
logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_token_service() -> AccessTokenService:
    """Access token service configured from settings (one per process)."""
    return AccessTokenService(
        secret=settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        expire_hours=settings.JWT_EXPIRE_HOURS,
    )


def get_text_generator() -> TextGenerator:
    """Text generator used by the AI suggestion routes."""
    return GeminiTextGenerator(
        api_key=settings.GEMINI_API_KEY,
        model=settings.GEMINI_MODEL,
        base_url=settings.GEMINI_BASE_URL,
        timeout=settings.GEMINI_TIMEOUT,
    )


def _extract_token(request: Request) -> Optional[str]:
    token = request.headers.get(settings.AUTH_HEADER_NAME)
    if token and token.strip():
        return token.strip()
    return None


async def get_current_user(
    request: Request,
    token_service: AccessTokenService = Depends(get_token_service),
) -> dict[str, Any]:
    """
    Get the current authenticated user from the access token header.

    Args:
        request: FastAPI request object (for accessing headers)
        token_service: Token verifier

    Returns:
        User dictionary containing:
            - id: User id
            - email: User email address (if present in the token)
            - role: User role (if present in the token)

    Raises:
        HTTPException: 401 with consistent error format for missing,
            malformed, tampered or expired tokens

    Example:
        >>> @router.post("/challenges")
        >>> async def create(user: dict = Depends(get_current_user)):
        ...     return {"creator": user["id"]}
    """
    try:
        token = _extract_token(request)
        if not token:
            raise MissingTokenError()

        logger.info(
            "Attempting authentication with access token",
            extra={"event": "auth_attempt", "method": "token", "path": request.url.path},
        )
        user = token_service.verify_token(token)
        logger.info(
            "Access token authentication successful",
            extra={"event": "auth_success", "method": "token", "user_id": user.get("id")},
        )
        return user

    except MissingTokenError as e:
        logger.warning(
            "Missing access token",
            extra={"event": "auth_failed", "reason": "missing_token", "path": request.url.path},
        )
        raise HTTPException(status_code=e.status_code, detail=format_error_response(e))

    except (InvalidTokenError, TokenExpiredError) as e:
        logger.warning(
            f"Token authentication failed: {e.error_code}",
            extra={"event": "auth_failed", "method": "token", "error_code": e.error_code},
        )
        raise HTTPException(status_code=e.status_code, detail=format_error_response(e))

    except AuthError as e:
        logger.error(
            f"Authentication error: {e.error_code}",
            extra={"event": "auth_error", "error_code": e.error_code, "status_code": e.status_code},
        )
        raise HTTPException(status_code=e.status_code, detail=format_error_response(e))
