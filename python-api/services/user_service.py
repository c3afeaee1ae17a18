"""
User Service

Registration, login and profile management backed by the ZeroDB ``users``
table. Passwords are stored as bcrypt hashes and the hash never leaves this
module; callers get access tokens or sanitized profiles.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from fastapi import status as http_status
from integrations.auth.exceptions import AuthError, format_error_response
from integrations.auth.passwords import (
    MAX_PASSWORD_BYTES,
    hash_password,
    password_too_long,
    verify_password,
)
from integrations.auth.tokens import AccessTokenService
from integrations.zerodb.client import ZeroDBClient
from integrations.zerodb.exceptions import (
    ZeroDBError,
    ZeroDBNotFound,
    ZeroDBTimeoutError,
)
from services.errors import AuthenticationError, BadRequestError, NotFoundError

# Configure logger
logger = logging.getLogger(__name__)

USERS_TABLE = "users"
CHALLENGES_TABLE = "challenges"

PROFILE_FIELDS = ("name", "expertise", "organization", "preferences")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def default_preferences() -> Dict[str, Any]:
    return {"notifications": {"email": True, "platform": True}, "language": "en"}


def _sanitize(user: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in user.items() if key != "password_hash"}


def _issue_token(token_service: AccessTokenService, user: Dict[str, Any]) -> str:
    try:
        return token_service.issue_token(
            user["user_id"], email=user.get("email"), role=user.get("role")
        )
    except AuthError as e:
        raise HTTPException(status_code=e.status_code, detail=format_error_response(e))


def _handle_store_error(e: Exception, action: str) -> HTTPException:
    if isinstance(e, ZeroDBTimeoutError):
        logger.error(f"Timeout during {action}: {str(e)}")
        return HTTPException(
            status_code=http_status.HTTP_504_GATEWAY_TIMEOUT,
            detail="Request timed out. Please try again.",
        )
    if isinstance(e, (ZeroDBError, ZeroDBNotFound)):
        logger.error(f"ZeroDB error during {action}: {str(e)}", exc_info=True)
    else:
        logger.error(f"Unexpected error during {action}: {str(e)}", exc_info=True)
    return HTTPException(
        status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}. Please contact support.",
    )


async def _find_user(zerodb_client: ZeroDBClient, **filters: Any) -> Optional[Dict[str, Any]]:
    rows = await zerodb_client.tables.query_rows(USERS_TABLE, filter=filters)
    return rows[0] if rows else None


async def register_user(
    zerodb_client: ZeroDBClient,
    token_service: AccessTokenService,
    name: str,
    email: str,
    password: str,
    role: str = "participant",
    expertise: Optional[List[str]] = None,
    organization: Optional[Dict[str, Any]] = None,
    bcrypt_rounds: int = 10,
) -> str:
    """
    Register a new user and return an access token.

    Args:
        zerodb_client: ZeroDB client instance
        token_service: Access token issuer
        name: Display name
        email: Email address (unique, case-insensitive)
        password: Plain-text password (at least 6 characters)
        role: Platform role (default: participant)
        expertise: Optional list of challenge types
        organization: Optional ``{name, role}``
        bcrypt_rounds: bcrypt cost factor

    Returns:
        Access token for the new user

    Raises:
        BadRequestError: 400 if a field is missing or the email is taken
        HTTPException: 500 for database errors
        HTTPException: 504 for timeout errors
    """
    try:
        if not name or not name.strip() or not email or not password:
            raise BadRequestError("Please provide all required fields")
        if len(password) < 6:
            raise BadRequestError("Password must be at least 6 characters long")
        if password_too_long(password):
            raise BadRequestError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

        email = normalize_email(email)
        if await _find_user(zerodb_client, email=email):
            logger.warning(f"Registration rejected: email already registered ({email})")
            raise BadRequestError("User already exists", error_code="USER_EXISTS")

        user_row = {
            "user_id": str(uuid.uuid4()),
            "name": name.strip(),
            "email": email,
            "password_hash": hash_password(password, rounds=bcrypt_rounds),
            "role": role,
            "expertise": list(expertise or []),
            "organization": organization,
            "preferences": default_preferences(),
            "created_challenges": [],
            "participating_challenges": [],
            "created_at": datetime.now(timezone.utc).isoformat(),
        }

        logger.info(f"Registering user {user_row['user_id']}")
        await zerodb_client.tables.insert_rows(USERS_TABLE, rows=[user_row])

        return _issue_token(token_service, user_row)

    except HTTPException:
        raise

    except Exception as e:
        raise _handle_store_error(e, "register user")


async def authenticate_user(
    zerodb_client: ZeroDBClient,
    token_service: AccessTokenService,
    email: str,
    password: str,
) -> str:
    """
    Check credentials and return an access token.

    Unknown email and wrong password both answer 401 "Invalid credentials".

    Raises:
        BadRequestError: 400 if email or password is missing
        AuthenticationError: 401 for bad credentials
        HTTPException: 500 for database errors
        HTTPException: 504 for timeout errors
    """
    try:
        if not email or not password:
            raise BadRequestError("Please provide email and password")

        user = await _find_user(zerodb_client, email=normalize_email(email))
        if not user or not verify_password(password, user.get("password_hash", "")):
            logger.warning(
                "Login failed",
                extra={"event": "auth_failed", "method": "password"},
            )
            raise AuthenticationError("Invalid credentials")

        logger.info(
            "Login successful",
            extra={"event": "auth_success", "method": "password", "user_id": user["user_id"]},
        )
        return _issue_token(token_service, user)

    except HTTPException:
        raise

    except Exception as e:
        raise _handle_store_error(e, "log in")


async def _challenge_summary(zerodb_client: ZeroDBClient, challenge_id: str) -> Any:
    rows = await zerodb_client.tables.query_rows(
        CHALLENGES_TABLE, filter={"challenge_id": challenge_id}
    )
    if not rows:
        return challenge_id
    challenge = rows[0]
    return {
        "challenge_id": challenge_id,
        "title": challenge.get("title"),
        "status": challenge.get("status"),
        "challenge_type": challenge.get("challenge_type"),
    }


async def get_profile(zerodb_client: ZeroDBClient, user_id: str) -> Dict[str, Any]:
    """
    Get a user's profile with created and participating challenges populated.

    Raises:
        NotFoundError: 404 if the user does not exist
        HTTPException: 500 for database errors
        HTTPException: 504 for timeout errors
    """
    try:
        user = await _find_user(zerodb_client, user_id=user_id)
        if not user:
            raise NotFoundError("User not found")

        profile = _sanitize(user)
        profile["created_challenges"] = [
            await _challenge_summary(zerodb_client, challenge_id)
            for challenge_id in user.get("created_challenges") or []
        ]
        profile["participating_challenges"] = [
            {
                "challenge": await _challenge_summary(zerodb_client, entry.get("challenge_id")),
                "role": entry.get("role", "participant"),
                "joined_at": entry.get("joined_at"),
            }
            for entry in user.get("participating_challenges") or []
        ]
        return profile

    except HTTPException:
        raise

    except Exception as e:
        raise _handle_store_error(e, "retrieve profile")


async def update_profile(
    zerodb_client: ZeroDBClient,
    user_id: str,
    update_data: Dict[str, Any],
) -> Dict[str, Any]:
    """
    Update name, expertise, organization and/or preferences.

    Only supplied (non-None) fields change. Returns the refreshed profile.

    Raises:
        NotFoundError: 404 if the user does not exist
        HTTPException: 500 for database errors
        HTTPException: 504 for timeout errors
    """
    try:
        if not await _find_user(zerodb_client, user_id=user_id):
            raise NotFoundError("User not found")

        update_fields = {
            key: value
            for key, value in update_data.items()
            if key in PROFILE_FIELDS and value is not None
        }
        if update_fields:
            logger.info(f"Updating profile {user_id} with fields: {list(update_fields.keys())}")
            await zerodb_client.tables.update_rows(
                USERS_TABLE,
                filter={"user_id": user_id},
                update={"$set": update_fields},
            )

        return await get_profile(zerodb_client, user_id)

    except HTTPException:
        raise

    except Exception as e:
        raise _handle_store_error(e, "update profile")


async def list_reviewers(zerodb_client: ZeroDBClient) -> List[Dict[str, Any]]:
    """List users whose role is ``reviewer``."""
    try:
        rows = await zerodb_client.tables.query_rows(USERS_TABLE, filter={"role": "reviewer"})
        return [
            {
                "user_id": row["user_id"],
                "name": row.get("name"),
                "email": row.get("email"),
                "expertise": row.get("expertise", []),
                "organization": row.get("organization"),
            }
            for row in rows
        ]

    except HTTPException:
        raise

    except Exception as e:
        raise _handle_store_error(e, "list reviewers")
