"""
Access Token Service

Issues and verifies the signed bearer tokens handed out on register/login.
Tokens are HS256 JWTs whose subject is the user id; the rest of the
application treats them as opaque strings.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt

from .exceptions import InvalidTokenError, TokenExpiredError, TokenIssueError

logger = logging.getLogger(__name__)


class AccessTokenService:
    """
    Signs and verifies access tokens.

    Example:
        >>> tokens = AccessTokenService(secret="s3cret")
        >>> token = tokens.issue_token("user-123", email="a@x.com")
        >>> tokens.verify_token(token)["id"]
        'user-123'
    """

    def __init__(self, secret: str, algorithm: str = "HS256", expire_hours: int = 24):
        """
        Args:
            secret: Signing secret
            algorithm: JWT algorithm (default: HS256)
            expire_hours: Token lifetime in hours (default: 24)
        """
        self.secret = secret
        self.algorithm = algorithm
        self.expire_hours = expire_hours

    def issue_token(
        self,
        user_id: str,
        email: Optional[str] = None,
        role: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> str:
        """
        Issue an access token for a user.

        Args:
            user_id: Subject of the token
            email: Optional email claim
            role: Optional role claim
            now: Issue time (defaults to the current UTC time)

        Returns:
            Encoded token string

        Raises:
            TokenIssueError: If the token cannot be signed
        """
        issued_at = now or datetime.now(timezone.utc)
        payload: dict[str, Any] = {
            "sub": user_id,
            "iat": issued_at,
            "exp": issued_at + timedelta(hours=self.expire_hours),
        }
        if email:
            payload["email"] = email
        if role:
            payload["role"] = role

        try:
            token = jwt.encode(payload, self.secret, algorithm=self.algorithm)
        except (jwt.PyJWTError, NotImplementedError, TypeError) as e:
            logger.error(
                "Failed to sign access token",
                extra={"event": "token_issue_error", "error": str(e)},
            )
            raise TokenIssueError() from e

        logger.info(
            "Access token issued",
            extra={"event": "token_issued", "user_id": user_id},
        )
        return token

    def verify_token(self, token: str) -> dict[str, Any]:
        """
        Verify a token and return the identity it carries.

        Args:
            token: Encoded access token

        Returns:
            Identity dict with keys: id, email, role

        Raises:
            TokenExpiredError: If the token has expired
            InvalidTokenError: If the token is malformed, tampered or has no subject
        """
        try:
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError as e:
            logger.warning(
                "Token expired",
                extra={"event": "token_verification_failed", "reason": "expired"},
            )
            raise TokenExpiredError() from e
        except jwt.InvalidTokenError as e:
            logger.warning(
                "Invalid token",
                extra={"event": "token_verification_failed", "reason": "invalid"},
            )
            raise InvalidTokenError() from e

        user_id = claims.get("sub")
        if not user_id:
            raise InvalidTokenError("Token has no subject")

        return {
            "id": user_id,
            "email": claims.get("email"),
            "role": claims.get("role"),
        }
