"""JWT token creation and validation."""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from loguru import logger

DEFAULT_ACCESS_TOKEN_EXPIRE_MINUTES = 60


class JWTHandler:
    """Handles JWT token creation and validation.

    Tokens are issued elsewhere; `create_access_token` exists for operators
    and tests that need a token signed with the service secret.
    """

    def __init__(
        self,
        secret_key: Optional[str],
        algorithm: str = "HS256",
        access_token_expire_minutes: int = DEFAULT_ACCESS_TOKEN_EXPIRE_MINUTES,
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.access_token_expire_minutes = access_token_expire_minutes

        if not self.secret_key:
            logger.warning("JWT_SECRET_KEY not configured - admin routes will reject every token")

    @property
    def enabled(self) -> bool:
        return bool(self.secret_key)

    def create_access_token(self, user_id: str, email: Optional[str] = None, is_admin: bool = False) -> str:
        """
        Create a short-lived access token.

        Args:
            user_id: The user's unique identifier
            email: The user's email address
            is_admin: Grants access to the write routes

        Returns:
            Encoded JWT access token
        """
        if not self.enabled:
            raise ValueError("Cannot sign tokens without JWT_SECRET_KEY")
        now = datetime.now(timezone.utc)
        payload = {
            "sub": user_id,
            "email": email,
            "is_admin": is_admin,
            "type": "access",
            "exp": now + timedelta(minutes=self.access_token_expire_minutes),
            "iat": now,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def decode_token(self, token: str) -> Optional[dict]:
        """
        Decode and validate a JWT token.

        Args:
            token: The JWT token to decode

        Returns:
            Decoded payload if valid, None otherwise
        """
        if not self.enabled:
            return None
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            logger.info("Token has expired")
            return None
        except jwt.InvalidTokenError as e:
            logger.info(f"Invalid token: {e}")
            return None

    def validate_access_token(self, token: str) -> Optional[dict]:
        """Decode a token and ensure it is an access token with a subject."""
        payload = self.decode_token(token)
        if payload and payload.get("type") == "access" and payload.get("sub"):
            return payload
        return None
