"""
Access token service.

Issues and validates the HS256 bearer tokens that identify the caller of
every scheduling and meeting endpoint.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import HTTPException, status
from jose import JWTError, jwt

from app.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)


class TokenService:
    """
    Signs and checks access tokens with the configured secret.

    Claims:
        sub: user id
        role: caller role (informational)
        email: caller e-mail, used as default display name in meetings
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

        self.SECRET_KEY = self.settings.JWT_SECRET_KEY
        self.ALGORITHM = self.settings.JWT_ALGORITHM
        self.ACCESS_TOKEN_EXPIRE_MINUTES = self.settings.ACCESS_TOKEN_EXPIRE_MINUTES

    def create_access_token(self, data: dict[str, Any], expires_delta: timedelta | None = None) -> str:
        """
        Sign an access token.

        Args:
            data: Claims to include (at least ``sub``)
            expires_delta: Lifetime override

        Returns:
            Encoded JWT
        """
        to_encode = data.copy()
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self.ACCESS_TOKEN_EXPIRE_MINUTES))
        to_encode.update({"exp": expire, "iat": now, "token_type": "access"})
        return jwt.encode(to_encode, self.SECRET_KEY, algorithm=self.ALGORITHM)

    def decode_token(self, token: str) -> dict[str, Any]:
        """
        Decode and verify a token.

        Raises:
            HTTPException: 401 when the signature or expiry is invalid
        """
        try:
            return jwt.decode(token, self.SECRET_KEY, algorithms=[self.ALGORITHM])
        except JWTError as e:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid or expired token",
                headers={"WWW-Authenticate": "Bearer"},
            ) from e

    def verify_token(self, token: str) -> bool:
        """True when the token decodes and names a subject."""
        try:
            payload = self.decode_token(token)
        except HTTPException:
            return False
        if not payload.get("sub"):
            logger.warning("Token without subject rejected")
            return False
        return payload.get("token_type", "access") == "access"
