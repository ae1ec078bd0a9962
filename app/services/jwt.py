"""JWT Token Service."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from app.config import get_settings


@dataclass
class TokenPair:
    """A freshly signed access/refresh token pair."""

    access_token: str
    refresh_token: str


class JWTService:
    """Handles JWT token creation and validation."""

    def __init__(self) -> None:
        settings = get_settings()
        self.access_secret = settings.ACCESS_TOKEN_SECRET_KEY
        self.refresh_secret = settings.REFRESH_TOKEN_SECRET_KEY
        self.algorithm = settings.JWT_ALGORITHM
        self.issuer = settings.JWT_ISSUER
        self.access_expire_minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES
        self.refresh_expire_minutes = settings.REFRESH_TOKEN_EXPIRE_MINUTES

    def create_token(self, user_id: int | str, secret: str, expire_minutes: int) -> str:
        """Sign a token for the given user. The audience is the user id itself."""
        now = datetime.now(timezone.utc)
        payload = {
            "userId": str(user_id),
            "sub": str(user_id),
            "iss": self.issuer,
            "aud": str(user_id),
            "iat": now,
            "exp": now + timedelta(minutes=expire_minutes),
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def create_token_pair(self, user_id: int | str, refresh_expire_minutes: int | None = None) -> TokenPair:
        """Sign an access token and a refresh token for the given user."""
        return TokenPair(
            access_token=self.create_token(user_id, self.access_secret, self.access_expire_minutes),
            refresh_token=self.create_token(
                user_id,
                self.refresh_secret,
                refresh_expire_minutes if refresh_expire_minutes is not None else self.refresh_expire_minutes,
            ),
        )

    def decode_token(self, token: str, secret: str) -> dict[str, Any] | None:
        """Decode and validate a token. Returns None if invalid.

        Checks signature, expiry, issuer, and that the audience matches the
        embedded user id.
        """
        try:
            claims = jwt.get_unverified_claims(token)
            audience = str(claims.get("userId"))
            return jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                audience=audience,
                issuer=self.issuer,
            )
        except JWTError:
            return None

    def verify_access_token(self, token: str) -> int | None:
        """Return the user id carried by a valid access token."""
        return self._user_id(self.decode_token(token, self.access_secret))

    def verify_refresh_token(self, token: str) -> int | None:
        """Return the user id carried by a valid refresh token."""
        return self._user_id(self.decode_token(token, self.refresh_secret))

    @staticmethod
    def _user_id(payload: dict[str, Any] | None) -> int | None:
        if not payload:
            return None
        try:
            return int(payload["userId"])
        except (KeyError, TypeError, ValueError):
            return None


_jwt_service: JWTService | None = None


def get_jwt_service() -> JWTService:
    """Get singleton JWT service instance."""
    global _jwt_service
    if _jwt_service is None:
        _jwt_service = JWTService()
    return _jwt_service
