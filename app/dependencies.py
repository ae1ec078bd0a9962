"""Authentication dependencies and cookie helpers for FastAPI routes."""

from fastapi import Depends, Request, Response
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db
from app.errors import AuthFailure
from app.models.user import User
from app.services.auth import Actor
from app.services.jwt import get_jwt_service

ACCESS_COOKIE_NAME = "accessToken"
REFRESH_COOKIE_NAME = "refreshToken"
ACCESS_COOKIE_MAX_AGE = 24 * 60 * 60  # 1 day
REFRESH_COOKIE_MAX_AGE = 7 * 24 * 60 * 60  # 7 days


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
) -> Actor:
    """Extract and validate user from Bearer token or cookie. Raises 401 if invalid."""
    token: str | None = None

    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        token = auth_header[7:]

    if not token:
        token = request.cookies.get(ACCESS_COOKIE_NAME)

    if not token:
        raise AuthFailure("Not authenticated")

    user_id = get_jwt_service().verify_access_token(token)
    if user_id is None:
        raise AuthFailure("Invalid or expired token")

    user = db.get(User, user_id)
    if not user:
        raise AuthFailure("Auth Failed")

    return Actor(user_id=user.id, email=user.email, role=user.role)


def set_auth_cookies(response: Response, access_token: str, refresh_token: str) -> None:
    """Set the access and refresh token cookies."""
    secure = get_settings().is_production
    response.set_cookie(
        key=ACCESS_COOKIE_NAME,
        value=access_token,
        httponly=True,
        samesite="lax",
        secure=secure,
        max_age=ACCESS_COOKIE_MAX_AGE,
    )
    response.set_cookie(
        key=REFRESH_COOKIE_NAME,
        value=refresh_token,
        httponly=True,
        samesite="lax",
        secure=secure,
        max_age=REFRESH_COOKIE_MAX_AGE,
    )


def clear_auth_cookies(response: Response) -> None:
    """Clear both authentication cookies."""
    response.delete_cookie(key=ACCESS_COOKIE_NAME)
    response.delete_cookie(key=REFRESH_COOKIE_NAME)
