"""Service errors rendered as envelope responses by the exception handlers in main.py."""

from typing import Any


class AuthServiceError(Exception):
    """Base error; carries the HTTP status it maps to and optional envelope data."""

    status_code = 500

    def __init__(self, message: str, data: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.data = data


class ValidationFailure(AuthServiceError):
    """Bad id, duplicate email or otherwise malformed request."""

    status_code = 422


class BadRequest(AuthServiceError):
    status_code = 400


class AuthFailure(AuthServiceError):
    """Bad credentials, invalid or expired token, unverified account."""

    status_code = 401


class AuthorizationFailure(AuthServiceError):
    """Acting user is neither the resource owner nor an admin."""

    status_code = 403


class NotFound(AuthServiceError):
    status_code = 404


class InternalFailure(AuthServiceError):
    status_code = 500
