"""Pydantic schemas for authentication endpoints."""

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, EmailStr, field_validator, model_validator
from pydantic.alias_generators import to_camel

T = TypeVar("T")

CAMEL_CONFIG = {"alias_generator": to_camel, "populate_by_name": True}


class ApiResponse(BaseModel, Generic[T]):
    """Envelope shared by every endpoint."""

    data: T | None = None
    success: bool = True
    error: bool = False
    message: str
    status: int


class SignupRequest(BaseModel):
    email: EmailStr
    password: str
    confirm_password: str
    name: str | None = None
    accept_terms: bool = False

    model_config = CAMEL_CONFIG

    @field_validator("password")
    @classmethod
    def password_length(cls, value: str) -> str:
        if len(value) < 6:
            raise ValueError("Password must be at least 6 characters")
        return value

    @model_validator(mode="after")
    def passwords_match(self) -> "SignupRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RefreshTokenRequest(BaseModel):
    refresh_token: str

    model_config = CAMEL_CONFIG


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    password: str
    confirm_password: str

    model_config = CAMEL_CONFIG

    @field_validator("password")
    @classmethod
    def password_length(cls, value: str) -> str:
        if len(value) < 6:
            raise ValueError("Password must be at least 6 characters")
        return value

    @model_validator(mode="after")
    def passwords_match(self) -> "ResetPasswordRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class ProfileUpdate(BaseModel):
    """Submitted profile fields. None or empty values leave the stored value untouched."""

    name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: EmailStr | None = None
    date_of_birth: str | None = None
    gender: str | None = None
    family_name: str | None = None
    mobile_number: str | None = None
    status: str | None = None
    role: str | None = None
    bio: str | None = None
    accept_terms: bool | None = None
    company_name: str | None = None
    nationality: str | None = None
    address: str | None = None
    favorite_animal: str | None = None
    job_title: str | None = None

    model_config = CAMEL_CONFIG

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_absent(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip() or None
        return value


class TokenData(BaseModel):
    access_token: str
    refresh_token: str

    model_config = CAMEL_CONFIG


class SignupData(TokenData):
    verify_email_link: str


class UserSummary(BaseModel):
    """User projection returned by login."""

    id: int
    email: str
    name: str | None
    role: str
    is_verified: bool
    is_deleted: bool
    status: str

    model_config = {**CAMEL_CONFIG, "from_attributes": True}


class LoginUser(UserSummary):
    access_token: str
    refresh_token: str


class UserProfile(BaseModel):
    """Full user projection without password fields."""

    id: int
    email: str
    name: str | None
    first_name: str | None
    last_name: str | None
    family_name: str | None
    date_of_birth: str | None
    gender: str | None
    mobile_number: str | None
    bio: str | None
    company_name: str | None
    nationality: str | None
    address: str | None
    job_title: str | None
    favorite_animal: str | None
    profile_image: str | None
    role: str
    status: str
    is_verified: bool
    is_deleted: bool
    accept_terms: bool
    created_at: datetime
    updated_at: datetime

    model_config = {**CAMEL_CONFIG, "from_attributes": True}


class UserEnvelope(BaseModel, Generic[T]):
    """Wraps payloads as {"user": ...}."""

    user: T


class ResetLinkData(BaseModel):
    reset_password_token: str

    model_config = CAMEL_CONFIG


class LoginLinkData(BaseModel):
    login_link: str

    model_config = CAMEL_CONFIG


def error_body(message: str, status: int, data: Any = None) -> dict[str, Any]:
    """Envelope for a failed request."""
    return {"data": data, "success": False, "error": True, "message": message, "status": status}
