"""Configuration settings for the auth service."""

import os
import secrets
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./auth_service.db")

    # JWT
    ACCESS_TOKEN_SECRET_KEY: str = os.getenv("ACCESS_TOKEN_SECRET_KEY", secrets.token_urlsafe(32))
    REFRESH_TOKEN_SECRET_KEY: str = os.getenv("REFRESH_TOKEN_SECRET_KEY", secrets.token_urlsafe(32))
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER: str = os.getenv("JWT_ISSUER", "auth-service")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
    REFRESH_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("REFRESH_TOKEN_EXPIRE_MINUTES", str(7 * 24 * 60)))
    RESET_PASSWORD_LINK_EXPIRE_MINUTES: int = int(os.getenv("RESET_PASSWORD_LINK_EXPIRE_MINUTES", "15"))

    # Links embedded in emails
    CLIENT_URL: str = os.getenv("CLIENT_URL", "http://localhost:3000").rstrip("/")

    # Signups with these addresses get the admin role
    ADMIN_EMAILS: list[str] = [e.strip().lower() for e in os.getenv("ADMIN_EMAILS", "").split(",") if e.strip()]

    # Upload
    UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "uploads")
    MAX_UPLOAD_SIZE_MB: int = int(os.getenv("MAX_UPLOAD_SIZE_MB", "5"))

    # Email
    EMAIL_BACKEND: str = os.getenv("EMAIL_BACKEND", "console")
    EMAIL_FROM: str = os.getenv("EMAIL_FROM", "no-reply@localhost")
    SMTP_HOST: str = os.getenv("SMTP_HOST", "localhost")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME: str | None = os.getenv("SMTP_USERNAME") or None
    SMTP_PASSWORD: str | None = os.getenv("SMTP_PASSWORD") or None
    SMTP_USE_TLS: bool = os.getenv("SMTP_USE_TLS", "true").lower() == "true"

    # Application
    APP_ENV: str = os.getenv("APP_ENV", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    def validate(self) -> list[str]:
        """Validate settings and return list of warnings."""
        errors = []
        if not os.getenv("ACCESS_TOKEN_SECRET_KEY") or not os.getenv("REFRESH_TOKEN_SECRET_KEY"):
            errors.append("Token secret keys are not set - using auto-generated keys (not persistent across restarts)")
        if self.ACCESS_TOKEN_SECRET_KEY == self.REFRESH_TOKEN_SECRET_KEY:
            errors.append("ACCESS_TOKEN_SECRET_KEY and REFRESH_TOKEN_SECRET_KEY should differ")
        if self.EMAIL_BACKEND not in ("console", "smtp"):
            errors.append(f"Unknown EMAIL_BACKEND '{self.EMAIL_BACKEND}' - falling back to console")
        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
