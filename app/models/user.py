"""User model."""

from datetime import datetime, timezone

import bcrypt
from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from app.database import Base

ROLE_USER = "user"
ROLE_ADMIN = "admin"

STATUS_PENDING = "pending"
STATUS_ACTIVE = "active"


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
    """Application user."""

    __tablename__ = "user"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(256), unique=True, nullable=False, index=True)
    password_hash = Column(String(256), nullable=False)

    name = Column(String(256), nullable=True)
    first_name = Column(String(128), nullable=True)
    last_name = Column(String(128), nullable=True)
    family_name = Column(String(128), nullable=True)
    date_of_birth = Column(String(32), nullable=True)
    gender = Column(String(32), nullable=True)
    mobile_number = Column(String(32), nullable=True)
    bio = Column(Text, nullable=True)
    company_name = Column(String(256), nullable=True)
    nationality = Column(String(128), nullable=True)
    address = Column(String(512), nullable=True)
    job_title = Column(String(256), nullable=True)
    favorite_animal = Column(String(128), nullable=True)
    profile_image = Column(String(512), nullable=True)

    role = Column(String(16), nullable=False, default=ROLE_USER)
    status = Column(String(16), nullable=False, default=STATUS_PENDING)
    is_verified = Column(Boolean, nullable=False, default=False)
    is_deleted = Column(Boolean, nullable=False, default=False)
    accept_terms = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def set_password(self, password: str) -> None:
        """Hash and store a new password."""
        self.password_hash = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")

    def check_password(self, password: str) -> bool:
        """Compare a submitted password against the stored hash."""
        return bcrypt.checkpw(password.encode("utf-8"), self.password_hash.encode("utf-8"))
