"""Token record model."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from app.database import Base
from app.models.user import utcnow


class Token(Base):
    """The current access/refresh token pair issued to a user.

    One record per user; it is overwritten on every issuance and deleted when
    consumed by email verification, password reset or logout.
    """

    __tablename__ = "token"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    access_token = Column(String(1024), nullable=True)
    refresh_token = Column(String(1024), nullable=True, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
