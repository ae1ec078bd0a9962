"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import get_settings
from app.database import Base, get_db
from app.models.token import Token  # noqa: F401
from app.models.user import ROLE_ADMIN, STATUS_ACTIVE, User
from app.services.jwt import get_jwt_service
from app.services.mailer import EmailService, get_email_service


class RecordingEmailService(EmailService):
    """Email service that keeps rendered messages in memory instead of sending them."""

    def __init__(self) -> None:
        super().__init__()
        self.sent: list[dict] = []

    async def send(self, kind: str, to_email: str, name: str | None, link: str) -> None:
        subject, body = self.render(kind, name, link)
        self.sent.append({"kind": kind, "to": to_email, "name": name, "link": link, "subject": subject, "body": body})


@pytest.fixture(name="db_session")
def db_session_fixture():
    """Create an in-memory SQLite database for tests."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="outbox")
def outbox_fixture() -> RecordingEmailService:
    return RecordingEmailService()


@pytest.fixture(name="client")
def client_fixture(db_session: Session, outbox: RecordingEmailService, tmp_path, monkeypatch):
    """Create a test client with overridden DB and email dependencies."""
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    monkeypatch.setattr(get_settings(), "UPLOAD_DIR", str(tmp_path / "uploads"))
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_service] = lambda: outbox
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _create_user(db: Session, email: str, password: str, name: str, role: str = "user") -> User:
    user = User(email=email, name=name, role=role, is_verified=True, status=STATUS_ACTIVE, accept_terms=True)
    user.set_password(password)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _user_dict(user: User, password: str) -> dict:
    pair = get_jwt_service().create_token_pair(user.id)
    return {
        "user_id": user.id,
        "email": user.email,
        "name": user.name,
        "password": password,
        "access_token": pair.access_token,
        "headers": {"Authorization": f"Bearer {pair.access_token}"},
    }


@pytest.fixture(name="test_user")
def test_user_fixture(db_session: Session) -> dict:
    """A verified, active user plus a valid access token."""
    user = _create_user(db_session, "test@example.com", "password123", "Test User")
    return _user_dict(user, "password123")


@pytest.fixture(name="other_user")
def other_user_fixture(db_session: Session) -> dict:
    user = _create_user(db_session, "other@example.com", "password456", "Other User")
    return _user_dict(user, "password456")


@pytest.fixture(name="admin_user")
def admin_user_fixture(db_session: Session) -> dict:
    user = _create_user(db_session, "admin@example.com", "adminpass1", "Admin User", role=ROLE_ADMIN)
    return _user_dict(user, "adminpass1")
