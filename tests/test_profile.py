"""Tests for profile read, update and account removal."""

import io
from pathlib import Path

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.config import get_settings
from app.models.token import Token
from app.models.user import User


class TestGetProfile:
    """Tests for the caller's own profile."""

    def test_get_profile(self, client: TestClient, test_user: dict):
        response = client.get("/api/v1/auth/me", headers=test_user["headers"])
        assert response.status_code == 200
        user = response.json()["data"]["user"]
        assert user["id"] == test_user["user_id"]
        assert user["email"] == "test@example.com"
        assert user["name"] == "Test User"
        assert "passwordHash" not in user
        assert "password" not in user
        assert "confirmPassword" not in user

    def test_get_profile_from_cookie(self, client: TestClient, test_user: dict):
        client.cookies.set("accessToken", test_user["access_token"])
        response = client.get("/api/v1/auth/me")
        assert response.status_code == 200

    def test_get_profile_requires_auth(self, client: TestClient):
        response = client.get("/api/v1/auth/me")
        assert response.status_code == 401
        assert response.json()["error"] is True

    def test_get_profile_invalid_token(self, client: TestClient):
        response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer invalid.token.here"})
        assert response.status_code == 401

    def test_refresh_token_is_not_an_access_token(self, client: TestClient, test_user: dict):
        login = client.post("/api/v1/auth/login", json={"email": "test@example.com", "password": "password123"})
        refresh = login.json()["data"]["user"]["refreshToken"]
        client.cookies.clear()
        response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {refresh}"})
        assert response.status_code == 401


class TestUpdateProfile:
    """Tests for the truthy-overwrite profile merge."""

    def _update(self, client: TestClient, user: dict, target_id: int, data: dict, files: dict | None = None):
        return client.patch(f"/api/v1/auth/update/{target_id}", data=data, files=files, headers=user["headers"])

    def test_empty_name_keeps_stored_value(self, client: TestClient, test_user: dict, db_session: Session):
        response = self._update(client, test_user, test_user["user_id"], {"name": ""})
        assert response.status_code == 200
        assert response.json()["data"]["user"]["name"] == "Test User"
        assert db_session.get(User, test_user["user_id"]).name == "Test User"

    def test_non_empty_name_replaces(self, client: TestClient, test_user: dict, db_session: Session):
        response = self._update(client, test_user, test_user["user_id"], {"name": "Renamed"})
        assert response.status_code == 200
        assert response.json()["data"]["user"]["name"] == "Renamed"
        user = db_session.get(User, test_user["user_id"])
        db_session.refresh(user)
        assert user.name == "Renamed"

    def test_camel_case_fields(self, client: TestClient, test_user: dict):
        response = self._update(
            client,
            test_user,
            test_user["user_id"],
            {"firstName": "Ada", "jobTitle": "Engineer", "favoriteAnimal": "Owl", "lastName": ""},
        )
        assert response.status_code == 200
        user = response.json()["data"]["user"]
        assert user["firstName"] == "Ada"
        assert user["jobTitle"] == "Engineer"
        assert user["favoriteAnimal"] == "Owl"
        assert user["lastName"] is None

    def test_false_accept_terms_does_not_clear(self, client: TestClient, test_user: dict):
        response = self._update(client, test_user, test_user["user_id"], {"acceptTerms": "false"})
        assert response.status_code == 200
        assert response.json()["data"]["user"]["acceptTerms"] is True

    def test_update_email(self, client: TestClient, test_user: dict):
        response = self._update(client, test_user, test_user["user_id"], {"email": "New@Example.com"})
        assert response.status_code == 200
        assert response.json()["data"]["user"]["email"] == "new@example.com"

    def test_update_own_email_different_case(self, client: TestClient, test_user: dict):
        response = self._update(client, test_user, test_user["user_id"], {"email": "TEST@example.com"})
        assert response.status_code == 200

    def test_update_email_taken(self, client: TestClient, test_user: dict, other_user: dict):
        response = self._update(client, test_user, test_user["user_id"], {"email": "OTHER@example.com"})
        assert response.status_code == 422
        assert "already exists" in response.json()["message"]

    def test_blank_email_keeps_stored_value(self, client: TestClient, test_user: dict, db_session: Session):
        response = self._update(client, test_user, test_user["user_id"], {"email": "   "})
        assert response.status_code == 200
        assert response.json()["data"]["user"]["email"] == "test@example.com"
        db_session.expire_all()
        assert db_session.get(User, test_user["user_id"]).email == "test@example.com"

    def test_invalid_email_rejected(self, client: TestClient, test_user: dict, db_session: Session):
        response = self._update(client, test_user, test_user["user_id"], {"email": "not-an-email"})
        assert response.status_code == 422
        assert response.json()["success"] is False
        db_session.expire_all()
        assert db_session.get(User, test_user["user_id"]).email == "test@example.com"

    def test_failed_update_discards_uploaded_image(self, client: TestClient, test_user: dict, other_user: dict):
        """An image sent with a taken email is not left behind on disk."""
        response = self._update(
            client,
            test_user,
            test_user["user_id"],
            {"email": "other@example.com"},
            files={"profileImage": ("me.png", io.BytesIO(b"\x89PNG" + b"\x00" * 64), "image/png")},
        )
        assert response.status_code == 422
        users_dir = Path(get_settings().UPLOAD_DIR) / "users"
        assert not users_dir.exists() or list(users_dir.iterdir()) == []

    def test_update_other_user_forbidden(self, client: TestClient, test_user: dict, other_user: dict):
        response = self._update(client, test_user, other_user["user_id"], {"name": "Hacked"})
        assert response.status_code == 403

    def test_admin_can_update_other_user(self, client: TestClient, admin_user: dict, other_user: dict):
        response = self._update(client, admin_user, other_user["user_id"], {"name": "Fixed", "role": "admin"})
        assert response.status_code == 200
        user = response.json()["data"]["user"]
        assert user["name"] == "Fixed"
        assert user["role"] == "admin"

    def test_user_cannot_change_own_role(self, client: TestClient, test_user: dict):
        response = self._update(client, test_user, test_user["user_id"], {"role": "admin", "status": "pending"})
        assert response.status_code == 200
        user = response.json()["data"]["user"]
        assert user["role"] == "user"
        assert user["status"] == "active"

    def test_update_missing_user(self, client: TestClient, admin_user: dict):
        response = self._update(client, admin_user, 999, {"name": "Ghost"})
        assert response.status_code == 400

    def test_update_bad_id(self, client: TestClient, test_user: dict):
        response = self._update(client, test_user, "abc", {"name": "x"})  # type: ignore[arg-type]
        assert response.status_code == 422

    def test_update_requires_auth(self, client: TestClient, test_user: dict):
        response = client.patch(f"/api/v1/auth/update/{test_user['user_id']}", data={"name": "x"})
        assert response.status_code == 401

    def test_upload_profile_image(self, client: TestClient, test_user: dict):
        response = self._update(
            client,
            test_user,
            test_user["user_id"],
            {"name": ""},
            files={"profileImage": ("me.png", io.BytesIO(b"\x89PNG" + b"\x00" * 256), "image/png")},
        )
        assert response.status_code == 200
        image = response.json()["data"]["user"]["profileImage"]
        assert image.startswith("/static/uploads/users/")
        assert image.endswith(".png")

        stored = Path(get_settings().UPLOAD_DIR) / "users" / image.rsplit("/", 1)[-1]
        assert stored.exists()
        assert stored.stat().st_size == 260

    def test_upload_rejects_non_image(self, client: TestClient, test_user: dict):
        response = self._update(
            client,
            test_user,
            test_user["user_id"],
            {},
            files={"profileImage": ("script.exe", io.BytesIO(b"\x00" * 10), "application/octet-stream")},
        )
        assert response.status_code == 400
        assert "Unsupported file type" in response.json()["message"]


class TestRemoveUser:
    """Tests for hard deletion."""

    def test_remove_self(self, client: TestClient, test_user: dict, db_session: Session):
        client.post("/api/v1/auth/login", json={"email": "test@example.com", "password": "password123"})
        response = client.delete(f"/api/v1/auth/remove/{test_user['user_id']}", headers=test_user["headers"])
        assert response.status_code == 200
        db_session.expire_all()
        assert db_session.get(User, test_user["user_id"]) is None
        assert db_session.query(Token).filter(Token.user_id == test_user["user_id"]).count() == 0

    def test_remove_other_user_forbidden(self, client: TestClient, test_user: dict, other_user: dict):
        response = client.delete(f"/api/v1/auth/remove/{other_user['user_id']}", headers=test_user["headers"])
        assert response.status_code == 403

    def test_admin_removes_other_user(self, client: TestClient, admin_user: dict, other_user: dict, db_session: Session):
        response = client.delete(f"/api/v1/auth/remove/{other_user['user_id']}", headers=admin_user["headers"])
        assert response.status_code == 200
        db_session.expire_all()
        assert db_session.get(User, other_user["user_id"]) is None

    def test_remove_missing_user(self, client: TestClient, admin_user: dict):
        response = client.delete("/api/v1/auth/remove/999", headers=admin_user["headers"])
        assert response.status_code == 400

    def test_remove_bad_id(self, client: TestClient, admin_user: dict):
        response = client.delete("/api/v1/auth/remove/abc", headers=admin_user["headers"])
        assert response.status_code == 422
