"""
Tests for password hashing, sessions and the auth endpoints
"""

import base64

import pytest

from app.core.errors import AuthError, ConflictError
from app.core.security import (
    create_session_cookie,
    get_session_from_cookies,
    hash_password,
    is_valid_email,
    validate_password,
    verify_password,
)
from app.services.auth import INVALID_CREDENTIALS, AuthService
from conftest import USER_EMAIL, USER_PASSWORD, session_headers


class TestPasswordHashing:
    def test_hash_is_sha256_base64(self):
        hashed, salt = hash_password("Secret123")
        assert len(base64.b64decode(hashed)) == 32
        assert len(base64.b64decode(salt)) == 16

    def test_same_password_different_salt(self):
        assert hash_password("Secret123")[0] != hash_password("Secret123")[0]

    def test_fixed_salt_is_deterministic(self):
        assert hash_password("Secret123", b"0" * 16) == hash_password("Secret123", b"0" * 16)

    def test_verify(self):
        hashed, salt = hash_password("Secret123")
        assert verify_password("Secret123", hashed, salt) is True
        assert verify_password("secret123", hashed, salt) is False

    def test_verify_with_malformed_salt_is_false(self):
        hashed, _ = hash_password("Secret123")
        assert verify_password("Secret123", hashed, "***not base64***") is False


class TestValidation:
    @pytest.mark.parametrize(
        "password,error",
        [
            ("Ab1", "Password must be at least 8 characters long"),
            ("ABCDEFG1", "Password must contain at least one lowercase letter"),
            ("abcdefg1", "Password must contain at least one uppercase letter"),
            ("Abcdefgh", "Password must contain at least one number"),
        ],
    )
    def test_weak_passwords(self, password, error):
        check = validate_password(password)
        assert check.valid is False
        assert check.error == error

    def test_strong_password(self):
        assert validate_password("Secret123").valid is True

    def test_email_format(self):
        assert is_valid_email("a@b.co")
        assert not is_valid_email("no-at-sign")
        assert not is_valid_email("a b@c.d")


class TestSessionCookie:
    def test_cookie_attributes(self):
        cookie = create_session_cookie("abc")
        assert cookie.startswith("sessionId=abc;")
        for attr in ("HttpOnly", "SameSite=Strict", "Max-Age=86400", "Path=/"):
            assert attr in cookie

    def test_parse_cookie_header(self):
        assert get_session_from_cookies("theme=dark; sessionId=xyz; other=1") == "xyz"
        assert get_session_from_cookies("theme=dark") is None
        assert get_session_from_cookies(None) is None


class TestAuthService:
    def test_register_and_login(self, kv):
        auth = AuthService(kv)
        user = auth.register("a@example.com", "Secret123", "A")
        assert ":" in user.password_hash
        result = auth.login("a@example.com", "Secret123")
        assert result.user.user_id == user.user_id
        assert auth.get_user_from_session(result.session_id).user_id == user.user_id

    def test_duplicate_email(self, kv):
        auth = AuthService(kv)
        auth.register("a@example.com", "Secret123", "A")
        with pytest.raises(ConflictError):
            auth.register("a@example.com", "Other1234", "B")

    def test_login_errors_do_not_reveal_which_part_failed(self, kv):
        auth = AuthService(kv)
        auth.register("a@example.com", "Secret123", "A")
        with pytest.raises(AuthError) as unknown:
            auth.login("nobody@example.com", "Secret123")
        with pytest.raises(AuthError) as wrong:
            auth.login("a@example.com", "Wrong1234")
        assert unknown.value.message == wrong.value.message == INVALID_CREDENTIALS

    def test_logout_invalidates_session(self, kv):
        auth = AuthService(kv)
        auth.register("a@example.com", "Secret123", "A")
        result = auth.login("a@example.com", "Secret123")
        assert auth.logout(result.session_id) is True
        assert auth.get_user_from_session(result.session_id) is None

    def test_zero_ttl_login_session_never_resolves(self, kv):
        auth = AuthService(kv, session_ttl=0)
        auth.register("a@example.com", "Secret123", "A")
        result = auth.login("a@example.com", "Secret123")
        assert auth.get_user_from_session(result.session_id) is None


class TestAuthRoutes:
    def test_register_sets_cookie_and_me_works(self, client):
        response = client.post(
            "/api/auth/register",
            json={"email": "new@example.com", "password": "Secret123", "name": "New"},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["user"]["email"] == "new@example.com"
        assert "password_hash" not in body["user"]

        headers = session_headers(response, client)
        me = client.get("/api/auth/me", headers=headers)
        assert me.status_code == 200
        assert me.json()["user"]["name"] == "New"

    def test_register_duplicate_email(self, client, regular_user):
        response = client.post(
            "/api/auth/register",
            json={"email": USER_EMAIL, "password": "Secret123", "name": "Again"},
        )
        assert response.status_code == 409
        assert response.json() == {"success": False, "error": "User already exists with this email"}

    def test_register_weak_password(self, client):
        response = client.post(
            "/api/auth/register",
            json={"email": "new@example.com", "password": "password", "name": "New"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Password must contain at least one uppercase letter"

    def test_register_bad_email(self, client):
        response = client.post(
            "/api/auth/register",
            json={"email": "not-an-email", "password": "Secret123", "name": "New"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid email format"

    def test_login_failures_are_identical(self, client, regular_user):
        unknown = client.post("/api/auth/login", json={"email": "x@example.com", "password": USER_PASSWORD})
        wrong = client.post("/api/auth/login", json={"email": USER_EMAIL, "password": "Wrong1234"})
        assert unknown.status_code == wrong.status_code == 401
        assert unknown.json() == wrong.json() == {"success": False, "error": INVALID_CREDENTIALS}

    def test_me_without_cookie(self, client):
        response = client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json()["error"] == "No session found"

    def test_me_with_unknown_session(self, client):
        response = client.get("/api/auth/me", headers={"Cookie": "sessionId=bogus"})
        assert response.status_code == 401
        assert response.json()["error"] == "Invalid session"

    def test_logout_clears_cookie_and_session(self, client, user_headers):
        response = client.post("/api/auth/logout", headers=user_headers)
        assert response.status_code == 200
        assert "Max-Age=0" in response.headers["set-cookie"]
        assert client.get("/api/auth/me", headers=user_headers).status_code == 401

    def test_unknown_body_field_rejected(self, client):
        response = client.post(
            "/api/auth/login",
            json={"email": USER_EMAIL, "password": USER_PASSWORD, "remember": True},
        )
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_login_with_control_character_email(self, client, regular_user):
        response = client.post("/api/auth/login", json={"email": "a\u001fb@x.io", "password": "Whatever1"})
        assert response.status_code == 401
        assert response.json() == {"success": False, "error": INVALID_CREDENTIALS}

    def test_register_with_control_character_email(self, client):
        response = client.post(
            "/api/auth/register",
            json={"email": "a\u001fb@x.io", "password": "Secret123", "name": "X"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid email format"
