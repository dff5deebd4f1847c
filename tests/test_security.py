"""
Tests for authentication and the route authorization table.

Tests cover:
- Registration and login
- Token validation (missing, malformed, expired, inactive user)
- First-match-wins role rules for each resource
"""

from datetime import timedelta

import pytest

from petfriendly_backend.middleware import ADMINS, AUTHENTICATED, PUBLIC, SUPER_ADMIN_ONLY, compile_pattern, resolve_requirement
from petfriendly_backend.security import create_access_token, decode_access_token, hash_password, verify_password


class TestPatterns:
    def test_single_star_matches_one_segment(self):
        pattern = compile_pattern("/api/v1/adoption-requests/*/cancel")
        assert pattern.match("/api/v1/adoption-requests/abc/cancel")
        assert not pattern.match("/api/v1/adoption-requests/a/b/cancel")

    def test_double_star_matches_prefix_and_below(self):
        pattern = compile_pattern("/api/v1/pets/**")
        assert pattern.match("/api/v1/pets")
        assert pattern.match("/api/v1/pets/123/status")
        assert not pattern.match("/api/v1/petsitters")


class TestAccessRules:
    """First matching rule decides the requirement."""

    @pytest.mark.parametrize(
        "method,path,expected",
        [
            ("POST", "/api/v1/auth/login", PUBLIC),
            ("GET", "/api/v1/pets/available", PUBLIC),
            ("HEAD", "/api/v1/pets/123", PUBLIC),
            ("POST", "/api/v1/pets", ADMINS),
            ("DELETE", "/api/v1/foundations/123", ADMINS),
            ("POST", "/api/v1/contact-messages", PUBLIC),
            ("GET", "/api/v1/contact-messages", ADMINS),
            ("POST", "/api/v1/users/register", PUBLIC),
            ("GET", "/api/v1/users/profile", AUTHENTICATED),
            ("GET", "/api/v1/users/1", SUPER_ADMIN_ONLY),
            ("POST", "/api/v1/adoption-requests", AUTHENTICATED),
            ("PUT", "/api/v1/adoption-requests/1/cancel", AUTHENTICATED),
            ("PUT", "/api/v1/adoption-requests/1/approve", ADMINS),
            ("GET", "/api/v1/adoption-requests/pet/1", ADMINS),
            ("GET", "/api/v1/adoption-requests/user/1", AUTHENTICATED),
            ("DELETE", "/api/v1/adoption-requests/1", ADMINS),
            ("GET", "/api/v1/admin/anything", SUPER_ADMIN_ONLY),
            ("GET", "/actuator/health", PUBLIC),
            ("GET", "/v3/api-docs", PUBLIC),
            ("GET", "/swagger-ui", PUBLIC),
            ("GET", "/uploads/pets/1/a.jpg", PUBLIC),
            ("GET", "/api/v1/adoption-requests", AUTHENTICATED),
        ],
    )
    def test_requirement(self, method, path, expected):
        assert resolve_requirement(method, path) == expected


class TestPasswordsAndTokens:
    def test_hash_roundtrip(self):
        hashed = hash_password("DemoPa55!")
        assert hashed != "DemoPa55!"
        assert verify_password("DemoPa55!", hashed)
        assert not verify_password("wrong", hashed)

    def test_verify_unknown_hash_format(self):
        assert not verify_password("secret", "not-a-hash")

    def test_token_claims(self, user_account):
        user, _ = user_account
        claims = decode_access_token(create_access_token(user))
        assert claims["sub"] == user.email
        assert claims["uid"] == user.id
        assert claims["role"] == "USER"
        assert claims["exp"] > claims["iat"]


class TestAuthEndpoints:
    """Tests for /api/v1/auth."""

    def _register(self, client, email="maria@petfriendly.dev", path="/api/v1/auth/register"):
        return client.post(
            path,
            json={
                "first_name": "Maria",
                "last_name": "Lopez",
                "email": email,
                "password": "secret123",
                "phone": "+573001112233",
                "city": "Cali",
            },
        )

    def test_register_and_login(self, client):
        response = self._register(client)
        assert response.status_code == 200
        assert response.json() == {"message": "User registered successfully!"}

        login = client.post("/api/v1/auth/login", json={"email": "maria@petfriendly.dev", "password": "secret123"})
        assert login.status_code == 200
        data = login.json()
        assert data["token_type"] == "Bearer"

        profile = client.get("/api/v1/users/profile", headers={"Authorization": f"Bearer {data['access_token']}"})
        assert profile.status_code == 200
        assert profile.json()["role"] == "USER"
        assert profile.json()["city"] == "Cali"

    def test_duplicate_email(self, client):
        self._register(client)
        response = self._register(client)
        assert response.status_code == 400
        assert response.json()["detail"] == "Error: Email is already taken!"

    def test_register_foundation_creates_admin(self, client):
        response = self._register(client, "refugio@petfriendly.dev", "/api/v1/auth/register/foundation")
        assert response.json() == {"message": "Foundation registered successfully!"}

        alias = self._register(client, "refugio2@petfriendly.dev", "/api/v1/auth/register-foundation")
        assert alias.status_code == 200

        token = client.post(
            "/api/v1/auth/login", json={"email": "refugio@petfriendly.dev", "password": "secret123"}
        ).json()["access_token"]
        assert decode_access_token(token)["role"] == "FOUNDATION_ADMIN"

    def test_short_password_is_rejected(self, client):
        response = client.post(
            "/api/v1/auth/register",
            json={"first_name": "Maria", "last_name": "Lopez", "email": "m@petfriendly.dev", "password": "123"},
        )
        assert response.status_code == 422

    def test_bad_credentials(self, client):
        self._register(client)
        response = client.post("/api/v1/auth/login", json={"email": "maria@petfriendly.dev", "password": "wrong-pass"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    def test_inactive_user_cannot_login(self, client, user_account, super_admin_headers):
        user, _ = user_account
        client.put(f"/api/v1/users/{user.id}/deactivate", headers=super_admin_headers)
        response = client.post("/api/v1/auth/login", json={"email": user.email, "password": "secret123"})
        assert response.status_code == 401


class TestAuthorizationMiddleware:
    def test_missing_token_is_401(self, client):
        assert client.get("/api/v1/adoption-requests").status_code == 401

    def test_malformed_token_is_401(self, client):
        response = client.get("/api/v1/adoption-requests", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_expired_token_is_401(self, client, user_account):
        user, _ = user_account
        token = create_access_token(user, expires_delta=timedelta(minutes=-5))
        response = client.get("/api/v1/adoption-requests", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_wrong_role_is_403(self, client, user_headers):
        assert client.get("/api/v1/users", headers=user_headers).status_code == 403
        assert client.get("/api/v1/contact-messages", headers=user_headers).status_code == 403

    def test_deactivated_user_token_is_401(self, client, user_account, super_admin_headers):
        user, headers = user_account
        assert client.get("/api/v1/users/profile", headers=headers).status_code == 200
        client.put(f"/api/v1/users/{user.id}/deactivate", headers=super_admin_headers)
        assert client.get("/api/v1/users/profile", headers=headers).status_code == 401

    def test_public_routes_need_no_token(self, client):
        assert client.get("/api/v1/pets").status_code == 200
        assert client.get("/api/v1/foundations/page").status_code == 200
        assert client.get("/actuator/health").status_code == 200
        assert client.get("/v3/api-docs").status_code == 200

    def test_cors_preflight_is_allowed(self, client):
        response = client.options(
            "/api/v1/adoption-requests",
            headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "POST"},
        )
        assert response.status_code == 200
        assert "access-control-allow-origin" in response.headers

    def test_only_super_admin_creates_users(self, client, admin_headers, super_admin_headers):
        payload = {
            "first_name": "New",
            "last_name": "Staff",
            "email": "staff@petfriendly.dev",
            "password": "secret123",
            "role": "FOUNDATION_ADMIN",
        }
        assert client.post("/api/v1/users", json=payload, headers=admin_headers).status_code == 403
        response = client.post("/api/v1/users", json=payload, headers=super_admin_headers)
        assert response.status_code == 201
        assert response.json()["role"] == "FOUNDATION_ADMIN"
