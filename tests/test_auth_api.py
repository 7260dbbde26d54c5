"""
tests/test_auth_api.py -- HTTP tests for /api/v1/auth/* through the Flask test client.

Status codes and response shapes are asserted directly; the end-to-end test
walks signup -> login -> verify -> refresh -> logout the way a client would.
"""

from __future__ import annotations

import pytest

from conftest import PASSWORD, bearer

SIGNUP = "/api/v1/auth/signup"
LOGIN = "/api/v1/auth/login"
REFRESH = "/api/v1/auth/refresh"
LOGOUT = "/api/v1/auth/logout"
VERIFY = "/api/v1/auth/verify"


class TestEndToEnd:
    def test_full_session_lifecycle(self, client) -> None:
        resp = client.post(SIGNUP, json={"email": "user@example.com", "password": PASSWORD, "name": "User"})
        assert resp.status_code == 201
        signed_up = resp.get_json()
        assert signed_up["access_token"] and signed_up["refresh_token"]
        assert signed_up["token_type"] == "Bearer"
        assert signed_up["expires_in"] == 900

        resp = client.post(LOGIN, json={"email": "user@example.com", "password": PASSWORD})
        assert resp.status_code == 200
        logged_in = resp.get_json()
        assert logged_in["access_token"] != signed_up["access_token"]
        assert logged_in["refresh_token"] != signed_up["refresh_token"]

        resp = client.get(VERIFY, headers=bearer(logged_in["access_token"]))
        assert resp.status_code == 200
        assert resp.get_json() == {
            "valid": True,
            "user_id": signed_up["user"]["id"],
            "email": "user@example.com",
        }

        resp = client.post(REFRESH, json={"refresh_token": logged_in["refresh_token"]})
        assert resp.status_code == 200
        rotated = resp.get_json()
        assert set(rotated) == {"access_token", "refresh_token", "token_type", "expires_in"}
        assert rotated["refresh_token"] != logged_in["refresh_token"]

        resp = client.post(REFRESH, json={"refresh_token": logged_in["refresh_token"]})
        assert resp.status_code == 401

        resp = client.post(LOGOUT, json={"refresh_token": rotated["refresh_token"]})
        assert resp.status_code == 200
        assert resp.get_json() == {"message": "Logged out successfully"}

        resp = client.post(LOGOUT, json={"refresh_token": rotated["refresh_token"]})
        assert resp.status_code == 401


class TestSignup:
    def test_user_payload_has_no_password(self, signup) -> None:
        body = signup()
        assert set(body["user"]) == {"id", "email", "name", "created_at", "updated_at"}
        assert body["user"]["email"] == "user@example.com"

    def test_conflict_is_case_insensitive(self, client, signup) -> None:
        signup(email="a@b.com")
        resp = client.post(SIGNUP, json={"email": "A@B.com", "password": PASSWORD, "name": "Other"})
        assert resp.status_code == 409
        assert resp.get_json()["error"] == "CONFLICT"

    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"email": "user@example.com", "password": PASSWORD},
            {"email": "user@example.com", "password": "", "name": "User"},
            {"email": "not-an-email", "password": PASSWORD, "name": "User"},
            {"email": 42, "password": PASSWORD, "name": "User"},
        ],
    )
    def test_invalid_input(self, client, payload) -> None:
        resp = client.post(SIGNUP, json=payload)
        assert resp.status_code == 400
        assert resp.get_json()["status"] == 400

    def test_non_json_body(self, client) -> None:
        resp = client.post(SIGNUP, data="email=user@example.com", content_type="text/plain")
        assert resp.status_code == 400

    def test_unknown_fields_are_ignored(self, client) -> None:
        resp = client.post(
            SIGNUP,
            json={"email": "user@example.com", "password": PASSWORD, "name": "User", "role": "admin"},
        )
        assert resp.status_code == 201


class TestLogin:
    def test_wrong_password_and_unknown_user_share_a_message(self, client, signup) -> None:
        signup()
        wrong = client.post(LOGIN, json={"email": "user@example.com", "password": "wrong"})
        unknown = client.post(LOGIN, json={"email": "ghost@example.com", "password": PASSWORD})
        assert wrong.status_code == unknown.status_code == 401
        assert wrong.get_json()["message"] == unknown.get_json()["message"] == "Invalid email or password"

    def test_missing_password(self, client) -> None:
        resp = client.post(LOGIN, json={"email": "user@example.com"})
        assert resp.status_code == 400

    def test_returns_user(self, client, signup) -> None:
        created = signup()
        resp = client.post(LOGIN, json={"email": "USER@example.com", "password": PASSWORD})
        assert resp.status_code == 200
        assert resp.get_json()["user"]["id"] == created["user"]["id"]


class TestRefreshAndLogout:
    def test_refresh_requires_token(self, client) -> None:
        assert client.post(REFRESH, json={}).status_code == 400
        assert client.post(REFRESH, json={"refresh_token": ""}).status_code == 400

    def test_refresh_with_unknown_token(self, client) -> None:
        resp = client.post(REFRESH, json={"refresh_token": "never-issued"})
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "UNAUTHORIZED"

    def test_refresh_rejects_access_token(self, client, signup) -> None:
        body = signup()
        resp = client.post(REFRESH, json={"refresh_token": body["access_token"]})
        assert resp.status_code == 401

    def test_logout_requires_token(self, client) -> None:
        assert client.post(LOGOUT, json={}).status_code == 400

    def test_logout_with_unknown_token(self, client) -> None:
        assert client.post(LOGOUT, json={"refresh_token": "never-issued"}).status_code == 401

    def test_logged_out_token_cannot_refresh(self, client, signup) -> None:
        body = signup()
        assert client.post(LOGOUT, json={"refresh_token": body["refresh_token"]}).status_code == 200
        assert client.post(REFRESH, json={"refresh_token": body["refresh_token"]}).status_code == 401


class TestVerify:
    def test_missing_header(self, client) -> None:
        assert client.get(VERIFY).status_code == 401

    @pytest.mark.parametrize(
        "header",
        ["Bearer", "Bearer ", "Token abc", "bearer abc", "Bearer a b", "abc"],
    )
    def test_garbled_header(self, client, header) -> None:
        resp = client.get(VERIFY, headers={"Authorization": header})
        assert resp.status_code == 401

    def test_invalid_token(self, client) -> None:
        assert client.get(VERIFY, headers=bearer("not.a.token")).status_code == 401

    def test_refresh_token_is_not_accepted(self, client, signup) -> None:
        body = signup()
        assert client.get(VERIFY, headers=bearer(body["refresh_token"])).status_code == 401

    def test_tampered_token(self, client, signup) -> None:
        token = signup()["access_token"]
        header, payload, signature = token.split(".")
        tampered = f"{header}.{payload}.{signature[::-1]}"
        assert client.get(VERIFY, headers=bearer(tampered)).status_code == 401


class TestMisc:
    def test_health(self, client) -> None:
        resp = client.get("/api/v1/health")
        assert resp.status_code == 200
        assert resp.get_json()["status"] == "healthy"

    def test_me(self, client, signup) -> None:
        body = signup()
        resp = client.get("/api/v1/me", headers=bearer(body["access_token"]))
        assert resp.status_code == 200
        assert resp.get_json()["data"]["email"] == "user@example.com"

    def test_me_requires_token(self, client) -> None:
        assert client.get("/api/v1/me").status_code == 401

    def test_unknown_route_uses_error_envelope(self, client) -> None:
        resp = client.get("/api/v1/nope")
        assert resp.status_code == 404
        assert resp.get_json()["error"] == "NOT_FOUND"
