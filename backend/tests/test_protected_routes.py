"""Tests for bearer-token protection and the error envelope."""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from notekeeper.config import Settings
from notekeeper.dependencies.services import get_notes_service
from notekeeper.errors import ConfigurationError
from notekeeper.main import app, build_services, create_app
from tests.conftest import auth_headers, signup_and_verify


class TestBearerToken:
    """The auth dependency guards /api/auth/me, /logout and all note routes."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("get", "/api/auth/me"),
            ("post", "/api/auth/logout"),
            ("get", "/api/notes"),
            ("get", "/api/notes/search"),
        ],
    )
    def test_missing_token(self, client, method, path):
        test_client, _ = client

        response = getattr(test_client, method)(path)

        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Bearer token is required"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_non_bearer_scheme(self, client):
        test_client, _ = client

        response = test_client.get("/api/auth/me", headers={"Authorization": "Basic abc"})

        assert response.status_code == 401
        assert response.json()["error"] == "Bearer token is required"

    def test_invalid_token(self, client):
        test_client, _ = client

        response = test_client.get("/api/auth/me", headers=auth_headers("garbage"))

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid token"

    def test_expired_token(self, client):
        test_client, _ = client
        token = app.state.token_service.issue(
            "some-user", "expired@example.com", expires_delta=timedelta(days=-1)
        )
        response = test_client.get("/api/notes", headers=auth_headers(token))

        assert response.status_code == 401
        assert response.json()["error"] == "Token expired"

    def test_logout_acknowledges(self, client, sent_codes):
        test_client, _ = client
        codes, _ = sent_codes
        token = signup_and_verify(test_client, codes, "bye@example.com")

        response = test_client.post("/api/auth/logout", headers=auth_headers(token))

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Logout successful",
            "timestamp": response.json()["timestamp"],
        }
        # Stateless tokens keep working until they expire
        assert test_client.get("/api/auth/me", headers=auth_headers(token)).status_code == 200


class TestErrorEnvelope:
    def test_unknown_route(self, client):
        test_client, _ = client

        response = test_client.get("/api/nothing-here")

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Not Found"
        assert "timestamp" in body

    def test_wrong_method(self, client):
        test_client, _ = client

        response = test_client.put("/api/auth/login", json={})

        assert response.status_code == 405
        assert response.json()["success"] is False

    def test_malformed_json(self, client):
        test_client, _ = client

        response = test_client.post(
            "/api/auth/login",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"

    def test_unexpected_error_is_500(self, client):
        test_client, _ = client
        safe_client = TestClient(app, raise_server_exceptions=False)

        def explode():
            raise RuntimeError("boom")

        app.dependency_overrides[get_notes_service] = explode
        token = app.state.token_service.issue("user-1", "user@example.com")
        try:
            response = safe_client.get("/api/notes", headers=auth_headers(token))
        finally:
            app.dependency_overrides.pop(get_notes_service, None)

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Internal server error"
        assert "boom" not in response.text

    def test_security_headers(self, client):
        test_client, _ = client

        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"


class TestStartup:
    def test_missing_jwt_secret_prevents_startup(self):
        with pytest.raises(ConfigurationError):
            build_services(Settings(jwt_secret_key=""))

    def test_create_app_puts_services_on_state(self):
        built = create_app(Settings(jwt_secret_key="another-secret-0123456789abcdef0123"))

        assert built.state.token_service is not None
        assert built.state.otp_policy.max_attempts == 3
        assert built.state.otp_policy.resend_cooldown_seconds == 10
