"""
Tests for application wiring: root, health check, error handlers and admin seeding

Author: TechTots
Date: 2025-10-17
"""
from storefront import main
from storefront.core.auth import verify_password
from storefront.main import seed_admin
from storefront.models import User


class TestRootAndHealth:

    def test_root(self, client):
        body = client.get("/").json()

        assert body["status"] == "online"
        assert body["message"] == "TechTots API"

    def test_health_connected(self, client, monkeypatch):
        monkeypatch.setattr(main, "check_connection", lambda: 1.25)

        body = client.get("/health").json()

        assert body["status"] == "healthy"
        assert body["database"] == {"status": "connected", "latency_ms": 1.25, "error": None}

    def test_health_degraded(self, client, monkeypatch):
        def broken():
            raise RuntimeError("connection refused")

        monkeypatch.setattr(main, "check_connection", broken)

        body = client.get("/health").json()

        assert body["status"] == "degraded"
        assert body["database"]["status"] == "disconnected"
        assert body["database"]["error"] == "connection refused"


class TestErrorHandlers:

    def test_validation_errors_are_400(self, client):
        response = client.post("/api/v1/auth/login", json={"email": "not-an-email"})

        assert response.status_code == 400
        body = response.json()
        assert body["detail"] == "Validation failed"
        assert {error["field"] for error in body["errors"]} == {"email", "password"}


class TestSeedAdmin:

    def test_creates_admin(self, db_session):
        user = seed_admin(db_session, email="Boss@TechTots.com", password="s3cret-pass", name="Boss")

        assert user.role == "ADMIN"
        assert user.email == "boss@techtots.com"
        assert verify_password("s3cret-pass", user.password_hash)

    def test_existing_email_untouched(self, db_session, admin_user):
        assert seed_admin(db_session, email=admin_user.email, password="another-pass") is None
        assert db_session.query(User).count() == 1

    def test_without_credentials(self, db_session, monkeypatch):
        monkeypatch.setattr(main.settings, "ADMIN_EMAIL", None)
        monkeypatch.setattr(main.settings, "ADMIN_PASSWORD", None)

        assert seed_admin(db_session) is None
        assert db_session.query(User).count() == 0
