"""
Tests for the authentication endpoints

Author: TechTots
Date: 2025-10-17
"""
import re
from datetime import timedelta
from unittest.mock import AsyncMock, patch

import pytest

from storefront.core.database import utcnow
from storefront.models import PasswordResetToken
from storefront.services.email_service import EmailService


class TestRegister:

    def test_register_creates_customer(self, client):
        response = client.post("/api/v1/auth/register", json={
            "name": "  Ada Lovelace ",
            "email": "ada@example.com",
            "password": "engines-1843",
        })

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["name"] == "Ada Lovelace"
        assert data["role"] == "CUSTOMER"
        assert data["is_active"] is True
        assert "password_hash" not in data

    def test_duplicate_email_conflicts(self, client, customer):
        response = client.post("/api/v1/auth/register", json={
            "name": "Another Ada",
            "email": customer.email,
            "password": "engines-1843",
        })

        assert response.status_code == 409
        assert response.json()["detail"] == "Email already registered"

    def test_short_password_fails_validation(self, client):
        response = client.post("/api/v1/auth/register", json={
            "name": "Ada",
            "email": "ada@example.com",
            "password": "short",
        })

        assert response.status_code == 400
        body = response.json()
        assert body["detail"] == "Validation failed"
        assert body["errors"][0]["field"] == "password"


class TestLogin:

    def test_login_returns_token(self, client, make_user):
        make_user(email="grace@example.com", name="Grace Hopper", password="cobol-1959")

        response = client.post("/api/v1/auth/login", json={"email": "grace@example.com", "password": "cobol-1959"})

        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["access_token"]
        assert body["user"]["email"] == "grace@example.com"

    def test_token_works_for_me(self, client, make_user):
        make_user(email="grace@example.com", name="Grace Hopper", password="cobol-1959")
        token = client.post(
            "/api/v1/auth/login", json={"email": "grace@example.com", "password": "cobol-1959"}
        ).json()["access_token"]

        response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Grace Hopper"

    def test_wrong_password(self, client, make_user):
        make_user(email="grace@example.com", password="cobol-1959")

        response = client.post("/api/v1/auth/login", json={"email": "grace@example.com", "password": "fortran"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    def test_unknown_email(self, client):
        response = client.post("/api/v1/auth/login", json={"email": "nobody@example.com", "password": "whatever"})

        assert response.status_code == 401

    def test_deactivated_account(self, client, make_user):
        make_user(email="grace@example.com", password="cobol-1959", is_active=False)

        response = client.post("/api/v1/auth/login", json={"email": "grace@example.com", "password": "cobol-1959"})

        assert response.status_code == 403
        assert response.json()["detail"] == "Account is deactivated"


class TestProtectedRoutes:

    def test_missing_token(self, client):
        response = client.get("/api/v1/auth/me")

        assert response.status_code == 401

    def test_garbage_token(self, client):
        response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-token"})

        assert response.status_code == 401
        assert response.json()["detail"].startswith("Invalid token")

    def test_customer_cannot_reach_admin_routes(self, client, customer, auth_headers):
        response = client.get("/api/v1/admin/customers/", headers=auth_headers(customer))

        assert response.status_code == 403


@pytest.fixture
def sent_email():
    """Captures outgoing email instead of sending it"""
    with patch.object(EmailService, "send_email", new_callable=AsyncMock) as send:
        send.return_value = {"success": True, "message_id": "test"}
        yield send


def reset_token_from(send) -> str:
    html = send.call_args.kwargs["html_content"]
    return re.search(r"token=([\w-]+)", html).group(1)


class TestPasswordReset:

    def test_reset_flow(self, client, make_user, sent_email, db_session):
        make_user(email="grace@example.com", password="cobol-1959")

        requested = client.post("/api/v1/auth/forgot-password", json={"email": "grace@example.com"})
        token = reset_token_from(sent_email)
        reset = client.post("/api/v1/auth/reset-password", json={"token": token, "password": "flow-matic-1955"})

        assert requested.status_code == 200
        assert requested.json()["message"] == "Password reset instructions sent"
        assert sent_email.call_args.kwargs["to"] == "grace@example.com"
        assert reset.status_code == 200
        assert db_session.query(PasswordResetToken).count() == 0

        new_login = client.post("/api/v1/auth/login", json={"email": "grace@example.com", "password": "flow-matic-1955"})
        old_login = client.post("/api/v1/auth/login", json={"email": "grace@example.com", "password": "cobol-1959"})
        assert new_login.status_code == 200
        assert old_login.status_code == 401

    def test_unknown_email_gets_the_same_answer(self, client, sent_email, db_session):
        response = client.post("/api/v1/auth/forgot-password", json={"email": "nobody@example.com"})

        assert response.status_code == 200
        assert response.json()["message"] == "Password reset instructions sent"
        assert sent_email.call_count == 0
        assert db_session.query(PasswordResetToken).count() == 0

    def test_only_token_hash_is_stored(self, client, make_user, sent_email, db_session):
        make_user(email="grace@example.com", password="cobol-1959")

        client.post("/api/v1/auth/forgot-password", json={"email": "grace@example.com"})
        token = reset_token_from(sent_email)

        row = db_session.query(PasswordResetToken).one()
        assert row.token_hash != token
        assert len(row.token_hash) == 64

    def test_new_request_replaces_old_token(self, client, make_user, sent_email, db_session):
        make_user(email="grace@example.com", password="cobol-1959")

        client.post("/api/v1/auth/forgot-password", json={"email": "grace@example.com"})
        first = reset_token_from(sent_email)
        client.post("/api/v1/auth/forgot-password", json={"email": "grace@example.com"})

        response = client.post("/api/v1/auth/reset-password", json={"token": first, "password": "flow-matic-1955"})

        assert db_session.query(PasswordResetToken).count() == 1
        assert response.status_code == 400

    def test_expired_token(self, client, make_user, sent_email, db_session):
        make_user(email="grace@example.com", password="cobol-1959")
        client.post("/api/v1/auth/forgot-password", json={"email": "grace@example.com"})
        token = reset_token_from(sent_email)
        row = db_session.query(PasswordResetToken).one()
        row.expires = utcnow() - timedelta(minutes=1)
        db_session.commit()

        response = client.post("/api/v1/auth/reset-password", json={"token": token, "password": "flow-matic-1955"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid or expired reset token"

    def test_unknown_token(self, client):
        response = client.post("/api/v1/auth/reset-password", json={"token": "made-up", "password": "flow-matic-1955"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid or expired reset token"

    def test_account_without_password(self, client, make_user, sent_email):
        make_user(email="social@example.com")

        response = client.post("/api/v1/auth/forgot-password", json={"email": "social@example.com"})

        assert response.status_code == 400
        assert sent_email.call_count == 0

    def test_invalid_email(self, client):
        response = client.post("/api/v1/auth/forgot-password", json={"email": "not-an-email"})

        assert response.status_code == 400

    def test_short_new_password(self, client):
        response = client.post("/api/v1/auth/reset-password", json={"token": "abc", "password": "short"})

        assert response.status_code == 400

    def test_rate_limited(self, client, sent_email):
        for _ in range(5):
            client.post("/api/v1/auth/forgot-password", json={"email": "nobody@example.com"})

        response = client.post("/api/v1/auth/forgot-password", json={"email": "nobody@example.com"})

        assert response.status_code == 429
