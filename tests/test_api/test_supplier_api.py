"""
Tests for the supplier portal, admin supplier review and support tickets

Author: TechTots
Date: 2025-10-22
"""
import pytest

from storefront.models import Supplier


@pytest.fixture
def supplier_headers(supplier_user, auth_headers):
    return auth_headers(supplier_user)


@pytest.fixture
def admin_headers(admin_user, auth_headers):
    return auth_headers(admin_user)


@pytest.fixture
def supplier_profile(client, supplier_headers, sample_supplier_data):
    response = client.post("/api/v1/supplier/register", json=sample_supplier_data, headers=supplier_headers)
    assert response.status_code == 201
    return response.json()["data"]


@pytest.fixture
def ticket(client, supplier_headers, supplier_profile):
    response = client.post("/api/v1/supplier/tickets", json={
        "subject": "Late payout",
        "description": "September payout has not arrived yet.",
        "priority": "high",
    }, headers=supplier_headers)
    assert response.status_code == 201
    return response.json()["data"]


class TestSupplierRegistration:

    def test_register_starts_pending(self, supplier_profile):
        assert supplier_profile["status"] == "PENDING"
        assert supplier_profile["commission_rate"] == 15.0
        assert supplier_profile["payment_terms"] == 30
        assert supplier_profile["notification_preferences"]["email"]["tickets"] is True

    def test_requires_supplier_role(self, client, customer, auth_headers, sample_supplier_data):
        response = client.post("/api/v1/supplier/register", json=sample_supplier_data, headers=auth_headers(customer))

        assert response.status_code == 403
        assert response.json()["detail"] == "User must have supplier role to register"

    def test_second_profile_conflicts(self, client, supplier_headers, supplier_profile, sample_supplier_data):
        response = client.post("/api/v1/supplier/register", json=sample_supplier_data, headers=supplier_headers)

        assert response.status_code == 409
        assert response.json()["detail"] == "Supplier profile already exists"

    def test_slug_conflict(self, client, supplier_profile, make_user, auth_headers, sample_supplier_data):
        other = auth_headers(make_user(role="SUPPLIER", email="other@example.com"))

        response = client.post("/api/v1/supplier/register", json={**sample_supplier_data, "vat_number": "RO999"},
                               headers=other)

        assert response.status_code == 409
        assert response.json()["detail"] == "Company slug already exists"

    def test_vat_conflict(self, client, supplier_profile, make_user, auth_headers, sample_supplier_data):
        other = auth_headers(make_user(role="SUPPLIER", email="other@example.com"))

        response = client.post("/api/v1/supplier/register",
                               json={**sample_supplier_data, "company_slug": "other-toys"}, headers=other)

        assert response.status_code == 409
        assert response.json()["detail"] == "VAT number already registered"

    @pytest.mark.parametrize("field,value", [
        ("terms_accepted", False),
        ("privacy_accepted", False),
        ("website", "brightminds.example.com"),
        ("year_established", 3000),
        ("company_slug", "Bright Minds"),
    ])
    def test_form_validation(self, client, supplier_headers, sample_supplier_data, field, value):
        response = client.post("/api/v1/supplier/register", json={**sample_supplier_data, field: value},
                               headers=supplier_headers)

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == field


class TestSupplierSettings:

    def test_get_and_update(self, client, supplier_headers, supplier_profile):
        updated = client.put("/api/v1/supplier/settings", json={
            "description": "Wooden and electronic STEM kits",
            "notification_preferences": {"email": {"announcements": False}},
        }, headers=supplier_headers).json()["data"]
        fetched = client.get("/api/v1/supplier/settings", headers=supplier_headers).json()["data"]

        assert updated["description"] == "Wooden and electronic STEM kits"
        assert fetched["notification_preferences"]["email"]["announcements"] is False
        assert fetched["company_slug"] == "bright-minds-toys"

    def test_settings_without_profile(self, client, supplier_headers):
        response = client.get("/api/v1/supplier/settings", headers=supplier_headers)

        assert response.status_code == 404


class TestAdminSuppliers:

    def test_list_by_status(self, client, admin_headers, supplier_profile):
        pending = client.get("/api/v1/admin/suppliers/?status=pending", headers=admin_headers).json()
        approved = client.get("/api/v1/admin/suppliers/?status=APPROVED", headers=admin_headers).json()

        assert pending["total"] == 1
        assert approved["total"] == 0

    def test_invalid_status_filter(self, client, admin_headers):
        response = client.get("/api/v1/admin/suppliers/?status=sleeping", headers=admin_headers)

        assert response.status_code == 400

    def test_detail_includes_user_and_product_counts(self, client, admin_headers, supplier_profile, make_product):
        make_product(supplier_id=supplier_profile["id"])
        make_product(supplier_id=supplier_profile["id"], is_active=False)

        data = client.get(f"/api/v1/admin/suppliers/{supplier_profile['id']}", headers=admin_headers).json()["data"]

        assert data["user"]["email"] == "vendor@example.com"
        assert data["product_count"] == 2
        assert data["active_product_count"] == 1

    def test_approve(self, client, admin_headers, admin_user, supplier_profile):
        data = client.put(f"/api/v1/admin/suppliers/{supplier_profile['id']}", json={"status": "approved"},
                          headers=admin_headers).json()["data"]

        assert data["status"] == "APPROVED"
        assert data["approved_by"] == admin_user.id
        assert data["approved_at"] is not None

    def test_reject_default_reason(self, client, admin_headers, supplier_profile):
        data = client.put(f"/api/v1/admin/suppliers/{supplier_profile['id']}", json={"status": "SUSPENDED"},
                          headers=admin_headers).json()["data"]

        assert data["rejection_reason"] == "Status changed to SUSPENDED"

    @pytest.mark.parametrize("payload,detail", [
        ({"commission_rate": "120"}, "Commission rate must be between 0 and 100"),
        ({"payment_terms": -1}, "Payment terms cannot be negative"),
        ({"status": "MAYBE"}, "Invalid status. Must be one of: PENDING, APPROVED, REJECTED, SUSPENDED"),
    ])
    def test_invalid_terms(self, client, admin_headers, supplier_profile, payload, detail):
        response = client.put(f"/api/v1/admin/suppliers/{supplier_profile['id']}", json=payload,
                              headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == detail

    def test_delete_blocked_by_active_products(self, client, admin_headers, supplier_profile, make_product):
        make_product(supplier_id=supplier_profile["id"])

        response = client.delete(f"/api/v1/admin/suppliers/{supplier_profile['id']}", headers=admin_headers)

        assert response.status_code == 400
        assert "1 active product(s)" in response.json()["detail"]

    def test_delete(self, client, admin_headers, supplier_profile, db_session):
        response = client.delete(f"/api/v1/admin/suppliers/{supplier_profile['id']}", headers=admin_headers)

        assert response.status_code == 200
        assert db_session.query(Supplier).count() == 0


class TestSupplierTickets:

    def test_create(self, ticket):
        assert ticket["status"] == "OPEN"
        assert ticket["priority"] == "HIGH"
        assert ticket["category"] == "GENERAL"
        assert ticket["ticket_number"].startswith("TKT-")

    def test_invalid_priority(self, client, supplier_headers, supplier_profile):
        response = client.post("/api/v1/supplier/tickets", json={
            "subject": "Help",
            "description": "Something is wrong here.",
            "priority": "whenever",
        }, headers=supplier_headers)

        assert response.status_code == 400

    def test_supplier_sees_only_own_tickets(self, client, ticket, make_user, auth_headers, sample_supplier_data):
        other = auth_headers(make_user(role="SUPPLIER", email="other@example.com"))
        client.post("/api/v1/supplier/register", json={
            **sample_supplier_data, "company_slug": "other-toys", "vat_number": "RO999"
        }, headers=other)

        listing = client.get("/api/v1/supplier/tickets", headers=other).json()
        direct = client.get(f"/api/v1/supplier/tickets/{ticket['id']}", headers=other)

        assert listing["count"] == 0
        assert direct.status_code == 404

    def test_supplier_reply_reopens_closed_ticket(self, client, ticket, supplier_headers, admin_headers):
        client.put(f"/api/v1/admin/tickets/{ticket['id']}/status", json={"status": "CLOSED"}, headers=admin_headers)

        response = client.post(f"/api/v1/supplier/tickets/{ticket['id']}/responses", json={
            "content": "Still not received.",
            "attachments": [
                {"url": "https://utfs.io/f/receipt.pdf", "name": "receipt.pdf", "size": 1024},
                {"url": "https://evil.example.com/x.exe", "name": "x.exe"},
            ],
        }, headers=supplier_headers)
        detail = client.get(f"/api/v1/admin/tickets/{ticket['id']}", headers=admin_headers).json()["data"]

        assert response.status_code == 201
        assert [attachment["name"] for attachment in response.json()["data"]["attachments"]] == ["receipt.pdf"]
        assert detail["status"] == "REOPENED"
        assert detail["closed_at"] is None

    def test_internal_notes_hidden_from_supplier(self, client, ticket, supplier_headers, admin_headers):
        client.post(f"/api/v1/admin/tickets/{ticket['id']}/responses",
                    json={"content": "Check with finance", "is_internal": True}, headers=admin_headers)

        supplier_view = client.get(f"/api/v1/supplier/tickets/{ticket['id']}", headers=supplier_headers).json()
        admin_view = client.get(f"/api/v1/admin/tickets/{ticket['id']}", headers=admin_headers).json()

        assert supplier_view["data"]["responses"] == []
        assert len(admin_view["data"]["responses"]) == 1


class TestAdminTickets:

    def test_status_change_recorded_in_history(self, client, ticket, admin_headers):
        client.put(f"/api/v1/admin/tickets/{ticket['id']}/status",
                   json={"status": "in_progress", "note": "Looking into it"}, headers=admin_headers)
        client.put(f"/api/v1/admin/tickets/{ticket['id']}/status", json={"status": "RESOLVED"}, headers=admin_headers)

        history = client.get(f"/api/v1/admin/tickets/{ticket['id']}/status", headers=admin_headers).json()["data"]
        contents = {entry["content"] for entry in history["history"]}

        assert history["current_status"] == "RESOLVED"
        assert contents == {
            "Status changed from OPEN to IN_PROGRESS - Looking into it by Store Admin",
            "Status changed from IN_PROGRESS to RESOLVED by Store Admin",
        }

    def test_resolved_sets_closed_at(self, client, ticket, admin_headers):
        data = client.put(f"/api/v1/admin/tickets/{ticket['id']}/status", json={"status": "RESOLVED"},
                          headers=admin_headers).json()["data"]

        assert data["closed_at"] is not None

    def test_status_required(self, client, ticket, admin_headers):
        response = client.put(f"/api/v1/admin/tickets/{ticket['id']}/status", json={"note": "no status"},
                              headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Status is required"

    def test_unknown_ticket(self, client, admin_headers):
        response = client.get("/api/v1/admin/tickets/missing", headers=admin_headers)

        assert response.status_code == 404

    def test_public_response_moves_to_in_progress(self, client, ticket, admin_headers):
        response = client.post(f"/api/v1/admin/tickets/{ticket['id']}/responses",
                               json={"content": "Payout was sent today."}, headers=admin_headers)
        detail = client.get(f"/api/v1/admin/tickets/{ticket['id']}", headers=admin_headers).json()["data"]

        assert response.status_code == 201
        assert response.json()["data"]["responder_type"] == "ADMIN"
        assert detail["status"] == "IN_PROGRESS"

    def test_empty_response(self, client, ticket, admin_headers):
        response = client.post(f"/api/v1/admin/tickets/{ticket['id']}/responses", json={"content": "  "},
                               headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Response content is required"

    def test_update_priority_and_assignee(self, client, ticket, admin_headers, admin_user):
        data = client.put(f"/api/v1/admin/tickets/{ticket['id']}",
                          json={"priority": "urgent", "assigned_to": admin_user.id}, headers=admin_headers).json()["data"]

        assert data["priority"] == "URGENT"
        assert data["assignee"]["email"] == admin_user.email

    def test_unknown_assignee(self, client, ticket, admin_headers):
        response = client.put(f"/api/v1/admin/tickets/{ticket['id']}", json={"assigned_to": "nobody"},
                              headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["detail"] == "Assignee not found"

    def test_assignee_must_be_admin(self, client, ticket, admin_headers, supplier_user):
        response = client.put(f"/api/v1/admin/tickets/{ticket['id']}", json={"assigned_to": supplier_user.id},
                              headers=admin_headers)
        detail = client.get(f"/api/v1/admin/tickets/{ticket['id']}", headers=admin_headers).json()["data"]

        assert response.status_code == 400
        assert response.json()["detail"] == "Tickets can only be assigned to admins"
        assert detail["assignee"] is None

    def test_history_ignores_notes_mentioning_status(self, client, ticket, admin_headers):
        client.post(f"/api/v1/admin/tickets/{ticket['id']}/responses",
                    json={"content": "Carrier says: Status changed upstream", "is_internal": True},
                    headers=admin_headers)

        history = client.get(f"/api/v1/admin/tickets/{ticket['id']}/status", headers=admin_headers).json()["data"]

        assert history["history"] == []

    def test_list_filters(self, client, ticket, admin_headers):
        high = client.get("/api/v1/admin/tickets/?priority=HIGH", headers=admin_headers).json()
        closed = client.get("/api/v1/admin/tickets/?status=CLOSED", headers=admin_headers).json()

        assert high["count"] == 1
        assert high["data"][0]["supplier"]["company_name"] == "Bright Minds Toys"
        assert closed["count"] == 0
