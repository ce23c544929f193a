"""
Tests for the admin customer endpoints

Author: TechTots
Date: 2025-10-21
"""
import pytest

from storefront.models import User


@pytest.fixture
def admin_headers(admin_user, auth_headers):
    return auth_headers(admin_user)


class TestListCustomers:

    def test_lists_customers_only(self, client, admin_headers, customer, supplier_user):
        body = client.get("/api/v1/admin/customers/", headers=admin_headers).json()

        assert body["total"] == 1
        assert body["data"][0]["email"] == customer.email
        assert body["data"][0]["status"] == "Active"

    def test_orders_and_spend(self, client, admin_headers, customer, make_order, make_product):
        kit = make_product(price="40.00")
        make_order(customer, [(kit, 2)], status="COMPLETED")
        make_order(customer, [(kit, 1)], status="CANCELLED")

        row = client.get("/api/v1/admin/customers/", headers=admin_headers).json()["data"][0]

        # Cancelled orders count as orders but not as spend
        assert row["orders"] == 2
        assert row["spent"] == 80.0

    def test_status_filter_and_search(self, client, admin_headers, make_user):
        make_user(name="Ada Lovelace", email="ada@example.com")
        make_user(name="Grace Hopper", email="grace@example.com", is_active=False)

        inactive = client.get("/api/v1/admin/customers/?status=inactive", headers=admin_headers).json()
        search = client.get("/api/v1/admin/customers/?search=LOVE", headers=admin_headers).json()

        assert [row["name"] for row in inactive["data"]] == ["Grace Hopper"]
        assert [row["name"] for row in search["data"]] == ["Ada Lovelace"]

    def test_invalid_status_filter(self, client, admin_headers):
        response = client.get("/api/v1/admin/customers/?status=banned", headers=admin_headers)

        assert response.status_code == 400

    def test_sort_by_spend(self, client, admin_headers, make_user, make_order, make_product):
        kit = make_product(price="10.00")
        small = make_user(name="Small Spender")
        big = make_user(name="Big Spender")
        make_user(name="No Orders")
        make_order(small, [(kit, 1)])
        make_order(big, [(kit, 5)])

        rows = client.get("/api/v1/admin/customers/?sort_by=spent-high", headers=admin_headers).json()["data"]

        assert [row["name"] for row in rows] == ["Big Spender", "Small Spender", "No Orders"]

    def test_pagination(self, client, admin_headers, make_user):
        for _ in range(3):
            make_user()

        body = client.get("/api/v1/admin/customers/?limit=2&offset=2", headers=admin_headers).json()

        assert body["total"] == 3
        assert body["count"] == 1
        assert body["limit"] == 2
        assert body["offset"] == 2

    def test_rate_limited(self, client, admin_headers):
        statuses = [client.get("/api/v1/admin/customers/", headers=admin_headers).status_code for _ in range(31)]

        assert statuses[:30] == [200] * 30
        assert statuses[30] == 429


class TestCustomerDetail:

    def test_detail(self, client, admin_headers, customer, make_order, make_product):
        make_order(customer, [(make_product(price="25.00"), 2)], status="DELIVERED")

        data = client.get(f"/api/v1/admin/customers/{customer.id}", headers=admin_headers).json()["data"]

        assert data["total_orders"] == 1
        assert data["total_spent"] == 50.0
        assert data["last_order"]["status"] == "DELIVERED"

    def test_unknown(self, client, admin_headers):
        response = client.get("/api/v1/admin/customers/missing", headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["detail"] == "Customer not found"


class TestCustomerStatus:

    def test_deactivate(self, client, admin_headers, customer, db_session):
        response = client.patch(f"/api/v1/admin/customers/{customer.id}", json={"is_active": False},
                                headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "Inactive"
        db_session.refresh(customer)
        assert customer.is_active is False

    def test_cannot_deactivate_admin(self, client, admin_headers, admin_user):
        response = client.patch(f"/api/v1/admin/customers/{admin_user.id}", json={"is_active": False},
                                headers=admin_headers)

        assert response.status_code == 403


class TestDeleteCustomer:

    def test_delete_without_orders(self, client, admin_headers, customer, db_session):
        customer_id = customer.id

        response = client.delete(f"/api/v1/admin/customers/{customer_id}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["message"] == "Customer deleted successfully"
        assert db_session.get(User, customer_id) is None

    def test_customer_with_orders_is_kept(self, client, admin_headers, customer, make_order, make_product):
        make_order(customer, [(make_product(), 1)])

        response = client.delete(f"/api/v1/admin/customers/{customer.id}", headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == \
            "Cannot delete user with existing orders. Deactivate the account instead."

    def test_admin_cannot_be_deleted(self, client, admin_headers, make_user):
        other_admin = make_user(role="ADMIN", email="second-admin@techtots.com")

        response = client.delete(f"/api/v1/admin/customers/{other_admin.id}", headers=admin_headers)

        assert response.status_code == 403
        assert response.json()["detail"] == "Cannot delete admin users"

    def test_unknown(self, client, admin_headers):
        response = client.delete("/api/v1/admin/customers/missing", headers=admin_headers)

        assert response.status_code == 404
