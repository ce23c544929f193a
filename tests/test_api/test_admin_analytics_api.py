"""
Tests for the admin analytics and dashboard endpoints

Author: TechTots
Date: 2025-10-24
"""
import pytest

from storefront.core.config import settings


@pytest.fixture
def admin_headers(admin_user, auth_headers):
    return auth_headers(admin_user)


class TestAnalyticsEndpoint:

    def test_live_analytics(self, client, admin_headers, customer, make_order, make_product, days_ago):
        make_order(customer, [(make_product(price="30.00"), 2)], status="SHIPPED", created_at=days_ago(1, hours=2))

        data = client.get("/api/v1/admin/analytics?period=7", headers=admin_headers).json()["data"]

        assert data["period"] == 7
        assert data["sales_data"]["weekly"] == 60.0
        assert data["top_selling_products"][0]["sold_quantity"] == 2

    def test_period_bounds(self, client, admin_headers):
        assert client.get("/api/v1/admin/analytics?period=0", headers=admin_headers).status_code == 400
        assert client.get("/api/v1/admin/analytics?period=366", headers=admin_headers).status_code == 400

    def test_mock_data(self, client, admin_headers, monkeypatch):
        monkeypatch.setattr(settings, "USE_MOCK_DATA", True)

        body = client.get("/api/v1/admin/analytics", headers=admin_headers).json()

        assert body["mock"] is True
        assert body["data"]["top_selling_products"][0]["name"] == "Junior Robotics Kit"

    def test_admin_only(self, client, customer, auth_headers):
        response = client.get("/api/v1/admin/analytics", headers=auth_headers(customer))

        assert response.status_code == 403


class TestDashboardEndpoint:

    def test_live_dashboard(self, client, admin_headers, customer, make_order, make_product):
        make_order(customer, [(make_product(), 1)], status="COMPLETED")

        data = client.get("/api/v1/admin/dashboard", headers=admin_headers).json()["data"]

        assert [card["title"] for card in data["stats"]] == [
            "Total Revenue", "Total Orders", "New Customers", "Total Products"
        ]
        assert data["recent_orders"][0]["customer"] == "Ada Lovelace"

    def test_mock_dashboard(self, client, admin_headers, monkeypatch):
        monkeypatch.setattr(settings, "USE_MOCK_DATA", True)

        body = client.get("/api/v1/admin/dashboard", headers=admin_headers).json()

        assert body["mock"] is True
        assert len(body["data"]["stats"]) == 4
