"""
Tests for the admin order endpoints

Author: TechTots
Date: 2025-10-21
"""
import pytest


@pytest.fixture
def admin_headers(admin_user, auth_headers):
    return auth_headers(admin_user)


@pytest.fixture
def placed_order(customer, make_product, make_order):
    kit = make_product(name="Robot Arm", price="30.00", stock=5, total_sold=3)
    order = make_order(customer, [(kit, 3)])
    return order, kit


class TestListOrders:

    def test_filters(self, client, admin_headers, customer, make_order, make_product, days_ago):
        kit = make_product()
        make_order(customer, [(kit, 1)], status="SHIPPED", created_at=days_ago(1))
        make_order(customer, [(kit, 1)], status="PROCESSING", created_at=days_ago(10))

        shipped = client.get("/api/v1/admin/orders/?status=shipped", headers=admin_headers).json()
        by_name = client.get("/api/v1/admin/orders/?search=lovelace", headers=admin_headers).json()

        assert shipped["total"] == 1
        assert shipped["data"][0]["status"] == "SHIPPED"
        assert shipped["data"][0]["customer"]["email"] == customer.email
        assert by_name["total"] == 2

    def test_invalid_status_filter(self, client, admin_headers):
        response = client.get("/api/v1/admin/orders/?status=LOST", headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["detail"].startswith("Invalid status. Must be one of:")

    def test_get_unknown_order(self, client, admin_headers):
        response = client.get("/api/v1/admin/orders/missing", headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["detail"] == "Order missing not found"


class TestUpdateStatus:

    def test_invalid_status(self, client, admin_headers, placed_order):
        order, _ = placed_order

        response = client.patch(f"/api/v1/admin/orders/{order.id}", json={"status": "teleported"},
                                headers=admin_headers)

        assert response.status_code == 400
        assert "PROCESSING" in response.json()["detail"]

    def test_unknown_order(self, client, admin_headers):
        response = client.patch("/api/v1/admin/orders/missing", json={"status": "SHIPPED"}, headers=admin_headers)

        assert response.status_code == 404

    def test_shipped(self, client, admin_headers, placed_order):
        order, _ = placed_order

        response = client.patch(f"/api/v1/admin/orders/{order.id}", json={"status": "shipped"},
                                headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["message"] == "Order status updated to SHIPPED"

    def test_delivered_sets_delivered_at(self, client, admin_headers, placed_order):
        order, _ = placed_order

        data = client.patch(f"/api/v1/admin/orders/{order.id}", json={"status": "DELIVERED"},
                            headers=admin_headers).json()["data"]

        assert data["delivered_at"] is not None

    def test_cancel_restocks_and_records_reason(self, client, admin_headers, placed_order, db_session):
        order, kit = placed_order

        data = client.patch(
            f"/api/v1/admin/orders/{order.id}",
            json={"status": "CANCELLED", "cancellation_reason": "Customer request"},
            headers=admin_headers
        ).json()["data"]

        assert data["notes"] == "Cancellation reason: Customer request"
        db_session.refresh(kit)
        assert kit.stock_quantity == 8
        assert kit.total_sold == 0

    def test_cancelling_twice_restocks_once(self, client, admin_headers, placed_order, db_session):
        order, kit = placed_order

        for _ in range(2):
            client.patch(f"/api/v1/admin/orders/{order.id}", json={"status": "CANCELLED"}, headers=admin_headers)

        db_session.refresh(kit)
        assert kit.stock_quantity == 8

    def test_reopening_cancelled_order_takes_stock_back(self, client, admin_headers, placed_order, db_session):
        order, kit = placed_order

        for status in ("CANCELLED", "PROCESSING", "CANCELLED"):
            response = client.patch(f"/api/v1/admin/orders/{order.id}", json={"status": status},
                                    headers=admin_headers)
            assert response.status_code == 200

        db_session.refresh(kit)
        assert kit.stock_quantity == 8
        assert kit.total_sold == 0

    def test_reopening_requires_stock(self, client, admin_headers, placed_order, db_session):
        order, kit = placed_order
        client.patch(f"/api/v1/admin/orders/{order.id}", json={"status": "CANCELLED"}, headers=admin_headers)
        db_session.refresh(kit)
        kit.stock_quantity = 1
        db_session.commit()

        response = client.patch(f"/api/v1/admin/orders/{order.id}", json={"status": "PROCESSING"},
                                headers=admin_headers)
        reloaded = client.get(f"/api/v1/admin/orders/{order.id}", headers=admin_headers).json()["data"]

        assert response.status_code == 400
        assert response.json()["detail"] == "Insufficient stock to reopen order: Robot Arm"
        assert reloaded["status"] == "CANCELLED"

    def test_payment_status(self, client, admin_headers, placed_order):
        order, _ = placed_order

        ok = client.patch(f"/api/v1/admin/orders/{order.id}", json={"status": "COMPLETED", "payment_status": "paid"},
                          headers=admin_headers)
        bad = client.patch(f"/api/v1/admin/orders/{order.id}", json={"status": "COMPLETED", "payment_status": "maybe"},
                           headers=admin_headers)

        assert ok.json()["data"]["payment_status"] == "PAID"
        assert bad.status_code == 400
