"""
Tests for the customer account endpoints

Addresses, saved cards, wishlist, own orders, dashboard and profile.

Author: TechTots
Date: 2025-10-20
"""
import pytest

from storefront.models import Address, PaymentCard

VISA = "4111 1111 1111 1111"
MASTERCARD = "5105105105105100"


@pytest.fixture
def headers(customer, auth_headers):
    return auth_headers(customer)


def card_payload(number=VISA, month="12", year="40", **fields):
    return {
        "cardholder_name": "Ada Lovelace",
        "card_number": number,
        "expiry_month": month,
        "expiry_year": year,
        "cvv": "123",
        **fields,
    }


class TestAddresses:

    def test_first_address_becomes_default(self, client, headers, sample_address_data):
        response = client.post("/api/v1/account/addresses", json=sample_address_data, headers=headers)

        assert response.status_code == 201
        assert response.json()["data"]["is_default"] is True

    def test_new_default_replaces_old(self, client, headers, sample_address_data):
        first = client.post("/api/v1/account/addresses", json=sample_address_data, headers=headers).json()["data"]
        second = client.post(
            "/api/v1/account/addresses", json={**sample_address_data, "city": "Iasi", "is_default": True},
            headers=headers
        ).json()["data"]

        addresses = client.get("/api/v1/account/addresses", headers=headers).json()["data"]
        defaults = [address["id"] for address in addresses if address["is_default"]]

        assert defaults == [second["id"]]
        assert first["id"] != second["id"]

    def test_other_users_address_is_not_found(self, client, headers, sample_address_data, make_user, auth_headers):
        address = client.post("/api/v1/account/addresses", json=sample_address_data, headers=headers).json()["data"]
        stranger = auth_headers(make_user(email="eve@example.com"))

        response = client.delete(f"/api/v1/account/addresses/{address['id']}", headers=stranger)

        assert response.status_code == 404
        assert response.json()["detail"] == "Address not found"


class TestPaymentCards:

    def test_add_card_stores_only_safe_fields(self, client, headers, db_session):
        response = client.post("/api/v1/account/payment-cards", json=card_payload(), headers=headers)

        assert response.status_code == 201
        card = response.json()["data"]
        assert card["last_four_digits"] == "1111"
        assert card["card_type"] == "visa"
        assert card["is_default"] is True
        assert "encrypted_card_data" not in card
        assert card["masked_number"].endswith("1111")

        row = db_session.query(PaymentCard).one()
        assert "4111111111111111" not in row.encrypted_card_data
        assert ":" in row.encrypted_card_data

    def test_default_switches_to_new_card(self, client, headers):
        client.post("/api/v1/account/payment-cards", json=card_payload(), headers=headers)
        client.post("/api/v1/account/payment-cards", json=card_payload(MASTERCARD, is_default=True), headers=headers)

        cards = client.get("/api/v1/account/payment-cards", headers=headers).json()["data"]
        defaults = [card["card_type"] for card in cards if card["is_default"]]

        assert defaults == ["mastercard"]

    def test_expired_card(self, client, headers):
        response = client.post("/api/v1/account/payment-cards", json=card_payload(month="01", year="20"), headers=headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Card has expired"

    def test_luhn_failure(self, client, headers):
        response = client.post(
            "/api/v1/account/payment-cards", json=card_payload("4111111111111112"), headers=headers
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid card number"

    def test_non_digit_card_number_fails_validation(self, client, headers):
        response = client.post("/api/v1/account/payment-cards", json=card_payload("4111-abcd"), headers=headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Validation failed"

    def test_unknown_billing_address(self, client, headers):
        response = client.post(
            "/api/v1/account/payment-cards", json=card_payload(billing_address_id="missing"), headers=headers
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Billing address not found"


class TestWishlist:

    def test_add_then_duplicate(self, client, headers, make_product):
        kit = make_product()

        first = client.post("/api/v1/account/wishlist", json={"product_id": kit.id}, headers=headers)
        second = client.post("/api/v1/account/wishlist", json={"product_id": kit.id}, headers=headers)

        assert first.status_code == 201
        assert second.status_code == 200
        assert second.json()["message"] == "Product already in wishlist"

        wishlist = client.get("/api/v1/account/wishlist", headers=headers).json()
        assert wishlist["count"] == 1
        assert wishlist["data"][0]["product"]["name"] == kit.name

    def test_remove(self, client, headers, make_product):
        kit = make_product()
        client.post("/api/v1/account/wishlist", json={"product_id": kit.id}, headers=headers)

        removed = client.delete(f"/api/v1/account/wishlist/{kit.id}", headers=headers)
        again = client.delete(f"/api/v1/account/wishlist/{kit.id}", headers=headers)

        assert removed.status_code == 200
        assert again.status_code == 404

    def test_unknown_product(self, client, headers):
        response = client.post("/api/v1/account/wishlist", json={"product_id": "missing"}, headers=headers)

        assert response.status_code == 404


class TestOrders:

    def test_only_own_orders(self, client, headers, customer, make_user, make_order, make_product):
        kit = make_product()
        mine = make_order(customer, [(kit, 1)])
        theirs = make_order(make_user(email="eve@example.com"), [(kit, 2)])

        listing = client.get("/api/v1/account/orders", headers=headers).json()
        other = client.get(f"/api/v1/account/orders/{theirs.id}", headers=headers)

        assert [order["id"] for order in listing["data"]] == [mine.id]
        assert other.status_code == 404


class TestOrderTracking:

    def test_shipped_order_timeline(self, client, headers, customer, make_order, make_product, db_session,
                                    sample_address_data):
        order = make_order(customer, [(make_product(), 1)], status="SHIPPED")
        order.shipping_address = Address(user_id=customer.id, **sample_address_data)
        db_session.commit()

        data = client.get(f"/api/v1/account/orders/{order.id}/tracking", headers=headers).json()["data"]

        assert data["order"]["tracking_number"] == "TRKTEST001"
        assert data["order"]["carrier"] == "Standard Shipping"
        assert data["order"]["shipping_address"]["city"] == "Cluj-Napoca"
        assert [event["id"] for event in data["tracking_events"]] == [
            "confirmed", "processing", "shipped", "estimated_delivery",
        ]
        assert data["tracking_events"][-1]["completed"] is False
        assert data["tracking_events"][-1]["location"] == "12 Analytical Street"
        assert data["order"]["estimated_delivery"] is not None

    def test_delivered_order_uses_delivery_time(self, client, headers, customer, make_order, make_product,
                                                db_session, days_ago):
        order = make_order(customer, [(make_product(), 1)], status="DELIVERED", created_at=days_ago(4))
        order.delivered_at = days_ago(1)
        db_session.commit()

        data = client.get(f"/api/v1/account/orders/{order.id}/tracking", headers=headers).json()["data"]
        events = {event["id"]: event for event in data["tracking_events"]}

        assert "estimated_delivery" not in events
        assert events["delivered"]["timestamp"] == order.delivered_at.isoformat()
        assert events["out_for_delivery"]["location"] == "Local Facility - Unknown"
        assert data["order"]["estimated_delivery"] is None

    def test_cancelled_order(self, client, headers, customer, make_order, make_product):
        order = make_order(customer, [(make_product(), 1)], status="CANCELLED")

        data = client.get(f"/api/v1/account/orders/{order.id}/tracking", headers=headers).json()["data"]

        assert [event["id"] for event in data["tracking_events"]] == ["confirmed", "cancelled"]

    def test_other_users_order(self, client, headers, make_user, make_order, make_product):
        order = make_order(make_user(email="eve@example.com"), [(make_product(), 1)])

        response = client.get(f"/api/v1/account/orders/{order.id}/tracking", headers=headers)

        assert response.status_code == 404
        assert response.json()["detail"] == "Order not found"


class TestDashboard:

    def test_stats(self, client, headers, customer, make_order, make_product, category):
        kit = make_product(price="300.00", category=category)
        make_order(customer, [(kit, 2)], status="COMPLETED")
        make_order(customer, [(kit, 1)], status="CANCELLED", total="100")

        stats = client.get("/api/v1/account/dashboard/stats", headers=headers).json()["data"]

        assert stats["total_orders"] == 2
        assert stats["total_spent"] == 600.0
        assert stats["favorite_category"] == "Robotics"
        assert stats["account_level"]["current"] == "silver"
        assert stats["loyalty_points"] == 600

    def test_activities_include_orders_and_welcome(self, client, headers, customer, make_order, make_product):
        make_order(customer, [(make_product(), 1)], status="SHIPPED")

        activities = client.get("/api/v1/account/dashboard/activities", headers=headers).json()["data"]
        types = {activity["type"] for activity in activities}

        assert "order" in types
        assert "account" in types


class TestProfile:

    def test_update_profile(self, client, headers):
        response = client.put("/api/v1/account/profile", json={"name": " Countess Ada "}, headers=headers)

        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Countess Ada"

    def test_email_taken(self, client, headers, make_user):
        make_user(email="grace@example.com")

        response = client.put("/api/v1/account/profile", json={"email": "grace@example.com"}, headers=headers)

        assert response.status_code == 409

    def test_change_password(self, client, make_user, auth_headers):
        user = make_user(email="grace@example.com", password="cobol-1959")
        headers = auth_headers(user)

        wrong = client.post("/api/v1/account/password",
                            json={"current_password": "nope", "new_password": "analytical-1"}, headers=headers)
        ok = client.post("/api/v1/account/password",
                         json={"current_password": "cobol-1959", "new_password": "analytical-1"}, headers=headers)
        login = client.post("/api/v1/auth/login", json={"email": "grace@example.com", "password": "analytical-1"})

        assert wrong.status_code == 400
        assert wrong.json()["detail"] == "Current password is incorrect"
        assert ok.status_code == 200
        assert login.status_code == 200
