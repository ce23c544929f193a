"""
Tests for the public catalog and store settings endpoints

Author: TechTots
Date: 2025-10-17
"""


class TestProductListing:

    def test_pagination_envelope(self, client, make_product):
        for _ in range(3):
            make_product()

        body = client.get("/api/v1/products/?limit=2&page=2").json()

        assert body["status"] == "success"
        assert len(body["data"]) == 1
        assert body["pagination"] == {"total": 3, "page": 2, "limit": 2, "pages": 2}

    def test_filters(self, client, make_product, category):
        make_product(name="Line Follower", price="80.00", category=category, featured=True)
        make_product(name="Bristlebot", price="15.00", category=category)
        make_product(name="Crystal Garden", price="20.00")

        featured = client.get("/api/v1/products/?featured=true").json()
        robotics_cheap = client.get("/api/v1/products/?category=robotics&max_price=50").json()

        assert [product["name"] for product in featured["data"]] == ["Line Follower"]
        assert [product["name"] for product in robotics_cheap["data"]] == ["Bristlebot"]

    def test_sort_by_name(self, client, make_product):
        make_product(name="Zoetrope")
        make_product(name="Abacus")

        names = [product["name"] for product in client.get("/api/v1/products/?sort=name").json()["data"]]

        assert names == ["Abacus", "Zoetrope"]

    def test_limit_bounds(self, client):
        assert client.get("/api/v1/products/?limit=0").status_code == 400
        assert client.get("/api/v1/products/?limit=101").status_code == 400


class TestProductDetail:

    def test_by_slug(self, client, make_product, category):
        make_product(name="Line Follower", slug="line-follower", category=category)

        data = client.get("/api/v1/products/line-follower").json()["data"]

        assert data["name"] == "Line Follower"
        assert data["category"]["name"] == "Robotics"

    def test_inactive_is_hidden(self, client, make_product):
        make_product(slug="retired", is_active=False)

        response = client.get("/api/v1/products/retired")

        assert response.status_code == 404
        assert response.json()["detail"] == "Product not found"

    def test_categories(self, client, category):
        body = client.get("/api/v1/products/categories").json()

        assert body["count"] == 1
        assert body["data"][0]["slug"] == "robotics"


class TestStoreSettings:

    def test_public_settings_created_with_defaults(self, client):
        data = client.get("/api/v1/settings/public").json()["data"]

        assert data["store_name"] == "TechTots"
        assert data["currency"] == "EUR"
        assert data["shipping_settings"]["free_threshold"]["price"] == 250.0
        assert "payment_settings" not in data

    def test_admin_partial_update_merges_blocks(self, client, admin_user, auth_headers):
        headers = auth_headers(admin_user)

        response = client.put("/api/v1/admin/settings/", json={
            "store_name": "TechTots Kids",
            "contact_email": "hello@techtots.com",
            "tax_settings": {"rate": 19},
        }, headers=headers)
        data = client.get("/api/v1/admin/settings/", headers=headers).json()["data"]

        assert response.status_code == 200
        assert data["store_name"] == "TechTots Kids"
        assert data["contact_email"] == "hello@techtots.com"
        assert data["tax_settings"]["rate"] == 19
        assert data["tax_settings"]["active"] is True
        assert data["payment_settings"]["card_payments"] is True

    def test_admin_settings_require_admin(self, client, customer, auth_headers):
        response = client.get("/api/v1/admin/settings/", headers=auth_headers(customer))

        assert response.status_code == 403
