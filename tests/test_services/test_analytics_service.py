"""
Tests for AnalyticsService

Helper functions are tested directly; the service runs against the
in-memory database with orders spread over the current and previous periods.

Author: TechTots
Date: 2025-10-24
"""
import pytest

from storefront.services.analytics_service import AnalyticsService, format_change, percent_change, trend


class TestChangeHelpers:

    @pytest.mark.parametrize("current,previous,expected", [
        (150, 100, 50.0),
        (50, 100, -50.0),
        (10, 0, 100.0),
        (0, 0, 0.0),
        (1, 3, -66.7),
    ])
    def test_percent_change(self, current, previous, expected):
        assert percent_change(current, previous) == expected

    def test_format_change(self):
        assert format_change(12.345) == "+12.3%"
        assert format_change(0) == "+0.0%"
        assert format_change(-4.25) == "-4.2%"

    def test_trend(self):
        assert trend(0.0) == "up"
        assert trend(-0.1) == "down"


@pytest.fixture
def sales_history(make_user, make_product, make_order, category, days_ago):
    """
    Two customers and four orders:

    current period (last 30 days): COMPLETED 60, SHIPPED 50, PROCESSING 20
    previous period: DELIVERED 50
    """
    loyal = make_user(name="Ada Lovelace", email="ada@example.com", created_at=days_ago(90))
    make_user(name="Grace Hopper", email="grace@example.com", created_at=days_ago(5))

    robot = make_product(name="Robot Arm", price="20.00", category=category, total_sold=7)
    telescope = make_product(name="Telescope", price="50.00", total_sold=2)

    orders = {
        "completed": make_order(loyal, [(robot, 3)], status="COMPLETED", created_at=days_ago(2)),
        "shipped": make_order(loyal, [(telescope, 1)], status="SHIPPED", created_at=days_ago(10)),
        "processing": make_order(loyal, [(robot, 1)], status="PROCESSING", created_at=days_ago(3)),
        "previous": make_order(loyal, [(telescope, 1)], status="DELIVERED", created_at=days_ago(40)),
    }
    return {"robot": robot, "telescope": telescope, "orders": orders}


class TestGetAnalytics:

    def test_sales_data(self, db_session, sales_history):
        data = AnalyticsService(db_session).get_analytics(30)["sales_data"]

        assert data["monthly"] == 110.0
        assert data["weekly"] == 60.0
        assert data["daily"] == 0.0
        assert data["previous_period_change"] == 120.0
        assert data["trending"] == "up"

    def test_order_stats(self, db_session, sales_history):
        stats = AnalyticsService(db_session).get_analytics(30)["order_stats"]

        # 3 orders over 2 customers now, 1 order over 1 customer before
        assert stats["conversion_rate"]["rate"] == 150.0
        assert stats["conversion_rate"]["previous_period_change"] == 50.0

        assert stats["average_order_value"]["value"] == 55.0
        assert stats["average_order_value"]["previous_period_change"] == 10.0

        assert stats["total_customers"]["value"] == 2
        assert stats["total_customers"]["new_in_period"] == 1
        assert stats["total_customers"]["previous_period_change"] == 100.0

    def test_admins_are_not_customers(self, db_session, sales_history, admin_user):
        stats = AnalyticsService(db_session).get_analytics(30)["order_stats"]

        assert stats["total_customers"]["value"] == 2

    def test_top_selling_products(self, db_session, sales_history):
        top = AnalyticsService(db_session).get_analytics(30)["top_selling_products"]

        assert [entry["name"] for entry in top] == ["Robot Arm", "Telescope"]
        assert top[0]["sold_quantity"] == 4
        assert top[0]["revenue"] == 80.0
        assert top[1]["sold_quantity"] == 1

    def test_sales_by_category(self, db_session, sales_history, category):
        rows = AnalyticsService(db_session).get_analytics(30)["sales_by_category"]

        assert rows[0] == {"category_id": category.id, "category": "Robotics", "amount": 60.0, "percentage": 55}
        assert rows[1]["category"] == "Uncategorized"
        assert rows[1]["percentage"] == 45

    def test_empty_store(self, db_session):
        analytics = AnalyticsService(db_session).get_analytics(7)

        assert analytics["period"] == 7
        assert analytics["sales_data"]["monthly"] == 0.0
        assert analytics["sales_data"]["previous_period_change"] == 0.0
        assert analytics["top_selling_products"] == []
        assert analytics["sales_by_category"] == []


class TestGetDashboard:

    def test_stat_cards(self, db_session, sales_history):
        stats = AnalyticsService(db_session).get_dashboard(30)["stats"]
        cards = {card["title"]: card for card in stats}

        # Revenue card counts COMPLETED orders only
        assert cards["Total Revenue"]["value"] == 60.0
        assert cards["Total Revenue"]["change"] == "+100.0%"
        assert cards["Total Orders"]["value"] == 3
        assert cards["Total Orders"]["change"] == "+200.0%"
        assert cards["New Customers"]["value"] == 1
        assert cards["Total Products"]["value"] == 2
        assert cards["Total Products"]["description"] == "Active products"
        assert cards["Total Orders"]["description"] == "Last 30 days"

    def test_recent_orders(self, db_session, sales_history):
        recent = AnalyticsService(db_session).get_dashboard(30)["recent_orders"]
        newest = sales_history["orders"]["completed"]

        assert len(recent) == 4
        assert recent[0]["order_number"] == newest.order_number
        assert recent[0]["customer"] == "Ada Lovelace"
        assert recent[0]["status"] == "Completed"
        assert recent[0]["date"] == newest.created_at.isoformat()[:10]

    def test_top_products_by_total_sold(self, db_session, sales_history, make_product):
        make_product(name="Unsold Kit")

        top = AnalyticsService(db_session).get_dashboard(30)["top_products"]

        assert [product["name"] for product in top] == ["Robot Arm", "Telescope"]
        assert top[0]["sales"] == 7
        assert top[0]["inventory"] == 10
