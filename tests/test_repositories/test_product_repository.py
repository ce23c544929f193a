"""
Tests for ProductRepository

Runs the catalog queries against the in-memory database.

Author: TechTots
Date: 2025-10-17
"""
from decimal import Decimal

from storefront.domain.catalog import Product, slugify
from storefront.repositories.product_repository import ProductRepository


class TestFindAll:
    """Filtering, sorting and pagination"""

    def test_hides_inactive_products_by_default(self, db_session, make_product):
        """Storefront listing only shows active products"""
        # Arrange
        make_product(name="Visible Kit")
        make_product(name="Retired Kit", is_active=False)

        # Act
        products, total = ProductRepository(db_session).find_all()

        # Assert
        assert total == 1
        assert isinstance(products[0], Product)
        assert products[0].name == "Visible Kit"

    def test_is_active_filter_for_back_office(self, db_session, make_product):
        make_product(name="Visible Kit")
        make_product(name="Retired Kit", is_active=False)

        products, total = ProductRepository(db_session).find_all(active_only=False, is_active=False)

        assert total == 1
        assert products[0].name == "Retired Kit"

    def test_category_filter_by_slug(self, db_session, make_product, category):
        make_product(name="Line Follower", category=category)
        make_product(name="Crystal Garden")

        products, total = ProductRepository(db_session).find_all(category="robotics")

        assert total == 1
        assert products[0].category.name == "Robotics"

    def test_price_bounds_are_inclusive(self, db_session, make_product):
        make_product(name="Cheap", price="10.00")
        make_product(name="Mid", price="25.00")
        make_product(name="Pricey", price="90.00")

        products, total = ProductRepository(db_session).find_all(
            min_price=Decimal("10.00"), max_price=Decimal("25.00"), sort="price"
        )

        assert total == 2
        assert [product.name for product in products] == ["Cheap", "Mid"]

    def test_search_matches_name_description_and_tags(self, db_session, make_product):
        make_product(name="Volcano Lab")
        make_product(name="Circuit Board", description="Snap together a working volcano alarm")
        make_product(name="Gear Set", tags=["volcano", "engineering"])
        make_product(name="Puzzle Cube")

        _, total = ProductRepository(db_session).find_all(search="VOLCANO")

        assert total == 3

    def test_sort_price_desc(self, db_session, make_product):
        make_product(name="A", price="5.00")
        make_product(name="B", price="50.00")

        products, _ = ProductRepository(db_session).find_all(sort="price_desc")

        assert [product.name for product in products] == ["B", "A"]

    def test_pagination_keeps_total(self, db_session, make_product):
        for _ in range(5):
            make_product()

        products, total = ProductRepository(db_session).find_all(limit=2, offset=4)

        assert total == 5
        assert len(products) == 1


class TestSlugs:

    def test_slugify(self):
        assert slugify("  Mini Robot: Arm & Claw!") == "mini-robot-arm-claw"
        assert slugify("!!!") == "item"

    def test_unique_slug_appends_suffix(self, db_session, make_product):
        make_product(name="Robot Arm", slug="robot-arm")
        make_product(name="Robot Arm", slug="robot-arm-2")

        assert ProductRepository(db_session).unique_slug("Robot Arm") == "robot-arm-3"

    def test_find_by_slug_ignores_inactive(self, db_session, make_product):
        make_product(name="Retired", slug="retired", is_active=False)
        repo = ProductRepository(db_session)

        assert repo.find_by_slug("retired") is None
        assert repo.find_by_slug("retired", active_only=False).name == "Retired"


class TestOrderReferences:

    def test_is_referenced_by_orders(self, db_session, make_product, make_order, customer):
        ordered = make_product()
        unused = make_product()
        make_order(customer, [(ordered, 1)])

        repo = ProductRepository(db_session)

        assert repo.is_referenced_by_orders(ordered.id) is True
        assert repo.is_referenced_by_orders(unused.id) is False
