"""
Pytest fixtures and configuration for TechTots Backend tests

This file provides shared fixtures that can be used across all test modules.
Every test gets a fresh in-memory SQLite database wired into the API
through the get_db dependency override.

Author: TechTots
Date: 2025-10-17
"""
from datetime import timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.core.auth import create_access_token, hash_password
from storefront.core.config import settings
from storefront.core.database import Base, get_db, init_db, utcnow
from storefront.core.rate_limit import rate_limiter
from storefront.main import app
from storefront.models import Category, Order, OrderItem, Product, User


@pytest.fixture(scope="session")
def engine():
    """
    Provides a shared in-memory SQLite engine

    Scope: session (created once per test session)
    StaticPool keeps a single connection so every session sees the same database
    """
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield test_engine
    test_engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine):
    """
    Provides a session over freshly created tables for each test

    Scope: function (tables dropped after each test)
    """
    init_db(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """No real email delivery, live analytics and a clean rate limiter for every test"""
    monkeypatch.setattr(settings, "BREVO_API_KEY", None)
    monkeypatch.setattr(settings, "USE_MOCK_DATA", False)
    rate_limiter.reset()
    yield
    rate_limiter.reset()


@pytest.fixture
def client(db_session):
    """
    Provides a TestClient whose requests use the test session
    """
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# ============================================================================
# Factories
# ============================================================================

@pytest.fixture
def make_user(db_session):
    """
    Factory for users

    Passwords are only hashed when given, bcrypt is slow.
    """
    counter = {"n": 0}

    def _make_user(role="CUSTOMER", email=None, name="Test User", password=None, is_active=True, created_at=None):
        counter["n"] += 1
        user = User(
            name=name,
            email=email or f"user{counter['n']}@example.com",
            password_hash=hash_password(password) if password else None,
            role=role,
            is_active=is_active,
        )
        if created_at is not None:
            user.created_at = created_at
            user.updated_at = created_at
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture
def customer(make_user):
    return make_user(role="CUSTOMER", email="ada@example.com", name="Ada Lovelace")


@pytest.fixture
def admin_user(make_user):
    return make_user(role="ADMIN", email="admin@techtots.com", name="Store Admin")


@pytest.fixture
def supplier_user(make_user):
    return make_user(role="SUPPLIER", email="vendor@example.com", name="Vendor Owner")


@pytest.fixture
def auth_headers():
    """Returns a function building bearer headers for a user"""
    def _headers(user):
        token = create_access_token(user.id, user.email, user.name, user.role)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def category(db_session):
    row = Category(name="Robotics", slug="robotics", description="Build and code robots")
    db_session.add(row)
    db_session.commit()
    return row


@pytest.fixture
def make_product(db_session):
    """Factory for products"""
    counter = {"n": 0}

    def _make_product(name=None, price="49.99", stock=10, category=None, is_active=True, featured=False, **fields):
        counter["n"] += 1
        name = name or f"STEM Kit {counter['n']}"
        product = Product(
            name=name,
            slug=fields.pop("slug", f"stem-kit-{counter['n']}"),
            price=Decimal(price),
            stock_quantity=stock,
            category_id=category.id if category else None,
            is_active=is_active,
            featured=featured,
            **fields
        )
        db_session.add(product)
        db_session.commit()
        return product

    return _make_product


@pytest.fixture
def make_order(db_session):
    """
    Factory for orders

    lines: list of (product, quantity); totals are derived from product prices
    """
    counter = {"n": 0}

    def _make_order(user, lines=(), status="PROCESSING", created_at=None, discount="0", total=None):
        counter["n"] += 1
        subtotal = sum((Decimal(product.price) * quantity for product, quantity in lines), Decimal("0"))
        order = Order(
            order_number=f"ORD-TEST-{counter['n']:03d}",
            user_id=user.id,
            subtotal=subtotal,
            discount_amount=Decimal(discount),
            total=Decimal(total) if total is not None else subtotal - Decimal(discount),
            status=status,
            payment_status="PENDING",
            payment_method="card",
        )
        if created_at is not None:
            order.created_at = created_at
            order.updated_at = created_at
        for product, quantity in lines:
            order.items.append(OrderItem(product_id=product.id, name=product.name, price=product.price, quantity=quantity))
        db_session.add(order)
        db_session.commit()
        return order

    return _make_order


@pytest.fixture
def days_ago():
    """Returns a function giving a naive UTC timestamp N days in the past"""
    def _days_ago(days, hours=0):
        return utcnow() - timedelta(days=days, hours=hours)

    return _days_ago


@pytest.fixture
def sample_address_data():
    """
    Provides sample address data for tests
    """
    return {
        "full_name": "Ada Lovelace",
        "address_line1": "12 Analytical Street",
        "city": "Cluj-Napoca",
        "state": "Cluj",
        "postal_code": "400001",
        "country": "Romania",
        "phone": "+40712345678",
    }


@pytest.fixture
def sample_supplier_data():
    """
    Provides a valid supplier registration payload
    """
    return {
        "company_name": "Bright Minds Toys",
        "company_slug": "bright-minds-toys",
        "description": "Wooden STEM kits",
        "website": "https://brightminds.example.com",
        "phone": "+40721000111",
        "vat_number": "RO12345678",
        "business_address": "1 Factory Road",
        "business_city": "Brasov",
        "business_state": "Brasov",
        "business_country": "Romania",
        "business_postal_code": "500001",
        "contact_person_name": "Ioana Pop",
        "contact_person_email": "ioana@brightminds.example.com",
        "contact_person_phone": "+40721000222",
        "year_established": 2015,
        "terms_accepted": True,
        "privacy_accepted": True,
    }
