"""
Store-wide settings (single row)
"""
from sqlalchemy import Column, String, DateTime, Text, JSON

from storefront.core.database import Base, utcnow

DEFAULT_SETTINGS_ID = "default"

DEFAULT_SHIPPING_SETTINGS = {
    "standard": {"active": True, "price": 15.0},
    "express": {"active": True, "price": 30.0},
    "free_threshold": {"active": True, "price": 250.0},
    "local_pickup": {"active": False, "price": 0.0},
}

DEFAULT_PAYMENT_SETTINGS = {
    "card_payments": True,
    "bank_transfer": False,
    "cash_on_delivery": False,
}

DEFAULT_TAX_SETTINGS = {
    "rate": 21,
    "active": True,
    "include_in_price": True,
}


class StoreSettings(Base):
    __tablename__ = "store_settings"

    id = Column(String(36), primary_key=True, default=DEFAULT_SETTINGS_ID)
    store_name = Column(String(100), nullable=False, default="TechTots")
    store_url = Column(String(255), nullable=False, default="https://techtots.com")
    store_description = Column(Text)
    contact_email = Column(String(255), nullable=False, default="info@techtots.com")
    contact_phone = Column(String(50))
    currency = Column(String(10), nullable=False, default="EUR")
    timezone = Column(String(50), nullable=False, default="Europe/Bucharest")
    date_format = Column(String(20), nullable=False, default="DD/MM/YYYY")
    weight_unit = Column(String(10), nullable=False, default="kg")
    meta_title = Column(String(255))
    meta_description = Column(Text)
    meta_keywords = Column(Text)

    shipping_settings = Column(JSON)
    payment_settings = Column(JSON)
    tax_settings = Column(JSON)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
