"""
Orders, order lines, cart lines and coupons
"""
from sqlalchemy import Column, String, Boolean, DateTime, Integer, Text, Numeric, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from storefront.core.database import Base, utcnow
from .user import new_id


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=new_id)
    order_number = Column(String(50), unique=True, nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)

    # Amounts
    subtotal = Column(Numeric(12, 2), nullable=False)
    tax = Column(Numeric(12, 2), nullable=False, default=0)
    shipping_cost = Column(Numeric(12, 2), nullable=False, default=0)
    discount_amount = Column(Numeric(12, 2), nullable=False, default=0)
    total = Column(Numeric(12, 2), nullable=False)
    coupon_code = Column(String(50))

    # Status
    status = Column(String(20), nullable=False, default="PROCESSING", index=True)
    payment_status = Column(String(20), nullable=False, default="PENDING")
    payment_method = Column(String(50))
    notes = Column(Text)

    shipping_address_id = Column(String(36), ForeignKey("addresses.id", ondelete="SET NULL"))
    billing_address_id = Column(String(36), ForeignKey("addresses.id", ondelete="SET NULL"))

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
    delivered_at = Column(DateTime)

    user = relationship("User", back_populates="orders")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")
    shipping_address = relationship("Address", foreign_keys=[shipping_address_id])


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(String(36), primary_key=True, default=new_id)
    order_id = Column(String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="SET NULL"), index=True)
    name = Column(String(255), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    quantity = Column(Integer, nullable=False)

    order = relationship("Order", back_populates="items")
    product = relationship("Product")


class CartItem(Base):
    __tablename__ = "cart_items"
    __table_args__ = (UniqueConstraint("user_id", "product_id", name="uq_cart_user_product"),)

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="cart_items")
    product = relationship("Product")


class Coupon(Base):
    __tablename__ = "coupons"

    id = Column(String(36), primary_key=True, default=new_id)
    code = Column(String(50), unique=True, nullable=False, index=True)
    description = Column(Text)
    type = Column(String(20), nullable=False)
    value = Column(Numeric(12, 2), nullable=False)
    minimum_order_value = Column(Numeric(12, 2))
    max_discount_amount = Column(Numeric(12, 2))
    max_uses = Column(Integer)
    current_uses = Column(Integer, nullable=False, default=0)
    max_uses_per_user = Column(Integer)
    is_active = Column(Boolean, nullable=False, default=True)
    starts_at = Column(DateTime)
    expires_at = Column(DateTime)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
