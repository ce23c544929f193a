"""
User accounts (customers, admins, suppliers)
"""
import uuid

from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.orm import relationship

from storefront.core.database import Base, utcnow


def new_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255))
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255))
    role = Column(String(20), nullable=False, default="CUSTOMER", index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    email_verified = Column(DateTime)
    image = Column(String(500))

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    orders = relationship("Order", back_populates="user")
    addresses = relationship("Address", back_populates="user", cascade="all, delete-orphan")
    payment_cards = relationship("PaymentCard", back_populates="user", cascade="all, delete-orphan")
    wishlist_items = relationship("WishlistItem", back_populates="user", cascade="all, delete-orphan")
    cart_items = relationship("CartItem", back_populates="user", cascade="all, delete-orphan")
    reviews = relationship("Review", back_populates="user", cascade="all, delete-orphan")
    supplier = relationship(
        "Supplier",
        back_populates="user",
        uselist=False,
        foreign_keys="Supplier.user_id",
        cascade="all, delete-orphan",
    )


class PasswordResetToken(Base):
    """One-hour reset link; only the SHA-256 of the emailed token is stored"""
    __tablename__ = "password_reset_tokens"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String(255), nullable=False, index=True)
    token_hash = Column(String(64), unique=True, nullable=False)
    expires = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
