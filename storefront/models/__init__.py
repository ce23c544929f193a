"""
SQLAlchemy models

Importing this package registers every table on Base.metadata.
"""
from .user import User, PasswordResetToken
from .account import Address, PaymentCard, WishlistItem, Review
from .catalog import Category, Product
from .order import Order, OrderItem, CartItem, Coupon
from .supplier import Supplier, SupplierTicket, SupplierTicketResponse
from .email import EmailTemplate, EmailSequenceStep
from .settings import StoreSettings

__all__ = [
    "User",
    "PasswordResetToken",
    "Address",
    "PaymentCard",
    "WishlistItem",
    "Review",
    "Category",
    "Product",
    "Order",
    "OrderItem",
    "CartItem",
    "Coupon",
    "Supplier",
    "SupplierTicket",
    "SupplierTicketResponse",
    "EmailTemplate",
    "EmailSequenceStep",
    "StoreSettings",
]
