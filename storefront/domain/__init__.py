"""
Domain Layer - Business Entities

Pydantic models for storefront entities and request payloads.
Read models are built from ORM rows (from_attributes) and expose to_dict().

Author: TechTots
Date: 2025-10-17
"""
from storefront.domain.catalog import Product, Category
from storefront.domain.order import Order, OrderItem
from storefront.domain.account import Address, PaymentCard, WishlistItem, AccountLevel, UserStats
from storefront.domain.supplier import Supplier, Ticket, TicketResponse
from storefront.domain.email import EmailTemplate
from storefront.domain.settings import StoreSettings

__all__ = [
    'Product',
    'Category',
    'Order',
    'OrderItem',
    'Address',
    'PaymentCard',
    'WishlistItem',
    'AccountLevel',
    'UserStats',
    'Supplier',
    'Ticket',
    'TicketResponse',
    'EmailTemplate',
    'StoreSettings',
]
