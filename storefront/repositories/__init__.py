"""
Repository Layer - Data Access

This layer handles all database queries and returns domain models.
Repositories wrap a SQLAlchemy session and hide query details from services.

Author: TechTots
Date: 2025-10-17
"""
from storefront.repositories.product_repository import ProductRepository
from storefront.repositories.order_repository import OrderRepository
from storefront.repositories.customer_repository import CustomerRepository
from storefront.repositories.address_repository import AddressRepository
from storefront.repositories.payment_card_repository import PaymentCardRepository
from storefront.repositories.wishlist_repository import WishlistRepository
from storefront.repositories.cart_repository import CartRepository
from storefront.repositories.supplier_repository import SupplierRepository
from storefront.repositories.ticket_repository import TicketRepository
from storefront.repositories.email_template_repository import EmailTemplateRepository
from storefront.repositories.settings_repository import SettingsRepository

__all__ = [
    'ProductRepository',
    'OrderRepository',
    'CustomerRepository',
    'AddressRepository',
    'PaymentCardRepository',
    'WishlistRepository',
    'CartRepository',
    'SupplierRepository',
    'TicketRepository',
    'EmailTemplateRepository',
    'SettingsRepository',
]
