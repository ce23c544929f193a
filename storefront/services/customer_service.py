"""
Customer Service
Admin-side customer management
"""
import logging
from decimal import Decimal
from typing import Dict, Any

from sqlalchemy.orm import Session

from storefront.core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from storefront.domain.enums import Role, OrderStatus
from storefront.repositories.address_repository import AddressRepository
from storefront.repositories.customer_repository import CustomerRepository
from storefront.repositories.order_repository import OrderRepository
from storefront.repositories.payment_card_repository import PaymentCardRepository
from storefront.repositories.wishlist_repository import WishlistRepository

logger = logging.getLogger(__name__)


class CustomerService:

    def __init__(self, db: Session):
        self.users = CustomerRepository(db)
        self.orders = OrderRepository(db)
        self.addresses = AddressRepository(db)
        self.cards = PaymentCardRepository(db)
        self.wishlist = WishlistRepository(db)

    def _get_user(self, customer_id: str):
        user = self.users.get_row(customer_id)
        if user is None:
            raise NotFoundError("Customer not found")
        return user

    def get_detail(self, customer_id: str) -> Dict[str, Any]:
        user = self._get_user(customer_id)
        orders = self.orders.find_by_user(customer_id)
        billable = [order for order in orders if order.status != OrderStatus.CANCELLED.value]
        total_spent = sum((order.total for order in billable), Decimal("0"))

        return {
            "id": user.id,
            "name": user.name or "Anonymous",
            "email": user.email,
            "role": user.role,
            "status": "Active" if user.is_active else "Inactive",
            "is_active": user.is_active,
            "created_at": user.created_at.isoformat(),
            "total_orders": len(orders),
            "total_spent": float(total_spent),
            "average_order_value": float(total_spent / len(billable)) if billable else 0.0,
            "last_order": orders[0].to_dict() if orders else None,
            "recent_orders": [order.to_dict() for order in orders[:5]],
            "wishlist_count": self.wishlist.count_for_user(customer_id),
            "addresses": [address.to_dict() for address in self.addresses.find_by_user(customer_id)],
            "payment_cards": [card.to_dict() for card in self.cards.find_by_user(customer_id)],
        }

    def set_active(self, customer_id: str, is_active: bool) -> Dict[str, Any]:
        user = self._get_user(customer_id)
        if user.role == Role.ADMIN.value and not is_active:
            raise PermissionDeniedError("Cannot deactivate admin users")
        user.is_active = is_active
        self.users.save(user)
        logger.info(f"Customer {customer_id} {'activated' if is_active else 'deactivated'}")
        return {"id": user.id, "status": "Active" if user.is_active else "Inactive"}

    def delete(self, customer_id: str):
        """
        Raises:
            NotFoundError: unknown customer
            PermissionDeniedError: target is an admin
            ValidationError: customer has orders (deactivate instead)
        """
        user = self._get_user(customer_id)
        if user.role == Role.ADMIN.value:
            raise PermissionDeniedError("Cannot delete admin users")
        if self.orders.has_orders(customer_id):
            raise ValidationError("Cannot delete user with existing orders. Deactivate the account instead.")

        self.users.delete(user)
        logger.info(f"Customer {customer_id} deleted")
