"""
Order Service
Admin-side order lifecycle: status transitions, restocking and customer notifications
"""
import logging
from collections import defaultdict
from typing import Dict, Any, Optional

from sqlalchemy.orm import Session

from storefront.core.database import utcnow
from storefront.core.exceptions import NotFoundError, ValidationError
from storefront.domain.enums import OrderStatus, PaymentStatus
from storefront.repositories.order_repository import OrderRepository
from storefront.services.email_service import EmailService

logger = logging.getLogger(__name__)


def parse_order_status(value: str) -> OrderStatus:
    try:
        return OrderStatus((value or "").strip().upper())
    except ValueError:
        allowed = ", ".join(status.value for status in OrderStatus)
        raise ValidationError(f"Invalid status. Must be one of: {allowed}")


def parse_payment_status(value: str) -> PaymentStatus:
    try:
        return PaymentStatus((value or "").strip().upper())
    except ValueError:
        allowed = ", ".join(status.value for status in PaymentStatus)
        raise ValidationError(f"Invalid payment status. Must be one of: {allowed}")


class OrderService:

    def __init__(self, db: Session, email_service: Optional[EmailService] = None):
        self.db = db
        self.orders = OrderRepository(db)
        self.email = email_service or EmailService(db)

    def _restock(self, row):
        for item in row.items:
            product = item.product
            if product is None:
                continue
            product.stock_quantity += item.quantity
            product.total_sold = max(0, (product.total_sold or 0) - item.quantity)

    def _withdraw_stock(self, row):
        """Take a reopened order's items back out of stock"""
        needed = defaultdict(int)
        for item in row.items:
            if item.product is not None:
                needed[item.product] += item.quantity
        for product, quantity in needed.items():
            if product.stock_quantity < quantity:
                raise ValidationError(f"Insufficient stock to reopen order: {product.name}")
        for item in row.items:
            product = item.product
            if product is None:
                continue
            product.stock_quantity -= item.quantity
            product.total_sold = (product.total_sold or 0) + item.quantity

    async def update_status(
        self,
        order_id: str,
        status: str,
        cancellation_reason: Optional[str] = None,
        payment_status: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Change an order's status

        Side effects:
        - DELIVERED stamps delivered_at
        - CANCELLED stores the reason in notes and returns items to stock
        - Leaving CANCELLED takes the items back out of stock
        - Emails on entering SHIPPED, CANCELLED or COMPLETED (failures are logged only)

        Raises:
            ValidationError: unknown status or payment status, or not enough stock to reopen
            NotFoundError: order does not exist
        """
        new_status = parse_order_status(status)
        new_payment = parse_payment_status(payment_status) if payment_status else None

        row = self.orders.get_row(order_id)
        if row is None:
            raise NotFoundError("Order not found")

        previous = row.status
        changed = previous != new_status.value

        try:
            row.status = new_status.value
            if new_payment is not None:
                row.payment_status = new_payment.value

            if new_status == OrderStatus.DELIVERED and row.delivered_at is None:
                row.delivered_at = utcnow()

            if new_status == OrderStatus.CANCELLED:
                if cancellation_reason and cancellation_reason.strip():
                    row.notes = f"Cancellation reason: {cancellation_reason.strip()}"
                if changed:
                    self._restock(row)
            elif previous == OrderStatus.CANCELLED.value:
                self._withdraw_stock(row)

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Order {row.order_number} status changed from {previous} to {new_status.value}")

        order = self.orders.detail_dict(row)
        customer = order.get("customer")
        if changed and customer:
            if new_status == OrderStatus.CANCELLED:
                await self.email.send_order_cancelled(order, customer, cancellation_reason)
            elif new_status == OrderStatus.COMPLETED:
                await self.email.send_order_completed(order, customer)
            elif new_status == OrderStatus.SHIPPED:
                await self.email.send_order_shipped(order, customer)

        return order
