"""
Order Repository - Data Access Layer for Orders

Handles all order queries and returns Order domain models.

Author: TechTots
Date: 2025-10-17
"""
from datetime import datetime
from typing import List, Optional, Tuple, Iterable

from sqlalchemy import or_, select
from sqlalchemy.orm import Session, contains_eager, joinedload, selectinload

from storefront.domain.order import Order
from storefront.models import Order as OrderRow, OrderItem as OrderItemRow, User as UserRow, Product as ProductRow


class OrderRepository:
    """
    Repository for Order data access

    All order queries are centralized here.
    """

    def __init__(self, db: Session):
        self.db = db

    def _base_query(self):
        return self.db.query(OrderRow).options(
            selectinload(OrderRow.items),
            joinedload(OrderRow.shipping_address),
        )

    @staticmethod
    def _customer_summary(row: OrderRow) -> dict:
        user = row.user
        return {
            "id": user.id,
            "name": user.name or "Anonymous",
            "email": user.email,
        } if user else None

    def get_row(self, order_id: str) -> Optional[OrderRow]:
        return self._base_query().options(joinedload(OrderRow.user)).filter(OrderRow.id == order_id).first()

    def find_by_id(self, order_id: str) -> Optional[Order]:
        row = self._base_query().filter(OrderRow.id == order_id).first()
        return Order.model_validate(row) if row else None

    def find_for_user(self, user_id: str, order_id: str) -> Optional[Order]:
        row = self._base_query().filter(OrderRow.id == order_id, OrderRow.user_id == user_id).first()
        return Order.model_validate(row) if row else None

    def find_by_user(self, user_id: str, limit: Optional[int] = None) -> List[Order]:
        query = self._base_query().filter(OrderRow.user_id == user_id).order_by(OrderRow.created_at.desc())
        if limit:
            query = query.limit(limit)
        return [Order.model_validate(row) for row in query.all()]

    def detail_dict(self, row: OrderRow) -> dict:
        data = Order.model_validate(row).to_dict()
        data['customer'] = self._customer_summary(row)
        return data

    def find_all(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[dict], int]:
        """
        Find orders with filters (admin listing)

        Args:
            status: Exact order status
            search: Order number, customer name or customer email
            date_from / date_to: Creation date bounds
            limit / offset: Pagination

        Returns:
            Tuple of (order dicts with customer summary, total count)
        """
        query = self.db.query(OrderRow).join(UserRow, OrderRow.user_id == UserRow.id)

        if status:
            query = query.filter(OrderRow.status == status)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                OrderRow.order_number.ilike(pattern),
                UserRow.name.ilike(pattern),
                UserRow.email.ilike(pattern),
            ))
        if date_from:
            query = query.filter(OrderRow.created_at >= date_from)
        if date_to:
            query = query.filter(OrderRow.created_at <= date_to)

        total = query.count()
        rows = (
            query.options(selectinload(OrderRow.items), joinedload(OrderRow.user), joinedload(OrderRow.shipping_address))
            .order_by(OrderRow.created_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return [self.detail_dict(row) for row in rows], total

    def find_between(
        self,
        start: datetime,
        end: Optional[datetime] = None,
        statuses: Optional[Iterable[str]] = None
    ) -> List[OrderRow]:
        """Orders created in [start, end) with items and products loaded (analytics)"""
        query = (
            self.db.query(OrderRow)
            .options(selectinload(OrderRow.items).joinedload(OrderItemRow.product).joinedload(ProductRow.category))
            .filter(OrderRow.created_at >= start)
        )
        if end is not None:
            query = query.filter(OrderRow.created_at < end)
        if statuses:
            query = query.filter(OrderRow.status.in_(list(statuses)))
        return query.order_by(OrderRow.created_at).all()

    def recent(self, limit: int = 5) -> List[dict]:
        rows = (
            self.db.query(OrderRow)
            .options(selectinload(OrderRow.items), joinedload(OrderRow.user), joinedload(OrderRow.shipping_address))
            .order_by(OrderRow.created_at.desc())
            .limit(limit)
            .all()
        )
        return [self.detail_dict(row) for row in rows]

    def has_orders(self, user_id: str) -> bool:
        return self.db.query(OrderRow.id).filter(OrderRow.user_id == user_id).first() is not None

    def count_with_coupon(self, user_id: str, coupon_code: str) -> int:
        return (
            self.db.query(OrderRow)
            .filter(OrderRow.user_id == user_id, OrderRow.coupon_code == coupon_code)
            .count()
        )

    def order_number_exists(self, order_number: str) -> bool:
        return self.db.query(OrderRow.id).filter(OrderRow.order_number == order_number).first() is not None

    # ------------------------------------------------------------------
    # Supplier views
    # ------------------------------------------------------------------

    @staticmethod
    def _supplier_order_ids(supplier_id: str):
        return (
            select(OrderItemRow.order_id)
            .join(ProductRow, OrderItemRow.product_id == ProductRow.id)
            .where(ProductRow.supplier_id == supplier_id)
        )

    def _supplier_query(self, supplier_id: str):
        return (
            self.db.query(OrderRow)
            .options(
                selectinload(OrderRow.items).joinedload(OrderItemRow.product),
                joinedload(OrderRow.user),
                joinedload(OrderRow.shipping_address),
            )
            .filter(OrderRow.id.in_(self._supplier_order_ids(supplier_id)))
        )

    def find_for_supplier(
        self,
        supplier_id: str,
        status: Optional[str] = None,
        limit: int = 10,
        offset: int = 0
    ) -> Tuple[List[OrderRow], int]:
        """Orders holding at least one of the supplier's products, newest first"""
        query = self._supplier_query(supplier_id)
        if status:
            query = query.filter(OrderRow.status == status)
        total = query.count()
        rows = query.order_by(OrderRow.created_at.desc()).offset(offset).limit(limit).all()
        return rows, total

    def get_for_supplier(self, supplier_id: str, order_id: str) -> Optional[OrderRow]:
        return self._supplier_query(supplier_id).filter(OrderRow.id == order_id).first()

    def supplier_lines(
        self,
        supplier_id: str,
        start: Optional[datetime] = None,
        statuses: Optional[Iterable[str]] = None
    ) -> List[OrderItemRow]:
        """Order lines of the supplier's products with order, product and category loaded"""
        query = (
            self.db.query(OrderItemRow)
            .join(OrderRow, OrderItemRow.order_id == OrderRow.id)
            .join(ProductRow, OrderItemRow.product_id == ProductRow.id)
            .options(
                contains_eager(OrderItemRow.order),
                contains_eager(OrderItemRow.product).joinedload(ProductRow.category),
            )
            .filter(ProductRow.supplier_id == supplier_id)
        )
        if start is not None:
            query = query.filter(OrderRow.created_at >= start)
        if statuses:
            query = query.filter(OrderRow.status.in_(list(statuses)))
        return query.order_by(OrderRow.created_at).all()
