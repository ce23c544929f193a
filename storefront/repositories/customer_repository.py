"""
Customer Repository - users and per-customer order aggregates

Author: TechTots
Date: 2025-10-17
"""
from typing import List, Optional, Tuple

from sqlalchemy import case, func, or_
from sqlalchemy.orm import Session

from storefront.domain.enums import Role, OrderStatus
from storefront.models import User as UserRow, Order as OrderRow


CUSTOMER_SORTS = ("newest", "oldest", "orders-high", "spent-high", "spent-low")


class CustomerRepository:
    """
    Repository for user accounts

    Spend aggregates ignore cancelled orders; order counts include them.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_row(self, user_id: str) -> Optional[UserRow]:
        return self.db.get(UserRow, user_id)

    def find_by_email(self, email: str) -> Optional[UserRow]:
        return self.db.query(UserRow).filter(func.lower(UserRow.email) == email.lower()).first()

    def create(self, name: Optional[str], email: str, password_hash: Optional[str],
               role: str = Role.CUSTOMER.value, is_active: bool = True) -> UserRow:
        row = UserRow(name=name, email=email.lower(), password_hash=password_hash, role=role, is_active=is_active)
        self.db.add(row)
        self.db.commit()
        return row

    def save(self, row: UserRow) -> UserRow:
        self.db.commit()
        return row

    def delete(self, row: UserRow):
        self.db.delete(row)
        self.db.commit()

    def _order_stats_subquery(self):
        spent = func.sum(case((OrderRow.status != OrderStatus.CANCELLED.value, OrderRow.total), else_=0))
        return (
            self.db.query(
                OrderRow.user_id.label("user_id"),
                func.count(OrderRow.id).label("orders"),
                spent.label("spent"),
                func.min(OrderRow.created_at).label("first_order_at"),
            )
            .group_by(OrderRow.user_id)
            .subquery()
        )

    def find_customers(
        self,
        status: str = "all",
        search: Optional[str] = None,
        sort_by: str = "newest",
        limit: int = 10,
        offset: int = 0
    ) -> Tuple[List[dict], int]:
        """
        List CUSTOMER accounts with order count and spend

        Args:
            status: all, active or inactive
            search: Case-insensitive match on name or email
            sort_by: newest, oldest, orders-high, spent-high, spent-low
            limit / offset: Pagination

        Returns:
            Tuple of (customer rows, total count)
        """
        stats = self._order_stats_subquery()
        orders_col = func.coalesce(stats.c.orders, 0)
        spent_col = func.coalesce(stats.c.spent, 0)

        query = (
            self.db.query(UserRow, orders_col.label("orders"), spent_col.label("spent"), stats.c.first_order_at)
            .outerjoin(stats, stats.c.user_id == UserRow.id)
            .filter(UserRow.role == Role.CUSTOMER.value)
        )

        if status == "active":
            query = query.filter(UserRow.is_active.is_(True))
        elif status == "inactive":
            query = query.filter(UserRow.is_active.is_(False))

        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(UserRow.name.ilike(pattern), UserRow.email.ilike(pattern)))

        total = query.count()

        order_by = {
            "newest": [UserRow.created_at.desc()],
            "oldest": [UserRow.created_at.asc()],
            "orders-high": [orders_col.desc(), UserRow.created_at.desc()],
            "spent-high": [spent_col.desc(), UserRow.created_at.desc()],
            "spent-low": [spent_col.asc(), UserRow.created_at.desc()],
        }.get(sort_by, [UserRow.created_at.desc()])

        rows = query.order_by(*order_by).offset(offset).limit(limit).all()

        customers = []
        for user, orders, spent, first_order_at in rows:
            joined = first_order_at or user.created_at
            customers.append({
                "id": user.id,
                "name": user.name or "Anonymous",
                "email": user.email,
                "joined": joined.strftime("%Y-%m-%d"),
                "orders": int(orders or 0),
                "spent": round(float(spent or 0), 2),
                "status": "Active" if user.is_active else "Inactive",
            })
        return customers, total
