"""
Analytics Service
Store-wide sales, order and customer metrics for the admin dashboard

All figures are computed in one pass over the orders fetched for the
current and previous periods. Revenue counts COMPLETED, DELIVERED and
SHIPPED orders; the dashboard revenue card counts COMPLETED only.

Author: TechTots
Date: 2025-10-24
"""
from collections import defaultdict
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Dict, Any, List, Optional, Iterable

from sqlalchemy.orm import Session

from storefront.core.database import utcnow
from storefront.domain.enums import OrderStatus, REVENUE_STATUSES, Role
from storefront.models import Order as OrderRow, Product as ProductRow, User as UserRow
from storefront.repositories.order_repository import OrderRepository


def percent_change(current: float, previous: float) -> float:
    """Relative change in percent, 1 decimal; 100 when growing from zero"""
    if previous > 0:
        return round((current - previous) / previous * 100, 1)
    if current > 0:
        return 100.0
    return 0.0


def format_change(change: float) -> str:
    return f"+{change:.1f}%" if change >= 0 else f"{change:.1f}%"


def trend(change: float) -> str:
    return "up" if change >= 0 else "down"


def _sum_totals(orders: Iterable[OrderRow]) -> float:
    return float(sum((Decimal(order.total) for order in orders), Decimal("0")))


class AnalyticsService:

    def __init__(self, db: Session, now: Optional[datetime] = None):
        self.db = db
        self.orders = OrderRepository(db)
        self.now = now or utcnow()

    def _window(self, period_days: int):
        end = self.now
        start = end - timedelta(days=period_days)
        previous_start = start - timedelta(days=period_days)
        return previous_start, start, end

    def _count_customers(self, created_from: Optional[datetime] = None, created_to: Optional[datetime] = None) -> int:
        query = self.db.query(UserRow).filter(UserRow.role == Role.CUSTOMER.value)
        if created_from is not None:
            query = query.filter(UserRow.created_at >= created_from)
        if created_to is not None:
            query = query.filter(UserRow.created_at < created_to)
        return query.count()

    # ------------------------------------------------------------------
    # /analytics
    # ------------------------------------------------------------------

    def get_analytics(self, period_days: int = 30) -> Dict[str, Any]:
        previous_start, start, end = self._window(period_days)
        orders = self.orders.find_between(previous_start, end + timedelta(seconds=1))
        current = [order for order in orders if order.created_at >= start]
        previous = [order for order in orders if order.created_at < start]

        return {
            "period": period_days,
            "sales_data": self._sales_data(current, previous),
            "order_stats": self._order_stats(current, previous, previous_start, start),
            "top_selling_products": self._top_selling_products(current),
            "sales_by_category": self._sales_by_category(current),
        }

    def _sales_data(self, current: List[OrderRow], previous: List[OrderRow]) -> Dict[str, Any]:
        revenue = [order for order in current if order.status in REVENUE_STATUSES]
        current_total = _sum_totals(revenue)
        previous_total = _sum_totals(order for order in previous if order.status in REVENUE_STATUSES)
        change = percent_change(current_total, previous_total)

        day_ago = self.now - timedelta(days=1)
        week_ago = self.now - timedelta(days=7)
        return {
            "daily": _sum_totals(order for order in revenue if order.created_at >= day_ago),
            "weekly": _sum_totals(order for order in revenue if order.created_at >= week_ago),
            "monthly": current_total,
            "previous_period_change": change,
            "trending": trend(change),
        }

    def _order_stats(self, current: List[OrderRow], previous: List[OrderRow],
                     previous_start: datetime, start: datetime) -> Dict[str, Any]:
        total_customers = self._count_customers()
        customers_at_start = self._count_customers(created_to=start)

        conversion = (len(current) / total_customers * 100) if total_customers else 0.0
        previous_conversion = (len(previous) / customers_at_start * 100) if customers_at_start else 0.0
        conversion_change = round(conversion - previous_conversion, 1)

        current_revenue = [order for order in current if order.status in REVENUE_STATUSES]
        previous_revenue = [order for order in previous if order.status in REVENUE_STATUSES]
        aov = _sum_totals(current_revenue) / len(current_revenue) if current_revenue else 0.0
        previous_aov = _sum_totals(previous_revenue) / len(previous_revenue) if previous_revenue else 0.0
        aov_change = percent_change(aov, previous_aov)

        new_customers = self._count_customers(created_from=start)
        previous_new_customers = self._count_customers(created_from=previous_start, created_to=start)
        customer_change = percent_change(new_customers, previous_new_customers)

        return {
            "conversion_rate": {
                "rate": round(conversion, 1),
                "previous_period_change": conversion_change,
                "trending": trend(conversion_change),
            },
            "average_order_value": {
                "value": round(aov, 2),
                "previous_period_change": aov_change,
                "trending": trend(aov_change),
            },
            "total_customers": {
                "value": total_customers,
                "new_in_period": new_customers,
                "previous_period_change": customer_change,
                "trending": trend(customer_change),
            },
        }

    @staticmethod
    def _top_selling_products(current: List[OrderRow], limit: int = 5) -> List[Dict[str, Any]]:
        """Top products by units sold in the period, presented by revenue (units x current price)"""
        sold: Dict[str, int] = defaultdict(int)
        products: Dict[str, ProductRow] = {}
        for order in current:
            for item in order.items:
                if item.product_id is None:
                    continue
                sold[item.product_id] += item.quantity
                if item.product is not None:
                    products[item.product_id] = item.product

        top_ids = sorted(sold, key=lambda product_id: sold[product_id], reverse=True)[:limit]
        result = []
        for product_id in top_ids:
            product = products.get(product_id)
            price = float(product.price) if product else 0.0
            result.append({
                "id": product_id,
                "name": product.name if product else "Unknown Product",
                "sold_quantity": sold[product_id],
                "revenue": round(sold[product_id] * price, 2),
            })
        return sorted(result, key=lambda entry: entry["revenue"], reverse=True)

    @staticmethod
    def _sales_by_category(current: List[OrderRow]) -> List[Dict[str, Any]]:
        amounts: Dict[Optional[str], float] = defaultdict(float)
        names: Dict[Optional[str], str] = {}
        for order in current:
            if order.status not in REVENUE_STATUSES:
                continue
            for item in order.items:
                category = item.product.category if item.product is not None else None
                category_id = category.id if category else None
                names[category_id] = category.name if category else "Uncategorized"
                amounts[category_id] += float(item.price) * item.quantity

        total = sum(amounts.values())
        rows = [
            {
                "category_id": category_id,
                "category": names[category_id],
                "amount": round(amount, 2),
                "percentage": round(amount / total * 100) if total > 0 else 0,
            }
            for category_id, amount in amounts.items()
        ]
        return sorted(rows, key=lambda row: row["amount"], reverse=True)

    # ------------------------------------------------------------------
    # /dashboard
    # ------------------------------------------------------------------

    def get_dashboard(self, period_days: int = 30) -> Dict[str, Any]:
        previous_start, start, end = self._window(period_days)
        orders = self.orders.find_between(previous_start, end + timedelta(seconds=1))
        current = [order for order in orders if order.created_at >= start]
        previous = [order for order in orders if order.created_at < start]

        completed = OrderStatus.COMPLETED.value
        revenue = _sum_totals(order for order in current if order.status == completed)
        previous_revenue = _sum_totals(order for order in previous if order.status == completed)
        new_customers = self._count_customers(created_from=start)
        previous_new_customers = self._count_customers(created_from=previous_start, created_to=start)
        active_products = self.db.query(ProductRow).filter(ProductRow.is_active.is_(True)).count()

        def card(title, value, current_value, previous_value, description):
            change = percent_change(current_value, previous_value)
            return {
                "title": title,
                "value": value,
                "change": format_change(change),
                "trend": trend(change),
                "description": description,
            }

        period_label = f"Last {period_days} days"
        stats = [
            card("Total Revenue", round(revenue, 2), revenue, previous_revenue, period_label),
            card("Total Orders", len(current), len(current), len(previous), period_label),
            card("New Customers", new_customers, new_customers, previous_new_customers, period_label),
            {
                "title": "Total Products",
                "value": active_products,
                "change": "+0.0%",
                "trend": "up",
                "description": "Active products",
            },
        ]

        recent_orders = [
            {
                "id": order["id"],
                "order_number": order["order_number"],
                "customer": (order.get("customer") or {}).get("name") or "Guest User",
                "date": order["created_at"][:10],
                "amount": order["total"],
                "status": order["status"].capitalize(),
            }
            for order in self.orders.recent(5)
        ]

        top_products = [
            {
                "id": product.id,
                "name": product.name,
                "price": float(product.price),
                "sales": product.total_sold,
                "inventory": product.stock_quantity,
            }
            for product in (
                self.db.query(ProductRow)
                .filter(ProductRow.total_sold > 0)
                .order_by(ProductRow.total_sold.desc())
                .limit(5)
                .all()
            )
        ]

        return {"stats": stats, "recent_orders": recent_orders, "top_products": top_products}


# Fixed payloads served when USE_MOCK_DATA is enabled
MOCK_ANALYTICS = {
    "period": 30,
    "sales_data": {
        "daily": 1250.5,
        "weekly": 8430.25,
        "monthly": 32150.75,
        "previous_period_change": 12.5,
        "trending": "up",
    },
    "order_stats": {
        "conversion_rate": {"rate": 3.2, "previous_period_change": 0.4, "trending": "up"},
        "average_order_value": {"value": 86.4, "previous_period_change": 5.2, "trending": "up"},
        "total_customers": {"value": 1240, "new_in_period": 86, "previous_period_change": 8.1, "trending": "up"},
    },
    "top_selling_products": [
        {"id": "mock-1", "name": "Junior Robotics Kit", "sold_quantity": 124, "revenue": 11160.0},
        {"id": "mock-2", "name": "Solar System Model", "sold_quantity": 98, "revenue": 4410.0},
        {"id": "mock-3", "name": "Chemistry Starter Set", "sold_quantity": 76, "revenue": 4180.0},
        {"id": "mock-4", "name": "Coding Caterpillar", "sold_quantity": 61, "revenue": 3050.0},
        {"id": "mock-5", "name": "Magnetic Math Tiles", "sold_quantity": 57, "revenue": 1710.0},
    ],
    "sales_by_category": [
        {"category_id": "mock-technology", "category": "Technology", "amount": 14200.0, "percentage": 44},
        {"category_id": "mock-science", "category": "Science", "amount": 9800.0, "percentage": 30},
        {"category_id": "mock-engineering", "category": "Engineering", "amount": 5150.75, "percentage": 16},
        {"category_id": "mock-mathematics", "category": "Mathematics", "amount": 3000.0, "percentage": 9},
    ],
}

MOCK_DASHBOARD = {
    "stats": [
        {"title": "Total Revenue", "value": 32150.75, "change": "+12.5%", "trend": "up", "description": "Last 30 days"},
        {"title": "Total Orders", "value": 372, "change": "+8.2%", "trend": "up", "description": "Last 30 days"},
        {"title": "New Customers", "value": 86, "change": "+8.1%", "trend": "up", "description": "Last 30 days"},
        {"title": "Total Products", "value": 148, "change": "+0.0%", "trend": "up", "description": "Active products"},
    ],
    "recent_orders": [
        {"id": "mock-order-1", "order_number": "ORD-1700000000000-101", "customer": "Ana Popescu",
         "date": "2025-10-20", "amount": 129.9, "status": "Processing"},
        {"id": "mock-order-2", "order_number": "ORD-1700000000000-102", "customer": "Mihai Ionescu",
         "date": "2025-10-19", "amount": 89.5, "status": "Shipped"},
    ],
    "top_products": [
        {"id": "mock-1", "name": "Junior Robotics Kit", "price": 90.0, "sales": 124, "inventory": 36},
        {"id": "mock-2", "name": "Solar System Model", "price": 45.0, "sales": 98, "inventory": 52},
    ],
}
