"""
Supplier Catalog Service
Products a supplier lists, the orders that contain them and the
supplier's sales figures

Order lines are split into the store commission (the supplier's
commission_rate percent of the line total) and the supplier revenue
(the rest). Sales count PROCESSING, SHIPPED, DELIVERED and COMPLETED
orders; cancelled orders never earn revenue.

Author: TechTots
Date: 2025-10-26
"""
import logging
import math
from collections import defaultdict
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Dict, Any, List, Optional, Tuple

from sqlalchemy.orm import Session

from storefront.core.auth import TokenUser
from storefront.core.database import utcnow
from storefront.core.exceptions import ConflictError, NotFoundError, ValidationError
from storefront.domain.catalog import Product, SupplierProductCreate, SupplierProductUpdate, slugify
from storefront.domain.enums import OrderStatus, SUPPLIER_SALE_STATUSES
from storefront.domain.order import OrderAddress
from storefront.models import OrderItem as OrderItemRow, Order as OrderRow, Supplier as SupplierRow
from storefront.repositories.order_repository import OrderRepository
from storefront.repositories.product_repository import ProductRepository
from storefront.repositories.supplier_repository import SupplierRepository
from storefront.services.analytics_service import percent_change
from storefront.services.checkout_service import money

logger = logging.getLogger(__name__)

SUPPLIER_PERIODS = {"7d": 7, "30d": 30, "90d": 90, "1y": 365}
DEFAULT_PERIOD = "30d"
LOW_STOCK_THRESHOLD = 5


def resolve_period(period: Optional[str]) -> Tuple[str, int]:
    """Known period key and its length in days; anything else means 30 days"""
    if period in SUPPLIER_PERIODS:
        return period, SUPPLIER_PERIODS[period]
    return DEFAULT_PERIOD, SUPPLIER_PERIODS[DEFAULT_PERIOD]


def split_commission(line_total: Decimal, commission_rate) -> Tuple[Decimal, Decimal]:
    """(commission, supplier revenue) of a line total"""
    commission = money(Decimal(line_total) * Decimal(str(commission_rate)) / 100)
    return commission, money(Decimal(line_total) - commission)


def month_keys(start: datetime, end: datetime) -> List[str]:
    keys = []
    year, month = start.year, start.month
    while (year, month) <= (end.year, end.month):
        keys.append(f"{year}-{month:02d}")
        month += 1
        if month > 12:
            year, month = year + 1, 1
    return keys


class SupplierCatalogService:

    def __init__(self, db: Session, now: Optional[datetime] = None):
        self.suppliers = SupplierRepository(db)
        self.products = ProductRepository(db)
        self.orders = OrderRepository(db)
        self.now = now or utcnow()

    def supplier_for(self, user: TokenUser) -> SupplierRow:
        row = self.suppliers.get_by_user(user.id)
        if row is None:
            raise NotFoundError("Supplier not found")
        return row

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    def list_products(
        self,
        user: TokenUser,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
        status: Optional[str] = None,
        low_stock: bool = False,
        category: Optional[str] = None,
        sort: str = "created",
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None
    ) -> Dict[str, Any]:
        """
        The supplier's own products, active and inactive

        Args:
            status: "active" or "inactive"
            low_stock: Only products with LOW_STOCK_THRESHOLD units or fewer
        """
        supplier = self.supplier_for(user)
        is_active = {"active": True, "inactive": False}.get(status) if status else None

        products, total = self.products.find_all(
            category=category,
            min_price=min_price,
            max_price=max_price,
            search=search,
            sort=sort,
            active_only=False,
            is_active=is_active,
            supplier_id=supplier.id,
            low_stock_threshold=LOW_STOCK_THRESHOLD if low_stock else None,
            limit=limit,
            offset=(page - 1) * limit
        )
        return {
            "products": [product.to_dict() for product in products],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": math.ceil(total / limit) if limit else 0,
            },
        }

    def get_product(self, user: TokenUser, product_id: str) -> Product:
        supplier = self.supplier_for(user)
        if self.products.get_supplier_row(supplier.id, product_id) is None:
            raise NotFoundError("Product not found")
        return self.products.find_by_id(product_id)

    def create_product(self, user: TokenUser, data: SupplierProductCreate) -> Product:
        """Create a product owned by the supplier; the slug always comes from the name"""
        supplier = self.supplier_for(user)
        slug = slugify(data.name)
        if self.products.slug_exists(slug):
            raise ValidationError("A product with this name already exists")
        if data.sku and self.products.sku_exists(data.sku):
            raise ConflictError("Product with this SKU already exists")

        product = self.products.create({**data.model_dump(), "slug": slug, "supplier_id": supplier.id})
        logger.info(f"Supplier {supplier.company_name} created product {product.slug}")
        return product

    def update_product(self, user: TokenUser, product_id: str, data: SupplierProductUpdate) -> Product:
        supplier = self.supplier_for(user)
        row = self.products.get_supplier_row(supplier.id, product_id)
        if row is None:
            raise NotFoundError("Product not found")

        changes = data.model_dump(exclude_unset=True)
        for required in ("name", "price", "is_active", "stock_quantity"):
            if required in changes and changes[required] is None:
                changes.pop(required)

        if "name" in changes and changes["name"] != row.name:
            slug = slugify(changes["name"])
            if self.products.slug_exists(slug, exclude_id=product_id):
                raise ValidationError("A product with this name already exists")
            changes["slug"] = slug
        if changes.get("sku") and self.products.sku_exists(changes["sku"], exclude_id=product_id):
            raise ConflictError("Product with this SKU already exists")

        return self.products.update(row, changes)

    def delete_product(self, user: TokenUser, product_id: str):
        supplier = self.supplier_for(user)
        row = self.products.get_supplier_row(supplier.id, product_id)
        if row is None:
            raise NotFoundError("Product not found")
        if self.products.is_referenced_by_orders(product_id):
            raise ValidationError("Cannot delete product with existing orders")

        self.products.delete(row)
        logger.info(f"Supplier {supplier.company_name} deleted product {product_id}")

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    @staticmethod
    def _line_dict(item: OrderItemRow, commission_rate) -> Dict[str, Any]:
        line_total = money(Decimal(item.price) * item.quantity)
        commission, revenue = split_commission(line_total, commission_rate)
        return {
            "id": item.id,
            "product_id": item.product_id,
            "name": item.name,
            "sku": item.product.sku if item.product else None,
            "price": float(item.price),
            "quantity": item.quantity,
            "line_total": float(line_total),
            "commission": float(commission),
            "supplier_revenue": float(revenue),
        }

    def _order_dict(self, row: OrderRow, supplier: SupplierRow, with_address: bool = False) -> Dict[str, Any]:
        """Order summary limited to the supplier's own lines"""
        lines = [
            self._line_dict(item, supplier.commission_rate)
            for item in row.items
            if item.product is not None and item.product.supplier_id == supplier.id
        ]
        data = {
            "id": row.id,
            "order_number": row.order_number,
            "status": row.status,
            "payment_status": row.payment_status,
            "payment_method": row.payment_method,
            "created_at": row.created_at.isoformat(),
            "delivered_at": row.delivered_at.isoformat() if row.delivered_at else None,
            "customer": {
                "name": row.user.name or "Anonymous",
                "email": row.user.email,
            } if row.user else None,
            "items": lines,
            "item_count": sum(line["quantity"] for line in lines),
            "subtotal": round(sum(line["line_total"] for line in lines), 2),
            "commission": round(sum(line["commission"] for line in lines), 2),
            "supplier_revenue": round(sum(line["supplier_revenue"] for line in lines), 2),
        }
        if with_address:
            address = row.shipping_address
            data["shipping_address"] = OrderAddress.model_validate(address).to_dict() if address else None
        return data

    def list_orders(self, user: TokenUser, status: Optional[str] = None, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        supplier = self.supplier_for(user)
        rows, total = self.orders.find_for_supplier(supplier.id, status=status, limit=limit, offset=(page - 1) * limit)
        return {
            "orders": [self._order_dict(row, supplier) for row in rows],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": math.ceil(total / limit) if limit else 0,
            },
        }

    def get_order(self, user: TokenUser, order_id: str) -> Dict[str, Any]:
        supplier = self.supplier_for(user)
        row = self.orders.get_for_supplier(supplier.id, order_id)
        if row is None:
            raise NotFoundError("Order not found")
        return self._order_dict(row, supplier, with_address=True)

    # ------------------------------------------------------------------
    # Stats and revenue
    # ------------------------------------------------------------------

    def _split(self, lines: List[OrderItemRow], commission_rate) -> Tuple[Decimal, Decimal]:
        revenue = commission = Decimal("0")
        for item in lines:
            line_commission, line_revenue = split_commission(Decimal(item.price) * item.quantity, commission_rate)
            commission += line_commission
            revenue += line_revenue
        return revenue, commission

    def _month_start(self) -> datetime:
        return self.now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

    def get_stats(self, user: TokenUser, period: Optional[str] = None) -> Dict[str, Any]:
        """
        Dashboard cards and charts for the supplier

        Totals are all-time; revenue_series, top_products and top_categories
        cover the requested period ("7d", "30d", "90d" or "1y").
        """
        supplier = self.supplier_for(user)
        period, days = resolve_period(period)
        start = self.now - timedelta(days=days)
        rate = supplier.commission_rate

        lines = self.orders.supplier_lines(supplier.id)
        sales = [item for item in lines if item.order.status in SUPPLIER_SALE_STATUSES]
        total_revenue, commission_earned = self._split(sales, rate)
        monthly_revenue, _ = self._split([item for item in sales if item.order.created_at >= self._month_start()], rate)
        in_period = [item for item in sales if item.order.created_at >= start]

        return {
            "period": period,
            "total_products": self.suppliers.count_products(supplier.id),
            "active_products": self.suppliers.count_products(supplier.id, active_only=True),
            "total_orders": len({item.order_id for item in lines}),
            "pending_orders": len({
                item.order_id for item in lines if item.order.status == OrderStatus.PROCESSING.value
            }),
            "total_revenue": float(total_revenue),
            "monthly_revenue": float(monthly_revenue),
            "commission_earned": float(commission_earned),
            "revenue_series": self._daily_series(in_period, start, rate),
            "top_products": self._by_product(in_period, rate)[:10],
            "top_categories": self._by_category(in_period, rate)[:5],
        }

    def _daily_series(self, lines: List[OrderItemRow], start: datetime, rate) -> List[Dict[str, Any]]:
        per_day: Dict[str, Decimal] = defaultdict(Decimal)
        for item in lines:
            per_day[item.order.created_at.date().isoformat()] += split_commission(
                Decimal(item.price) * item.quantity, rate
            )[1]

        series = []
        day = start.date()
        while day <= self.now.date():
            key = day.isoformat()
            series.append({"date": key, "revenue": float(per_day.get(key, Decimal("0")))})
            day += timedelta(days=1)
        return series

    @staticmethod
    def _by_product(lines: List[OrderItemRow], rate) -> List[Dict[str, Any]]:
        rows: Dict[str, Dict[str, Any]] = {}
        for item in lines:
            row = rows.setdefault(item.product_id, {
                "product_id": item.product_id,
                "name": item.product.name if item.product else item.name,
                "quantity": 0,
                "revenue": Decimal("0"),
            })
            row["quantity"] += item.quantity
            row["revenue"] += split_commission(Decimal(item.price) * item.quantity, rate)[1]
        return sorted(
            ({**row, "revenue": float(row["revenue"])} for row in rows.values()),
            key=lambda row: row["revenue"],
            reverse=True,
        )

    @staticmethod
    def _by_category(lines: List[OrderItemRow], rate) -> List[Dict[str, Any]]:
        rows: Dict[str, Dict[str, Any]] = {}
        for item in lines:
            category = item.product.category if item.product else None
            name = category.name if category else "Uncategorized"
            row = rows.setdefault(name, {"category": name, "quantity": 0, "revenue": Decimal("0")})
            row["quantity"] += item.quantity
            row["revenue"] += split_commission(Decimal(item.price) * item.quantity, rate)[1]
        return sorted(
            ({**row, "revenue": float(row["revenue"])} for row in rows.values()),
            key=lambda row: row["revenue"],
            reverse=True,
        )

    def get_revenue(self, user: TokenUser, period: Optional[str] = None) -> Dict[str, Any]:
        """
        Revenue report for the period, compared with the period before it

        Returns:
            totals, revenue_growth (percent), a monthly series and the
            product/category breakdown with each entry's share of revenue
        """
        supplier = self.supplier_for(user)
        period, days = resolve_period(period)
        start = self.now - timedelta(days=days)
        previous_start = start - timedelta(days=days)
        rate = supplier.commission_rate

        lines = self.orders.supplier_lines(supplier.id, start=previous_start, statuses=SUPPLIER_SALE_STATUSES)
        current = [item for item in lines if item.order.created_at >= start]
        previous = [item for item in lines if item.order.created_at < start]

        total_revenue, commission_earned = self._split(current, rate)
        previous_revenue, _ = self._split(previous, rate)
        monthly_revenue, _ = self._split([item for item in current if item.order.created_at >= self._month_start()], rate)
        order_ids = {item.order_id for item in current}
        average = total_revenue / len(order_ids) if order_ids else Decimal("0")

        revenue_total = float(total_revenue)
        by_product = [
            {**row, "percentage": round(row["revenue"] / revenue_total * 100, 1) if revenue_total else 0.0}
            for row in self._by_product(current, rate)[:10]
        ]
        by_category = [
            {**row, "percentage": round(row["revenue"] / revenue_total * 100, 1) if revenue_total else 0.0}
            for row in self._by_category(current, rate)[:5]
        ]

        return {
            "period": period,
            "total_revenue": revenue_total,
            "monthly_revenue": float(monthly_revenue),
            "commission_earned": float(commission_earned),
            "revenue_growth": percent_change(revenue_total, float(previous_revenue)),
            "average_order_value": float(money(average)),
            "total_orders": len(order_ids),
            "units_sold": sum(item.quantity for item in current),
            "series": self._monthly_series(current, start, rate),
            "breakdown": {
                "by_product": by_product,
                "by_category": by_category,
            },
        }

    def _monthly_series(self, lines: List[OrderItemRow], start: datetime, rate) -> List[Dict[str, Any]]:
        buckets = {
            key: {"revenue": Decimal("0"), "commission": Decimal("0"), "orders": set(), "customers": set()}
            for key in month_keys(start, self.now)
        }
        for item in lines:
            bucket = buckets.get(item.order.created_at.strftime("%Y-%m"))
            if bucket is None:
                continue
            commission, revenue = split_commission(Decimal(item.price) * item.quantity, rate)
            bucket["revenue"] += revenue
            bucket["commission"] += commission
            bucket["orders"].add(item.order_id)
            bucket["customers"].add(item.order.user_id)

        return [
            {
                "month": key,
                "revenue": float(bucket["revenue"]),
                "commission": float(bucket["commission"]),
                "orders": len(bucket["orders"]),
                "customers": len(bucket["customers"]),
            }
            for key, bucket in buckets.items()
        ]
