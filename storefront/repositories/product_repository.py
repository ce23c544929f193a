"""
Product Repository - Data Access Layer for Products

Handles all catalog queries and returns Product domain models.

Author: TechTots
Date: 2025-10-17
"""
from decimal import Decimal
from typing import List, Optional, Tuple, Dict, Any

from sqlalchemy import or_, cast, String
from sqlalchemy.orm import Session, joinedload

from storefront.domain.catalog import Product, Category, slugify
from storefront.models import Product as ProductRow, Category as CategoryRow, OrderItem as OrderItemRow

PRODUCT_SORTS = {
    "name": [ProductRow.name.asc()],
    "price": [ProductRow.price.asc()],
    "price_desc": [ProductRow.price.desc()],
    "featured": [ProductRow.featured.desc(), ProductRow.created_at.desc()],
    "created": [ProductRow.created_at.desc()],
    "stock": [ProductRow.stock_quantity.asc(), ProductRow.name.asc()],
}


class ProductRepository:
    """
    Repository for Product data access

    All catalog queries are centralized here.
    Read methods return Product domain models; get_row returns the ORM row for writes.
    """

    def __init__(self, db: Session):
        self.db = db

    def _base_query(self):
        return self.db.query(ProductRow).options(joinedload(ProductRow.category))

    def get_row(self, product_id: str) -> Optional[ProductRow]:
        return self.db.get(ProductRow, product_id)

    def get_supplier_row(self, supplier_id: str, product_id: str) -> Optional[ProductRow]:
        return (
            self.db.query(ProductRow)
            .filter(ProductRow.id == product_id, ProductRow.supplier_id == supplier_id)
            .first()
        )

    def find_by_id(self, product_id: str) -> Optional[Product]:
        row = self._base_query().filter(ProductRow.id == product_id).first()
        return Product.model_validate(row) if row else None

    def find_by_slug(self, slug: str, active_only: bool = True) -> Optional[Product]:
        query = self._base_query().filter(ProductRow.slug == slug)
        if active_only:
            query = query.filter(ProductRow.is_active.is_(True))
        row = query.first()
        return Product.model_validate(row) if row else None

    def find_all(
        self,
        category: Optional[str] = None,
        featured: Optional[bool] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        search: Optional[str] = None,
        sort: str = "created",
        active_only: bool = True,
        is_active: Optional[bool] = None,
        supplier_id: Optional[str] = None,
        low_stock_threshold: Optional[int] = None,
        limit: int = 12,
        offset: int = 0
    ) -> Tuple[List[Product], int]:
        """
        Find products with filters

        Args:
            category: Category slug
            featured: Only featured (True) or non-featured (False) products
            min_price / max_price: Inclusive price bounds
            search: Case-insensitive match on name, description or tags
            sort: name, price, price_desc, featured, stock or created (newest first)
            active_only: Hide inactive products (storefront)
            is_active: Exact active flag (back office, with active_only=False)
            supplier_id: Only products listed by this supplier
            low_stock_threshold: Only products with stock_quantity at or below it
            limit: Maximum results to return
            offset: Number of results to skip

        Returns:
            Tuple of (products list, total count)
        """
        query = self.db.query(ProductRow)

        if active_only:
            query = query.filter(ProductRow.is_active.is_(True))
        elif is_active is not None:
            query = query.filter(ProductRow.is_active.is_(is_active))
        if supplier_id:
            query = query.filter(ProductRow.supplier_id == supplier_id)
        if low_stock_threshold is not None:
            query = query.filter(ProductRow.stock_quantity <= low_stock_threshold)
        if category:
            query = query.join(CategoryRow, ProductRow.category_id == CategoryRow.id).filter(CategoryRow.slug == category)
        if featured is not None:
            query = query.filter(ProductRow.featured.is_(featured))
        if min_price is not None:
            query = query.filter(ProductRow.price >= min_price)
        if max_price is not None:
            query = query.filter(ProductRow.price <= max_price)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                ProductRow.name.ilike(pattern),
                ProductRow.description.ilike(pattern),
                cast(ProductRow.tags, String).ilike(pattern),
            ))

        total = query.count()

        rows = (
            query.options(joinedload(ProductRow.category))
            .order_by(*PRODUCT_SORTS.get(sort, PRODUCT_SORTS["created"]))
            .offset(offset)
            .limit(limit)
            .all()
        )
        return [Product.model_validate(row) for row in rows], total

    def list_categories(self, active_only: bool = True) -> List[Category]:
        query = self.db.query(CategoryRow)
        if active_only:
            query = query.filter(CategoryRow.is_active.is_(True))
        return [Category.model_validate(row) for row in query.order_by(CategoryRow.name).all()]

    def slug_exists(self, slug: str, exclude_id: Optional[str] = None) -> bool:
        query = self.db.query(ProductRow.id).filter(ProductRow.slug == slug)
        if exclude_id:
            query = query.filter(ProductRow.id != exclude_id)
        return query.first() is not None

    def sku_exists(self, sku: str, exclude_id: Optional[str] = None) -> bool:
        query = self.db.query(ProductRow.id).filter(ProductRow.sku == sku)
        if exclude_id:
            query = query.filter(ProductRow.id != exclude_id)
        return query.first() is not None

    def unique_slug(self, name: str) -> str:
        base = slugify(name)
        slug = base
        suffix = 2
        while self.slug_exists(slug):
            slug = f"{base}-{suffix}"
            suffix += 1
        return slug

    def create(self, data: Dict[str, Any]) -> Product:
        row = ProductRow(**data)
        self.db.add(row)
        self.db.commit()
        return self.find_by_id(row.id)

    def update(self, row: ProductRow, data: Dict[str, Any]) -> Product:
        for field, value in data.items():
            setattr(row, field, value)
        self.db.commit()
        return self.find_by_id(row.id)

    def is_referenced_by_orders(self, product_id: str) -> bool:
        return self.db.query(OrderItemRow.id).filter(OrderItemRow.product_id == product_id).first() is not None

    def delete(self, row: ProductRow):
        self.db.delete(row)
        self.db.commit()
