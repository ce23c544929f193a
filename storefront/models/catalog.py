"""
Catalog tables: categories and products
"""
from sqlalchemy import Column, String, Boolean, DateTime, Integer, Text, Numeric, JSON, ForeignKey
from sqlalchemy.orm import relationship

from storefront.core.database import Base, utcnow
from .user import new_id


class Category(Base):
    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False)
    slug = Column(String(100), unique=True, nullable=False, index=True)
    description = Column(Text)
    image = Column(String(500))
    parent_id = Column(String(36), ForeignKey("categories.id"))
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    products = relationship("Product", back_populates="category")


class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    description = Column(Text)
    price = Column(Numeric(12, 2), nullable=False)
    compare_at_price = Column(Numeric(12, 2))
    sku = Column(String(100), unique=True)
    images = Column(JSON, nullable=False, default=list)
    tags = Column(JSON, nullable=False, default=list)
    attributes = Column(JSON)
    category_id = Column(String(36), ForeignKey("categories.id"), index=True)
    supplier_id = Column(String(36), ForeignKey("suppliers.id", ondelete="SET NULL"), index=True)

    is_active = Column(Boolean, nullable=False, default=True, index=True)
    featured = Column(Boolean, nullable=False, default=False)

    # Inventory
    stock_quantity = Column(Integer, nullable=False, default=0)
    reserved_quantity = Column(Integer, nullable=False, default=0)
    reorder_point = Column(Integer)
    total_sold = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    category = relationship("Category", back_populates="products")
    supplier = relationship("Supplier", back_populates="products")

    @property
    def available_quantity(self) -> int:
        return max(0, (self.stock_quantity or 0) - (self.reserved_quantity or 0))
