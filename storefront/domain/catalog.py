"""
Catalog Domain Models

Represents categories and products of the TechTots catalog.

Author: TechTots
Date: 2025-10-17
"""
import re
from datetime import datetime
from decimal import Decimal
from typing import Optional, List, Any, Dict

from pydantic import BaseModel, Field

from .base import DomainModel


class Category(DomainModel):
    """Product category"""

    id: str = Field(..., description="Category ID")
    name: str = Field(..., description="Category name")
    slug: str = Field(..., description="URL slug")
    description: Optional[str] = Field(None, description="Category description")
    image: Optional[str] = Field(None, description="Category image URL")
    parent_id: Optional[str] = Field(None, description="Parent category ID")
    is_active: bool = Field(True, description="Whether category is visible")


class Product(DomainModel):
    """
    Product domain model - represents a product in the storefront catalog

    Fields:
        id: Internal product ID
        name / slug / description: Display data
        price: Selling price (VAT included)
        compare_at_price: Previous price shown struck through
        sku: Stock Keeping Unit
        images / tags / attributes: Merchandising data
        category: Embedded category summary

        # Inventory
        stock_quantity: Units on hand
        reserved_quantity: Units held for pending operations
        reorder_point: Low-stock alert threshold
        total_sold: Units sold since launch
    """

    id: str = Field(..., description="Product ID")
    name: str = Field(..., description="Product name")
    slug: str = Field(..., description="URL slug")
    description: Optional[str] = Field(None, description="Product description")
    price: Decimal = Field(..., description="Selling price", ge=0)
    compare_at_price: Optional[Decimal] = Field(None, description="Compare-at price", ge=0)
    sku: Optional[str] = Field(None, description="Stock Keeping Unit")
    images: List[str] = Field(default_factory=list, description="Image URLs")
    tags: List[str] = Field(default_factory=list, description="Search tags")
    attributes: Optional[Dict[str, Any]] = Field(None, description="Free-form attributes (age range, STEM area...)")
    category_id: Optional[str] = Field(None, description="Category ID")
    category: Optional[Category] = Field(None, description="Category summary")
    supplier_id: Optional[str] = Field(None, description="Supplier that lists the product")

    is_active: bool = Field(True, description="Whether product is visible in the storefront")
    featured: bool = Field(False, description="Whether product is featured")

    stock_quantity: int = Field(0, description="Units on hand")
    reserved_quantity: int = Field(0, description="Units reserved")
    reorder_point: Optional[int] = Field(None, description="Low-stock threshold")
    total_sold: int = Field(0, description="Units sold")

    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    @property
    def available_quantity(self) -> int:
        return max(0, self.stock_quantity - self.reserved_quantity)

    @property
    def in_stock(self) -> bool:
        return self.available_quantity > 0

    @property
    def is_on_sale(self) -> bool:
        return self.compare_at_price is not None and self.compare_at_price > self.price

    def to_dict(self) -> dict:
        data = super().to_dict()
        data['available_quantity'] = self.available_quantity
        data['in_stock'] = self.in_stock
        data['is_on_sale'] = self.is_on_sale
        return data


def slugify(value: str) -> str:
    """Lowercase, ASCII letters/digits separated by single hyphens"""
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    return slug or "item"


class ProductCreate(BaseModel):
    """Schema for creating a new product"""
    name: str = Field(..., min_length=1, max_length=255)
    slug: Optional[str] = Field(None, max_length=255, pattern=r"^[a-z0-9-]+$")
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0)
    compare_at_price: Optional[Decimal] = Field(None, ge=0)
    sku: Optional[str] = Field(None, max_length=100)
    images: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    attributes: Optional[Dict[str, Any]] = None
    category_id: Optional[str] = None
    supplier_id: Optional[str] = None
    is_active: bool = True
    featured: bool = False
    stock_quantity: int = Field(0, ge=0)
    reorder_point: Optional[int] = Field(None, ge=0)


class ProductUpdate(BaseModel):
    """Schema for updating an existing product"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, max_length=255, pattern=r"^[a-z0-9-]+$")
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    compare_at_price: Optional[Decimal] = Field(None, ge=0)
    sku: Optional[str] = Field(None, max_length=100)
    images: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    attributes: Optional[Dict[str, Any]] = None
    category_id: Optional[str] = None
    supplier_id: Optional[str] = None
    is_active: Optional[bool] = None
    featured: Optional[bool] = None
    stock_quantity: Optional[int] = Field(None, ge=0)
    reorder_point: Optional[int] = Field(None, ge=0)


class SupplierProductCreate(BaseModel):
    """Product listed by a supplier; slug and supplier are assigned by the server"""
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=10, max_length=1000)
    price: Decimal = Field(..., ge=Decimal("0.01"))
    compare_at_price: Optional[Decimal] = Field(None, ge=0)
    sku: Optional[str] = Field(None, max_length=100)
    images: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    attributes: Optional[Dict[str, Any]] = None
    category_id: Optional[str] = None
    is_active: bool = True
    stock_quantity: int = Field(0, ge=0)
    reorder_point: Optional[int] = Field(None, ge=0)


class SupplierProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=10, max_length=1000)
    price: Optional[Decimal] = Field(None, ge=Decimal("0.01"))
    compare_at_price: Optional[Decimal] = Field(None, ge=0)
    sku: Optional[str] = Field(None, max_length=100)
    images: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    attributes: Optional[Dict[str, Any]] = None
    category_id: Optional[str] = None
    is_active: Optional[bool] = None
    stock_quantity: Optional[int] = Field(None, ge=0)
    reorder_point: Optional[int] = Field(None, ge=0)
