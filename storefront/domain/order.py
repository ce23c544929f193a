"""
Order Domain Models

Represents orders and their line items.

Author: TechTots
Date: 2025-10-17
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional, List

from pydantic import BaseModel, Field

from .base import DomainModel


class OrderItem(DomainModel):
    """Line item with the product name and price captured at order time"""

    id: str = Field(..., description="Order item ID")
    product_id: Optional[str] = Field(None, description="Product catalog ID")
    name: str = Field(..., description="Product name at order time")
    price: Decimal = Field(..., description="Unit price at order time", ge=0)
    quantity: int = Field(..., description="Quantity ordered", ge=1)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    def to_dict(self) -> dict:
        data = super().to_dict()
        data['line_total'] = float(self.line_total)
        return data


class OrderAddress(DomainModel):
    id: str
    full_name: str
    address_line1: str
    address_line2: Optional[str] = None
    city: str
    state: str
    postal_code: str
    country: str
    phone: str


class Order(DomainModel):
    """
    Order domain model

    Fields:
        order_number: Public reference (ORD-<epoch ms>-<3 digits>)
        subtotal: Sum of line totals, VAT included
        tax: VAT contained in the subtotal (informational, not added to total)
        shipping_cost / discount_amount / total: Amounts charged
        status: PROCESSING, SHIPPED, DELIVERED, CANCELLED, COMPLETED
        payment_status: PENDING, PAID, FAILED, REFUNDED
    """

    id: str = Field(..., description="Order ID")
    order_number: str = Field(..., description="Public order number")
    user_id: str = Field(..., description="Customer ID")

    subtotal: Decimal = Field(..., description="Subtotal", ge=0)
    tax: Decimal = Field(Decimal("0"), description="VAT included in subtotal", ge=0)
    shipping_cost: Decimal = Field(Decimal("0"), description="Shipping cost", ge=0)
    discount_amount: Decimal = Field(Decimal("0"), description="Coupon discount", ge=0)
    total: Decimal = Field(..., description="Total charged", ge=0)
    coupon_code: Optional[str] = Field(None, description="Applied coupon")

    status: str = Field(..., description="Order status")
    payment_status: str = Field(..., description="Payment status")
    payment_method: Optional[str] = Field(None, description="Payment method")
    notes: Optional[str] = Field(None, description="Order notes")

    shipping_address_id: Optional[str] = Field(None, description="Shipping address ID")
    shipping_address: Optional[OrderAddress] = Field(None, description="Shipping address")
    items: List[OrderItem] = Field(default_factory=list, description="Line items")

    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")
    delivered_at: Optional[datetime] = Field(None, description="Delivery timestamp")

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data['items'] = [item.to_dict() for item in self.items]
        data['item_count'] = self.item_count
        return data


class OrderStatusUpdate(BaseModel):
    """PATCH body for admin order updates; status is validated by the service"""
    status: str = Field(..., min_length=1)
    cancellation_reason: Optional[str] = Field(None, max_length=500)
    payment_status: Optional[str] = Field(None, max_length=20)
