"""
Cart and checkout request schemas
"""
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class CartItemAdd(BaseModel):
    """Quantity and product presence are checked by CartService"""
    product_id: str = ""
    quantity: int = 1

    @field_validator("product_id")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()


class CartItemUpdate(BaseModel):
    quantity: int


class ShippingAddressInput(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=255)
    address_line1: str = Field(..., min_length=1, max_length=255)
    address_line2: Optional[str] = Field(None, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    postal_code: str = Field(..., min_length=1, max_length=20)
    country: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=5, max_length=50)


class ShippingMethod(BaseModel):
    id: str = "standard"
    name: str = "Standard Shipping"
    price: Decimal = Field(Decimal("0"), ge=0)


class CheckoutRequest(BaseModel):
    shipping_address: ShippingAddressInput
    payment_method: str = Field("card", max_length=50)
    coupon_code: Optional[str] = Field(None, max_length=50)
    shipping_method: Optional[ShippingMethod] = None
    notes: Optional[str] = Field(None, max_length=1000)
