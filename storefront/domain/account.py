"""
Account Domain Models

Customer-facing account data: addresses, saved cards, wishlist,
dashboard statistics and loyalty level.

Author: TechTots
Date: 2025-10-17
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional, List

from pydantic import BaseModel, Field, EmailStr, field_validator

from storefront.core.security import mask_card_number

from .base import DomainModel
from .catalog import Product


# ============================================================================
# Addresses
# ============================================================================

class AddressInput(BaseModel):
    """Schema for creating an address"""
    name: str = Field("Shipping Address", min_length=1, max_length=100)
    full_name: str = Field(..., min_length=1, max_length=255)
    address_line1: str = Field(..., min_length=1, max_length=255)
    address_line2: Optional[str] = Field(None, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    postal_code: str = Field(..., min_length=1, max_length=20)
    country: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=5, max_length=50)
    is_default: bool = False


class AddressUpdate(BaseModel):
    """Schema for updating an address"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    address_line1: Optional[str] = Field(None, min_length=1, max_length=255)
    address_line2: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    state: Optional[str] = Field(None, min_length=1, max_length=100)
    postal_code: Optional[str] = Field(None, min_length=1, max_length=20)
    country: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, min_length=5, max_length=50)
    is_default: Optional[bool] = None


class Address(DomainModel):
    id: str
    name: str
    full_name: str
    address_line1: str
    address_line2: Optional[str] = None
    city: str
    state: str
    postal_code: str
    country: str
    phone: str
    is_default: bool = False
    created_at: datetime


# ============================================================================
# Payment cards
# ============================================================================

def _none_to_null(value: Optional[str]) -> Optional[str]:
    # The checkout form posts "none" when no billing address is chosen
    if value in (None, "", "none"):
        return None
    return value


class PaymentCardCreate(BaseModel):
    """Schema for saving a new card; number and CVV are encrypted at rest"""
    cardholder_name: str = Field(..., min_length=1, max_length=255)
    card_number: str = Field(..., description="13-19 digits, spaces allowed")
    expiry_month: str = Field(..., pattern=r"^(0[1-9]|1[0-2])$")
    expiry_year: str = Field(..., pattern=r"^\d{2}$")
    cvv: str = Field(..., pattern=r"^\d{3,4}$")
    is_default: bool = False
    billing_address_id: Optional[str] = None

    @field_validator("card_number")
    @classmethod
    def _digits_only(cls, value: str) -> str:
        digits = value.replace(" ", "").replace("-", "")
        if not digits.isdigit() or not 13 <= len(digits) <= 19:
            raise ValueError("Card number must be 13-19 digits")
        return digits

    @field_validator("billing_address_id")
    @classmethod
    def _billing_address(cls, value: Optional[str]) -> Optional[str]:
        return _none_to_null(value)


class PaymentCardUpdate(BaseModel):
    cardholder_name: Optional[str] = Field(None, min_length=1, max_length=255)
    expiry_month: Optional[str] = Field(None, pattern=r"^(0[1-9]|1[0-2])$")
    expiry_year: Optional[str] = Field(None, pattern=r"^\d{2}$")
    is_default: Optional[bool] = None
    billing_address_id: Optional[str] = None

    @field_validator("billing_address_id")
    @classmethod
    def _billing_address(cls, value: Optional[str]) -> Optional[str]:
        return _none_to_null(value)


class PaymentCard(DomainModel):
    """Safe view of a saved card (encrypted fields are never exposed)"""
    id: str
    cardholder_name: str
    last_four_digits: str
    expiry_month: str
    expiry_year: str
    card_type: str
    billing_address_id: Optional[str] = None
    is_default: bool = False
    created_at: datetime

    @property
    def masked_number(self) -> str:
        return mask_card_number(self.last_four_digits)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data['masked_number'] = self.masked_number
        return data


# ============================================================================
# Wishlist
# ============================================================================

class WishlistAdd(BaseModel):
    product_id: str = Field(..., min_length=1)


class WishlistItem(DomainModel):
    id: str
    product_id: str
    created_at: datetime
    product: Optional[Product] = None

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.product is not None:
            data['product'] = self.product.to_dict()
        return data


# ============================================================================
# Profile
# ============================================================================

class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None


class PasswordChange(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=128)


# ============================================================================
# Dashboard
# ============================================================================

class AccountLevel(BaseModel):
    """Loyalty tier derived from lifetime spend"""
    current: str = Field(..., description="Tier key (bronze, silver, gold, platinum)")
    name: str = Field(..., description="Tier display name")
    progress: int = Field(..., description="Percent of the way to the next tier", ge=0, le=100)
    overall_progress: float = Field(..., description="Percent of the way to the top tier", ge=0, le=100)
    next_level: Optional[str] = Field(None, description="Next tier key")
    next_level_name: Optional[str] = Field(None, description="Next tier display name")
    amount_to_next_level: Optional[Decimal] = Field(None, description="Spend still needed")
    benefits_unlocked: List[str] = Field(default_factory=list)


class UserStats(BaseModel):
    total_orders: int
    total_spent: Decimal
    average_order_value: Decimal
    favorite_category: Optional[str] = None
    account_level: AccountLevel
    loyalty_points: int
    saved_on_discounts: Decimal


class Activity(BaseModel):
    id: str
    type: str = Field(..., description="order, wishlist, review, profile, account")
    title: str
    description: str
    status: str = Field("info", description="success, warning, info")
    timestamp: datetime
    link: Optional[str] = None
