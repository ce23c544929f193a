"""
Store settings schemas
"""
from datetime import datetime
from typing import Optional, Dict, Any

from pydantic import BaseModel, Field, EmailStr

from .base import DomainModel


class StoreSettingsUpdate(BaseModel):
    store_name: Optional[str] = Field(None, min_length=1, max_length=100)
    store_url: Optional[str] = Field(None, max_length=255)
    store_description: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, max_length=50)
    currency: Optional[str] = Field(None, min_length=3, max_length=10)
    timezone: Optional[str] = Field(None, max_length=50)
    date_format: Optional[str] = Field(None, max_length=20)
    weight_unit: Optional[str] = Field(None, max_length=10)
    meta_title: Optional[str] = Field(None, max_length=255)
    meta_description: Optional[str] = None
    meta_keywords: Optional[str] = None
    shipping_settings: Optional[Dict[str, Any]] = None
    payment_settings: Optional[Dict[str, Any]] = None
    tax_settings: Optional[Dict[str, Any]] = None


class StoreSettings(DomainModel):
    id: str
    store_name: str
    store_url: str
    store_description: Optional[str] = None
    contact_email: str
    contact_phone: Optional[str] = None
    currency: str
    timezone: str
    date_format: str
    weight_unit: str
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    meta_keywords: Optional[str] = None
    shipping_settings: Dict[str, Any] = Field(default_factory=dict)
    payment_settings: Dict[str, Any] = Field(default_factory=dict)
    tax_settings: Dict[str, Any] = Field(default_factory=dict)
    updated_at: Optional[datetime] = None

    def public_dict(self) -> dict:
        """Subset safe to expose to the storefront"""
        return {
            "store_name": self.store_name,
            "store_url": self.store_url,
            "currency": self.currency,
            "contact_email": self.contact_email,
            "shipping_settings": self.shipping_settings,
            "tax_settings": self.tax_settings,
        }
