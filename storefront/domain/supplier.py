"""
Supplier Domain Models

Supplier onboarding, profile settings and support tickets.

Author: TechTots
Date: 2025-10-17
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional, List, Dict

from pydantic import BaseModel, Field, EmailStr, field_validator

from .base import DomainModel


def _current_year() -> int:
    return datetime.now().year


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return value


class SupplierRegistration(BaseModel):
    """Onboarding form submitted by a user holding the SUPPLIER role"""
    company_name: str = Field(..., min_length=2, max_length=100)
    company_slug: str = Field(..., min_length=2, max_length=50, pattern=r"^[a-z0-9-]+$")
    description: Optional[str] = None
    website: Optional[str] = Field(None, max_length=255)
    phone: str = Field(..., min_length=10, max_length=50)
    vat_number: Optional[str] = Field(None, max_length=50)
    tax_id: Optional[str] = Field(None, max_length=50)

    business_address: str = Field(..., min_length=5, max_length=255)
    business_city: str = Field(..., min_length=2, max_length=100)
    business_state: str = Field(..., min_length=2, max_length=100)
    business_country: str = Field("Romania", min_length=2, max_length=100)
    business_postal_code: str = Field(..., min_length=4, max_length=20)

    contact_person_name: str = Field(..., min_length=2, max_length=100)
    contact_person_email: EmailStr
    contact_person_phone: str = Field(..., min_length=10, max_length=50)

    year_established: Optional[int] = Field(None, ge=1900)
    employee_count: Optional[int] = Field(None, ge=1)
    annual_revenue: Optional[str] = None
    certifications: List[str] = Field(default_factory=list)
    product_categories: List[str] = Field(default_factory=list)
    logo: Optional[str] = None
    catalog_url: Optional[str] = None

    terms_accepted: bool
    privacy_accepted: bool

    @field_validator("website", "vat_number", "tax_id", "logo", "catalog_url", mode="before")
    @classmethod
    def _empty_strings(cls, value):
        return _blank_to_none(value)

    @field_validator("website", "logo", "catalog_url")
    @classmethod
    def _url(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.startswith(("http://", "https://")):
            raise ValueError("Must be a valid URL")
        return value

    @field_validator("year_established")
    @classmethod
    def _not_in_future(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value > _current_year():
            raise ValueError("Year established cannot be in the future")
        return value

    @field_validator("terms_accepted")
    @classmethod
    def _terms(cls, value: bool) -> bool:
        if value is not True:
            raise ValueError("You must accept the terms and conditions")
        return value

    @field_validator("privacy_accepted")
    @classmethod
    def _privacy(cls, value: bool) -> bool:
        if value is not True:
            raise ValueError("You must accept the privacy policy")
        return value


class NotificationChannels(BaseModel):
    messages: bool = True
    tickets: bool = True
    announcements: bool = True
    invoices: bool = True
    orders: bool = True


class NotificationPreferences(BaseModel):
    email: NotificationChannels = Field(default_factory=NotificationChannels)
    in_app: NotificationChannels = Field(default_factory=NotificationChannels)


class SupplierSettingsUpdate(BaseModel):
    """Fields a supplier may change on their own profile"""
    company_name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = None
    website: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, min_length=10, max_length=50)
    tax_id: Optional[str] = Field(None, max_length=50)
    business_address: Optional[str] = Field(None, min_length=5, max_length=255)
    business_city: Optional[str] = Field(None, min_length=2, max_length=100)
    business_state: Optional[str] = Field(None, min_length=2, max_length=100)
    business_country: Optional[str] = Field(None, min_length=2, max_length=100)
    business_postal_code: Optional[str] = Field(None, min_length=4, max_length=20)
    contact_person_name: Optional[str] = Field(None, min_length=2, max_length=100)
    contact_person_email: Optional[EmailStr] = None
    contact_person_phone: Optional[str] = Field(None, min_length=10, max_length=50)
    logo: Optional[str] = None
    catalog_url: Optional[str] = None
    notification_preferences: Optional[NotificationPreferences] = None


class AdminSupplierUpdate(BaseModel):
    """Admin review of a supplier; ranges are checked by SupplierService"""
    status: Optional[str] = None
    commission_rate: Optional[Decimal] = None
    payment_terms: Optional[int] = None
    minimum_order_value: Optional[Decimal] = None
    rejection_reason: Optional[str] = Field(None, max_length=1000)


class Supplier(DomainModel):
    id: str
    user_id: str
    company_name: str
    company_slug: str
    description: Optional[str] = None
    website: Optional[str] = None
    phone: str
    vat_number: Optional[str] = None
    tax_id: Optional[str] = None
    logo: Optional[str] = None
    catalog_url: Optional[str] = None
    business_address: str
    business_city: str
    business_state: str
    business_country: str
    business_postal_code: str
    contact_person_name: str
    contact_person_email: str
    contact_person_phone: str
    year_established: Optional[int] = None
    employee_count: Optional[int] = None
    annual_revenue: Optional[str] = None
    certifications: List[str] = Field(default_factory=list)
    product_categories: List[str] = Field(default_factory=list)
    status: str
    commission_rate: Decimal
    payment_terms: int
    minimum_order_value: Decimal
    rejection_reason: Optional[str] = None
    approved_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    notification_preferences: Optional[Dict] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


# ============================================================================
# Tickets
# ============================================================================

class Attachment(BaseModel):
    url: str
    name: str = Field("attachment", max_length=255)
    size: int = Field(0, ge=0)


class TicketCreate(BaseModel):
    subject: str = Field(..., min_length=3, max_length=200)
    description: str = Field(..., min_length=10)
    priority: str = "MEDIUM"
    category: str = Field("GENERAL", max_length=50)


class TicketUpdate(BaseModel):
    status: Optional[str] = None
    priority: Optional[str] = None
    assigned_to: Optional[str] = None


class TicketStatusUpdate(BaseModel):
    status: Optional[str] = None
    note: Optional[str] = Field(None, max_length=1000)


class TicketResponseCreate(BaseModel):
    content: Optional[str] = None
    is_internal: bool = False
    attachments: List[Attachment] = Field(default_factory=list)


class TicketResponse(DomainModel):
    id: str
    ticket_id: str
    responder_id: Optional[str] = None
    responder_type: str
    content: str
    is_internal: bool
    attachments: List[Dict] = Field(default_factory=list)
    created_at: datetime


class Ticket(DomainModel):
    id: str
    ticket_number: str
    supplier_id: str
    subject: str
    description: str
    status: str
    priority: str
    category: str
    assigned_to: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
