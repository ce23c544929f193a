"""
Supplier profiles and supplier support tickets
"""
from sqlalchemy import Column, String, Boolean, DateTime, Integer, Text, Numeric, JSON, ForeignKey
from sqlalchemy.orm import relationship

from storefront.core.database import Base, utcnow
from .user import new_id


class Supplier(Base):
    __tablename__ = "suppliers"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)

    # Company
    company_name = Column(String(100), nullable=False)
    company_slug = Column(String(100), unique=True, nullable=False, index=True)
    description = Column(Text)
    website = Column(String(255))
    phone = Column(String(50), nullable=False)
    vat_number = Column(String(50), unique=True)
    tax_id = Column(String(50))
    logo = Column(String(500))
    catalog_url = Column(String(500))

    # Business address
    business_address = Column(String(255), nullable=False)
    business_city = Column(String(100), nullable=False)
    business_state = Column(String(100), nullable=False)
    business_country = Column(String(100), nullable=False)
    business_postal_code = Column(String(20), nullable=False)

    # Contact person
    contact_person_name = Column(String(100), nullable=False)
    contact_person_email = Column(String(255), nullable=False)
    contact_person_phone = Column(String(50), nullable=False)

    year_established = Column(Integer)
    employee_count = Column(Integer)
    annual_revenue = Column(String(50))
    certifications = Column(JSON, nullable=False, default=list)
    product_categories = Column(JSON, nullable=False, default=list)

    # Commercial terms
    status = Column(String(20), nullable=False, default="PENDING", index=True)
    commission_rate = Column(Numeric(5, 2), nullable=False, default=15)
    payment_terms = Column(Integer, nullable=False, default=30)
    minimum_order_value = Column(Numeric(12, 2), nullable=False, default=0)
    rejection_reason = Column(Text)
    approved_at = Column(DateTime)
    approved_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"))

    notification_preferences = Column(JSON)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="supplier", foreign_keys=[user_id])
    products = relationship("Product", back_populates="supplier")
    tickets = relationship("SupplierTicket", back_populates="supplier", cascade="all, delete-orphan")


class SupplierTicket(Base):
    __tablename__ = "supplier_tickets"

    id = Column(String(36), primary_key=True, default=new_id)
    ticket_number = Column(String(30), unique=True, nullable=False, index=True)
    supplier_id = Column(String(36), ForeignKey("suppliers.id", ondelete="CASCADE"), nullable=False, index=True)
    subject = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default="OPEN", index=True)
    priority = Column(String(10), nullable=False, default="MEDIUM")
    category = Column(String(50), nullable=False, default="GENERAL")
    assigned_to = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"))
    attachments = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
    closed_at = Column(DateTime)

    supplier = relationship("Supplier", back_populates="tickets")
    assignee = relationship("User", foreign_keys=[assigned_to])
    responses = relationship(
        "SupplierTicketResponse",
        back_populates="ticket",
        cascade="all, delete-orphan",
        order_by="SupplierTicketResponse.created_at",
    )


class SupplierTicketResponse(Base):
    __tablename__ = "supplier_ticket_responses"

    id = Column(String(36), primary_key=True, default=new_id)
    ticket_id = Column(String(36), ForeignKey("supplier_tickets.id", ondelete="CASCADE"), nullable=False, index=True)
    responder_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"))
    responder_type = Column(String(20), nullable=False)
    content = Column(Text, nullable=False)
    is_internal = Column(Boolean, nullable=False, default=False)
    # [{"url": ..., "name": ..., "size": ...}]
    attachments = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    ticket = relationship("SupplierTicket", back_populates="responses")
    responder = relationship("User")
