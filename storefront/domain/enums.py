"""
Enumerations shared by models, services and API schemas
"""
from enum import Enum


class Role(str, Enum):
    CUSTOMER = "CUSTOMER"
    ADMIN = "ADMIN"
    SUPPLIER = "SUPPLIER"


class OrderStatus(str, Enum):
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class CouponType(str, Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED_AMOUNT = "FIXED_AMOUNT"


class SupplierStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    SUSPENDED = "SUSPENDED"


class TicketStatus(str, Enum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    PENDING_CUSTOMER = "PENDING_CUSTOMER"
    PENDING_SUPPLIER = "PENDING_SUPPLIER"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"
    REOPENED = "REOPENED"


class TicketPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class ResponderType(str, Enum):
    ADMIN = "ADMIN"
    SUPPLIER = "SUPPLIER"


# Orders that count as revenue in analytics
REVENUE_STATUSES = (OrderStatus.COMPLETED.value, OrderStatus.DELIVERED.value, OrderStatus.SHIPPED.value)

# Ticket states that carry a closed_at timestamp
CLOSED_TICKET_STATUSES = (TicketStatus.CLOSED.value, TicketStatus.RESOLVED.value)

# Orders that count towards a supplier's sales
SUPPLIER_SALE_STATUSES = (
    OrderStatus.PROCESSING.value,
    OrderStatus.SHIPPED.value,
    OrderStatus.DELIVERED.value,
    OrderStatus.COMPLETED.value,
)
