"""
Supplier Service
Supplier onboarding, self-service settings and admin review

Author: TechTots
Date: 2025-10-22
"""
import logging
from decimal import Decimal
from typing import Dict, Any, Optional

from sqlalchemy.orm import Session

from storefront.core.auth import TokenUser
from storefront.core.database import utcnow
from storefront.core.exceptions import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from storefront.domain.enums import Role, SupplierStatus
from storefront.domain.supplier import (
    AdminSupplierUpdate,
    NotificationPreferences,
    Supplier,
    SupplierRegistration,
    SupplierSettingsUpdate,
)
from storefront.repositories.supplier_repository import SupplierRepository
from storefront.services.email_service import EmailService

logger = logging.getLogger(__name__)

DEFAULT_COMMISSION_RATE = Decimal("15.0")
DEFAULT_PAYMENT_TERMS = 30


class SupplierService:

    def __init__(self, db: Session, email_service: Optional[EmailService] = None):
        self.suppliers = SupplierRepository(db)
        self.email = email_service or EmailService(db)

    # ------------------------------------------------------------------
    # Supplier portal
    # ------------------------------------------------------------------

    def register(self, user: TokenUser, data: SupplierRegistration) -> Supplier:
        if user.role != Role.SUPPLIER.value:
            raise PermissionDeniedError("User must have supplier role to register")
        if self.suppliers.get_by_user(user.id):
            raise ConflictError("Supplier profile already exists")
        if self.suppliers.slug_exists(data.company_slug):
            raise ConflictError("Company slug already exists")
        if data.vat_number and self.suppliers.vat_exists(data.vat_number):
            raise ConflictError("VAT number already registered")

        fields = data.model_dump(exclude={"terms_accepted", "privacy_accepted"})
        fields["contact_person_email"] = str(fields["contact_person_email"])
        row = self.suppliers.create(user.id, {
            **fields,
            "status": SupplierStatus.PENDING.value,
            "commission_rate": DEFAULT_COMMISSION_RATE,
            "payment_terms": DEFAULT_PAYMENT_TERMS,
            "minimum_order_value": Decimal("0"),
            "notification_preferences": NotificationPreferences().model_dump(),
        })
        logger.info(f"Supplier {row.company_name} registered by user {user.id}, pending review")
        return Supplier.model_validate(row)

    def _own_profile(self, user: TokenUser):
        if user.role != Role.SUPPLIER.value:
            raise PermissionDeniedError("Not authorized")
        row = self.suppliers.get_by_user(user.id)
        if row is None:
            raise NotFoundError("Supplier profile not found")
        return row

    def get_settings(self, user: TokenUser) -> Supplier:
        return Supplier.model_validate(self._own_profile(user))

    def update_settings(self, user: TokenUser, data: SupplierSettingsUpdate) -> Supplier:
        row = self._own_profile(user)
        changes = data.model_dump(exclude_unset=True)
        if "contact_person_email" in changes and changes["contact_person_email"] is not None:
            changes["contact_person_email"] = str(changes["contact_person_email"])
        if data.notification_preferences is not None:
            # Stored whole, channels left out of the request fall back to on
            changes["notification_preferences"] = data.notification_preferences.model_dump()
        for required in ("company_name", "phone", "contact_person_email"):
            if required in changes and changes[required] is None:
                changes.pop(required)
        row = self.suppliers.update(row, changes)
        return Supplier.model_validate(row)

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    def get(self, supplier_id: str):
        row = self.suppliers.get_row(supplier_id)
        if row is None:
            raise NotFoundError("Supplier not found")
        return row

    def detail(self, supplier_id: str) -> Dict[str, Any]:
        row = self.get(supplier_id)
        data = Supplier.model_validate(row).to_dict()
        data["user"] = {
            "id": row.user.id,
            "name": row.user.name,
            "email": row.user.email,
            "is_active": row.user.is_active,
        } if row.user else None
        data["product_count"] = self.suppliers.count_products(supplier_id)
        data["active_product_count"] = self.suppliers.count_products(supplier_id, active_only=True)
        return data

    async def admin_update(self, supplier_id: str, data: AdminSupplierUpdate, admin: TokenUser) -> Dict[str, Any]:
        """
        Review a supplier

        - APPROVED stamps approved_at/approved_by and emails the supplier
        - REJECTED / SUSPENDED store the given reason or "Status changed to <STATUS>"
        """
        row = self.get(supplier_id)
        changes: Dict[str, Any] = {}

        if data.commission_rate is not None:
            if data.commission_rate < 0 or data.commission_rate > 100:
                raise ValidationError("Commission rate must be between 0 and 100")
            changes["commission_rate"] = data.commission_rate
        if data.payment_terms is not None:
            if data.payment_terms < 0:
                raise ValidationError("Payment terms cannot be negative")
            changes["payment_terms"] = data.payment_terms
        if data.minimum_order_value is not None:
            if data.minimum_order_value < 0:
                raise ValidationError("Minimum order value cannot be negative")
            changes["minimum_order_value"] = data.minimum_order_value

        new_status = None
        if data.status is not None:
            try:
                new_status = SupplierStatus(data.status.strip().upper())
            except ValueError:
                allowed = ", ".join(status.value for status in SupplierStatus)
                raise ValidationError(f"Invalid status. Must be one of: {allowed}")

            changes["status"] = new_status.value
            if new_status == SupplierStatus.APPROVED:
                changes["approved_at"] = utcnow()
                changes["approved_by"] = admin.id
                changes["rejection_reason"] = None
            elif new_status in (SupplierStatus.REJECTED, SupplierStatus.SUSPENDED):
                changes["rejection_reason"] = data.rejection_reason or f"Status changed to {new_status.value}"
        elif data.rejection_reason is not None:
            changes["rejection_reason"] = data.rejection_reason

        previous_status = row.status
        row = self.suppliers.update(row, changes)
        supplier = Supplier.model_validate(row).to_dict()

        if new_status is not None and new_status.value != previous_status:
            logger.info(f"Supplier {row.company_name} status changed from {previous_status} to {new_status.value} by {admin.email}")
            if new_status == SupplierStatus.APPROVED:
                await self.email.send_supplier_approved(supplier)

        return supplier

    def delete(self, supplier_id: str):
        row = self.get(supplier_id)
        active_products = self.suppliers.count_products(supplier_id, active_only=True)
        if active_products:
            raise ValidationError(
                f"Cannot delete supplier with {active_products} active product(s). Deactivate the products first."
            )
        self.suppliers.delete(row)
        logger.info(f"Supplier {supplier_id} deleted")
