"""
Address Repository

Owner-scoped address queries. Only one address per user is the default;
switching the default happens in the same commit as the write.
"""
from typing import List, Optional, Dict, Any

from sqlalchemy.orm import Session

from storefront.domain.account import Address
from storefront.models import Address as AddressRow


class AddressRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_row(self, user_id: str, address_id: str) -> Optional[AddressRow]:
        return (
            self.db.query(AddressRow)
            .filter(AddressRow.id == address_id, AddressRow.user_id == user_id)
            .first()
        )

    def find_by_user(self, user_id: str) -> List[Address]:
        rows = (
            self.db.query(AddressRow)
            .filter(AddressRow.user_id == user_id)
            .order_by(AddressRow.is_default.desc(), AddressRow.created_at.desc())
            .all()
        )
        return [Address.model_validate(row) for row in rows]

    def _unset_defaults(self, user_id: str, keep_id: Optional[str] = None):
        query = self.db.query(AddressRow).filter(
            AddressRow.user_id == user_id, AddressRow.is_default.is_(True)
        )
        if keep_id:
            query = query.filter(AddressRow.id != keep_id)
        query.update({AddressRow.is_default: False}, synchronize_session="fetch")

    def _has_any(self, user_id: str) -> bool:
        return self.db.query(AddressRow.id).filter(AddressRow.user_id == user_id).first() is not None

    def create(self, user_id: str, data: Dict[str, Any]) -> Address:
        try:
            # First address becomes the default
            is_default = bool(data.pop("is_default", False)) or not self._has_any(user_id)
            if is_default:
                self._unset_defaults(user_id)
            row = AddressRow(user_id=user_id, is_default=is_default, **data)
            self.db.add(row)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return Address.model_validate(row)

    def find_or_create(self, user_id: str, data: Dict[str, Any]) -> AddressRow:
        """Reuse an identical address (checkout) instead of duplicating it; caller commits"""
        query = self.db.query(AddressRow).filter(AddressRow.user_id == user_id)
        for field in ("full_name", "address_line1", "city", "state", "postal_code", "country", "phone"):
            query = query.filter(getattr(AddressRow, field) == data.get(field))
        row = query.first()
        if row:
            return row

        row = AddressRow(
            user_id=user_id,
            name="Shipping Address",
            is_default=not self._has_any(user_id),
            **data
        )
        self.db.add(row)
        self.db.flush()
        return row

    def update(self, row: AddressRow, data: Dict[str, Any]) -> Address:
        try:
            if data.get("is_default"):
                self._unset_defaults(row.user_id, keep_id=row.id)
            for field, value in data.items():
                setattr(row, field, value)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return Address.model_validate(row)

    def delete(self, row: AddressRow):
        """Delete; when the default goes away the most recent remaining address is promoted"""
        try:
            user_id, was_default = row.user_id, row.is_default
            self.db.delete(row)
            self.db.flush()
            if was_default:
                replacement = (
                    self.db.query(AddressRow)
                    .filter(AddressRow.user_id == user_id)
                    .order_by(AddressRow.created_at.desc())
                    .first()
                )
                if replacement:
                    replacement.is_default = True
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
