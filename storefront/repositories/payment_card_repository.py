"""
Payment Card Repository

Stores already-encrypted card rows; validation and encryption live in
PaymentCardService.
"""
from typing import List, Optional, Dict, Any

from sqlalchemy.orm import Session

from storefront.domain.account import PaymentCard
from storefront.models import PaymentCard as PaymentCardRow


class PaymentCardRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_row(self, user_id: str, card_id: str) -> Optional[PaymentCardRow]:
        return (
            self.db.query(PaymentCardRow)
            .filter(PaymentCardRow.id == card_id, PaymentCardRow.user_id == user_id)
            .first()
        )

    def find_by_user(self, user_id: str) -> List[PaymentCard]:
        """Default card first, then newest"""
        rows = (
            self.db.query(PaymentCardRow)
            .filter(PaymentCardRow.user_id == user_id)
            .order_by(PaymentCardRow.is_default.desc(), PaymentCardRow.created_at.desc())
            .all()
        )
        return [PaymentCard.model_validate(row) for row in rows]

    def _unset_defaults(self, user_id: str, keep_id: Optional[str] = None):
        query = self.db.query(PaymentCardRow).filter(
            PaymentCardRow.user_id == user_id, PaymentCardRow.is_default.is_(True)
        )
        if keep_id:
            query = query.filter(PaymentCardRow.id != keep_id)
        query.update({PaymentCardRow.is_default: False}, synchronize_session="fetch")

    def create(self, user_id: str, data: Dict[str, Any]) -> PaymentCard:
        try:
            has_cards = self.db.query(PaymentCardRow.id).filter(PaymentCardRow.user_id == user_id).first() is not None
            is_default = bool(data.pop("is_default", False)) or not has_cards
            if is_default:
                self._unset_defaults(user_id)
            row = PaymentCardRow(user_id=user_id, is_default=is_default, **data)
            self.db.add(row)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return PaymentCard.model_validate(row)

    def update(self, row: PaymentCardRow, data: Dict[str, Any]) -> PaymentCard:
        try:
            if data.get("is_default"):
                self._unset_defaults(row.user_id, keep_id=row.id)
            for field, value in data.items():
                setattr(row, field, value)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return PaymentCard.model_validate(row)

    def delete(self, row: PaymentCardRow):
        try:
            user_id, was_default = row.user_id, row.is_default
            self.db.delete(row)
            self.db.flush()
            if was_default:
                replacement = (
                    self.db.query(PaymentCardRow)
                    .filter(PaymentCardRow.user_id == user_id)
                    .order_by(PaymentCardRow.created_at.desc())
                    .first()
                )
                if replacement:
                    replacement.is_default = True
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
