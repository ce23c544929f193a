"""
Payment Card Service
Validates, encrypts and stores customer payment cards
"""
import logging
from typing import List

from sqlalchemy.orm import Session

from storefront.core.exceptions import NotFoundError, ValidationError
from storefront.core.security import (
    card_number_error,
    encrypt_data,
    get_card_type,
    is_card_expired,
)
from storefront.domain.account import PaymentCard, PaymentCardCreate, PaymentCardUpdate
from storefront.repositories.address_repository import AddressRepository
from storefront.repositories.payment_card_repository import PaymentCardRepository

logger = logging.getLogger(__name__)


class PaymentCardService:

    def __init__(self, db: Session):
        self.cards = PaymentCardRepository(db)
        self.addresses = AddressRepository(db)

    def _check_billing_address(self, user_id: str, address_id):
        if address_id and self.addresses.get_row(user_id, address_id) is None:
            raise NotFoundError("Billing address not found")

    def list_cards(self, user_id: str) -> List[PaymentCard]:
        return self.cards.find_by_user(user_id)

    def get_card(self, user_id: str, card_id: str) -> PaymentCard:
        row = self.cards.get_row(user_id, card_id)
        if row is None:
            raise NotFoundError("Card not found")
        return PaymentCard.model_validate(row)

    def add_card(self, user_id: str, data: PaymentCardCreate) -> PaymentCard:
        error = card_number_error(data.card_number)
        if error:
            raise ValidationError(error)
        if is_card_expired(data.expiry_month, data.expiry_year):
            raise ValidationError("Card has expired")
        self._check_billing_address(user_id, data.billing_address_id)

        card = self.cards.create(user_id, {
            "cardholder_name": data.cardholder_name.strip(),
            "last_four_digits": data.card_number[-4:],
            "encrypted_card_data": encrypt_data(data.card_number),
            "encrypted_cvv": encrypt_data(data.cvv),
            "expiry_month": data.expiry_month,
            "expiry_year": data.expiry_year,
            "card_type": get_card_type(data.card_number),
            "billing_address_id": data.billing_address_id,
            "is_default": data.is_default,
        })
        logger.info(f"Payment card {card.id} ({card.card_type}) added for user {user_id}")
        return card

    def update_card(self, user_id: str, card_id: str, data: PaymentCardUpdate) -> PaymentCard:
        row = self.cards.get_row(user_id, card_id)
        if row is None:
            raise NotFoundError("Card not found")

        changes = data.model_dump(exclude_unset=True)
        month = changes.get("expiry_month", row.expiry_month)
        year = changes.get("expiry_year", row.expiry_year)
        if ("expiry_month" in changes or "expiry_year" in changes) and is_card_expired(month, year):
            raise ValidationError("Card has expired")
        if "billing_address_id" in changes:
            self._check_billing_address(user_id, changes["billing_address_id"])
        if changes.get("is_default") is False and row.is_default:
            # The default can only move by promoting another card
            changes.pop("is_default")

        return self.cards.update(row, changes)

    def delete_card(self, user_id: str, card_id: str):
        row = self.cards.get_row(user_id, card_id)
        if row is None:
            raise NotFoundError("Card not found")
        self.cards.delete(row)
        logger.info(f"Payment card {card_id} deleted for user {user_id}")
