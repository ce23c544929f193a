"""
Password Reset Service
Emailed one-hour reset links for accounts that sign in with a password

Author: TechTots
Date: 2025-10-26
"""
import hashlib
import logging
import secrets
from datetime import timedelta
from typing import Optional

from sqlalchemy.orm import Session

from storefront.core.auth import hash_password
from storefront.core.config import settings
from storefront.core.database import utcnow
from storefront.core.exceptions import ValidationError
from storefront.repositories.customer_repository import CustomerRepository
from storefront.repositories.password_reset_repository import PasswordResetRepository
from storefront.services.email_service import EmailService

logger = logging.getLogger(__name__)

RESET_TOKEN_TTL = timedelta(hours=1)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class PasswordResetService:

    def __init__(self, db: Session, email_service: Optional[EmailService] = None):
        self.db = db
        self.users = CustomerRepository(db)
        self.tokens = PasswordResetRepository(db)
        self.email = email_service or EmailService(db)

    async def request_reset(self, email: str) -> Optional[str]:
        """
        Issue a reset token and email the link

        Unknown emails are ignored so the response does not reveal which
        accounts exist. Accounts without a password are rejected.

        Returns:
            The raw token when one was issued, otherwise None
        """
        user = self.users.find_by_email(email)
        if user is None:
            logger.info("Password reset requested for unknown email")
            return None
        if not user.password_hash:
            raise ValidationError("This account has no password. Sign in with the provider you registered with.")

        token = secrets.token_urlsafe(32)
        self.tokens.replace_for_email(user.email, hash_token(token), utcnow() + RESET_TOKEN_TTL)
        await self.email.send_password_reset(
            user.email,
            user.name,
            f"{settings.STORE_URL}/auth/reset-password?token={token}",
        )
        logger.info(f"Password reset issued for user {user.id}")
        return token

    def reset_password(self, token: str, new_password: str):
        row = self.tokens.find_by_hash(hash_token(token))
        if row is None or row.expires < utcnow():
            raise ValidationError("Invalid or expired reset token")

        user = self.users.find_by_email(row.email)
        if user is None:
            raise ValidationError("Invalid or expired reset token")

        user.password_hash = hash_password(new_password)
        self.tokens.delete_for_email(row.email)
        self.users.save(user)
        logger.info(f"Password reset completed for user {user.id}")
