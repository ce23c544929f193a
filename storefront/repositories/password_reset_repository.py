"""
Password Reset Repository
"""
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from storefront.models import PasswordResetToken as PasswordResetTokenRow


class PasswordResetRepository:

    def __init__(self, db: Session):
        self.db = db

    def replace_for_email(self, email: str, token_hash: str, expires: datetime) -> PasswordResetTokenRow:
        """Issue a token, dropping any earlier ones for the same email"""
        self.db.query(PasswordResetTokenRow).filter(PasswordResetTokenRow.email == email).delete()
        row = PasswordResetTokenRow(email=email, token_hash=token_hash, expires=expires)
        self.db.add(row)
        self.db.commit()
        return row

    def find_by_hash(self, token_hash: str) -> Optional[PasswordResetTokenRow]:
        return self.db.query(PasswordResetTokenRow).filter(PasswordResetTokenRow.token_hash == token_hash).first()

    def delete_for_email(self, email: str):
        self.db.query(PasswordResetTokenRow).filter(PasswordResetTokenRow.email == email).delete()
