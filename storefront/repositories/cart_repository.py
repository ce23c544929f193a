"""
Cart Repository
"""
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from storefront.models import CartItem as CartRow


class CartRepository:

    def __init__(self, db: Session):
        self.db = db

    def find_by_user(self, user_id: str) -> List[CartRow]:
        return (
            self.db.query(CartRow)
            .options(joinedload(CartRow.product))
            .filter(CartRow.user_id == user_id)
            .order_by(CartRow.created_at)
            .all()
        )

    def get_row(self, user_id: str, item_id: str) -> Optional[CartRow]:
        return self.db.query(CartRow).filter(CartRow.id == item_id, CartRow.user_id == user_id).first()

    def find_line(self, user_id: str, product_id: str) -> Optional[CartRow]:
        return (
            self.db.query(CartRow)
            .filter(CartRow.user_id == user_id, CartRow.product_id == product_id)
            .first()
        )

    def upsert(self, user_id: str, product_id: str, quantity: int) -> CartRow:
        """Add quantity to an existing line or create it"""
        row = self.find_line(user_id, product_id)
        if row:
            row.quantity += quantity
        else:
            row = CartRow(user_id=user_id, product_id=product_id, quantity=quantity)
            self.db.add(row)
        self.db.commit()
        return row

    def set_quantity(self, row: CartRow, quantity: int) -> CartRow:
        row.quantity = quantity
        self.db.commit()
        return row

    def remove(self, row: CartRow):
        self.db.delete(row)
        self.db.commit()

    def remove_many(self, rows: List[CartRow]):
        for row in rows:
            self.db.delete(row)
        self.db.commit()

    def clear(self, user_id: str, commit: bool = True):
        self.db.query(CartRow).filter(CartRow.user_id == user_id).delete(synchronize_session="fetch")
        if commit:
            self.db.commit()
