"""
Wishlist Repository
"""
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from storefront.domain.account import WishlistItem
from storefront.models import WishlistItem as WishlistRow, Product as ProductRow


class WishlistRepository:

    def __init__(self, db: Session):
        self.db = db

    def find_by_user(self, user_id: str, limit: Optional[int] = None) -> List[WishlistItem]:
        query = (
            self.db.query(WishlistRow)
            .options(joinedload(WishlistRow.product).joinedload(ProductRow.category))
            .filter(WishlistRow.user_id == user_id)
            .order_by(WishlistRow.created_at.desc())
        )
        if limit:
            query = query.limit(limit)
        return [WishlistItem.model_validate(row) for row in query.all()]

    def find_item(self, user_id: str, product_id: str) -> Optional[WishlistRow]:
        return (
            self.db.query(WishlistRow)
            .filter(WishlistRow.user_id == user_id, WishlistRow.product_id == product_id)
            .first()
        )

    def count_for_user(self, user_id: str) -> int:
        return self.db.query(WishlistRow).filter(WishlistRow.user_id == user_id).count()

    def add(self, user_id: str, product_id: str) -> WishlistItem:
        row = WishlistRow(user_id=user_id, product_id=product_id)
        self.db.add(row)
        self.db.commit()
        return WishlistItem.model_validate(row)

    def remove(self, row: WishlistRow):
        self.db.delete(row)
        self.db.commit()
