"""
Cart Service
"""
import logging
from decimal import Decimal
from typing import Dict, Any

from sqlalchemy.orm import Session

from storefront.core.exceptions import NotFoundError, ValidationError
from storefront.repositories.cart_repository import CartRepository
from storefront.repositories.product_repository import ProductRepository

logger = logging.getLogger(__name__)


class CartService:

    def __init__(self, db: Session):
        self.cart = CartRepository(db)
        self.products = ProductRepository(db)

    def get_cart(self, user_id: str) -> Dict[str, Any]:
        """Cart lines with live prices; lines for removed or inactive products are dropped"""
        rows = self.cart.find_by_user(user_id)
        stale = [row for row in rows if row.product is None or not row.product.is_active]
        if stale:
            logger.info(f"Removing {len(stale)} unavailable cart line(s) for user {user_id}")
            self.cart.remove_many(stale)

        items = []
        subtotal = Decimal("0")
        for row in rows:
            if row in stale:
                continue
            product = row.product
            line_total = product.price * row.quantity
            subtotal += line_total
            items.append({
                "id": row.id,
                "product_id": product.id,
                "name": product.name,
                "slug": product.slug,
                "image": product.images[0] if product.images else None,
                "price": float(product.price),
                "quantity": row.quantity,
                "line_total": float(line_total),
                "available_quantity": product.available_quantity,
            })

        return {
            "items": items,
            "item_count": sum(item["quantity"] for item in items),
            "subtotal": float(subtotal),
        }

    def add_item(self, user_id: str, product_id: str, quantity: int) -> Dict[str, Any]:
        if not product_id:
            raise ValidationError("Product ID is required")
        if quantity is None or quantity <= 0:
            raise ValidationError("Quantity must be greater than 0")

        product = self.products.get_row(product_id)
        if product is None or not product.is_active:
            raise NotFoundError("Product not found")

        existing = self.cart.find_line(user_id, product_id)
        requested = quantity + (existing.quantity if existing else 0)
        if requested > product.available_quantity:
            raise ValidationError("Insufficient stock")

        row = self.cart.upsert(user_id, product_id, quantity)
        return {"id": row.id, "product_id": product_id, "quantity": row.quantity}

    def update_item(self, user_id: str, item_id: str, quantity: int) -> Dict[str, Any]:
        row = self.cart.get_row(user_id, item_id)
        if row is None:
            raise NotFoundError("Cart item not found")
        if quantity <= 0:
            raise ValidationError("Quantity must be greater than 0")
        if row.product is None or quantity > row.product.available_quantity:
            raise ValidationError("Insufficient stock")

        self.cart.set_quantity(row, quantity)
        return {"id": row.id, "product_id": row.product_id, "quantity": row.quantity}

    def remove_item(self, user_id: str, item_id: str):
        row = self.cart.get_row(user_id, item_id)
        if row is None:
            raise NotFoundError("Cart item not found")
        self.cart.remove(row)

    def clear(self, user_id: str):
        self.cart.clear(user_id)
