"""
Account Service
Customer dashboard statistics, activity feed, profile and wishlist

Author: TechTots
Date: 2025-10-20
"""
import logging
from collections import Counter
from datetime import timedelta
from decimal import Decimal
from typing import List, Tuple

from sqlalchemy.orm import Session, joinedload

from storefront.core.auth import hash_password, verify_password
from storefront.core.database import utcnow
from storefront.core.exceptions import ConflictError, NotFoundError, ValidationError
from storefront.domain.account import Activity, UserStats, WishlistItem, ProfileUpdate, PasswordChange
from storefront.domain.enums import OrderStatus
from storefront.models import Order as OrderRow, OrderItem as OrderItemRow, Product as ProductRow, Review
from storefront.repositories.customer_repository import CustomerRepository
from storefront.repositories.product_repository import ProductRepository
from storefront.repositories.wishlist_repository import WishlistRepository
from storefront.services.account_level_service import AccountLevelService

logger = logging.getLogger(__name__)

MAX_ACTIVITIES = 20

# status -> (title, feed severity)
ORDER_ACTIVITY = {
    OrderStatus.PROCESSING.value: ("Order Placed", "info"),
    OrderStatus.SHIPPED.value: ("Order Shipped", "info"),
    OrderStatus.DELIVERED.value: ("Order Delivered", "success"),
    OrderStatus.COMPLETED.value: ("Order Completed", "success"),
    OrderStatus.CANCELLED.value: ("Order Cancelled", "warning"),
}


class AccountService:

    def __init__(self, db: Session):
        self.db = db
        self.users = CustomerRepository(db)
        self.wishlist = WishlistRepository(db)
        self.products = ProductRepository(db)
        self.levels = AccountLevelService()

    def _get_user(self, user_id: str):
        user = self.users.get_row(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------

    def get_stats(self, user_id: str) -> UserStats:
        """Lifetime stats; cancelled orders count as orders but not as spend"""
        orders = (
            self.db.query(OrderRow)
            .options(joinedload(OrderRow.items).joinedload(OrderItemRow.product).joinedload(ProductRow.category))
            .filter(OrderRow.user_id == user_id)
            .all()
        )

        billable = [order for order in orders if order.status != OrderStatus.CANCELLED.value]
        total_spent = sum((Decimal(order.total) for order in billable), Decimal("0"))
        saved = sum((Decimal(order.discount_amount or 0) for order in billable), Decimal("0"))
        average = (total_spent / len(billable)).quantize(Decimal("0.01")) if billable else Decimal("0.00")

        categories = Counter()
        for order in billable:
            for item in order.items:
                if item.product is not None and item.product.category is not None:
                    categories[item.product.category.name] += item.quantity
        favorite = categories.most_common(1)[0][0] if categories else None

        return UserStats(
            total_orders=len(orders),
            total_spent=total_spent.quantize(Decimal("0.01")),
            average_order_value=average,
            favorite_category=favorite,
            account_level=self.levels.calculate(total_spent),
            loyalty_points=self.levels.loyalty_points(total_spent),
            saved_on_discounts=saved.quantize(Decimal("0.01")),
        )

    def get_activities(self, user_id: str) -> List[Activity]:
        user = self._get_user(user_id)
        activities: List[Activity] = []

        orders = (
            self.db.query(OrderRow)
            .filter(OrderRow.user_id == user_id)
            .order_by(OrderRow.created_at.desc())
            .limit(10)
            .all()
        )
        for order in orders:
            title, severity = ORDER_ACTIVITY.get(order.status, ("Order Updated", "info"))
            activities.append(Activity(
                id=f"order-{order.id}",
                type="order",
                title=title,
                description=f"Order #{order.order_number} - {float(order.total):.2f}",
                status=severity,
                timestamp=order.updated_at or order.created_at,
                link=f"/account/orders/{order.id}",
            ))

        for item in self.wishlist.find_by_user(user_id, limit=5):
            product_name = item.product.name if item.product else "a product"
            activities.append(Activity(
                id=f"wishlist-{item.id}",
                type="wishlist",
                title="Added to Wishlist",
                description=f"You saved {product_name}",
                status="info",
                timestamp=item.created_at,
                link=f"/products/{item.product.slug}" if item.product else None,
            ))

        reviews = (
            self.db.query(Review)
            .options(joinedload(Review.product))
            .filter(Review.user_id == user_id)
            .order_by(Review.created_at.desc())
            .limit(5)
            .all()
        )
        for review in reviews:
            activities.append(Activity(
                id=f"review-{review.id}",
                type="review",
                title="Review Posted",
                description=f"You rated {review.product.name if review.product else 'a product'} {review.rating}/5",
                status="success",
                timestamp=review.created_at,
            ))

        now = utcnow()
        edited = user.updated_at and user.updated_at - user.created_at > timedelta(seconds=1)
        if edited and now - user.updated_at <= timedelta(days=30):
            activities.append(Activity(
                id="profile-updated",
                type="profile",
                title="Profile Updated",
                description="Your account details were updated",
                status="info",
                timestamp=user.updated_at,
                link="/account/settings",
            ))
        if user.created_at and now - user.created_at <= timedelta(days=90):
            activities.append(Activity(
                id="account-created",
                type="account",
                title="Welcome to TechTots!",
                description="Your account was created",
                status="success",
                timestamp=user.created_at,
            ))

        activities.sort(key=lambda activity: activity.timestamp, reverse=True)
        return activities[:MAX_ACTIVITIES]

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    def update_profile(self, user_id: str, data: ProfileUpdate):
        user = self._get_user(user_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        if "email" in changes:
            email = changes["email"].lower()
            existing = self.users.find_by_email(email)
            if existing and existing.id != user.id:
                raise ConflictError("Email is already in use")
            user.email = email
        if "name" in changes:
            user.name = changes["name"].strip()

        return self.users.save(user)

    def change_password(self, user_id: str, data: PasswordChange):
        user = self._get_user(user_id)
        if not verify_password(data.current_password, user.password_hash):
            raise ValidationError("Current password is incorrect")
        user.password_hash = hash_password(data.new_password)
        self.users.save(user)
        logger.info(f"Password changed for user {user_id}")

    # ------------------------------------------------------------------
    # Wishlist
    # ------------------------------------------------------------------

    def add_to_wishlist(self, user_id: str, product_id: str) -> Tuple[WishlistItem, bool]:
        """
        Returns:
            (item, created) - created is False when the product was already saved
        """
        product = self.products.get_row(product_id)
        if product is None:
            raise NotFoundError("Product not found")

        existing = self.wishlist.find_item(user_id, product_id)
        if existing:
            return WishlistItem.model_validate(existing), False
        return self.wishlist.add(user_id, product_id), True

    def remove_from_wishlist(self, user_id: str, product_id: str):
        row = self.wishlist.find_item(user_id, product_id)
        if row is None:
            raise NotFoundError("Item not found in wishlist")
        self.wishlist.remove(row)
