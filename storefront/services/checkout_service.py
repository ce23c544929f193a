"""
Checkout Service
Turns a customer's cart into an order

Pricing (prices are VAT inclusive):
- subtotal  = sum(price * quantity)
- shipping  = chosen method price, 0 when the free-shipping threshold is active and reached
- tax       = subtotal - subtotal / (1 + rate)   (VAT already inside the prices, informational)
- discount  = coupon discount, rounded to cents
- total     = max(0, subtotal + shipping - discount)

Author: TechTots
Date: 2025-10-20
"""
import random
import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Any, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from storefront.core.database import utcnow
from storefront.core.exceptions import ValidationError
from storefront.domain.checkout import CheckoutRequest
from storefront.domain.enums import CouponType, OrderStatus, PaymentStatus
from storefront.domain.order import Order
from storefront.models import Coupon, Order as OrderRow, OrderItem as OrderItemRow, Product as ProductRow
from storefront.repositories.address_repository import AddressRepository
from storefront.repositories.cart_repository import CartRepository
from storefront.repositories.order_repository import OrderRepository
from storefront.repositories.settings_repository import SettingsRepository

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
DEFAULT_TAX_RATE = Decimal("21")


def money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def calculate_tax(subtotal: Decimal, tax_settings: Optional[Dict[str, Any]]) -> Decimal:
    """VAT contained in a VAT-inclusive subtotal"""
    tax_settings = tax_settings or {}
    if not tax_settings.get("active", True):
        return Decimal("0.00")
    rate = Decimal(str(tax_settings.get("rate", DEFAULT_TAX_RATE))) / 100
    return money(subtotal - subtotal / (1 + rate))


def calculate_shipping(
    subtotal: Decimal,
    shipping_settings: Optional[Dict[str, Any]],
    method_price: Optional[Decimal] = None
) -> Decimal:
    shipping_settings = shipping_settings or {}
    if method_price is None:
        standard = shipping_settings.get("standard") or {}
        method_price = Decimal(str(standard.get("price", 0))) if standard.get("active", True) else Decimal("0")

    free_threshold = shipping_settings.get("free_threshold") or {}
    if free_threshold.get("active") and subtotal >= Decimal(str(free_threshold.get("price", 0))):
        return Decimal("0.00")
    return money(method_price)


def coupon_error(coupon: Optional[Coupon], subtotal: Decimal, user_uses: int = 0,
                 now: Optional[datetime] = None) -> Optional[str]:
    """Reason a coupon cannot be applied, or None"""
    now = now or utcnow()
    if coupon is None:
        return "Invalid coupon code"
    if not coupon.is_active:
        return "This coupon is no longer active"
    if coupon.starts_at and coupon.starts_at > now:
        return "This coupon is not yet valid"
    if coupon.expires_at and coupon.expires_at < now:
        return "This coupon has expired"
    if coupon.max_uses is not None and (coupon.current_uses or 0) >= coupon.max_uses:
        return "This coupon has reached its usage limit"
    if coupon.max_uses_per_user is not None and user_uses >= coupon.max_uses_per_user:
        return "You have already used this coupon"
    if coupon.minimum_order_value is not None and subtotal < coupon.minimum_order_value:
        return f"Minimum order value of {money(coupon.minimum_order_value)} required for this coupon"
    return None


def calculate_discount(coupon: Coupon, subtotal: Decimal) -> Decimal:
    value = Decimal(str(coupon.value))
    if coupon.type == CouponType.PERCENTAGE.value:
        discount = subtotal * value / 100
        if coupon.max_discount_amount is not None:
            discount = min(discount, Decimal(str(coupon.max_discount_amount)))
    else:
        discount = min(value, subtotal)
    return money(discount)


def calculate_total(subtotal: Decimal, shipping: Decimal, discount: Decimal) -> Decimal:
    """Amount charged; VAT is already inside subtotal so the extracted tax is not added again"""
    return money(max(Decimal("0.00"), subtotal + shipping - discount))


def generate_order_number(now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    return f"ORD-{int(now.timestamp() * 1000)}-{random.randint(0, 999):03d}"


class CheckoutService:
    """
    Service for placing orders

    Handles:
    - Stock re-validation
    - Shipping address find-or-create
    - Coupon validation and usage counting
    - Inventory updates and cart clearing, all in one commit
    """

    def __init__(self, db: Session):
        self.db = db
        self.cart = CartRepository(db)
        self.addresses = AddressRepository(db)
        self.orders = OrderRepository(db)
        self.settings = SettingsRepository(db)

    def _unique_order_number(self) -> str:
        order_number = generate_order_number()
        while self.orders.order_number_exists(order_number):
            order_number = generate_order_number()
        return order_number

    def quote(self, user_id: str, coupon_code: Optional[str] = None,
              shipping_price: Optional[Decimal] = None) -> Dict[str, Any]:
        """Price the current cart without placing an order"""
        lines = [row for row in self.cart.find_by_user(user_id) if row.product and row.product.is_active]
        subtotal = money(sum((row.product.price * row.quantity for row in lines), Decimal("0")))
        store = self.settings.get()

        shipping = calculate_shipping(subtotal, store.shipping_settings, shipping_price)
        tax = calculate_tax(subtotal, store.tax_settings)

        coupon = None
        discount = Decimal("0.00")
        if coupon_code:
            coupon = self.db.query(Coupon).filter(func.upper(Coupon.code) == coupon_code.strip().upper()).first()
            user_uses = self.orders.count_with_coupon(user_id, coupon.code) if coupon else 0
            error = coupon_error(coupon, subtotal, user_uses)
            if error:
                raise ValidationError(error)
            discount = calculate_discount(coupon, subtotal)

        total = calculate_total(subtotal, shipping, discount)
        return {
            "lines": lines,
            "coupon": coupon,
            "subtotal": subtotal,
            "shipping_cost": shipping,
            "tax": tax,
            "discount_amount": discount,
            "total": total,
        }

    def place_order(self, user_id: str, request: CheckoutRequest) -> Order:
        shipping_price = request.shipping_method.price if request.shipping_method else None
        quote = self.quote(user_id, request.coupon_code, shipping_price)
        lines = quote["lines"]
        if not lines:
            raise ValidationError("Cart is empty")

        try:
            for row in lines:
                product: ProductRow = row.product
                if row.quantity > product.available_quantity:
                    raise ValidationError(f"Insufficient stock for {product.name}")

            address = self.addresses.find_or_create(user_id, request.shipping_address.model_dump())

            order = OrderRow(
                order_number=self._unique_order_number(),
                user_id=user_id,
                subtotal=quote["subtotal"],
                tax=quote["tax"],
                shipping_cost=quote["shipping_cost"],
                discount_amount=quote["discount_amount"],
                total=quote["total"],
                coupon_code=quote["coupon"].code if quote["coupon"] else None,
                status=OrderStatus.PROCESSING.value,
                payment_status=PaymentStatus.PENDING.value,
                payment_method=request.payment_method,
                notes=request.notes,
                shipping_address_id=address.id,
                billing_address_id=address.id,
            )
            self.db.add(order)

            for row in lines:
                product = row.product
                order.items.append(OrderItemRow(
                    product_id=product.id,
                    name=product.name,
                    price=product.price,
                    quantity=row.quantity,
                ))
                product.stock_quantity -= row.quantity
                product.total_sold = (product.total_sold or 0) + row.quantity

            if quote["coupon"] is not None:
                quote["coupon"].current_uses = (quote["coupon"].current_uses or 0) + 1

            self.cart.clear(user_id, commit=False)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Order {order.order_number} placed by user {user_id} (total {quote['total']})")
        return self.orders.find_by_id(order.id)
