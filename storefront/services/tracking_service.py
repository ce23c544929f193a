"""
Order tracking timeline

There is no carrier integration; the timeline is derived from the order
status and its timestamps so the storefront can render a shipment view.
"""
from datetime import datetime, timedelta
from typing import Dict, Any, List, Optional

from storefront.domain.enums import OrderStatus
from storefront.domain.order import Order

CARRIER = "Standard Shipping"
ESTIMATED_DELIVERY_DAYS = 5

PROCESSED = (OrderStatus.PROCESSING.value, OrderStatus.SHIPPED.value, OrderStatus.DELIVERED.value,
             OrderStatus.COMPLETED.value)
SHIPPED = (OrderStatus.SHIPPED.value, OrderStatus.DELIVERED.value, OrderStatus.COMPLETED.value)
DELIVERED = (OrderStatus.DELIVERED.value, OrderStatus.COMPLETED.value)


def tracking_number(order_number: str) -> str:
    """Stable per order: TRK followed by the order number without dashes"""
    digits = order_number[4:] if order_number.startswith("ORD-") else order_number
    return "TRK" + digits.replace("-", "")


def _event(event_id: str, status: str, description: str, location: str, timestamp: datetime,
           completed: bool = True) -> Dict[str, Any]:
    return {
        "id": event_id,
        "status": status,
        "description": description,
        "location": location,
        "timestamp": timestamp.isoformat(),
        "completed": completed,
    }


def estimated_delivery(order: Order) -> Optional[datetime]:
    if order.status in DELIVERED or order.status == OrderStatus.CANCELLED.value:
        return None
    return order.created_at + timedelta(days=ESTIMATED_DELIVERY_DAYS)


def tracking_events(order: Order) -> List[Dict[str, Any]]:
    """
    Timeline events, oldest first

    - confirmed: always, at order creation
    - processing (+2h), shipped (+1 day), out for delivery (+2 days 08:00)
      and delivered (delivered_at, else +2 days 14:30) as the status allows
    - cancelled: at the last update of a cancelled order
    - estimated delivery (+5 days, not completed) while the order is open
    """
    base = order.created_at
    address = order.shipping_address
    city = address.city if address else "Unknown"
    street = address.address_line1 if address else "Delivery address"

    events = [_event("confirmed", "CONFIRMED", "Order confirmed and payment processed", "Online", base)]

    if order.status in PROCESSED:
        events.append(_event("processing", "PROCESSING", "Order is being prepared for shipment",
                             "Fulfillment Center", base + timedelta(hours=2)))
    if order.status in SHIPPED:
        events.append(_event("shipped", "SHIPPED", "Package shipped", "Fulfillment Center",
                             base + timedelta(days=1)))
    if order.status in DELIVERED:
        out_for_delivery = (base + timedelta(days=2)).replace(hour=8, minute=0, second=0, microsecond=0)
        events.append(_event("out_for_delivery", "OUT_FOR_DELIVERY", "Package is out for delivery",
                             f"Local Facility - {city}", out_for_delivery))
        delivered_at = order.delivered_at or (base + timedelta(days=2)).replace(
            hour=14, minute=30, second=0, microsecond=0
        )
        events.append(_event("delivered", "DELIVERED", "Package has been delivered", street, delivered_at))
    if order.status == OrderStatus.CANCELLED.value:
        events.append(_event("cancelled", "CANCELLED", "Order was cancelled", "Online",
                             order.updated_at or base))

    estimate = estimated_delivery(order)
    if estimate is not None:
        event = _event("estimated_delivery", "ESTIMATED_DELIVERY", "Estimated delivery", street, estimate,
                       completed=False)
        event["estimated"] = True
        events.append(event)

    return events


def build_tracking(order: Order, now: datetime) -> Dict[str, Any]:
    address = order.shipping_address
    estimate = estimated_delivery(order)
    return {
        "order": {
            "id": order.id,
            "order_number": order.order_number,
            "status": order.status,
            "tracking_number": tracking_number(order.order_number),
            "carrier": CARRIER,
            "estimated_delivery": estimate.isoformat() if estimate else None,
            "delivered_at": order.delivered_at.isoformat() if order.delivered_at else None,
            "created_at": order.created_at.isoformat(),
            "shipping_address": {
                "full_name": address.full_name,
                "address_line1": address.address_line1,
                "city": address.city,
                "state": address.state,
                "postal_code": address.postal_code,
                "country": address.country,
            } if address else None,
        },
        "tracking_events": tracking_events(order),
        "last_updated": now.isoformat(),
    }
