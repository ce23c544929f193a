"""
Checkout API Endpoints
Turns the signed-in customer's cart into an order
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from storefront.core.auth import TokenUser, get_current_user
from storefront.core.database import get_db
from storefront.core.exceptions import StorefrontError
from storefront.domain.checkout import CheckoutRequest
from storefront.services.checkout_service import CheckoutService
from storefront.services.email_service import EmailService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/order", status_code=status.HTTP_201_CREATED)
async def create_order(
    data: CheckoutRequest,
    user: TokenUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Place an order from the current cart

    Stock, address, order, inventory, coupon usage and cart clearing are
    committed together. The confirmation email is sent afterwards and a
    delivery failure does not fail the request.
    """
    try:
        order = CheckoutService(db).place_order(user.id, data).to_dict()

        await EmailService(db).send_order_confirmation(order, {"name": user.name, "email": user.email})

        return {
            "status": "success",
            "message": "Order placed successfully",
            "data": order
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error placing order")
        raise HTTPException(status_code=500, detail=f"Error placing order: {str(e)}")
