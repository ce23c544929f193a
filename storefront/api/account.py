"""
Account API Endpoints
Signed-in customer area: addresses, payment cards, wishlist, orders,
dashboard, profile and password

Author: TechTots
Date: 2025-10-20
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from storefront.core.auth import TokenUser, get_current_user
from storefront.core.database import get_db, utcnow
from storefront.core.exceptions import NotFoundError, StorefrontError
from storefront.domain.account import (
    Address,
    AddressInput,
    AddressUpdate,
    PasswordChange,
    PaymentCardCreate,
    PaymentCardUpdate,
    ProfileUpdate,
    WishlistAdd,
)
from storefront.domain.base import to_json_value
from storefront.repositories.address_repository import AddressRepository
from storefront.repositories.order_repository import OrderRepository
from storefront.repositories.wishlist_repository import WishlistRepository
from storefront.services.account_service import AccountService
from storefront.services.payment_card_service import PaymentCardService
from storefront.services.tracking_service import build_tracking

logger = logging.getLogger(__name__)

router = APIRouter()


def _address_or_404(repo: AddressRepository, user_id: str, address_id: str):
    row = repo.get_row(user_id, address_id)
    if row is None:
        raise NotFoundError("Address not found")
    return row


# =============================================================================
# Addresses
# =============================================================================

@router.get("/addresses")
async def list_addresses(user: TokenUser = Depends(get_current_user), db: Session = Depends(get_db)):
    """List saved addresses, default first"""
    try:
        addresses = AddressRepository(db).find_by_user(user.id)

        return {
            "status": "success",
            "count": len(addresses),
            "data": [address.to_dict() for address in addresses]
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error fetching addresses")
        raise HTTPException(status_code=500, detail=f"Error fetching addresses: {str(e)}")


@router.post("/addresses", status_code=status.HTTP_201_CREATED)
async def create_address(
    data: AddressInput,
    user: TokenUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        address = AddressRepository(db).create(user.id, data.model_dump())

        return {
            "status": "success",
            "message": "Address added",
            "data": address.to_dict()
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error creating address")
        raise HTTPException(status_code=500, detail=f"Error creating address: {str(e)}")


@router.get("/addresses/{address_id}")
async def get_address(address_id: str, user: TokenUser = Depends(get_current_user), db: Session = Depends(get_db)):
    repo = AddressRepository(db)
    row = _address_or_404(repo, user.id, address_id)
    return {
        "status": "success",
        "data": Address.model_validate(row).to_dict()
    }


@router.put("/addresses/{address_id}")
async def update_address(
    address_id: str,
    data: AddressUpdate,
    user: TokenUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        repo = AddressRepository(db)
        row = _address_or_404(repo, user.id, address_id)
        address = repo.update(row, data.model_dump(exclude_unset=True, exclude_none=True))

        return {
            "status": "success",
            "message": "Address updated",
            "data": address.to_dict()
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception(f"Error updating address {address_id}")
        raise HTTPException(status_code=500, detail=f"Error updating address: {str(e)}")


@router.delete("/addresses/{address_id}")
async def delete_address(address_id: str, user: TokenUser = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        repo = AddressRepository(db)
        repo.delete(_address_or_404(repo, user.id, address_id))

        return {
            "status": "success",
            "message": "Address deleted"
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception(f"Error deleting address {address_id}")
        raise HTTPException(status_code=500, detail=f"Error deleting address: {str(e)}")


# =============================================================================
# Payment cards
# =============================================================================

@router.get("/payment-cards")
async def list_payment_cards(user: TokenUser = Depends(get_current_user), db: Session = Depends(get_db)):
    """List saved cards, default first; only masked data is returned"""
    try:
        cards = PaymentCardService(db).list_cards(user.id)

        return {
            "status": "success",
            "count": len(cards),
            "data": [card.to_dict() for card in cards]
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error fetching payment cards")
        raise HTTPException(status_code=500, detail=f"Error fetching payment cards: {str(e)}")


@router.post("/payment-cards", status_code=status.HTTP_201_CREATED)
async def create_payment_card(
    data: PaymentCardCreate,
    user: TokenUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        card = PaymentCardService(db).add_card(user.id, data)

        return {
            "status": "success",
            "message": "Payment card added",
            "data": card.to_dict()
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error adding payment card")
        raise HTTPException(status_code=500, detail=f"Error adding payment card: {str(e)}")


@router.get("/payment-cards/{card_id}")
async def get_payment_card(card_id: str, user: TokenUser = Depends(get_current_user), db: Session = Depends(get_db)):
    card = PaymentCardService(db).get_card(user.id, card_id)
    return {
        "status": "success",
        "data": card.to_dict()
    }


@router.put("/payment-cards/{card_id}")
async def update_payment_card(
    card_id: str,
    data: PaymentCardUpdate,
    user: TokenUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        card = PaymentCardService(db).update_card(user.id, card_id, data)

        return {
            "status": "success",
            "message": "Payment card updated",
            "data": card.to_dict()
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception(f"Error updating payment card {card_id}")
        raise HTTPException(status_code=500, detail=f"Error updating payment card: {str(e)}")


@router.delete("/payment-cards/{card_id}")
async def delete_payment_card(card_id: str, user: TokenUser = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        PaymentCardService(db).delete_card(user.id, card_id)

        return {
            "status": "success",
            "message": "Payment card deleted"
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception(f"Error deleting payment card {card_id}")
        raise HTTPException(status_code=500, detail=f"Error deleting payment card: {str(e)}")


# =============================================================================
# Wishlist
# =============================================================================

@router.get("/wishlist")
async def get_wishlist(user: TokenUser = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        items = WishlistRepository(db).find_by_user(user.id)

        return {
            "status": "success",
            "count": len(items),
            "data": [item.to_dict() for item in items]
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error fetching wishlist")
        raise HTTPException(status_code=500, detail=f"Error fetching wishlist: {str(e)}")


@router.post("/wishlist", status_code=status.HTTP_201_CREATED)
async def add_to_wishlist(
    data: WishlistAdd,
    user: TokenUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Save a product; answers 200 when it was already saved"""
    try:
        item, created = AccountService(db).add_to_wishlist(user.id, data.product_id)

        if not created:
            return JSONResponse(status_code=status.HTTP_200_OK, content={
                "status": "success",
                "message": "Product already in wishlist",
                "data": item.to_dict()
            })

        return {
            "status": "success",
            "message": "Product added to wishlist",
            "data": item.to_dict()
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error adding to wishlist")
        raise HTTPException(status_code=500, detail=f"Error adding to wishlist: {str(e)}")


@router.delete("/wishlist/{product_id}")
async def remove_from_wishlist(product_id: str, user: TokenUser = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        AccountService(db).remove_from_wishlist(user.id, product_id)

        return {
            "status": "success",
            "message": "Product removed from wishlist"
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error removing from wishlist")
        raise HTTPException(status_code=500, detail=f"Error removing from wishlist: {str(e)}")


# =============================================================================
# Orders
# =============================================================================

@router.get("/orders")
async def list_my_orders(user: TokenUser = Depends(get_current_user), db: Session = Depends(get_db)):
    """Own orders, newest first, with items"""
    try:
        orders = OrderRepository(db).find_by_user(user.id)

        return {
            "status": "success",
            "count": len(orders),
            "data": [order.to_dict() for order in orders]
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error fetching orders")
        raise HTTPException(status_code=500, detail=f"Error fetching orders: {str(e)}")


@router.get("/orders/{order_id}")
async def get_my_order(order_id: str, user: TokenUser = Depends(get_current_user), db: Session = Depends(get_db)):
    order = OrderRepository(db).find_for_user(user.id, order_id)
    if order is None:
        raise HTTPException(status_code=404, detail=f"Order {order_id} not found")

    return {
        "status": "success",
        "data": order.to_dict()
    }


@router.get("/orders/{order_id}/tracking")
async def get_order_tracking(order_id: str, user: TokenUser = Depends(get_current_user), db: Session = Depends(get_db)):
    """Shipment timeline for one of the user's orders"""
    try:
        order = OrderRepository(db).find_for_user(user.id, order_id)
        if order is None:
            raise NotFoundError("Order not found")

        return {
            "status": "success",
            "data": build_tracking(order, utcnow())
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception(f"Error fetching tracking for order {order_id}")
        raise HTTPException(status_code=500, detail=f"Error fetching tracking information: {str(e)}")


# =============================================================================
# Dashboard
# =============================================================================

@router.get("/dashboard/stats")
async def get_dashboard_stats(user: TokenUser = Depends(get_current_user), db: Session = Depends(get_db)):
    """
    Lifetime account statistics

    Returns:
    - Order count, spend and average order value
    - Favorite category
    - Account level with progress and unlocked benefits
    - Loyalty points and savings from coupons
    """
    try:
        stats = AccountService(db).get_stats(user.id)

        return {
            "status": "success",
            "data": to_json_value(stats.model_dump())
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error fetching dashboard stats")
        raise HTTPException(status_code=500, detail=f"Error fetching dashboard stats: {str(e)}")


@router.get("/dashboard/activities")
async def get_dashboard_activities(user: TokenUser = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        activities = AccountService(db).get_activities(user.id)

        return {
            "status": "success",
            "count": len(activities),
            "data": [to_json_value(activity.model_dump()) for activity in activities]
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error fetching activities")
        raise HTTPException(status_code=500, detail=f"Error fetching activities: {str(e)}")


# =============================================================================
# Profile
# =============================================================================

@router.put("/profile")
async def update_profile(
    data: ProfileUpdate,
    user: TokenUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        row = AccountService(db).update_profile(user.id, data)

        return {
            "status": "success",
            "message": "Profile updated",
            "data": {"id": row.id, "name": row.name, "email": row.email}
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error updating profile")
        raise HTTPException(status_code=500, detail=f"Error updating profile: {str(e)}")


@router.post("/password")
async def change_password(
    data: PasswordChange,
    user: TokenUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        AccountService(db).change_password(user.id, data)

        return {
            "status": "success",
            "message": "Password changed successfully"
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error changing password")
        raise HTTPException(status_code=500, detail=f"Error changing password: {str(e)}")
