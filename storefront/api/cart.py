"""
Cart API Endpoints
Shopping cart for signed-in customers
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storefront.core.auth import TokenUser, get_current_user
from storefront.core.database import get_db
from storefront.core.exceptions import StorefrontError
from storefront.core.rate_limit import rate_limit
from storefront.domain.checkout import CartItemAdd, CartItemUpdate
from storefront.services.cart_service import CartService

logger = logging.getLogger(__name__)

router = APIRouter()

read_limit = rate_limit(50, 60, scope="cart:read")
write_limit = rate_limit(20, 60, scope="cart:write")


@router.get("/", dependencies=[Depends(read_limit)])
async def get_cart(user: TokenUser = Depends(get_current_user), db: Session = Depends(get_db)):
    """Get the current user's cart with live prices and subtotal"""
    try:
        cart = CartService(db).get_cart(user.id)

        return {
            "status": "success",
            "data": cart
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error fetching cart")
        raise HTTPException(status_code=500, detail=f"Error fetching cart: {str(e)}")


@router.post("/", dependencies=[Depends(write_limit)])
async def add_to_cart(
    data: CartItemAdd,
    user: TokenUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Add a product to the cart, incrementing the quantity of an existing line"""
    try:
        item = CartService(db).add_item(user.id, data.product_id, data.quantity)

        return {
            "status": "success",
            "message": "Item added to cart",
            "data": item
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error adding item to cart")
        raise HTTPException(status_code=500, detail=f"Error adding item to cart: {str(e)}")


@router.put("/items/{item_id}", dependencies=[Depends(write_limit)])
async def update_cart_item(
    item_id: str,
    data: CartItemUpdate,
    user: TokenUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        item = CartService(db).update_item(user.id, item_id, data.quantity)

        return {
            "status": "success",
            "message": "Cart updated",
            "data": item
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error updating cart item")
        raise HTTPException(status_code=500, detail=f"Error updating cart item: {str(e)}")


@router.delete("/items/{item_id}", dependencies=[Depends(write_limit)])
async def remove_cart_item(
    item_id: str,
    user: TokenUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        CartService(db).remove_item(user.id, item_id)

        return {
            "status": "success",
            "message": "Item removed from cart"
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error removing cart item")
        raise HTTPException(status_code=500, detail=f"Error removing cart item: {str(e)}")


@router.delete("/", dependencies=[Depends(write_limit)])
async def clear_cart(user: TokenUser = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        CartService(db).clear(user.id)

        return {
            "status": "success",
            "message": "Cart cleared"
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error clearing cart")
        raise HTTPException(status_code=500, detail=f"Error clearing cart: {str(e)}")
