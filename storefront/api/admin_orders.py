"""
Admin Orders API Endpoints
Order listing, detail and status management (admin only)
"""
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.core.auth import TokenUser, require_admin
from storefront.core.database import get_db
from storefront.core.exceptions import StorefrontError
from storefront.domain.order import OrderStatusUpdate
from storefront.repositories.order_repository import OrderRepository
from storefront.services.order_service import OrderService, parse_order_status

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/")
async def get_orders(
    status: Optional[str] = Query(None, description="Filter by order status"),
    search: Optional[str] = Query(None, description="Order number, customer name or email"),
    date_from: Optional[datetime] = Query(None, description="Created on or after"),
    date_to: Optional[datetime] = Query(None, description="Created on or before"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    admin: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Get orders with filters, newest first"""
    try:
        if status:
            status = parse_order_status(status).value

        orders, total = OrderRepository(db).find_all(
            status=status,
            search=search,
            date_from=date_from,
            date_to=date_to,
            limit=limit,
            offset=offset
        )

        return {
            "status": "success",
            "total": total,
            "limit": limit,
            "offset": offset,
            "count": len(orders),
            "data": orders
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error fetching orders")
        raise HTTPException(status_code=500, detail=f"Error fetching orders: {str(e)}")


@router.get("/{order_id}")
async def get_order(order_id: str, admin: TokenUser = Depends(require_admin), db: Session = Depends(get_db)):
    """Get order detail with items, customer and shipping address"""
    try:
        repo = OrderRepository(db)
        row = repo.get_row(order_id)

        if not row:
            raise HTTPException(status_code=404, detail=f"Order {order_id} not found")

        return {
            "status": "success",
            "data": repo.detail_dict(row)
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception(f"Error fetching order {order_id}")
        raise HTTPException(status_code=500, detail=f"Error fetching order: {str(e)}")


@router.patch("/{order_id}")
async def update_order_status(
    order_id: str,
    data: OrderStatusUpdate,
    admin: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Change an order's status

    Customers are emailed on SHIPPED, CANCELLED and COMPLETED.
    """
    try:
        order = await OrderService(db).update_status(
            order_id,
            data.status,
            cancellation_reason=data.cancellation_reason,
            payment_status=data.payment_status
        )

        return {
            "status": "success",
            "message": f"Order status updated to {order['status']}",
            "data": order
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception(f"Error updating order {order_id}")
        raise HTTPException(status_code=500, detail=f"Error updating order: {str(e)}")
