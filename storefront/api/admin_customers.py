"""
Admin Customers API Endpoints
Customer listing, detail, activation and deletion (admin only)
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from storefront.core.auth import TokenUser, require_admin
from storefront.core.database import get_db
from storefront.core.exceptions import StorefrontError
from storefront.core.rate_limit import rate_limit
from storefront.repositories.customer_repository import CUSTOMER_SORTS, CustomerRepository
from storefront.services.customer_service import CustomerService

logger = logging.getLogger(__name__)

router = APIRouter()


class CustomerStatusUpdate(BaseModel):
    is_active: bool


@router.get("/", dependencies=[Depends(rate_limit(30, 600, scope="admin:customers"))])
async def list_customers(
    status: str = Query("all", pattern="^(all|active|inactive)$"),
    search: Optional[str] = Query(None, description="Search by name or email"),
    sort_by: str = Query("newest", description=", ".join(CUSTOMER_SORTS)),
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    admin: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    List customers with order count and total spend

    Cancelled orders do not count towards spend.
    """
    try:
        customers, total = CustomerRepository(db).find_customers(
            status=status,
            search=search,
            sort_by=sort_by,
            limit=limit,
            offset=offset
        )

        return {
            "status": "success",
            "total": total,
            "limit": limit,
            "offset": offset,
            "count": len(customers),
            "data": customers
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error fetching customers")
        raise HTTPException(status_code=500, detail=f"Error fetching customers: {str(e)}")


@router.get("/{customer_id}")
async def get_customer(customer_id: str, admin: TokenUser = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        customer = CustomerService(db).get_detail(customer_id)

        return {
            "status": "success",
            "data": customer
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception(f"Error fetching customer {customer_id}")
        raise HTTPException(status_code=500, detail=f"Error fetching customer: {str(e)}")


@router.patch("/{customer_id}")
async def update_customer_status(
    customer_id: str,
    data: CustomerStatusUpdate,
    admin: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Activate or deactivate a customer account"""
    try:
        result = CustomerService(db).set_active(customer_id, data.is_active)

        return {
            "status": "success",
            "message": f"Customer {'activated' if data.is_active else 'deactivated'}",
            "data": result
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception(f"Error updating customer {customer_id}")
        raise HTTPException(status_code=500, detail=f"Error updating customer: {str(e)}")


@router.delete("/{customer_id}")
async def delete_customer(customer_id: str, admin: TokenUser = Depends(require_admin), db: Session = Depends(get_db)):
    """
    Delete a customer without orders

    Addresses, cards, wishlist and cart go with the account.
    """
    try:
        CustomerService(db).delete(customer_id)
        logger.info(f"Customer {customer_id} deleted by {admin.email}")

        return {
            "status": "success",
            "message": "Customer deleted successfully"
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception(f"Error deleting customer {customer_id}")
        raise HTTPException(status_code=500, detail=f"Error deleting customer: {str(e)}")
