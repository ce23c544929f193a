"""
Supplier Portal API Endpoints
Onboarding, profile settings, own catalog, orders, sales figures and
support tickets for SUPPLIER accounts
"""
import logging
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from storefront.core.auth import TokenUser, get_current_user, require_supplier
from storefront.core.database import get_db
from storefront.core.exceptions import StorefrontError
from storefront.domain.catalog import SupplierProductCreate, SupplierProductUpdate
from storefront.domain.supplier import SupplierRegistration, SupplierSettingsUpdate, TicketCreate, TicketResponseCreate
from storefront.services.supplier_catalog_service import SupplierCatalogService
from storefront.services.supplier_service import SupplierService
from storefront.services.ticket_service import TicketService

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Onboarding and settings
# =============================================================================

@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register_supplier(
    data: SupplierRegistration,
    user: TokenUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Create the supplier profile for the signed-in SUPPLIER user

    The profile starts PENDING until an admin approves it.
    """
    try:
        supplier = SupplierService(db).register(user, data)

        return {
            "status": "success",
            "message": "Supplier registration submitted for review",
            "data": supplier.to_dict()
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error registering supplier")
        raise HTTPException(status_code=500, detail=f"Error registering supplier: {str(e)}")


@router.get("/settings")
async def get_supplier_settings(user: TokenUser = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        return {
            "status": "success",
            "data": SupplierService(db).get_settings(user).to_dict()
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error fetching supplier settings")
        raise HTTPException(status_code=500, detail=f"Error fetching supplier settings: {str(e)}")


@router.put("/settings")
async def update_supplier_settings(
    data: SupplierSettingsUpdate,
    user: TokenUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        supplier = SupplierService(db).update_settings(user, data)

        return {
            "status": "success",
            "message": "Settings updated",
            "data": supplier.to_dict()
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error updating supplier settings")
        raise HTTPException(status_code=500, detail=f"Error updating supplier settings: {str(e)}")


# =============================================================================
# Products
# =============================================================================

@router.get("/products")
async def list_my_products(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None, description="Search by name, description or tags"),
    status: Optional[str] = Query(None, pattern="^(active|inactive)$"),
    low_stock: bool = Query(False, description="Only products with 5 units or fewer"),
    category: Optional[str] = Query(None, description="Filter by category slug"),
    sort: str = Query("created"),
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    user: TokenUser = Depends(require_supplier),
    db: Session = Depends(get_db)
):
    try:
        result = SupplierCatalogService(db).list_products(
            user,
            page=page,
            limit=limit,
            search=search,
            status=status,
            low_stock=low_stock,
            category=category,
            sort=sort,
            min_price=min_price,
            max_price=max_price
        )

        return {
            "status": "success",
            "data": result
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error fetching supplier products")
        raise HTTPException(status_code=500, detail=f"Error fetching products: {str(e)}")


@router.post("/products", status_code=status.HTTP_201_CREATED)
async def create_my_product(
    data: SupplierProductCreate,
    user: TokenUser = Depends(require_supplier),
    db: Session = Depends(get_db)
):
    """List a new product under the supplier; the slug is derived from the name"""
    try:
        product = SupplierCatalogService(db).create_product(user, data)

        return {
            "status": "success",
            "message": "Product created",
            "data": product.to_dict()
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error creating supplier product")
        raise HTTPException(status_code=500, detail=f"Error creating product: {str(e)}")


@router.get("/products/{product_id}")
async def get_my_product(product_id: str, user: TokenUser = Depends(require_supplier), db: Session = Depends(get_db)):
    return {
        "status": "success",
        "data": SupplierCatalogService(db).get_product(user, product_id).to_dict()
    }


@router.put("/products/{product_id}")
async def update_my_product(
    product_id: str,
    data: SupplierProductUpdate,
    user: TokenUser = Depends(require_supplier),
    db: Session = Depends(get_db)
):
    try:
        product = SupplierCatalogService(db).update_product(user, product_id, data)

        return {
            "status": "success",
            "message": "Product updated",
            "data": product.to_dict()
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception(f"Error updating supplier product {product_id}")
        raise HTTPException(status_code=500, detail=f"Error updating product: {str(e)}")


@router.delete("/products/{product_id}")
async def delete_my_product(product_id: str, user: TokenUser = Depends(require_supplier), db: Session = Depends(get_db)):
    """Delete a product; products already ordered must be deactivated instead"""
    try:
        SupplierCatalogService(db).delete_product(user, product_id)

        return {
            "status": "success",
            "message": "Product deleted"
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception(f"Error deleting supplier product {product_id}")
        raise HTTPException(status_code=500, detail=f"Error deleting product: {str(e)}")


# =============================================================================
# Orders and sales
# =============================================================================

@router.get("/orders")
async def list_my_orders(
    status: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: TokenUser = Depends(require_supplier),
    db: Session = Depends(get_db)
):
    """Orders containing the supplier's products, showing only the supplier's lines"""
    try:
        result = SupplierCatalogService(db).list_orders(
            user,
            status=status.strip().upper() if status else None,
            page=page,
            limit=limit
        )

        return {
            "status": "success",
            "data": result
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error fetching supplier orders")
        raise HTTPException(status_code=500, detail=f"Error fetching orders: {str(e)}")


@router.get("/orders/{order_id}")
async def get_my_order(order_id: str, user: TokenUser = Depends(require_supplier), db: Session = Depends(get_db)):
    try:
        return {
            "status": "success",
            "data": SupplierCatalogService(db).get_order(user, order_id)
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception(f"Error fetching supplier order {order_id}")
        raise HTTPException(status_code=500, detail=f"Error fetching order: {str(e)}")


@router.get("/stats")
async def get_my_stats(
    period: str = Query("30d", description="7d, 30d, 90d or 1y"),
    user: TokenUser = Depends(require_supplier),
    db: Session = Depends(get_db)
):
    try:
        return {
            "status": "success",
            "data": SupplierCatalogService(db).get_stats(user, period)
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error fetching supplier stats")
        raise HTTPException(status_code=500, detail=f"Error fetching stats: {str(e)}")


@router.get("/revenue")
async def get_my_revenue(
    period: str = Query("30d", description="7d, 30d, 90d or 1y"),
    user: TokenUser = Depends(require_supplier),
    db: Session = Depends(get_db)
):
    try:
        return {
            "status": "success",
            "data": SupplierCatalogService(db).get_revenue(user, period)
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error fetching supplier revenue")
        raise HTTPException(status_code=500, detail=f"Error fetching revenue: {str(e)}")


# =============================================================================
# Tickets
# =============================================================================

@router.get("/tickets")
async def list_my_tickets(
    status: Optional[str] = Query(None),
    user: TokenUser = Depends(require_supplier),
    db: Session = Depends(get_db)
):
    try:
        tickets = TicketService(db).list_for_supplier(user, status=status.strip().upper() if status else None)

        return {
            "status": "success",
            "count": len(tickets),
            "data": tickets
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error fetching tickets")
        raise HTTPException(status_code=500, detail=f"Error fetching tickets: {str(e)}")


@router.post("/tickets", status_code=status.HTTP_201_CREATED)
async def create_ticket(
    data: TicketCreate,
    user: TokenUser = Depends(require_supplier),
    db: Session = Depends(get_db)
):
    try:
        ticket = TicketService(db).create_ticket(user, data)

        return {
            "status": "success",
            "message": "Ticket created",
            "data": ticket
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error creating ticket")
        raise HTTPException(status_code=500, detail=f"Error creating ticket: {str(e)}")


@router.get("/tickets/{ticket_id}")
async def get_my_ticket(ticket_id: str, user: TokenUser = Depends(require_supplier), db: Session = Depends(get_db)):
    try:
        return {
            "status": "success",
            "data": TicketService(db).get_for_supplier(user, ticket_id)
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception(f"Error fetching ticket {ticket_id}")
        raise HTTPException(status_code=500, detail=f"Error fetching ticket: {str(e)}")


@router.post("/tickets/{ticket_id}/responses", status_code=status.HTTP_201_CREATED)
async def respond_to_ticket(
    ticket_id: str,
    data: TicketResponseCreate,
    user: TokenUser = Depends(require_supplier),
    db: Session = Depends(get_db)
):
    """Reply to a ticket; replying to a resolved or closed ticket reopens it"""
    try:
        response = TicketService(db).supplier_respond(user, ticket_id, data)

        return {
            "status": "success",
            "message": "Response added",
            "data": response
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception(f"Error responding to ticket {ticket_id}")
        raise HTTPException(status_code=500, detail=f"Error responding to ticket: {str(e)}")
