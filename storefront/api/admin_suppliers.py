"""
Admin Suppliers API Endpoints
Supplier review, commercial terms and removal (admin only)
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.core.auth import TokenUser, require_admin
from storefront.core.database import get_db
from storefront.core.exceptions import StorefrontError, ValidationError
from storefront.domain.enums import SupplierStatus
from storefront.domain.supplier import AdminSupplierUpdate
from storefront.repositories.supplier_repository import SupplierRepository
from storefront.services.supplier_service import SupplierService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/")
async def get_suppliers(
    status: Optional[str] = Query(None, description="PENDING, APPROVED, REJECTED or SUSPENDED"),
    search: Optional[str] = Query(None, description="Company or contact name/email"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    admin: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    try:
        if status:
            try:
                status = SupplierStatus(status.strip().upper()).value
            except ValueError:
                allowed = ", ".join(item.value for item in SupplierStatus)
                raise ValidationError(f"Invalid status. Must be one of: {allowed}")

        suppliers, total = SupplierRepository(db).find_all(status=status, search=search, limit=limit, offset=offset)

        return {
            "status": "success",
            "total": total,
            "limit": limit,
            "offset": offset,
            "count": len(suppliers),
            "data": [supplier.to_dict() for supplier in suppliers]
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error fetching suppliers")
        raise HTTPException(status_code=500, detail=f"Error fetching suppliers: {str(e)}")


@router.get("/{supplier_id}")
async def get_supplier(supplier_id: str, admin: TokenUser = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        return {
            "status": "success",
            "data": SupplierService(db).detail(supplier_id)
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception(f"Error fetching supplier {supplier_id}")
        raise HTTPException(status_code=500, detail=f"Error fetching supplier: {str(e)}")


@router.put("/{supplier_id}")
async def update_supplier(
    supplier_id: str,
    data: AdminSupplierUpdate,
    admin: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Review a supplier or change its commercial terms

    Approval stamps approved_at/approved_by and emails the supplier.
    """
    try:
        supplier = await SupplierService(db).admin_update(supplier_id, data, admin)

        return {
            "status": "success",
            "message": "Supplier updated",
            "data": supplier
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception(f"Error updating supplier {supplier_id}")
        raise HTTPException(status_code=500, detail=f"Error updating supplier: {str(e)}")


@router.delete("/{supplier_id}")
async def delete_supplier(supplier_id: str, admin: TokenUser = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        SupplierService(db).delete(supplier_id)

        return {
            "status": "success",
            "message": "Supplier deleted"
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception(f"Error deleting supplier {supplier_id}")
        raise HTTPException(status_code=500, detail=f"Error deleting supplier: {str(e)}")
