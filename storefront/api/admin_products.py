"""
Admin Products API Endpoints
Catalog management for the back office (admin only)
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from storefront.core.auth import TokenUser, require_admin
from storefront.core.database import get_db
from storefront.core.exceptions import ConflictError, NotFoundError, StorefrontError
from storefront.domain.catalog import ProductCreate, ProductUpdate
from storefront.repositories.product_repository import ProductRepository

logger = logging.getLogger(__name__)

router = APIRouter()


def _product_row_or_404(repo: ProductRepository, product_id: str):
    row = repo.get_row(product_id)
    if row is None:
        raise NotFoundError("Product not found")
    return row


@router.get("/")
async def get_products(
    category: Optional[str] = Query(None, description="Filter by category slug"),
    is_active: Optional[bool] = Query(None, description="Filter by active status"),
    search: Optional[str] = Query(None, description="Search by name or description"),
    sort: str = Query("created"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    admin: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Get all products, including inactive ones"""
    try:
        repo = ProductRepository(db)

        products, total = repo.find_all(
            category=category,
            search=search,
            sort=sort,
            active_only=False,
            is_active=is_active,
            limit=limit,
            offset=offset
        )

        return {
            "status": "success",
            "total": total,
            "limit": limit,
            "offset": offset,
            "count": len(products),
            "data": [product.to_dict() for product in products]
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error fetching products")
        raise HTTPException(status_code=500, detail=f"Error fetching products: {str(e)}")


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_product(
    data: ProductCreate,
    admin: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Create a product; the slug is derived from the name when omitted"""
    try:
        repo = ProductRepository(db)
        fields = data.model_dump()

        if fields["slug"]:
            if repo.slug_exists(fields["slug"]):
                raise ConflictError("Product with this slug already exists")
        else:
            fields["slug"] = repo.unique_slug(data.name)

        if fields["sku"] and repo.sku_exists(fields["sku"]):
            raise ConflictError("Product with this SKU already exists")

        product = repo.create(fields)
        logger.info(f"Product {product.slug} created by {admin.email}")

        return {
            "status": "success",
            "message": "Product created",
            "data": product.to_dict()
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error creating product")
        raise HTTPException(status_code=500, detail=f"Error creating product: {str(e)}")


@router.get("/{product_id}")
async def get_product(product_id: str, admin: TokenUser = Depends(require_admin), db: Session = Depends(get_db)):
    product = ProductRepository(db).find_by_id(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    return {
        "status": "success",
        "data": product.to_dict()
    }


@router.put("/{product_id}")
async def update_product(
    product_id: str,
    data: ProductUpdate,
    admin: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    try:
        repo = ProductRepository(db)
        row = _product_row_or_404(repo, product_id)
        changes = data.model_dump(exclude_unset=True)

        if changes.get("slug") and repo.slug_exists(changes["slug"], exclude_id=product_id):
            raise ConflictError("Product with this slug already exists")
        if changes.get("sku") and repo.sku_exists(changes["sku"], exclude_id=product_id):
            raise ConflictError("Product with this SKU already exists")
        for required in ("name", "slug", "price", "is_active", "featured", "stock_quantity"):
            if required in changes and changes[required] is None:
                changes.pop(required)

        product = repo.update(row, changes)

        return {
            "status": "success",
            "message": "Product updated",
            "data": product.to_dict()
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception(f"Error updating product {product_id}")
        raise HTTPException(status_code=500, detail=f"Error updating product: {str(e)}")


@router.delete("/{product_id}")
async def delete_product(product_id: str, admin: TokenUser = Depends(require_admin), db: Session = Depends(get_db)):
    """
    Delete a product

    Products that appear in orders are deactivated instead so order
    history keeps its catalog link.
    """
    try:
        repo = ProductRepository(db)
        row = _product_row_or_404(repo, product_id)

        if repo.is_referenced_by_orders(product_id):
            repo.update(row, {"is_active": False})
            logger.info(f"Product {product_id} deactivated by {admin.email} (referenced by orders)")
            return {
                "status": "success",
                "message": "Product is referenced by orders and was deactivated instead of deleted",
                "deactivated": True
            }

        repo.delete(row)
        logger.info(f"Product {product_id} deleted by {admin.email}")

        return {
            "status": "success",
            "message": "Product deleted",
            "deactivated": False
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception(f"Error deleting product {product_id}")
        raise HTTPException(status_code=500, detail=f"Error deleting product: {str(e)}")
