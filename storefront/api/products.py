"""
Products API Endpoints
Public storefront catalog: listing, categories and product detail

Author: TechTots
Date: 2025-10-17
"""
import logging
import math
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.core.database import get_db
from storefront.repositories.product_repository import ProductRepository

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/")
async def get_products(
    category: Optional[str] = Query(None, description="Filter by category slug"),
    featured: Optional[bool] = Query(None, description="Filter by featured flag"),
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    search: Optional[str] = Query(None, description="Search by name or description"),
    sort: str = Query("created", description="name, price, price_desc, featured or created"),
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """
    Get active products with optional filters

    Returns products with pagination information
    """
    try:
        repo = ProductRepository(db)

        products, total = repo.find_all(
            category=category,
            featured=featured,
            min_price=min_price,
            max_price=max_price,
            search=search,
            sort=sort,
            limit=limit,
            offset=(page - 1) * limit
        )

        return {
            "status": "success",
            "data": [product.to_dict() for product in products],
            "pagination": {
                "total": total,
                "page": page,
                "limit": limit,
                "pages": math.ceil(total / limit) if total else 0
            }
        }

    except Exception as e:
        logger.exception("Error fetching products")
        raise HTTPException(status_code=500, detail=f"Error fetching products: {str(e)}")


@router.get("/categories")
async def get_categories(db: Session = Depends(get_db)):
    """Get active categories"""
    try:
        categories = ProductRepository(db).list_categories()

        return {
            "status": "success",
            "count": len(categories),
            "data": [category.to_dict() for category in categories]
        }

    except Exception as e:
        logger.exception("Error fetching categories")
        raise HTTPException(status_code=500, detail=f"Error fetching categories: {str(e)}")


@router.get("/{slug}")
async def get_product(slug: str, db: Session = Depends(get_db)):
    """Get a single active product by slug"""
    try:
        product = ProductRepository(db).find_by_slug(slug)

        if not product:
            raise HTTPException(status_code=404, detail="Product not found")

        return {
            "status": "success",
            "data": product.to_dict()
        }

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error fetching product {slug}")
        raise HTTPException(status_code=500, detail=f"Error fetching product: {str(e)}")
