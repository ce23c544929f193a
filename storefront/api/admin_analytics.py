"""
Admin Analytics API Endpoints
Sales analytics and dashboard cards for the back office (admin only)

Author: TechTots
Date: 2025-10-24
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.core.auth import TokenUser, require_admin
from storefront.core.config import settings
from storefront.core.database import get_db
from storefront.services.analytics_service import MOCK_ANALYTICS, MOCK_DASHBOARD, AnalyticsService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/analytics")
async def get_analytics(
    period: int = Query(30, ge=1, le=365, description="Period length in days"),
    admin: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Sales analytics for the last `period` days compared to the period before

    Returns:
    - sales_data: daily / weekly / period revenue with change and trend
    - order_stats: conversion rate, average order value, customers
    - top_selling_products: top 5 by units sold
    - sales_by_category: revenue per category with share of total
    """
    if settings.USE_MOCK_DATA:
        return {
            "status": "success",
            "mock": True,
            "data": MOCK_ANALYTICS
        }

    try:
        return {
            "status": "success",
            "data": AnalyticsService(db).get_analytics(period)
        }

    except Exception as e:
        logger.exception("Error computing analytics")
        raise HTTPException(status_code=500, detail=f"Error fetching analytics: {str(e)}")


@router.get("/dashboard")
async def get_dashboard(
    period: int = Query(30, ge=1, le=365, description="Period length in days"),
    admin: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Dashboard stat cards, recent orders and best sellers"""
    if settings.USE_MOCK_DATA:
        return {
            "status": "success",
            "mock": True,
            "data": MOCK_DASHBOARD
        }

    try:
        return {
            "status": "success",
            "data": AnalyticsService(db).get_dashboard(period)
        }

    except Exception as e:
        logger.exception("Error computing dashboard")
        raise HTTPException(status_code=500, detail=f"Error fetching dashboard: {str(e)}")
