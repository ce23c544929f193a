"""
Store Settings API Endpoints
Singleton store configuration: admin read/write and a public subset
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storefront.core.auth import TokenUser, require_admin
from storefront.core.database import get_db
from storefront.domain.settings import StoreSettingsUpdate
from storefront.repositories.settings_repository import SettingsRepository

logger = logging.getLogger(__name__)

admin_router = APIRouter()
public_router = APIRouter()


@admin_router.get("/")
async def get_settings(admin: TokenUser = Depends(require_admin), db: Session = Depends(get_db)):
    """Get store settings, created with defaults on first read"""
    try:
        return {
            "status": "success",
            "data": SettingsRepository(db).get().to_dict()
        }

    except Exception as e:
        logger.exception("Error fetching settings")
        raise HTTPException(status_code=500, detail=f"Error fetching settings: {str(e)}")


@admin_router.put("/")
async def update_settings(
    data: StoreSettingsUpdate,
    admin: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Partial update

    shipping_settings, payment_settings and tax_settings are merged into the
    stored blocks, so sending {"tax_settings": {"rate": 19}} keeps the other tax keys.
    """
    try:
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if "contact_email" in changes:
            changes["contact_email"] = str(changes["contact_email"])

        store = SettingsRepository(db).update(changes)
        logger.info(f"Store settings updated by {admin.email}: {', '.join(sorted(changes)) or 'no changes'}")

        return {
            "status": "success",
            "message": "Settings updated",
            "data": store.to_dict()
        }

    except Exception as e:
        logger.exception("Error updating settings")
        raise HTTPException(status_code=500, detail=f"Error updating settings: {str(e)}")


@public_router.get("/public")
async def get_public_settings(db: Session = Depends(get_db)):
    """Store name, currency, shipping and tax settings for the storefront"""
    try:
        return {
            "status": "success",
            "data": SettingsRepository(db).get().public_dict()
        }

    except Exception as e:
        logger.exception("Error fetching public settings")
        raise HTTPException(status_code=500, detail=f"Error fetching settings: {str(e)}")
