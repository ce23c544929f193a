"""
Admin Email Templates API Endpoints
CRUD, preview and test sends for transactional email templates (admin only)

Templates use {{variable}} placeholders and {{#if variable}}...{{/if}} blocks.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from storefront.core.auth import TokenUser, require_admin
from storefront.core.database import get_db
from storefront.core.exceptions import NotFoundError, StorefrontError, ValidationError
from storefront.domain.email import EmailTemplate, EmailTemplateCreate, EmailTemplateUpdate, TemplatePreview, TemplateSendTest
from storefront.repositories.email_template_repository import EmailTemplateRepository
from storefront.services.email_service import EmailService, render_template

logger = logging.getLogger(__name__)

router = APIRouter()

SLUG_TAKEN = "Template with this slug already exists"


def _template_row_or_404(repo: EmailTemplateRepository, template_id: str):
    row = repo.get_row(template_id)
    if row is None:
        raise NotFoundError("Template not found")
    return row


def _fields(data: dict) -> dict:
    if "metadata" in data:
        data["template_metadata"] = data.pop("metadata")
    return data


@router.get("/")
async def get_templates(
    category: Optional[str] = Query(None, description="Filter by category"),
    is_active: Optional[bool] = Query(None, description="Filter by active status"),
    admin: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    try:
        templates = EmailTemplateRepository(db).find_all(category=category, is_active=is_active)

        return {
            "status": "success",
            "count": len(templates),
            "data": [template.to_dict() for template in templates]
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error fetching email templates")
        raise HTTPException(status_code=500, detail=f"Error fetching email templates: {str(e)}")


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_template(
    data: EmailTemplateCreate,
    admin: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    try:
        repo = EmailTemplateRepository(db)
        if repo.slug_exists(data.slug):
            raise ValidationError(SLUG_TAKEN)

        template = repo.create(_fields(data.model_dump()))
        logger.info(f"Email template {template.slug} created by {admin.email}")

        return {
            "status": "success",
            "message": "Template created",
            "data": template.to_dict()
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error creating email template")
        raise HTTPException(status_code=500, detail=f"Error creating email template: {str(e)}")


@router.get("/{template_id}")
async def get_template(template_id: str, admin: TokenUser = Depends(require_admin), db: Session = Depends(get_db)):
    row = _template_row_or_404(EmailTemplateRepository(db), template_id)
    return {
        "status": "success",
        "data": EmailTemplate.model_validate(row).to_dict()
    }


@router.put("/{template_id}")
async def update_template(
    template_id: str,
    data: EmailTemplateUpdate,
    admin: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Partial update; only the fields sent are changed"""
    try:
        repo = EmailTemplateRepository(db)
        row = _template_row_or_404(repo, template_id)
        changes = _fields(data.model_dump(exclude_unset=True))

        if changes.get("slug") and repo.slug_exists(changes["slug"], exclude_id=template_id):
            raise ValidationError(SLUG_TAKEN)
        for required in ("name", "slug", "subject", "content", "category", "is_active", "variables"):
            if required in changes and changes[required] is None:
                changes.pop(required)

        template = repo.update(row, changes)

        return {
            "status": "success",
            "message": "Template updated",
            "data": template.to_dict()
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception(f"Error updating email template {template_id}")
        raise HTTPException(status_code=500, detail=f"Error updating email template: {str(e)}")


@router.delete("/{template_id}")
async def delete_template(template_id: str, admin: TokenUser = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        repo = EmailTemplateRepository(db)
        row = _template_row_or_404(repo, template_id)

        usage = repo.usage_count(template_id)
        if usage:
            raise ValidationError(f"Template is used in {usage} sequence step(s) and cannot be deleted")

        repo.delete(row)
        logger.info(f"Email template {template_id} deleted by {admin.email}")

        return {
            "status": "success",
            "message": "Template deleted"
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception(f"Error deleting email template {template_id}")
        raise HTTPException(status_code=500, detail=f"Error deleting email template: {str(e)}")


@router.post("/{template_id}/preview")
async def preview_template(
    template_id: str,
    data: TemplatePreview,
    admin: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Render subject and body with the supplied variables"""
    row = _template_row_or_404(EmailTemplateRepository(db), template_id)
    return {
        "status": "success",
        "data": {
            "subject": render_template(row.subject, data.variables),
            "html": render_template(row.content, data.variables)
        }
    }


@router.post("/{template_id}/send-test")
async def send_test_email(
    template_id: str,
    data: TemplateSendTest,
    admin: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    try:
        row = _template_row_or_404(EmailTemplateRepository(db), template_id)

        result = await EmailService(db).send_email(
            to=str(data.to),
            subject=f"[TEST] {render_template(row.subject, data.variables)}",
            html_content=render_template(row.content, data.variables)
        )
        logger.info(f"Test email for template {row.slug} sent to {data.to} by {admin.email}")

        return {
            "status": "success",
            "message": f"Test email sent to {data.to}",
            "data": result
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception(f"Error sending test email for template {template_id}")
        raise HTTPException(status_code=500, detail=f"Error sending test email: {str(e)}")
