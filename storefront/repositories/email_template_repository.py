"""
Email Template Repository
"""
from typing import List, Optional, Dict, Any

from sqlalchemy.orm import Session

from storefront.domain.email import EmailTemplate
from storefront.models import EmailTemplate as TemplateRow, EmailSequenceStep as StepRow


class EmailTemplateRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_row(self, template_id: str) -> Optional[TemplateRow]:
        return self.db.get(TemplateRow, template_id)

    def find_by_slug(self, slug: str, active_only: bool = True) -> Optional[TemplateRow]:
        query = self.db.query(TemplateRow).filter(TemplateRow.slug == slug)
        if active_only:
            query = query.filter(TemplateRow.is_active.is_(True))
        return query.first()

    def find_all(self, category: Optional[str] = None, is_active: Optional[bool] = None) -> List[EmailTemplate]:
        query = self.db.query(TemplateRow)
        if category:
            query = query.filter(TemplateRow.category == category)
        if is_active is not None:
            query = query.filter(TemplateRow.is_active.is_(is_active))
        return [EmailTemplate.model_validate(row) for row in query.order_by(TemplateRow.updated_at.desc()).all()]

    def slug_exists(self, slug: str, exclude_id: Optional[str] = None) -> bool:
        query = self.db.query(TemplateRow.id).filter(TemplateRow.slug == slug)
        if exclude_id:
            query = query.filter(TemplateRow.id != exclude_id)
        return query.first() is not None

    def usage_count(self, template_id: str) -> int:
        return self.db.query(StepRow).filter(StepRow.template_id == template_id).count()

    def create(self, data: Dict[str, Any]) -> EmailTemplate:
        row = TemplateRow(**data)
        self.db.add(row)
        self.db.commit()
        return EmailTemplate.model_validate(row)

    def update(self, row: TemplateRow, data: Dict[str, Any]) -> EmailTemplate:
        for field, value in data.items():
            setattr(row, field, value)
        self.db.commit()
        return EmailTemplate.model_validate(row)

    def delete(self, row: TemplateRow):
        self.db.delete(row)
        self.db.commit()
