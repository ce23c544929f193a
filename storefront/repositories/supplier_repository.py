"""
Supplier Repository
"""
from typing import List, Optional, Tuple, Dict, Any

from sqlalchemy import or_
from sqlalchemy.orm import Session

from storefront.domain.supplier import Supplier
from storefront.models import Supplier as SupplierRow, Product as ProductRow


class SupplierRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_row(self, supplier_id: str) -> Optional[SupplierRow]:
        return self.db.get(SupplierRow, supplier_id)

    def get_by_user(self, user_id: str) -> Optional[SupplierRow]:
        return self.db.query(SupplierRow).filter(SupplierRow.user_id == user_id).first()

    def slug_exists(self, slug: str) -> bool:
        return self.db.query(SupplierRow.id).filter(SupplierRow.company_slug == slug).first() is not None

    def vat_exists(self, vat_number: str) -> bool:
        return self.db.query(SupplierRow.id).filter(SupplierRow.vat_number == vat_number).first() is not None

    def find_all(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[Supplier], int]:
        query = self.db.query(SupplierRow)
        if status:
            query = query.filter(SupplierRow.status == status)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                SupplierRow.company_name.ilike(pattern),
                SupplierRow.contact_person_email.ilike(pattern),
                SupplierRow.contact_person_name.ilike(pattern),
            ))
        total = query.count()
        rows = query.order_by(SupplierRow.created_at.desc()).offset(offset).limit(limit).all()
        return [Supplier.model_validate(row) for row in rows], total

    def count_products(self, supplier_id: str, active_only: bool = False) -> int:
        query = self.db.query(ProductRow).filter(ProductRow.supplier_id == supplier_id)
        if active_only:
            query = query.filter(ProductRow.is_active.is_(True))
        return query.count()

    def create(self, user_id: str, data: Dict[str, Any]) -> SupplierRow:
        row = SupplierRow(user_id=user_id, **data)
        self.db.add(row)
        self.db.commit()
        return row

    def update(self, row: SupplierRow, data: Dict[str, Any]) -> SupplierRow:
        for field, value in data.items():
            setattr(row, field, value)
        self.db.commit()
        return row

    def delete(self, row: SupplierRow):
        self.db.delete(row)
        self.db.commit()
