"""
Supplier Ticket Repository
"""
from typing import List, Optional, Dict, Any

from sqlalchemy.orm import Session, joinedload, selectinload

from storefront.models import (
    SupplierTicket as TicketRow,
    SupplierTicketResponse as ResponseRow,
    Supplier as SupplierRow,
)


class TicketRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_row(self, ticket_id: str) -> Optional[TicketRow]:
        return (
            self.db.query(TicketRow)
            .options(
                joinedload(TicketRow.supplier).joinedload(SupplierRow.user),
                joinedload(TicketRow.assignee),
                selectinload(TicketRow.responses).joinedload(ResponseRow.responder),
            )
            .filter(TicketRow.id == ticket_id)
            .first()
        )

    def find_all(
        self,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        supplier_id: Optional[str] = None,
    ) -> List[TicketRow]:
        query = self.db.query(TicketRow).options(joinedload(TicketRow.supplier), selectinload(TicketRow.responses))
        if status:
            query = query.filter(TicketRow.status == status)
        if priority:
            query = query.filter(TicketRow.priority == priority)
        if supplier_id:
            query = query.filter(TicketRow.supplier_id == supplier_id)
        return query.order_by(TicketRow.created_at.desc()).all()

    def number_exists(self, ticket_number: str) -> bool:
        return self.db.query(TicketRow.id).filter(TicketRow.ticket_number == ticket_number).first() is not None

    def create(self, supplier_id: str, data: Dict[str, Any]) -> TicketRow:
        row = TicketRow(supplier_id=supplier_id, **data)
        self.db.add(row)
        self.db.commit()
        return row

    def responses(self, ticket_id: str, include_internal: bool = True) -> List[ResponseRow]:
        query = (
            self.db.query(ResponseRow)
            .options(joinedload(ResponseRow.responder))
            .filter(ResponseRow.ticket_id == ticket_id)
        )
        if not include_internal:
            query = query.filter(ResponseRow.is_internal.is_(False))
        return query.order_by(ResponseRow.created_at.asc()).all()

    def status_history(self, ticket_id: str) -> List[ResponseRow]:
        return (
            self.db.query(ResponseRow)
            .options(joinedload(ResponseRow.responder))
            .filter(
                ResponseRow.ticket_id == ticket_id,
                ResponseRow.is_internal.is_(True),
                ResponseRow.content.startswith("Status changed"),
            )
            .order_by(ResponseRow.created_at.desc())
            .all()
        )

    def add_response(self, ticket: TicketRow, data: Dict[str, Any], commit: bool = True) -> ResponseRow:
        row = ResponseRow(ticket_id=ticket.id, **data)
        self.db.add(row)
        if commit:
            self.db.commit()
        return row

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
