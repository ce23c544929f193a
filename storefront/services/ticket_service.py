"""
Ticket Service
Supplier support tickets: creation, admin triage, status history and responses

Status history is not a separate table: every status change adds an
internal response "Status changed from A to B[ - note] by <name>".

Author: TechTots
Date: 2025-10-22
"""
import random
import string
import logging
from datetime import datetime
from typing import Dict, Any, List, Optional
from urllib.parse import urlparse

from sqlalchemy.orm import Session

from storefront.core.auth import TokenUser
from storefront.core.database import utcnow
from storefront.core.exceptions import NotFoundError, ValidationError
from storefront.domain.enums import CLOSED_TICKET_STATUSES, ResponderType, Role, TicketPriority, TicketStatus
from storefront.domain.supplier import (
    Attachment,
    Ticket,
    TicketCreate,
    TicketResponse,
    TicketResponseCreate,
    TicketUpdate,
)
from storefront.repositories.customer_repository import CustomerRepository
from storefront.repositories.supplier_repository import SupplierRepository
from storefront.repositories.ticket_repository import TicketRepository
from storefront.services.email_service import EmailService

logger = logging.getLogger(__name__)

# Files are uploaded client-side; only links to our upload host are stored
ALLOWED_ATTACHMENT_HOSTS = ("uploadthing.com", "utfs.io")


def parse_ticket_status(value: Optional[str]) -> TicketStatus:
    if not value:
        raise ValidationError("Status is required")
    try:
        return TicketStatus(value.strip().upper())
    except ValueError:
        allowed = ", ".join(status.value for status in TicketStatus)
        raise ValidationError(f"Invalid status. Must be one of: {allowed}")


def parse_ticket_priority(value: str) -> TicketPriority:
    try:
        return TicketPriority(value.strip().upper())
    except ValueError:
        allowed = ", ".join(priority.value for priority in TicketPriority)
        raise ValidationError(f"Invalid priority. Must be one of: {allowed}")


def filter_attachments(attachments: List[Attachment]) -> List[Dict[str, Any]]:
    """Keep attachments hosted on an allowed upload host, as {url, name, size}"""
    kept = []
    for attachment in attachments:
        host = (urlparse(attachment.url).hostname or "").lower()
        if any(host == allowed or host.endswith(f".{allowed}") for allowed in ALLOWED_ATTACHMENT_HOSTS):
            kept.append({"url": attachment.url, "name": attachment.name, "size": attachment.size})
    return kept


def generate_ticket_number(now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=4))
    return f"TKT-{now:%Y%m%d}-{suffix}"


def _responder_summary(row) -> Optional[Dict[str, Any]]:
    if row.responder is None:
        return None
    return {"id": row.responder.id, "name": row.responder.name, "email": row.responder.email}


def response_dict(row) -> Dict[str, Any]:
    data = TicketResponse.model_validate(row).to_dict()
    data["responder"] = _responder_summary(row)
    return data


class TicketService:

    def __init__(self, db: Session, email_service: Optional[EmailService] = None):
        self.tickets = TicketRepository(db)
        self.suppliers = SupplierRepository(db)
        self.users = CustomerRepository(db)
        self.email = email_service or EmailService(db)

    def _get(self, ticket_id: str):
        row = self.tickets.get_row(ticket_id)
        if row is None:
            raise NotFoundError("Ticket not found")
        return row

    @staticmethod
    def _summary(row) -> Dict[str, Any]:
        data = Ticket.model_validate(row).to_dict()
        data["supplier"] = {
            "id": row.supplier.id,
            "company_name": row.supplier.company_name,
            "contact_person_email": row.supplier.contact_person_email,
        } if row.supplier else None
        data["response_count"] = len(row.responses)
        return data

    def _detail(self, row, include_internal: bool = True) -> Dict[str, Any]:
        data = self._summary(row)
        data["assignee"] = {
            "id": row.assignee.id,
            "name": row.assignee.name,
            "email": row.assignee.email,
        } if row.assignee else None
        data["responses"] = [
            response_dict(response)
            for response in self.tickets.responses(row.id, include_internal=include_internal)
        ]
        return data

    # ------------------------------------------------------------------
    # Supplier side
    # ------------------------------------------------------------------

    def _supplier_for(self, user: TokenUser):
        supplier = self.suppliers.get_by_user(user.id)
        if supplier is None:
            raise NotFoundError("Supplier profile not found")
        return supplier

    def create_ticket(self, user: TokenUser, data: TicketCreate) -> Dict[str, Any]:
        supplier = self._supplier_for(user)
        priority = parse_ticket_priority(data.priority)

        ticket_number = generate_ticket_number()
        while self.tickets.number_exists(ticket_number):
            ticket_number = generate_ticket_number()

        row = self.tickets.create(supplier.id, {
            "ticket_number": ticket_number,
            "subject": data.subject.strip(),
            "description": data.description.strip(),
            "priority": priority.value,
            "category": data.category.strip().upper(),
            "status": TicketStatus.OPEN.value,
        })
        logger.info(f"Ticket {ticket_number} opened by supplier {supplier.id}")
        return self._detail(self._get(row.id), include_internal=False)

    def list_for_supplier(self, user: TokenUser, status: Optional[str] = None) -> List[Dict[str, Any]]:
        supplier = self._supplier_for(user)
        rows = self.tickets.find_all(status=status, supplier_id=supplier.id)
        return [self._summary(row) for row in rows]

    def get_for_supplier(self, user: TokenUser, ticket_id: str) -> Dict[str, Any]:
        supplier = self._supplier_for(user)
        row = self._get(ticket_id)
        if row.supplier_id != supplier.id:
            raise NotFoundError("Ticket not found")
        return self._detail(row, include_internal=False)

    def supplier_respond(self, user: TokenUser, ticket_id: str, data: TicketResponseCreate) -> Dict[str, Any]:
        supplier = self._supplier_for(user)
        row = self._get(ticket_id)
        if row.supplier_id != supplier.id:
            raise NotFoundError("Ticket not found")
        content = (data.content or "").strip()
        if not content:
            raise ValidationError("Response content is required")

        try:
            response = self.tickets.add_response(row, {
                "responder_id": user.id,
                "responder_type": ResponderType.SUPPLIER.value,
                "content": content,
                "is_internal": False,
                "attachments": filter_attachments(data.attachments),
            }, commit=False)
            if row.status in CLOSED_TICKET_STATUSES:
                row.status = TicketStatus.REOPENED.value
                row.closed_at = None
            row.updated_at = utcnow()
            self.tickets.commit()
        except Exception:
            self.tickets.rollback()
            raise
        return response_dict(response)

    # ------------------------------------------------------------------
    # Admin side
    # ------------------------------------------------------------------

    def list_all(self, status: Optional[str] = None, priority: Optional[str] = None,
                 supplier_id: Optional[str] = None) -> List[Dict[str, Any]]:
        if status:
            status = parse_ticket_status(status).value
        if priority:
            priority = parse_ticket_priority(priority).value
        rows = self.tickets.find_all(status=status, priority=priority, supplier_id=supplier_id)
        return [self._summary(row) for row in rows]

    def get_detail(self, ticket_id: str) -> Dict[str, Any]:
        return self._detail(self._get(ticket_id))

    @staticmethod
    def _apply_status(row, new_status: TicketStatus):
        row.status = new_status.value
        if new_status.value in CLOSED_TICKET_STATUSES:
            row.closed_at = row.closed_at or utcnow()
        else:
            row.closed_at = None

    def _check_assignee(self, user_id: str):
        assignee = self.users.get_row(user_id)
        if assignee is None:
            raise NotFoundError("Assignee not found")
        if assignee.role != Role.ADMIN.value:
            raise ValidationError("Tickets can only be assigned to admins")

    def update_ticket(self, ticket_id: str, data: TicketUpdate) -> Dict[str, Any]:
        row = self._get(ticket_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("assigned_to"):
            self._check_assignee(changes["assigned_to"])

        try:
            if changes.get("status"):
                self._apply_status(row, parse_ticket_status(changes["status"]))
            if changes.get("priority"):
                row.priority = parse_ticket_priority(changes["priority"]).value
            if "assigned_to" in changes:
                row.assigned_to = changes["assigned_to"] or None
            row.updated_at = utcnow()
            self.tickets.commit()
        except Exception:
            self.tickets.rollback()
            raise
        return self._detail(self._get(ticket_id))

    def change_status(self, ticket_id: str, status: Optional[str], note: Optional[str],
                      admin: TokenUser) -> Dict[str, Any]:
        new_status = parse_ticket_status(status)
        row = self._get(ticket_id)
        previous = row.status

        message = f"Status changed from {previous} to {new_status.value}"
        if note and note.strip():
            message += f" - {note.strip()}"
        message += f" by {admin.name or admin.email}"

        try:
            self._apply_status(row, new_status)
            row.updated_at = utcnow()
            self.tickets.add_response(row, {
                "responder_id": admin.id,
                "responder_type": ResponderType.ADMIN.value,
                "content": message,
                "is_internal": True,
                "attachments": [],
            }, commit=False)
            self.tickets.commit()
        except Exception:
            self.tickets.rollback()
            raise

        logger.info(f"Ticket {row.ticket_number}: {message}")
        return self._detail(self._get(ticket_id))

    def status_history(self, ticket_id: str) -> Dict[str, Any]:
        row = self._get(ticket_id)
        return {
            "current_status": row.status,
            "history": [response_dict(entry) for entry in self.tickets.status_history(ticket_id)],
        }

    def list_responses(self, ticket_id: str) -> List[Dict[str, Any]]:
        self._get(ticket_id)
        return [response_dict(row) for row in self.tickets.responses(ticket_id)]

    async def admin_respond(self, ticket_id: str, data: TicketResponseCreate, admin: TokenUser) -> Dict[str, Any]:
        """
        Add an admin response

        Public responses move the ticket to IN_PROGRESS and email the supplier;
        internal notes change nothing but the ticket's updated_at.
        """
        content = (data.content or "").strip()
        if not content:
            raise ValidationError("Response content is required")
        row = self._get(ticket_id)

        try:
            response = self.tickets.add_response(row, {
                "responder_id": admin.id,
                "responder_type": ResponderType.ADMIN.value,
                "content": content,
                "is_internal": data.is_internal,
                "attachments": filter_attachments(data.attachments),
            }, commit=False)
            if not data.is_internal:
                row.status = TicketStatus.IN_PROGRESS.value
                row.closed_at = None
            row.updated_at = utcnow()
            self.tickets.commit()
        except Exception:
            self.tickets.rollback()
            raise

        result = response_dict(response)
        if not data.is_internal:
            supplier = {
                "contact_person_email": row.supplier.contact_person_email,
                "contact_person_name": row.supplier.contact_person_name,
            }
            ticket = {"id": row.id, "ticket_number": row.ticket_number, "subject": row.subject}
            await self.email.send_ticket_response(ticket, supplier, content)
        return result
