"""
Admin Tickets API Endpoints
Supplier support desk: triage, status changes with history, and responses (admin only)
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from storefront.core.auth import TokenUser, require_admin
from storefront.core.database import get_db
from storefront.core.exceptions import StorefrontError
from storefront.domain.supplier import TicketResponseCreate, TicketStatusUpdate, TicketUpdate
from storefront.services.ticket_service import TicketService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/")
async def get_tickets(
    status: Optional[str] = Query(None, description="Filter by ticket status"),
    priority: Optional[str] = Query(None, description="Filter by priority"),
    supplier_id: Optional[str] = Query(None, description="Filter by supplier"),
    admin: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Get tickets, newest first"""
    try:
        tickets = TicketService(db).list_all(status=status, priority=priority, supplier_id=supplier_id)

        return {
            "status": "success",
            "count": len(tickets),
            "data": tickets
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Error fetching tickets")
        raise HTTPException(status_code=500, detail=f"Error fetching tickets: {str(e)}")


@router.get("/{ticket_id}")
async def get_ticket(ticket_id: str, admin: TokenUser = Depends(require_admin), db: Session = Depends(get_db)):
    """Ticket with supplier, assignee and all responses (internal notes included)"""
    try:
        return {
            "status": "success",
            "data": TicketService(db).get_detail(ticket_id)
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception(f"Error fetching ticket {ticket_id}")
        raise HTTPException(status_code=500, detail=f"Error fetching ticket: {str(e)}")


@router.put("/{ticket_id}")
async def update_ticket(
    ticket_id: str,
    data: TicketUpdate,
    admin: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    try:
        ticket = TicketService(db).update_ticket(ticket_id, data)

        return {
            "status": "success",
            "message": "Ticket updated",
            "data": ticket
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception(f"Error updating ticket {ticket_id}")
        raise HTTPException(status_code=500, detail=f"Error updating ticket: {str(e)}")


@router.put("/{ticket_id}/status")
async def change_ticket_status(
    ticket_id: str,
    data: TicketStatusUpdate,
    admin: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Change status and record it as an internal note"""
    try:
        ticket = TicketService(db).change_status(ticket_id, data.status, data.note, admin)

        return {
            "status": "success",
            "message": f"Ticket status updated to {ticket['status']}",
            "data": ticket
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception(f"Error changing status of ticket {ticket_id}")
        raise HTTPException(status_code=500, detail=f"Error changing ticket status: {str(e)}")


@router.get("/{ticket_id}/status")
async def get_ticket_status_history(ticket_id: str, admin: TokenUser = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        return {
            "status": "success",
            "data": TicketService(db).status_history(ticket_id)
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception(f"Error fetching status history of ticket {ticket_id}")
        raise HTTPException(status_code=500, detail=f"Error fetching status history: {str(e)}")


@router.get("/{ticket_id}/responses")
async def get_ticket_responses(ticket_id: str, admin: TokenUser = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        responses = TicketService(db).list_responses(ticket_id)

        return {
            "status": "success",
            "count": len(responses),
            "data": responses
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception(f"Error fetching responses of ticket {ticket_id}")
        raise HTTPException(status_code=500, detail=f"Error fetching responses: {str(e)}")


@router.post("/{ticket_id}/responses", status_code=status.HTTP_201_CREATED)
async def add_ticket_response(
    ticket_id: str,
    data: TicketResponseCreate,
    admin: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db)
):
    try:
        response = await TicketService(db).admin_respond(ticket_id, data, admin)

        return {
            "status": "success",
            "message": "Response added",
            "data": response
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception(f"Error responding to ticket {ticket_id}")
        raise HTTPException(status_code=500, detail=f"Error adding response: {str(e)}")
