"""
Ticket endpoints
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from repairdesk.api.dependencies import get_ticket_service
from repairdesk.middleware.auth import require_capability
from repairdesk.middleware.rate_limiter import get_rate_limit, limiter
from repairdesk.models import (
    AuthContext,
    ServiceStatus,
    TicketCreate,
    TicketStatusUpdate,
    TicketWithCustomer,
)
from repairdesk.security.permissions import Operation
from repairdesk.services import TicketService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["tickets"])


@router.post("/tickets", response_model=TicketWithCustomer, status_code=status.HTTP_201_CREATED)
@limiter.limit(get_rate_limit("write"))
async def create_ticket(
    request: Request,
    payload: TicketCreate,
    current_user: AuthContext = Depends(require_capability(Operation.CREATE_TICKET)),
    service: TicketService = Depends(get_ticket_service),
) -> TicketWithCustomer:
    """
    Register a repair ticket

    Requires: front desk role

    The customer is looked up by phone and created when unknown. The ticket
    gets the next ID of the day, e.g. SATY-20240301-0001.

    Returns:
        Created ticket with its customer
    """
    ticket = await service.create_ticket(payload)
    logger.info(f"User {current_user.user_id} created ticket {ticket.ticket_id}")
    return ticket


@router.get("/tickets", response_model=List[TicketWithCustomer])
@limiter.limit(get_rate_limit("read"))
async def list_tickets(
    request: Request,
    status_filter: Optional[ServiceStatus] = Query(None, alias="status"),
    current_user: AuthContext = Depends(require_capability(Operation.LIST_TICKETS)),
    service: TicketService = Depends(get_ticket_service),
) -> List[TicketWithCustomer]:
    """
    List tickets, newest first

    Technicians get the tickets assigned to them. Front desk staff get every
    ticket, optionally filtered by ``?status=``.
    """
    return await service.list_tickets(current_user.role, current_user.user_id, status_filter)


@router.get("/tickets/{ticket_id}", response_model=TicketWithCustomer)
@limiter.limit(get_rate_limit("read"))
async def get_ticket(
    request: Request,
    ticket_id: str,
    current_user: AuthContext = Depends(require_capability(Operation.VIEW_TICKET)),
    service: TicketService = Depends(get_ticket_service),
) -> TicketWithCustomer:
    ticket = await service.get_ticket(ticket_id)
    if ticket is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Ticket not found"
        )
    return ticket


@router.patch("/tickets/{ticket_id}/status", response_model=TicketWithCustomer)
@limiter.limit(get_rate_limit("write"))
async def update_ticket_status(
    request: Request,
    ticket_id: str,
    payload: TicketStatusUpdate,
    current_user: AuthContext = Depends(require_capability(Operation.UPDATE_TICKET_STATUS)),
    service: TicketService = Depends(get_ticket_service),
) -> TicketWithCustomer:
    """
    Move a ticket to a new service status

    The ticket is assigned to the caller and any ``service_note`` is
    appended under their name. Marking a ticket Completed
    stamps its completion time.

    Returns:
        Updated ticket with its customer
    """
    ticket = await service.update_status(
        ticket_id,
        payload,
        acting_user_id=current_user.user_id,
        acting_role=current_user.role,
    )
    if ticket is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Ticket not found"
        )
    return ticket
