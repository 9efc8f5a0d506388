"""
Ticket lifecycle service

Orchestrates ticket intake (customer lookup-or-create, ticket ID allocation,
record creation) and status updates on top of the storage interfaces.
"""
import logging
from typing import List, Optional

from repairdesk.database.base import CustomerDirectory, SequenceAllocator, TicketStore, UserRepository
from repairdesk.models import (
    CustomerCreate,
    ServiceStatus,
    Ticket,
    TicketCreate,
    TicketStatusUpdate,
    TicketWithCustomer,
    UserRole,
)
from repairdesk.utils.clock import Clock, utcnow
from repairdesk.utils.ticket_ids import date_key, format_ticket_id

logger = logging.getLogger(__name__)


class TicketService:
    """Ticket intake, status updates and role-scoped listing"""

    def __init__(
        self,
        customers: CustomerDirectory,
        sequences: SequenceAllocator,
        tickets: TicketStore,
        users: UserRepository,
        clock: Clock = utcnow,
    ):
        self.customers = customers
        self.sequences = sequences
        self.tickets = tickets
        self.users = users
        self.clock = clock

    async def create_ticket(self, ticket_input: TicketCreate) -> TicketWithCustomer:
        """
        Register a new repair ticket

        1. Reuse the customer on file for the phone number, or create one
        2. Reserve today's next sequence number and format the ticket ID
        3. Store the ticket

        Args:
            ticket_input: Validated intake form

        Returns:
            The created ticket joined with its customer
        """
        customer_data, fields = ticket_input.split_customer()

        customer = await self.customers.find_by_phone(customer_data["phone"])
        if customer is None:
            customer = await self.customers.create(CustomerCreate(**customer_data))
        else:
            logger.debug(f"Reusing customer {customer.id} for ticket intake")

        today = self.clock()
        sequence = await self.sequences.next_sequence(date_key(today))
        ticket_id = format_ticket_id(today, sequence)

        ticket = await self.tickets.create(fields, ticket_id, customer.id)
        return TicketWithCustomer(**ticket.model_dump(), customer=customer)

    async def update_status(
        self,
        ticket_id: str,
        update: TicketStatusUpdate,
        acting_user_id: str,
        acting_role: UserRole,
    ) -> Optional[TicketWithCustomer]:
        """
        Apply a status update on behalf of a staff member

        The caller has already authorized the request. Whoever makes the
        update becomes the assigned technician and the author of any service
        note, whatever their role.

        Returns:
            The updated ticket with its customer, or None if either is unknown
        """
        logger.debug(f"{acting_role.value} {acting_user_id} updating ticket {ticket_id}")

        ticket = await self.tickets.update_status(ticket_id, update, acting_user_id)
        if ticket is None:
            return None

        customer = await self.customers.get_by_id(ticket.customer_id)
        if customer is None:
            logger.error(f"Ticket {ticket_id} has no resolvable customer {ticket.customer_id}")
            return None

        return TicketWithCustomer(**ticket.model_dump(), customer=customer)

    async def get_ticket(self, ticket_id: str) -> Optional[TicketWithCustomer]:
        ticket = await self.tickets.get_by_ticket_id(ticket_id)
        if ticket is None:
            return None
        return await self._with_customer(ticket)

    async def list_tickets(
        self,
        role: UserRole,
        user_id: str,
        status: Optional[ServiceStatus] = None,
    ) -> List[TicketWithCustomer]:
        """
        List tickets visible to a staff member

        Technicians only ever see their own tickets; the status filter applies
        to front desk listings.
        """
        if role == UserRole.TECHNICIAN:
            return await self.tickets.list_by_technician(user_id)
        if status:
            return await self.tickets.list_by_status(status)
        return await self.tickets.list_all()

    async def _with_customer(self, ticket: Ticket) -> Optional[TicketWithCustomer]:
        customer = await self.customers.get_by_id(ticket.customer_id)
        if customer is None:
            return None

        technician_name = None
        if ticket.assigned_technician:
            technician = await self.users.get(ticket.assigned_technician)
            technician_name = technician.full_name if technician else None

        return TicketWithCustomer(
            **ticket.model_dump(),
            customer=customer,
            assigned_technician_name=technician_name,
        )
