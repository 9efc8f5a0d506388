"""
MongoDB ticket store
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from repairdesk.config import settings
from repairdesk.database.base import CustomerDirectory, TicketStore, UserRepository, to_document
from repairdesk.database.connection import get_database, COLLECTION_TICKETS
from repairdesk.models import (
    ServiceNote,
    ServiceStatus,
    Ticket,
    TicketFields,
    TicketStatusUpdate,
    TicketWithCustomer,
)
from repairdesk.utils.clock import Clock, utcnow

logger = logging.getLogger(__name__)

# Newest first; ticket_id breaks ties between tickets created in the same instant
TICKET_ORDER = [("created_at", -1), ("ticket_id", -1)]


async def join_tickets(
    tickets: List[Ticket],
    customers: CustomerDirectory,
    users: UserRepository,
) -> List[TicketWithCustomer]:
    """
    Attach customers and technician names to tickets

    Tickets whose customer cannot be resolved are dropped. A technician id that
    no longer resolves leaves the name empty.

    Args:
        tickets: Tickets in the order they should be returned
        customers: Customer directory to resolve customer_id
        users: Identity store to resolve assigned_technician

    Returns:
        Joined tickets, order preserved
    """
    customers_by_id = await customers.get_many(t.customer_id for t in tickets)
    technicians = await users.get_many(t.assigned_technician for t in tickets if t.assigned_technician)

    joined = []
    for ticket in tickets:
        customer = customers_by_id.get(ticket.customer_id)
        if customer is None:
            logger.warning(f"Ticket {ticket.ticket_id} references unknown customer {ticket.customer_id}")
            continue

        technician = technicians.get(ticket.assigned_technician) if ticket.assigned_technician else None
        joined.append(
            TicketWithCustomer(
                **ticket.model_dump(),
                customer=customer,
                assigned_technician_name=technician.full_name if technician else None,
            )
        )
    return joined


def keep_first_completion(
    set_fields: Dict[str, Any],
    note: Optional[Dict[str, Any]],
    now: datetime,
) -> List[Dict[str, Any]]:
    """
    Update pipeline that completes a ticket without moving an earlier completed_at

    Values are wrapped in ``$literal`` so note text starting with ``$`` is
    stored as written.
    """
    stage: Dict[str, Any] = {field: {"$literal": value} for field, value in set_fields.items()}
    stage["completed_at"] = {"$ifNull": ["$completed_at", {"$literal": now}]}
    if note:
        stage["service_notes"] = {
            "$concatArrays": [{"$ifNull": ["$service_notes", []]}, [{"$literal": note}]]
        }
    return [{"$set": stage}]


class MongoTicketStore(TicketStore):
    def __init__(
        self,
        customers: CustomerDirectory,
        users: UserRepository,
        db: Optional[AsyncIOMotorDatabase] = None,
        clock: Clock = utcnow,
        preserve_first_completion: Optional[bool] = None,
    ):
        self.collection = (db if db is not None else get_database())[COLLECTION_TICKETS]
        self.customers = customers
        self.users = users
        self.clock = clock
        if preserve_first_completion is None:
            preserve_first_completion = settings.preserve_first_completion
        self.preserve_first_completion = preserve_first_completion

    async def create(self, fields: TicketFields, ticket_id: str, customer_id: str) -> Ticket:
        data = fields.model_dump(exclude_none=True)
        now = self.clock()
        ticket = Ticket(
            **data,
            ticket_id=ticket_id,
            customer_id=customer_id,
            created_at=now,
            # Intake may record a repair already finished at the counter
            completed_at=now if fields.service_status == ServiceStatus.COMPLETED else None,
            service_notes=[],
        )
        await self.collection.insert_one(to_document(ticket))
        logger.info(f"Ticket {ticket_id} created for customer {customer_id}")
        return ticket

    async def get_by_ticket_id(self, ticket_id: str) -> Optional[Ticket]:
        doc = await self.collection.find_one({"ticket_id": ticket_id})
        return Ticket.model_validate(doc) if doc else None

    async def get_by_id(self, id: str) -> Optional[Ticket]:
        doc = await self.collection.find_one({"_id": id})
        return Ticket.model_validate(doc) if doc else None

    async def update_status(
        self,
        ticket_id: str,
        update: TicketStatusUpdate,
        acting_technician_id: Optional[str] = None,
    ) -> Optional[Ticket]:
        now = self.clock()
        completing = update.service_status == ServiceStatus.COMPLETED

        set_fields: Dict[str, Any] = {"service_status": update.service_status}
        if update.priority:
            set_fields["priority"] = update.priority
        if update.payment_status:
            set_fields["payment_status"] = update.payment_status
        if update.final_cost is not None:
            set_fields["final_cost"] = update.final_cost
        if acting_technician_id:
            set_fields["assigned_technician"] = acting_technician_id
        if completing and not self.preserve_first_completion:
            set_fields["completed_at"] = now

        note: Optional[Dict[str, Any]] = None
        if update.service_note and acting_technician_id:
            note = ServiceNote(
                note=update.service_note,
                technician_id=acting_technician_id,
                timestamp=now,
                photos=update.photos or [],
            ).model_dump()

        if completing and self.preserve_first_completion:
            mongo_update: Any = keep_first_completion(set_fields, note, now)
        else:
            mongo_update = {"$set": set_fields}
            if note:
                mongo_update["$push"] = {"service_notes": note}

        doc = await self.collection.find_one_and_update(
            {"ticket_id": ticket_id},
            mongo_update,
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            logger.info(f"Status update for unknown ticket {ticket_id}")
            return None

        logger.info(f"Ticket {ticket_id} moved to {update.service_status.value}")
        return Ticket.model_validate(doc)

    async def list_all(self) -> List[TicketWithCustomer]:
        return await self._list({})

    async def list_by_technician(self, technician_id: str) -> List[TicketWithCustomer]:
        return await self._list({"assigned_technician": technician_id})

    async def list_by_status(self, status: ServiceStatus) -> List[TicketWithCustomer]:
        return await self._list({"service_status": status})

    async def _list(self, filter_dict: Dict[str, Any]) -> List[TicketWithCustomer]:
        cursor = self.collection.find(filter_dict).sort(TICKET_ORDER)

        tickets = []
        async for doc in cursor:
            tickets.append(Ticket.model_validate(doc))
        return await join_tickets(tickets, self.customers, self.users)
