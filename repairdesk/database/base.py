"""
Storage interfaces

The services only talk to these interfaces. MongoDB implementations live in the
sibling modules; tests plug in in-memory implementations of the same classes.
"""
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel

from repairdesk.models import (
    Customer,
    CustomerCreate,
    ServiceStatus,
    Ticket,
    TicketFields,
    TicketStatusUpdate,
    TicketWithCustomer,
    User,
    UserCreate,
)


class UserRepository(ABC):
    """Identity store: staff accounts"""

    @abstractmethod
    async def get(self, user_id: str) -> Optional[User]:
        ...

    @abstractmethod
    async def get_by_username(self, username: str) -> Optional[User]:
        ...

    @abstractmethod
    async def get_many(self, user_ids: Iterable[str]) -> Dict[str, User]:
        """Resolve several ids at once; unknown ids are simply missing from the result"""

    @abstractmethod
    async def create(self, data: UserCreate) -> User:
        ...


class CustomerDirectory(ABC):
    """Customer records, looked up by phone when a ticket comes in"""

    @abstractmethod
    async def find_by_phone(self, phone: str) -> Optional[Customer]:
        """Exact phone match; the oldest customer wins when several share a phone"""

    @abstractmethod
    async def create(self, data: CustomerCreate) -> Customer:
        """Create a customer without checking for an existing phone"""

    @abstractmethod
    async def get_by_id(self, customer_id: str) -> Optional[Customer]:
        ...

    @abstractmethod
    async def get_many(self, customer_ids: Iterable[str]) -> Dict[str, Customer]:
        ...

    @abstractmethod
    async def list(self) -> List[Customer]:
        """All customers, newest first"""


class SequenceAllocator(ABC):
    """Per-day ticket sequence numbers"""

    @abstractmethod
    async def next_sequence(self, date_key: str) -> int:
        """
        Return the next sequence number for a day

        Numbers start at 1 and are never handed out twice for the same key,
        even to concurrent callers.
        """


class TicketStore(ABC):
    """Ticket records and their service notes"""

    @abstractmethod
    async def create(self, fields: TicketFields, ticket_id: str, customer_id: str) -> Ticket:
        ...

    @abstractmethod
    async def get_by_ticket_id(self, ticket_id: str) -> Optional[Ticket]:
        ...

    @abstractmethod
    async def get_by_id(self, id: str) -> Optional[Ticket]:
        ...

    @abstractmethod
    async def update_status(
        self,
        ticket_id: str,
        update: TicketStatusUpdate,
        acting_technician_id: Optional[str] = None,
    ) -> Optional[Ticket]:
        """
        Apply a status update

        Returns None when the ticket does not exist.
        """

    @abstractmethod
    async def list_all(self) -> List[TicketWithCustomer]:
        """Tickets joined with their customer, newest first"""

    @abstractmethod
    async def list_by_technician(self, technician_id: str) -> List[TicketWithCustomer]:
        ...

    @abstractmethod
    async def list_by_status(self, status: ServiceStatus) -> List[TicketWithCustomer]:
        ...


def to_document(model: BaseModel) -> dict:
    """Dump a model for insertion, storing its id under Mongo's ``_id``"""
    doc = model.model_dump()
    doc["_id"] = doc.pop("id")
    return doc
