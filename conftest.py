import copy
import os
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

# Ensure required env vars exist before importing app modules.
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-with-enough-length-for-hs256")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from pymongo.errors import DuplicateKeyError

from repairdesk.database.base import CustomerDirectory, SequenceAllocator, TicketStore, UserRepository
from repairdesk.database.tickets import join_tickets
from repairdesk.models import (
    Customer,
    CustomerCreate,
    ServiceNote,
    ServiceStatus,
    Ticket,
    TicketFields,
    TicketStatusUpdate,
    TicketWithCustomer,
    User,
    UserCreate,
    UserRole,
)


def _matches(document: Dict[str, Any], filter_dict: Dict[str, Any]) -> bool:
    for key, condition in filter_dict.items():
        value = document.get(key)
        if isinstance(condition, dict) and "$in" in condition:
            if value not in condition["$in"]:
                return False
        elif value != condition:
            return False
    return True


def _sorted(documents: List[Dict[str, Any]], keys) -> List[Dict[str, Any]]:
    if isinstance(keys, str):
        keys = [(keys, 1)]
    result = list(documents)
    # Stable sorts applied from the least significant key
    for key, direction in reversed(list(keys)):
        result.sort(key=lambda d: d.get(key), reverse=direction < 0)
    return result


def _evaluate(expr: Any, document: Dict[str, Any]) -> Any:
    """Aggregation expressions used by the ticket store's update pipelines"""
    if isinstance(expr, str) and expr.startswith("$"):
        return document.get(expr[1:])
    if isinstance(expr, list):
        return [_evaluate(item, document) for item in expr]
    if isinstance(expr, dict):
        if "$literal" in expr:
            return expr["$literal"]
        if "$ifNull" in expr:
            values = [_evaluate(item, document) for item in expr["$ifNull"]]
            return next((v for v in values if v is not None), None)
        if "$concatArrays" in expr:
            return [item for part in expr["$concatArrays"] for item in _evaluate(part, document)]
        return {key: _evaluate(value, document) for key, value in expr.items()}
    return expr


class FakeCollection:
    """Small in-memory stand-in for a Motor collection"""

    def __init__(self) -> None:
        self.documents: List[Dict[str, Any]] = []
        self.indexes = []

    async def create_index(self, keys, **kwargs):
        self.indexes.append((keys, kwargs))
        return keys

    async def insert_one(self, document: Dict[str, Any], *args, **kwargs):
        class _InsertResult:
            def __init__(self, inserted_id):
                self.inserted_id = inserted_id

        if "_id" in document and any(d["_id"] == document["_id"] for d in self.documents):
            raise DuplicateKeyError(f"duplicate _id {document['_id']}")
        self.documents.append(copy.deepcopy(document))
        return _InsertResult(document.get("_id"))

    async def find_one(self, filter_dict=None, *args, sort=None, **kwargs):
        matches = [d for d in self.documents if _matches(d, filter_dict or {})]
        if sort:
            matches = _sorted(matches, sort)
        return copy.deepcopy(matches[0]) if matches else None

    def find(self, filter_dict=None, *args, **kwargs):
        return FakeCursor([copy.deepcopy(d) for d in self.documents if _matches(d, filter_dict or {})])

    async def update_one(self, filter_dict, update_dict, upsert=False, **kwargs):
        doc = self._apply(filter_dict, update_dict, upsert)
        return {"matched_count": int(doc is not None), "modified_count": int(doc is not None)}

    async def find_one_and_update(self, filter_dict, update_dict, upsert=False, return_document=None, **kwargs):
        doc = self._apply(filter_dict, update_dict, upsert)
        return copy.deepcopy(doc) if doc is not None else None

    def _apply(self, filter_dict, update_dict, upsert) -> Optional[Dict[str, Any]]:
        doc = next((d for d in self.documents if _matches(d, filter_dict)), None)
        if doc is None:
            if not upsert:
                return None
            doc = {k: v for k, v in filter_dict.items() if not isinstance(v, dict)}
            self.documents.append(doc)

        if isinstance(update_dict, list):
            for stage in update_dict:
                evaluated = {key: _evaluate(expr, doc) for key, expr in stage.get("$set", {}).items()}
                doc.update(copy.deepcopy(evaluated))
            return doc

        for key, value in update_dict.get("$set", {}).items():
            doc[key] = copy.deepcopy(value)
        for key, amount in update_dict.get("$inc", {}).items():
            doc[key] = doc.get(key, 0) + amount
        for key, value in update_dict.get("$push", {}).items():
            doc.setdefault(key, []).append(copy.deepcopy(value))
        return doc


class FakeCursor:
    def __init__(self, items):
        self.items = list(items)

    def sort(self, keys, direction=None):
        if direction is not None:
            keys = [(keys, direction)]
        self.items = _sorted(self.items, keys)
        return self

    def limit(self, limit_count: int):
        self.items = self.items[:limit_count]
        return self

    def __aiter__(self):
        self._iter = iter(self.items)
        return self

    async def __anext__(self):
        try:
            return next(self._iter)
        except StopIteration:
            raise StopAsyncIteration


class FakeDatabase:
    def __init__(self) -> None:
        self.collections: Dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection())


class FixedClock:
    """Clock returning a settable instant"""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


# In-memory store doubles

class InMemoryUserRepository(UserRepository):
    def __init__(self) -> None:
        self.users: Dict[str, User] = {}

    async def get(self, user_id: str) -> Optional[User]:
        return self.users.get(user_id)

    async def get_by_username(self, username: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.username == username), None)

    async def get_many(self, user_ids: Iterable[str]) -> Dict[str, User]:
        return {uid: self.users[uid] for uid in user_ids if uid in self.users}

    async def create(self, data: UserCreate) -> User:
        return self.add(data)

    def add(self, data: UserCreate) -> User:
        user = User(
            username=data.username,
            password_hash=User.hash_password(data.password),
            role=data.role,
            full_name=data.full_name,
            email=data.email,
            phone=data.phone,
        )
        self.users[user.id] = user
        return user


class InMemoryCustomerDirectory(CustomerDirectory):
    def __init__(self, clock=None) -> None:
        self.customers: List[Customer] = []
        self.clock = clock

    async def find_by_phone(self, phone: str) -> Optional[Customer]:
        # Insertion order is creation order
        return next((c for c in self.customers if c.phone == phone), None)

    async def create(self, data: CustomerCreate) -> Customer:
        extra = {"created_at": self.clock()} if self.clock else {}
        customer = Customer(**data.model_dump(), **extra)
        self.customers.append(customer)
        return customer

    async def get_by_id(self, customer_id: str) -> Optional[Customer]:
        return next((c for c in self.customers if c.id == customer_id), None)

    async def get_many(self, customer_ids: Iterable[str]) -> Dict[str, Customer]:
        wanted = set(customer_ids)
        return {c.id: c for c in self.customers if c.id in wanted}

    async def list(self) -> List[Customer]:
        return list(reversed(self.customers))


class InMemorySequenceAllocator(SequenceAllocator):
    def __init__(self) -> None:
        self.counters: Dict[str, int] = {}

    async def next_sequence(self, date_key: str) -> int:
        self.counters[date_key] = self.counters.get(date_key, 0) + 1
        return self.counters[date_key]


class InMemoryTicketStore(TicketStore):
    def __init__(self, customers: CustomerDirectory, users: UserRepository, clock, preserve_first_completion=False):
        self.tickets: List[Ticket] = []
        self.customers = customers
        self.users = users
        self.clock = clock
        self.preserve_first_completion = preserve_first_completion

    async def create(self, fields: TicketFields, ticket_id: str, customer_id: str) -> Ticket:
        now = self.clock()
        ticket = Ticket(
            **fields.model_dump(exclude_none=True),
            ticket_id=ticket_id,
            customer_id=customer_id,
            created_at=now,
            completed_at=now if fields.service_status == ServiceStatus.COMPLETED else None,
        )
        self.tickets.append(ticket)
        return ticket

    async def get_by_ticket_id(self, ticket_id: str) -> Optional[Ticket]:
        return next((t for t in self.tickets if t.ticket_id == ticket_id), None)

    async def get_by_id(self, id: str) -> Optional[Ticket]:
        return next((t for t in self.tickets if t.id == id), None)

    async def update_status(
        self,
        ticket_id: str,
        update: TicketStatusUpdate,
        acting_technician_id: Optional[str] = None,
    ) -> Optional[Ticket]:
        ticket = await self.get_by_ticket_id(ticket_id)
        if ticket is None:
            return None

        now = self.clock()
        ticket.service_status = update.service_status
        if update.priority:
            ticket.priority = update.priority
        if update.payment_status:
            ticket.payment_status = update.payment_status
        if update.final_cost is not None:
            ticket.final_cost = update.final_cost
        if acting_technician_id:
            ticket.assigned_technician = acting_technician_id
        if update.service_status == ServiceStatus.COMPLETED:
            if not (self.preserve_first_completion and ticket.completed_at):
                ticket.completed_at = now
        if update.service_note and acting_technician_id:
            ticket.service_notes.append(ServiceNote(
                note=update.service_note,
                technician_id=acting_technician_id,
                timestamp=now,
                photos=update.photos or [],
            ))
        return ticket.model_copy(deep=True)

    async def list_all(self) -> List[TicketWithCustomer]:
        return await self._list(lambda t: True)

    async def list_by_technician(self, technician_id: str) -> List[TicketWithCustomer]:
        return await self._list(lambda t: t.assigned_technician == technician_id)

    async def list_by_status(self, status: ServiceStatus) -> List[TicketWithCustomer]:
        return await self._list(lambda t: t.service_status == status)

    async def _list(self, predicate) -> List[TicketWithCustomer]:
        selected = sorted(
            (t for t in self.tickets if predicate(t)),
            key=lambda t: (t.created_at, t.ticket_id),
            reverse=True,
        )
        return await join_tickets(selected, self.customers, self.users)


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 3, 1, 10, 0, 0))


@pytest.fixture
def stores(clock):
    """In-memory users, customers, sequences and tickets sharing one clock"""
    users = InMemoryUserRepository()
    customers = InMemoryCustomerDirectory(clock=clock)
    sequences = InMemorySequenceAllocator()
    tickets = InMemoryTicketStore(customers, users, clock)
    return {"users": users, "customers": customers, "sequences": sequences, "tickets": tickets}


@pytest.fixture
def ticket_service(stores, clock):
    from repairdesk.services import TicketService

    return TicketService(stores["customers"], stores["sequences"], stores["tickets"], stores["users"], clock=clock)


@pytest.fixture
def reporting_service(stores, clock):
    from repairdesk.services import ReportingService

    return ReportingService(stores["tickets"], stores["customers"], clock=clock)


@pytest.fixture
def technician(stores):
    return stores["users"].add(UserCreate(
        username="ravi", password="tech-pass", role=UserRole.TECHNICIAN, full_name="Ravi Kumar",
    ))


@pytest.fixture
def frontdesk_user(stores):
    return stores["users"].add(UserCreate(
        username="desk", password="desk-pass", role=UserRole.FRONTDESK, full_name="Front Desk",
    ))
