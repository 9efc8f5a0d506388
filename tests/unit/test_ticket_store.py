"""
Unit tests for the MongoDB stores, run against the in-memory collection fake

Tests cover:
- Customer lookup by phone and listing order
- Ticket creation defaults
- Status updates: completion timestamp, assignment, service notes
- Listing order, technician scoping and the customer join
"""
from datetime import datetime, timedelta

import pytest

from repairdesk.database import (
    COLLECTION_TICKETS,
    MongoCustomerDirectory,
    MongoTicketStore,
    MongoUserRepository,
    ensure_indexes,
)
from repairdesk.database.tickets import keep_first_completion
from repairdesk.models import (
    CustomerCreate,
    PaymentStatus,
    ServiceStatus,
    TicketFields,
    TicketPriority,
    TicketStatusUpdate,
    UserCreate,
    UserRole,
)


# ============================================================
# Fixtures
# ============================================================

@pytest.fixture
def customers(fake_db, clock):
    return MongoCustomerDirectory(db=fake_db, clock=clock)


@pytest.fixture
def users(fake_db):
    return MongoUserRepository(db=fake_db)


@pytest.fixture
def store(fake_db, customers, users, clock):
    return MongoTicketStore(customers, users, db=fake_db, clock=clock, preserve_first_completion=False)


def laptop_fields(**overrides):
    data = {
        "device_type": "Laptop",
        "issue_category": "Hardware",
        "problem_description": "Does not power on",
    }
    data.update(overrides)
    return TicketFields(**data)


# ============================================================
# Customers
# ============================================================

@pytest.mark.unit
@pytest.mark.asyncio
async def test_find_by_phone_returns_oldest_customer(customers, clock):
    first = await customers.create(CustomerCreate(name="Anita", phone="9876543210"))
    clock.now += timedelta(minutes=5)
    await customers.create(CustomerCreate(name="Anita R", phone="9876543210"))

    found = await customers.find_by_phone("9876543210")

    assert found.id == first.id
    assert found.name == "Anita"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_find_by_phone_unknown_returns_none(customers):
    assert await customers.find_by_phone("0000000000") is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_customer_list_newest_first(customers, clock):
    await customers.create(CustomerCreate(name="First", phone="9000000001"))
    clock.now += timedelta(hours=1)
    await customers.create(CustomerCreate(name="Second", phone="9000000002"))

    names = [c.name for c in await customers.list()]

    assert names == ["Second", "First"]


@pytest.mark.unit
def test_customer_blank_optional_fields_become_none():
    customer = CustomerCreate(name="Anita", phone="9876543210", email="", address="  ")

    assert customer.email is None
    assert customer.address is None


# ============================================================
# Tickets
# ============================================================

@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_ticket_applies_defaults(store, customers, clock):
    customer = await customers.create(CustomerCreate(name="Anita", phone="9876543210"))

    ticket = await store.create(laptop_fields(), "SATY-20240301-0001", customer.id)
    stored = await store.get_by_ticket_id("SATY-20240301-0001")

    assert stored.id == ticket.id
    assert stored.customer_id == customer.id
    assert stored.service_status == ServiceStatus.PENDING
    assert stored.priority == TicketPriority.MEDIUM
    assert stored.payment_status == PaymentStatus.PENDING
    assert stored.service_notes == []
    assert stored.completed_at is None
    assert stored.created_at == clock.now
    assert (await store.get_by_id(ticket.id)).ticket_id == "SATY-20240301-0001"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_ticket_created_as_completed_is_stamped(store, customers, clock):
    customer = await customers.create(CustomerCreate(name="Anita", phone="9876543210"))

    await store.create(laptop_fields(service_status=ServiceStatus.COMPLETED), "SATY-20240301-0001", customer.id)
    await store.create(laptop_fields(service_status=ServiceStatus.TESTING), "SATY-20240301-0002", customer.id)

    assert (await store.get_by_ticket_id("SATY-20240301-0001")).completed_at == clock.now
    assert (await store.get_by_ticket_id("SATY-20240301-0002")).completed_at is None



@pytest.mark.unit
@pytest.mark.asyncio
async def test_completed_sets_timestamp_and_delivered_keeps_it(store, customers, clock):
    customer = await customers.create(CustomerCreate(name="Anita", phone="9876543210"))
    await store.create(laptop_fields(), "SATY-20240301-0001", customer.id)

    clock.now = datetime(2024, 3, 3, 15, 0)
    completed = await store.update_status(
        "SATY-20240301-0001", TicketStatusUpdate(service_status=ServiceStatus.COMPLETED)
    )
    assert completed.completed_at == datetime(2024, 3, 3, 15, 0)

    clock.now = datetime(2024, 3, 4, 9, 0)
    delivered = await store.update_status(
        "SATY-20240301-0001",
        TicketStatusUpdate(service_status=ServiceStatus.DELIVERED, final_cost=1800, payment_status=PaymentStatus.PAID),
    )
    assert delivered.service_status == ServiceStatus.DELIVERED
    assert delivered.completed_at == datetime(2024, 3, 3, 15, 0)
    assert delivered.final_cost == 1800
    assert delivered.payment_status == PaymentStatus.PAID


@pytest.mark.unit
@pytest.mark.asyncio
async def test_completing_again_refreshes_timestamp(store, customers, clock):
    customer = await customers.create(CustomerCreate(name="Anita", phone="9876543210"))
    await store.create(laptop_fields(), "SATY-20240301-0001", customer.id)
    update = TicketStatusUpdate(service_status=ServiceStatus.COMPLETED)

    await store.update_status("SATY-20240301-0001", update)
    clock.now = datetime(2024, 3, 5, 12, 0)
    again = await store.update_status("SATY-20240301-0001", update)

    assert again.completed_at == datetime(2024, 3, 5, 12, 0)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_preserve_first_completion_keeps_timestamp(fake_db, customers, users, clock):
    store = MongoTicketStore(customers, users, db=fake_db, clock=clock, preserve_first_completion=True)
    customer = await customers.create(CustomerCreate(name="Anita", phone="9876543210"))
    await store.create(laptop_fields(), "SATY-20240301-0001", customer.id)
    update = TicketStatusUpdate(service_status=ServiceStatus.COMPLETED)

    first = await store.update_status("SATY-20240301-0001", update)
    clock.now = datetime(2024, 3, 5, 12, 0)
    again = await store.update_status("SATY-20240301-0001", update)

    assert first.completed_at == datetime(2024, 3, 1, 10, 0)
    assert again.completed_at == datetime(2024, 3, 1, 10, 0)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_preserve_first_completion_is_a_single_write(fake_db, customers, users, clock, monkeypatch):
    store = MongoTicketStore(customers, users, db=fake_db, clock=clock, preserve_first_completion=True)
    customer = await customers.create(CustomerCreate(name="Anita", phone="9876543210"))
    await store.create(laptop_fields(), "SATY-20240301-0001", customer.id)
    completed = TicketStatusUpdate(service_status=ServiceStatus.COMPLETED, service_note="Board reflowed")
    await store.update_status("SATY-20240301-0001", completed, acting_technician_id="tech-1")

    async def no_update_one(*args, **kwargs):
        raise AssertionError("completion must not need a second write")

    monkeypatch.setattr(fake_db[COLLECTION_TICKETS], "update_one", no_update_one)
    clock.now = datetime(2024, 3, 5, 12, 0)
    ticket = await store.update_status(
        "SATY-20240301-0001",
        TicketStatusUpdate(service_status=ServiceStatus.COMPLETED, service_note="$500 paid at pickup", final_cost=500),
        acting_technician_id="tech-2",
    )

    assert ticket.completed_at == datetime(2024, 3, 1, 10, 0)
    assert ticket.final_cost == 500
    assert ticket.assigned_technician == "tech-2"
    assert [n.note for n in ticket.service_notes] == ["Board reflowed", "$500 paid at pickup"]


@pytest.mark.unit
def test_keep_first_completion_pipeline():
    now = datetime(2024, 3, 1, 10, 0)

    pipeline = keep_first_completion({"service_status": ServiceStatus.COMPLETED}, {"note": "$5 off"}, now)

    assert pipeline == [{"$set": {
        "service_status": {"$literal": ServiceStatus.COMPLETED},
        "completed_at": {"$ifNull": ["$completed_at", {"$literal": now}]},
        "service_notes": {"$concatArrays": [{"$ifNull": ["$service_notes", []]}, [{"$literal": {"note": "$5 off"}}]]},
    }}]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_technician_update_assigns_and_appends_notes(store, customers, clock):
    customer = await customers.create(CustomerCreate(name="Anita", phone="9876543210"))
    await store.create(laptop_fields(), "SATY-20240301-0001", customer.id)

    await store.update_status(
        "SATY-20240301-0001",
        TicketStatusUpdate(service_status=ServiceStatus.IN_PROGRESS, service_note="Opened chassis"),
        acting_technician_id="tech-1",
    )
    clock.now += timedelta(hours=2)
    ticket = await store.update_status(
        "SATY-20240301-0001",
        TicketStatusUpdate(
            service_status=ServiceStatus.WAITING_FOR_PARTS,
            service_note="Needs new DC jack",
            photos=["jack.jpg"],
        ),
        acting_technician_id="tech-1",
    )

    assert ticket.assigned_technician == "tech-1"
    assert [n.note for n in ticket.service_notes] == ["Opened chassis", "Needs new DC jack"]
    assert ticket.service_notes[1].photos == ["jack.jpg"]
    assert ticket.service_notes[1].timestamp == clock.now
    assert all(n.technician_id == "tech-1" for n in ticket.service_notes)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_update_without_technician_adds_no_note(store, customers):
    customer = await customers.create(CustomerCreate(name="Anita", phone="9876543210"))
    await store.create(laptop_fields(assigned_technician="tech-1"), "SATY-20240301-0001", customer.id)

    ticket = await store.update_status(
        "SATY-20240301-0001",
        TicketStatusUpdate(service_status=ServiceStatus.TESTING, service_note="ignored", priority=TicketPriority.URGENT),
    )

    assert ticket.service_notes == []
    assert ticket.assigned_technician == "tech-1"
    assert ticket.priority == TicketPriority.URGENT


@pytest.mark.unit
@pytest.mark.asyncio
async def test_update_unknown_ticket_returns_none(store):
    result = await store.update_status(
        "SATY-20240301-9999", TicketStatusUpdate(service_status=ServiceStatus.TESTING)
    )

    assert result is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_lists_are_newest_first_and_technician_list_is_a_subset(store, customers, users, clock):
    technician = await users.create(UserCreate(
        username="ravi", password="tech-pass", role=UserRole.TECHNICIAN, full_name="Ravi Kumar",
    ))
    customer = await customers.create(CustomerCreate(name="Anita", phone="9876543210"))
    for n in range(1, 5):
        assigned = technician.id if n % 2 else None
        await store.create(laptop_fields(assigned_technician=assigned), f"SATY-20240301-000{n}", customer.id)
        clock.now += timedelta(minutes=1)

    all_ids = [t.ticket_id for t in await store.list_all()]
    mine = await store.list_by_technician(technician.id)

    assert all_ids == ["SATY-20240301-0004", "SATY-20240301-0003", "SATY-20240301-0002", "SATY-20240301-0001"]
    assert [t.ticket_id for t in mine] == ["SATY-20240301-0003", "SATY-20240301-0001"]
    assert all(t.assigned_technician_name == "Ravi Kumar" for t in mine)
    assert all(t.customer.name == "Anita" for t in mine)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_list_by_status_filters(store, customers):
    customer = await customers.create(CustomerCreate(name="Anita", phone="9876543210"))
    await store.create(laptop_fields(), "SATY-20240301-0001", customer.id)
    await store.create(laptop_fields(), "SATY-20240301-0002", customer.id)
    await store.update_status("SATY-20240301-0002", TicketStatusUpdate(service_status=ServiceStatus.TESTING))

    testing = await store.list_by_status(ServiceStatus.TESTING)

    assert [t.ticket_id for t in testing] == ["SATY-20240301-0002"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_list_skips_tickets_with_unknown_customer(store, customers, fake_db):
    customer = await customers.create(CustomerCreate(name="Anita", phone="9876543210"))
    await store.create(laptop_fields(), "SATY-20240301-0001", customer.id)
    await store.create(laptop_fields(), "SATY-20240301-0002", "missing-customer")

    tickets = await store.list_all()

    assert [t.ticket_id for t in tickets] == ["SATY-20240301-0001"]
    assert len(fake_db[COLLECTION_TICKETS].documents) == 2


@pytest.mark.unit
@pytest.mark.asyncio
async def test_ensure_indexes_creates_unique_ticket_id_index(fake_db):
    await ensure_indexes(fake_db)

    assert ([("ticket_id", 1)], {"unique": True}) in fake_db[COLLECTION_TICKETS].indexes
