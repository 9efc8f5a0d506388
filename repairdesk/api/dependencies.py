"""
FastAPI dependency providers for stores and services

Routes never build stores themselves; tests swap the store providers through
``app.dependency_overrides``.
"""
from fastapi import Depends

from repairdesk.database import (
    CustomerDirectory,
    MongoCustomerDirectory,
    MongoSequenceAllocator,
    MongoTicketStore,
    MongoUserRepository,
    SequenceAllocator,
    TicketStore,
    UserRepository,
)
from repairdesk.services import (
    CustomerMessenger,
    NotificationSender,
    ReportingService,
    TicketService,
    get_notification_sender,
)


def get_user_repository() -> UserRepository:
    return MongoUserRepository()


def get_customer_directory() -> CustomerDirectory:
    return MongoCustomerDirectory()


def get_sequence_allocator() -> SequenceAllocator:
    return MongoSequenceAllocator()


def get_ticket_store(
    customers: CustomerDirectory = Depends(get_customer_directory),
    users: UserRepository = Depends(get_user_repository),
) -> TicketStore:
    return MongoTicketStore(customers, users)


def get_ticket_service(
    customers: CustomerDirectory = Depends(get_customer_directory),
    sequences: SequenceAllocator = Depends(get_sequence_allocator),
    tickets: TicketStore = Depends(get_ticket_store),
    users: UserRepository = Depends(get_user_repository),
) -> TicketService:
    return TicketService(customers, sequences, tickets, users)


def get_reporting_service(
    tickets: TicketStore = Depends(get_ticket_store),
    customers: CustomerDirectory = Depends(get_customer_directory),
) -> ReportingService:
    return ReportingService(tickets, customers)


def get_sender() -> NotificationSender:
    return get_notification_sender()


def get_customer_messenger(
    tickets: TicketStore = Depends(get_ticket_store),
    customers: CustomerDirectory = Depends(get_customer_directory),
    sender: NotificationSender = Depends(get_sender),
) -> CustomerMessenger:
    return CustomerMessenger(tickets, customers, sender)
