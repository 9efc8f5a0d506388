"""
Database connection and repositories
"""
from .connection import (
    get_client,
    get_database,
    get_collection,
    close_connection,
    ensure_indexes,
    COLLECTION_USERS,
    COLLECTION_CUSTOMERS,
    COLLECTION_TICKETS,
    COLLECTION_TICKET_SEQUENCES,
)
from .base import UserRepository, CustomerDirectory, SequenceAllocator, TicketStore
from .users import MongoUserRepository
from .customers import MongoCustomerDirectory
from .sequences import MongoSequenceAllocator
from .tickets import MongoTicketStore, join_tickets

__all__ = [
    "get_client",
    "get_database",
    "get_collection",
    "close_connection",
    "ensure_indexes",
    "COLLECTION_USERS",
    "COLLECTION_CUSTOMERS",
    "COLLECTION_TICKETS",
    "COLLECTION_TICKET_SEQUENCES",
    "UserRepository",
    "CustomerDirectory",
    "SequenceAllocator",
    "TicketStore",
    "MongoUserRepository",
    "MongoCustomerDirectory",
    "MongoSequenceAllocator",
    "MongoTicketStore",
    "join_tickets",
]
