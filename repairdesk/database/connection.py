"""
MongoDB connection management using Motor (async)
"""
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase, AsyncIOMotorCollection
from typing import Optional
from repairdesk.config import settings


# Global async client instance
_client: Optional[AsyncIOMotorClient] = None


def get_client() -> AsyncIOMotorClient:
    """
    Get or create async MongoDB client instance

    Returns:
        AsyncIOMotorClient: Async MongoDB client
    """
    global _client
    if _client is None:
        _client = AsyncIOMotorClient(settings.mongodb_uri)
    return _client


def get_database() -> AsyncIOMotorDatabase:
    """
    Get the repair desk database

    Returns:
        AsyncIOMotorDatabase: Async MongoDB database instance
    """
    client = get_client()
    return client[settings.database_name]


def get_collection(collection_name: str) -> AsyncIOMotorCollection:
    """
    Get a specific collection from the database

    Args:
        collection_name: Name of the collection

    Returns:
        AsyncIOMotorCollection: Async MongoDB collection instance
    """
    db = get_database()
    return db[collection_name]


async def close_connection():
    """Close the async MongoDB connection"""
    global _client
    if _client is not None:
        _client.close()
        _client = None


# Collection names
COLLECTION_USERS = "users"
COLLECTION_CUSTOMERS = "customers"
COLLECTION_TICKETS = "tickets"
COLLECTION_TICKET_SEQUENCES = "ticket_sequences"


async def ensure_indexes(db: Optional[AsyncIOMotorDatabase] = None):
    """
    Create all required indexes for the database
    """
    db = db if db is not None else get_database()

    # Users indexes
    await db[COLLECTION_USERS].create_index([("username", 1)], unique=True)

    # Customers indexes (phone is a lookup key, not a uniqueness constraint)
    await db[COLLECTION_CUSTOMERS].create_index([("phone", 1), ("created_at", 1)])
    await db[COLLECTION_CUSTOMERS].create_index([("created_at", -1)])

    # Tickets indexes
    await db[COLLECTION_TICKETS].create_index([("ticket_id", 1)], unique=True)
    await db[COLLECTION_TICKETS].create_index([("created_at", -1)])
    await db[COLLECTION_TICKETS].create_index([("assigned_technician", 1), ("created_at", -1)])
    await db[COLLECTION_TICKETS].create_index([("service_status", 1), ("created_at", -1)])

    # Ticket sequences are keyed by _id (the YYYYMMDD date), which is already unique
