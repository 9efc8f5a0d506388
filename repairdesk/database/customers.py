"""
MongoDB customer directory
"""
import logging
from typing import Dict, Iterable, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from repairdesk.database.base import CustomerDirectory, to_document
from repairdesk.database.connection import get_database, COLLECTION_CUSTOMERS
from repairdesk.models import Customer, CustomerCreate
from repairdesk.utils.clock import Clock, utcnow

logger = logging.getLogger(__name__)


class MongoCustomerDirectory(CustomerDirectory):
    def __init__(self, db: Optional[AsyncIOMotorDatabase] = None, clock: Clock = utcnow):
        self.collection = (db if db is not None else get_database())[COLLECTION_CUSTOMERS]
        self.clock = clock

    async def find_by_phone(self, phone: str) -> Optional[Customer]:
        # Phone is not unique; sorting makes "first match" deterministic
        doc = await self.collection.find_one({"phone": phone}, sort=[("created_at", 1), ("_id", 1)])
        return Customer.model_validate(doc) if doc else None

    async def create(self, data: CustomerCreate) -> Customer:
        customer = Customer(**data.model_dump(), created_at=self.clock())
        await self.collection.insert_one(to_document(customer))
        logger.info(f"Customer {customer.id} created")
        return customer

    async def get_by_id(self, customer_id: str) -> Optional[Customer]:
        doc = await self.collection.find_one({"_id": customer_id})
        return Customer.model_validate(doc) if doc else None

    async def get_many(self, customer_ids: Iterable[str]) -> Dict[str, Customer]:
        ids = list({customer_id for customer_id in customer_ids if customer_id})
        if not ids:
            return {}

        customers = {}
        async for doc in self.collection.find({"_id": {"$in": ids}}):
            customer = Customer.model_validate(doc)
            customers[customer.id] = customer
        return customers

    async def list(self) -> List[Customer]:
        cursor = self.collection.find({}).sort([("created_at", -1), ("_id", -1)])

        customers = []
        async for doc in cursor:
            customers.append(Customer.model_validate(doc))
        return customers
