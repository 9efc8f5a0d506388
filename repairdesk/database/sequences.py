"""
MongoDB ticket sequence allocator

Each day has one counter document keyed by its YYYYMMDD date. The counter is
bumped with a single guarded ``$inc`` so concurrent ticket intakes on the same
day never read the same value.
"""
import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from repairdesk.database.base import SequenceAllocator
from repairdesk.models import TicketSequenceCounter
from repairdesk.database.connection import get_database, COLLECTION_TICKET_SEQUENCES

logger = logging.getLogger(__name__)

# Only the very first intake of a day can race on the upsert
MAX_UPSERT_ATTEMPTS = 3


class MongoSequenceAllocator(SequenceAllocator):
    def __init__(self, db: Optional[AsyncIOMotorDatabase] = None):
        self.collection = (db if db is not None else get_database())[COLLECTION_TICKET_SEQUENCES]

    async def next_sequence(self, date_key: str) -> int:
        """
        Atomically increment and return the counter for a day

        Args:
            date_key: Day in YYYYMMDD format

        Returns:
            The sequence number reserved for the caller

        Raises:
            DuplicateKeyError: If the upsert keeps colliding (should not happen)
        """
        for attempt in range(1, MAX_UPSERT_ATTEMPTS + 1):
            try:
                counter = await self.collection.find_one_and_update(
                    {"_id": date_key},
                    {"$inc": {"sequence": 1}},
                    upsert=True,
                    return_document=ReturnDocument.AFTER,
                )
            except DuplicateKeyError:
                # Two callers upserted a brand-new day at once; the document
                # exists now, so the retry is a plain increment
                logger.warning(f"Sequence upsert collision for {date_key} (attempt {attempt})")
                if attempt == MAX_UPSERT_ATTEMPTS:
                    raise
                continue

            sequence = TicketSequenceCounter.model_validate(counter).sequence
            logger.debug(f"Allocated ticket sequence {sequence} for {date_key}")
            return sequence
