"""
MongoDB identity store
"""
import logging
from typing import Dict, Iterable, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from repairdesk.database.base import UserRepository, to_document
from repairdesk.database.connection import get_database, COLLECTION_USERS
from repairdesk.models import User, UserCreate

logger = logging.getLogger(__name__)


class MongoUserRepository(UserRepository):
    def __init__(self, db: Optional[AsyncIOMotorDatabase] = None):
        self.collection = (db if db is not None else get_database())[COLLECTION_USERS]

    async def get(self, user_id: str) -> Optional[User]:
        doc = await self.collection.find_one({"_id": user_id})
        return User.model_validate(doc) if doc else None

    async def get_by_username(self, username: str) -> Optional[User]:
        doc = await self.collection.find_one({"username": username})
        return User.model_validate(doc) if doc else None

    async def get_many(self, user_ids: Iterable[str]) -> Dict[str, User]:
        ids = list({user_id for user_id in user_ids if user_id})
        if not ids:
            return {}

        users = {}
        async for doc in self.collection.find({"_id": {"$in": ids}}):
            user = User.model_validate(doc)
            users[user.id] = user
        return users

    async def create(self, data: UserCreate) -> User:
        user = User(
            username=data.username,
            password_hash=User.hash_password(data.password),
            role=data.role,
            full_name=data.full_name,
            email=data.email or None,
            phone=data.phone or None,
        )
        await self.collection.insert_one(to_document(user))
        logger.info(f"User {user.username} created with role {user.role.value}")
        return user
