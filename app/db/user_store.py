"""
app/db/user_store.py

Purpose: User record persistence

- UserStore: the capability interface the service layer depends on
- MongoUserStore: Motor-backed store with integer id sequence and unique email index
- InMemoryUserStore: dict-backed store for local development and tests
"""

import itertools
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from app.core.exceptions import DuplicateEmailError, UserNotFoundError
from app.core.logging import get_logger
from app.models.user import User

logger = get_logger(__name__)

USER_SEQUENCE = "users"


class UserStore(ABC):
    """
    Storage contract for user records.

    Sequences come back in store order; callers must not rely on it.
    `save` inserts when `id` is None (assigning one) and otherwise replaces
    the existing record, raising UserNotFoundError if it is gone.
    """

    @abstractmethod
    async def find_all(self) -> List[User]: ...

    @abstractmethod
    async def find_by_id(self, user_id: int) -> Optional[User]: ...

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]: ...

    @abstractmethod
    async def exists_by_email(self, email: str) -> bool: ...

    @abstractmethod
    async def find_by_active(self, active: bool) -> List[User]: ...

    @abstractmethod
    async def find_by_name_containing_ignore_case(self, name_part: str) -> List[User]: ...

    @abstractmethod
    async def save(self, user: User) -> User: ...

    @abstractmethod
    async def delete(self, user: User) -> None: ...

    @abstractmethod
    async def count(self) -> int: ...


def _to_document(user: User) -> Dict[str, Any]:
    return user.model_dump(exclude={"id"})


def _from_document(doc: Dict[str, Any]) -> User:
    data = dict(doc)
    data["id"] = data.pop("_id")
    return User.model_validate(data)


class MongoUserStore(UserStore):
    """Stores users in MongoDB; `_id` is an integer drawn from the counters collection."""

    def __init__(self, users: AsyncIOMotorCollection, counters: AsyncIOMotorCollection):
        self.users = users
        self.counters = counters

    async def _find(self, query: Dict[str, Any]) -> List[User]:
        cursor = self.users.find(query)
        return [_from_document(doc) async for doc in cursor]

    async def _next_id(self) -> int:
        counter = await self.counters.find_one_and_update(
            {"_id": USER_SEQUENCE},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return counter["seq"]

    async def find_all(self) -> List[User]:
        return await self._find({})

    async def find_by_id(self, user_id: int) -> Optional[User]:
        doc = await self.users.find_one({"_id": user_id})
        return _from_document(doc) if doc else None

    async def find_by_email(self, email: str) -> Optional[User]:
        doc = await self.users.find_one({"email": email})
        return _from_document(doc) if doc else None

    async def exists_by_email(self, email: str) -> bool:
        return await self.users.count_documents({"email": email}, limit=1) > 0

    async def find_by_active(self, active: bool) -> List[User]:
        return await self._find({"active": active})

    async def find_by_name_containing_ignore_case(self, name_part: str) -> List[User]:
        return await self._find({"name": {"$regex": re.escape(name_part), "$options": "i"}})

    async def save(self, user: User) -> User:
        doc = _to_document(user)
        try:
            if user.id is None:
                new_id = await self._next_id()
                await self.users.insert_one({"_id": new_id, **doc})
                logger.debug(f"Inserted user document {new_id}")
                return user.model_copy(update={"id": new_id})

            result = await self.users.replace_one({"_id": user.id}, doc)
        except DuplicateKeyError as e:
            logger.warning(f"Unique email index rejected {user.email}")
            raise DuplicateEmailError(user.email) from e

        # Deleted since it was read; the delete wins
        if result.matched_count == 0:
            raise UserNotFoundError(user.id)
        logger.debug(f"Replaced user document {user.id}")
        return user.model_copy()

    async def delete(self, user: User) -> None:
        await self.users.delete_one({"_id": user.id})

    async def count(self) -> int:
        return await self.users.count_documents({})


class InMemoryUserStore(UserStore):
    """
    Keeps users in a dict keyed by id. Records are copied in and out,
    and email uniqueness is enforced on save like the Mongo unique index.
    """

    def __init__(self):
        self._users: Dict[int, User] = {}
        self._ids = itertools.count(1)

    async def find_all(self) -> List[User]:
        return [user.model_copy() for user in self._users.values()]

    async def find_by_id(self, user_id: int) -> Optional[User]:
        user = self._users.get(user_id)
        return user.model_copy() if user else None

    async def find_by_email(self, email: str) -> Optional[User]:
        for user in self._users.values():
            if user.email == email:
                return user.model_copy()
        return None

    async def exists_by_email(self, email: str) -> bool:
        return any(user.email == email for user in self._users.values())

    async def find_by_active(self, active: bool) -> List[User]:
        return [user.model_copy() for user in self._users.values() if user.active == active]

    async def find_by_name_containing_ignore_case(self, name_part: str) -> List[User]:
        needle = name_part.casefold()
        return [user.model_copy() for user in self._users.values() if needle in user.name.casefold()]

    async def save(self, user: User) -> User:
        if user.id is not None and user.id not in self._users:
            raise UserNotFoundError(user.id)

        for other in self._users.values():
            if other.email == user.email and other.id != user.id:
                raise DuplicateEmailError(user.email)

        stored = user.model_copy(update={"id": next(self._ids)}) if user.id is None else user.model_copy()
        self._users[stored.id] = stored
        return stored.model_copy()

    async def delete(self, user: User) -> None:
        self._users.pop(user.id, None)

    async def count(self) -> int:
        return len(self._users)
