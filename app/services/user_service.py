"""
app/services/user_service.py

Purpose: User record business rules

- Listing, active filtering and name search
- Email uniqueness on create and update
- Full replacement vs field-by-field partial update
- Existence checks for update and delete
"""

from typing import List, Optional

from app.core.exceptions import DuplicateEmailError, UserNotFoundError
from app.core.logging import get_logger, LogContext
from app.db.user_store import UserStore
from app.models.user import User, UserCreate, UserPatch

logger = get_logger(__name__)


class UserService:
    """
    Enforces user record rules on top of a UserStore.

    Holds no state besides the store. The uniqueness check before each
    write is a fast path; the store's own constraint is the guarantee.
    """

    def __init__(self, store: UserStore):
        self.store = store

    async def list_all(self) -> List[User]:
        return await self.store.find_all()

    async def list_active(self) -> List[User]:
        return await self.store.find_by_active(True)

    async def search(self, name_part: str) -> List[User]:
        """Case-insensitive substring match on name."""
        return await self.store.find_by_name_containing_ignore_case(name_part)

    async def get_by_id(self, user_id: int) -> Optional[User]:
        return await self.store.find_by_id(user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        return await self.store.find_by_email(email)

    async def _require(self, user_id: int) -> User:
        user = await self.store.find_by_id(user_id)
        if user is None:
            logger.warning(f"User {user_id} not found")
            raise UserNotFoundError(user_id)
        return user

    async def _ensure_email_available(self, current: User, email: str) -> None:
        if email != current.email and await self.store.exists_by_email(email):
            logger.warning("Email already taken by another user")
            raise DuplicateEmailError(email)

    async def create(self, candidate: UserCreate) -> User:
        """
        Persists a new user.

        Raises:
            DuplicateEmailError: if the email is already registered
        """
        with LogContext(email=candidate.email):
            if await self.store.exists_by_email(candidate.email):
                logger.warning("Rejected create: email already registered")
                raise DuplicateEmailError(candidate.email)

            created = await self.store.save(User(**candidate.model_dump()))
            logger.info(f"Created user {created.id}")
            return created

    async def full_update(self, user_id: int, replacement: UserCreate) -> User:
        """
        Overwrites every mutable field with the replacement's values,
        including nulls for omitted optional fields.

        Raises:
            UserNotFoundError: no user at user_id
            DuplicateEmailError: new email belongs to another user
        """
        with LogContext(user_id=user_id):
            user = await self._require(user_id)
            await self._ensure_email_available(user, replacement.email)

            updated = user.model_copy(update=replacement.model_dump())
            saved = await self.store.save(updated)
            logger.info("User replaced")
            return saved

    async def partial_update(self, user_id: int, patch: UserPatch) -> User:
        """
        Overwrites only the fields present in the patch with a non-null value.

        Raises:
            UserNotFoundError: no user at user_id
            DuplicateEmailError: new email belongs to another user
        """
        with LogContext(user_id=user_id):
            user = await self._require(user_id)
            changes = patch.provided_fields()

            if "email" in changes:
                await self._ensure_email_available(user, changes["email"])

            saved = await self.store.save(user.model_copy(update=changes))
            logger.info(f"User patched (fields: {', '.join(sorted(changes)) or 'none'})")
            return saved

    async def delete(self, user_id: int) -> None:
        """
        Raises:
            UserNotFoundError: no user at user_id
        """
        with LogContext(user_id=user_id):
            user = await self._require(user_id)
            await self.store.delete(user)
            logger.info("User deleted")

    async def count(self) -> int:
        return await self.store.count()
