import asyncio
import logging

import pytest

from app.core.exceptions import DuplicateEmailError, UserNotFoundError
from app.core.logging import install_context_factory
from app.db.user_store import InMemoryUserStore
from app.models.user import UserCreate, UserPatch
from app.services.seed_service import seed_sample_users
from app.services.user_service import UserService

pytestmark = pytest.mark.asyncio


def make_service():
    return UserService(InMemoryUserStore())


async def create_jane(service):
    return await service.create(UserCreate(
        name="Jane Smith",
        email="jane.smith@example.com",
        phone="+1234567891",
        address="456 Oak Ave, City, Country",
    ))


async def test_create_assigns_id_and_defaults_active():
    service = make_service()
    user = await service.create(UserCreate(name="John Doe", email="john.doe@example.com"))
    assert user.id is not None
    assert user.active is True
    assert user.phone is None


async def test_create_distinct_emails_get_distinct_ids():
    service = make_service()
    first = await service.create(UserCreate(name="John Doe", email="john.doe@example.com"))
    second = await service.create(UserCreate(name="Jane Smith", email="jane.smith@example.com"))
    assert first.id != second.id
    assert await service.count() == 2


async def test_create_duplicate_email_leaves_store_unchanged():
    service = make_service()
    jane = await create_jane(service)

    with pytest.raises(DuplicateEmailError) as exc_info:
        await service.create(UserCreate(name="Other Jane", email="jane.smith@example.com"))

    assert exc_info.value.status_code == 409
    assert exc_info.value.message == "User with email jane.smith@example.com already exists"
    assert await service.count() == 1
    assert await service.get_by_id(jane.id) == jane


async def test_get_by_id_missing_returns_none():
    service = make_service()
    assert await service.get_by_id(404) is None


async def test_get_by_email():
    service = make_service()
    jane = await create_jane(service)
    assert await service.get_by_email("jane.smith@example.com") == jane
    assert await service.get_by_email("nobody@example.com") is None


async def test_partial_update_changes_only_phone():
    service = make_service()
    jane = await create_jane(service)

    await service.partial_update(jane.id, UserPatch(phone="555"))

    reread = await service.get_by_id(jane.id)
    assert reread.phone == "555"
    assert reread.name == jane.name
    assert reread.email == jane.email
    assert reread.address == jane.address
    assert reread.active == jane.active


async def test_partial_update_ignores_explicit_nulls():
    service = make_service()
    jane = await create_jane(service)

    updated = await service.partial_update(jane.id, UserPatch(address=None, active=None))

    assert updated == jane


async def test_partial_update_same_email_is_noop():
    service = make_service()
    jane = await create_jane(service)

    updated = await service.partial_update(jane.id, UserPatch(email="jane.smith@example.com", active=False))

    assert updated.email == jane.email
    assert updated.active is False


async def test_partial_update_email_taken_by_other_user():
    service = make_service()
    jane = await create_jane(service)
    await service.create(UserCreate(name="John Doe", email="john.doe@example.com"))

    with pytest.raises(DuplicateEmailError):
        await service.partial_update(jane.id, UserPatch(email="john.doe@example.com"))

    assert (await service.get_by_id(jane.id)).email == "jane.smith@example.com"


async def test_partial_update_missing_user():
    service = make_service()
    with pytest.raises(UserNotFoundError) as exc_info:
        await service.partial_update(99, UserPatch(phone="555"))
    assert exc_info.value.message == "User not found with id: 99"


async def test_full_update_overwrites_every_field():
    service = make_service()
    jane = await create_jane(service)
    replacement = UserCreate(name="Jane Smith", email="jane.new@example.com", active=False)

    updated = await service.full_update(jane.id, replacement)

    assert updated.id == jane.id
    assert updated.name == "Jane Smith"
    assert updated.email == "jane.new@example.com"
    assert updated.phone is None
    assert updated.address is None
    assert updated.active is False
    assert await service.get_by_id(jane.id) == updated


async def test_full_update_email_taken_by_other_user():
    service = make_service()
    jane = await create_jane(service)
    await service.create(UserCreate(name="John Doe", email="john.doe@example.com"))

    with pytest.raises(DuplicateEmailError):
        await service.full_update(jane.id, UserCreate(name="Jane Smith", email="john.doe@example.com"))


async def test_full_update_missing_user():
    service = make_service()
    with pytest.raises(UserNotFoundError):
        await service.full_update(5, UserCreate(name="Nobody Here", email="nobody@example.com"))


async def test_delete_removes_user():
    service = make_service()
    jane = await create_jane(service)

    await service.delete(jane.id)

    assert await service.get_by_id(jane.id) is None
    with pytest.raises(UserNotFoundError):
        await service.delete(jane.id)


async def test_search_is_case_insensitive_substring():
    service = make_service()
    for name, email in [("John Doe", "john@example.com"), ("Bob Johnson", "bob@example.com"), ("Alice Brown", "alice@example.com")]:
        await service.create(UserCreate(name=name, email=email))

    for query in ("jo", "JO", "jO"):
        names = {user.name for user in await service.search(query)}
        assert names == {"John Doe", "Bob Johnson"}


async def test_list_active_over_seed_data():
    service = make_service()
    assert await seed_sample_users(service) == 5

    active = await service.list_active()

    assert len(active) == 4
    assert "Charlie Wilson" not in {user.name for user in active}
    assert len(await service.list_all()) == 5


async def test_seed_skips_non_empty_store():
    service = make_service()
    await create_jane(service)
    assert await seed_sample_users(service) == 0
    assert await service.count() == 1


class YieldingStore(InMemoryUserStore):
    """In-memory store that gives up control on every read and write, like a network store."""

    async def find_by_id(self, user_id):
        await asyncio.sleep(0)
        return await super().find_by_id(user_id)

    async def save(self, user):
        await asyncio.sleep(0)
        return await super().save(user)


async def test_concurrent_updates_keep_their_own_log_context(caplog):
    install_context_factory()
    factory = logging.getLogRecordFactory()
    service = UserService(YieldingStore())
    jane = await create_jane(service)
    john = await service.create(UserCreate(name="John Doe", email="john.doe@example.com"))

    with caplog.at_level(logging.INFO, logger="userdir"):
        await asyncio.gather(
            service.partial_update(jane.id, UserPatch(phone="111")),
            service.partial_update(john.id, UserPatch(phone="222")),
        )

    patched = [record for record in caplog.records if record.getMessage().startswith("User patched")]
    assert sorted(record.user_id for record in patched) == sorted([jane.id, john.id])

    assert logging.getLogRecordFactory() is factory
    unrelated = factory("userdir.test", logging.INFO, __file__, 1, "unrelated", None, None)
    assert not hasattr(unrelated, "user_id")
