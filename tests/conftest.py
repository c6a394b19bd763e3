import asyncio

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.api.deps import get_user_service
from app.db.user_store import InMemoryUserStore
from app.services.user_service import UserService
from app.services.seed_service import seed_sample_users


@pytest.fixture
def store():
    return InMemoryUserStore()


@pytest.fixture
def service(store):
    return UserService(store)


@pytest.fixture
def client(service):
    app.dependency_overrides[get_user_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def seeded_client(client, service):
    asyncio.run(seed_sample_users(service))
    return client
