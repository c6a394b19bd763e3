"""
app/services/seed_service.py

Purpose: Sample data bootstrap

- Inserts a fixed set of demo users when the store is empty
- One of them is inactive so the active listing has something to filter
"""

from typing import List

from app.core.logging import get_logger
from app.models.user import UserCreate
from app.services.user_service import UserService

logger = get_logger(__name__)

SAMPLE_USERS = [
    {"name": "John Doe", "email": "john.doe@example.com", "phone": "+1234567890", "address": "123 Main St, City, Country"},
    {"name": "Jane Smith", "email": "jane.smith@example.com", "phone": "+1234567891", "address": "456 Oak Ave, City, Country"},
    {"name": "Bob Johnson", "email": "bob.johnson@example.com", "phone": "+1234567892", "address": "789 Pine Rd, City, Country"},
    {"name": "Alice Brown", "email": "alice.brown@example.com", "phone": "+1234567893", "address": "321 Elm St, City, Country"},
    {"name": "Charlie Wilson", "email": "charlie.wilson@example.com", "phone": "+1234567894", "address": "654 Maple Dr, City, Country", "active": False},
]


async def seed_sample_users(service: UserService) -> int:
    """
    Creates the sample users if the store holds no records.

    Returns:
        Number of users inserted (0 when the store was not empty)
    """
    existing = await service.count()
    if existing:
        logger.info(f"Skipping sample data, store already holds {existing} users")
        return 0

    created: List[int] = []
    for data in SAMPLE_USERS:
        user = await service.create(UserCreate(**data))
        created.append(user.id)

    logger.info(f"Sample data initialized ({len(created)} users)")
    return len(created)
