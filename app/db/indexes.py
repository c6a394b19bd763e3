"""
app/db/indexes.py

Purpose: Database index management

- Unique email index backing the service-level duplicate check
- Lookup indexes for active filtering and name search
"""

from app.db.mongo import get_users_collection
from app.core.logging import get_logger

logger = get_logger(__name__)


async def create_indexes():
    """
    Creates all necessary database indexes.
    This function is idempotent - safe to run multiple times.
    """
    try:
        users = get_users_collection()

        logger.info("Creating database indexes...")

        # Unique index on email (authoritative uniqueness guarantee)
        await users.create_index("email", unique=True, name="email_unique")
        logger.debug("Created unique index on users.email")

        # Index on active for the active-users listing
        await users.create_index("active", name="active_idx")
        logger.debug("Created index on users.active")

        # Index on name for search
        await users.create_index("name", name="name_idx")
        logger.debug("Created index on users.name")

        user_indexes = await users.index_information()
        logger.info(f"All database indexes created successfully (users={len(user_indexes)})")

    except Exception as e:
        logger.error(f"Failed to create indexes: {str(e)}", exc_info=True)
        raise


async def drop_all_indexes():
    """
    Drops all custom indexes (keeps _id index).
    Use with caution! Only for maintenance/migration.
    """
    try:
        users = get_users_collection()

        logger.warning("Dropping all database indexes...")
        await users.drop_indexes()
        logger.info("All indexes dropped successfully")

    except Exception as e:
        logger.error(f"Failed to drop indexes: {str(e)}", exc_info=True)
        raise
