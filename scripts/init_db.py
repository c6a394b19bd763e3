"""
Database initialization script

Creates the users indexes and inserts the sample users into an empty store:
    python scripts/init_db.py
    python scripts/init_db.py --rebuild-indexes
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.core.logging import setup_logging, get_logger
from app.db.mongo import connect_to_mongo, close_mongo_connection, get_users_collection, get_counters_collection
from app.db.indexes import create_indexes, drop_all_indexes
from app.db.user_store import MongoUserStore
from app.services.user_service import UserService
from app.services.seed_service import seed_sample_users

setup_logging()
logger = get_logger("scripts.init_db")


async def main(rebuild_indexes: bool):
    await connect_to_mongo()
    try:
        if rebuild_indexes:
            await drop_all_indexes()
        await create_indexes()

        service = UserService(MongoUserStore(get_users_collection(), get_counters_collection()))
        inserted = await seed_sample_users(service)
        logger.info(f"Database ready: {await service.count()} users ({inserted} inserted)")
    finally:
        await close_mongo_connection()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create indexes and seed sample users")
    parser.add_argument("--rebuild-indexes", action="store_true", help="Drop custom indexes before creating them")
    args = parser.parse_args()
    asyncio.run(main(args.rebuild_indexes))
