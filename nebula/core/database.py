import asyncio
import os
import time

from nebula.core.logger import logger
from nebula.core.models import database, settings

STREAM_CACHE_SCHEMA = """
    CREATE TABLE IF NOT EXISTS stream_cache (
        media_id TEXT NOT NULL,
        season TEXT NOT NULL,
        episode TEXT NOT NULL,
        data TEXT NOT NULL,
        expires_at INTEGER NOT NULL,
        PRIMARY KEY (media_id, season, episode)
    )
"""


async def create_tables(db=database):
    await db.execute(STREAM_CACHE_SCHEMA)
    await db.execute(
        "CREATE INDEX IF NOT EXISTS idx_stream_cache_expires_at ON stream_cache (expires_at)"
    )


async def delete_expired_streams(db=database):
    await db.execute(
        "DELETE FROM stream_cache WHERE expires_at < :current_time",
        {"current_time": int(time.time())},
    )


async def setup_database():
    try:
        if settings.DATABASE_TYPE == "sqlite":
            os.makedirs(os.path.dirname(settings.DATABASE_PATH), exist_ok=True)

            if not os.path.exists(settings.DATABASE_PATH):
                open(settings.DATABASE_PATH, "a").close()

        await database.connect()
        await create_tables()
        await delete_expired_streams()

        logger.log("DATABASE", f"Database ({settings.DATABASE_TYPE}) ready")
    except Exception as e:
        logger.error(f"Error setting up the database: {e}")


async def cleanup_expired_streams():
    while True:
        try:
            await delete_expired_streams()
        except Exception as e:
            logger.log("DATABASE", f"❌ Error during periodic stream cache cleanup: {e}")

        await asyncio.sleep(settings.STREAM_CACHE_CLEANUP_INTERVAL)


async def teardown_database():
    try:
        await database.disconnect()
    except Exception as e:
        logger.error(f"Error tearing down the database: {e}")
