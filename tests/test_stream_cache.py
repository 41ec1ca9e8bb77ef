import pytest
from databases import Database

from nebula.core.database import create_tables, delete_expired_streams
from nebula.services.stream_cache import StreamCache, cache_key

STREAMS = [{"name": "[P2P] Test", "title": "Movie\n👤 10", "infoHash": "a" * 40}]


def test_cache_key_placeholders():
    assert cache_key("tt0111161", None, None) == ("tt0111161", "nosn", "noep")
    assert cache_key("tt0111161", 1, 5) == ("tt0111161", "1", "5")


@pytest.mark.asyncio
async def test_set_and_get(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'cache.db'}")
    await db.connect()
    try:
        await create_tables(db)
        cache = StreamCache(db, "sqlite")
        key = cache_key("tt0111161", None, None)

        assert await cache.get(key) is None

        await cache.set(key, STREAMS, 3600)
        assert await cache.get(key) == STREAMS

        await cache.set(key, [], 300)
        assert await cache.get(key) == []

        assert await cache.get(cache_key("tt0111161", 1, 5)) is None
    finally:
        await db.disconnect()


@pytest.mark.asyncio
async def test_expired_entries(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'cache.db'}")
    await db.connect()
    try:
        await create_tables(db)
        cache = StreamCache(db, "sqlite")
        key = cache_key("tt0111161", 1, 5)

        await cache.set(key, STREAMS, -10)
        assert await cache.get(key) is None

        await delete_expired_streams(db)
        assert await db.fetch_val("SELECT COUNT(*) FROM stream_cache") == 0
    finally:
        await db.disconnect()
