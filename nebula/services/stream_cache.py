import time
from typing import List, Optional

import orjson
from databases import Database

from nebula.core.logger import logger
from nebula.core.models import database, settings

NO_SEASON = "nosn"
NO_EPISODE = "noep"


def cache_key(media_id: str, season: Optional[int], episode: Optional[int]):
    return (
        media_id,
        str(season) if season is not None else NO_SEASON,
        str(episode) if episode is not None else NO_EPISODE,
    )


class StreamCache:
    def __init__(self, db: Database = database, database_type: str = None):
        self.database = db
        self.database_type = database_type or settings.DATABASE_TYPE

    async def get(self, key: tuple) -> Optional[List[dict]]:
        media_id, season, episode = key
        row = await self.database.fetch_one(
            """
                SELECT data
                FROM stream_cache
                WHERE media_id = :media_id
                AND season = :season
                AND episode = :episode
                AND expires_at >= :current_time
            """,
            {
                "media_id": media_id,
                "season": season,
                "episode": episode,
                "current_time": int(time.time()),
            },
        )
        if row is None:
            return None

        return orjson.loads(row["data"])

    async def set(self, key: tuple, streams: List[dict], ttl: int):
        media_id, season, episode = key
        conflict_clause = (
            " ON CONFLICT (media_id, season, episode) DO UPDATE SET data = EXCLUDED.data, expires_at = EXCLUDED.expires_at"
            if self.database_type == "postgresql"
            else ""
        )
        await self.database.execute(
            f"""
                INSERT {"OR REPLACE " if self.database_type == "sqlite" else ""}
                INTO stream_cache
                VALUES (:media_id, :season, :episode, :data, :expires_at)
                {conflict_clause}
            """,
            {
                "media_id": media_id,
                "season": season,
                "episode": episode,
                "data": orjson.dumps(streams).decode("utf-8"),
                "expires_at": int(time.time()) + ttl,
            },
        )
        logger.log(
            "DATABASE", f"Cached {len(streams)} streams for {media_id} ({ttl}s)"
        )


stream_cache = StreamCache()
