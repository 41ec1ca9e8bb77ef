import asyncio
from typing import Optional

import aiohttp

from nebula.core.exceptions import SearchBackendError
from nebula.core.logger import logger
from nebula.core.models import settings
from nebula.core.result import attempt
from nebula.debrid.base import CacheChecker, LinkResolver
from nebula.debrid.premiumize import Premiumize
from nebula.metadata.base import MetadataLookup
from nebula.metadata.tmdb import TMDBApi
from nebula.scrapers.base import SearchBackend
from nebula.scrapers.bitmagnet import BitMagnet
from nebula.services.reconciler import CacheReconciler
from nebula.services.search import search_torrents
from nebula.services.streams import assemble_streams, build_torrent_streams
from nebula.services.trackers import TrackerSource, tracker_list
from nebula.utils.parsing import MediaIdentifier, parse_media_id


class StreamResolver:
    def __init__(
        self,
        search_backend: SearchBackend,
        metadata_lookup: Optional[MetadataLookup] = None,
        cache_checker: Optional[CacheChecker] = None,
        link_resolver: Optional[LinkResolver] = None,
        tracker_source: Optional[TrackerSource] = None,
        addon_name: str = None,
    ):
        self.search_backend = search_backend
        self.metadata_lookup = metadata_lookup
        self.tracker_source = tracker_source
        self.addon_name = addon_name or settings.ADDON_NAME
        self.reconciler = CacheReconciler(cache_checker, link_resolver, self.addon_name)

    async def get_supplementary_trackers(self):
        if self.tracker_source is None:
            return []

        outcome = await attempt(
            self.tracker_source.get_trackers(), "Supplementary tracker fetch"
        )
        return outcome.value if outcome.ok and outcome.value else []

    async def resolve(self, identifier: MediaIdentifier):
        search = await search_torrents(
            identifier, self.search_backend, self.metadata_lookup
        )
        if not search.candidates:
            return []

        reconciliation, extra_trackers = await asyncio.gather(
            self.reconciler.reconcile(search.candidates, identifier, search.title),
            self.get_supplementary_trackers(),
        )

        torrent_streams = build_torrent_streams(
            reconciliation.fallback, identifier, extra_trackers, self.addon_name
        )
        streams = assemble_streams(reconciliation.direct_streams, torrent_streams)

        logger.log(
            "STREAM",
            f"Resolved {len(streams)} streams for {identifier.log_name()} ({len(reconciliation.direct_streams)} direct, {len(streams) - len(reconciliation.direct_streams)} torrent)",
        )
        return streams

    async def resolve_id(self, media_type: str, media_id: str):
        return await self.resolve(parse_media_id(media_type, media_id))


def build_resolver(session: aiohttp.ClientSession, config: dict):
    bitmagnet_url = settings.BITMAGNET_URL or config.get("bitmagnetUrl")
    if not bitmagnet_url:
        raise SearchBackendError("Bitmagnet URL is not configured")

    search_backend = BitMagnet(
        session,
        bitmagnet_url,
        timeout=config.get("bitmagnetTimeout") or settings.BITMAGNET_TIMEOUT,
        search_limit=config.get("bitmagnetSearchLimit") or settings.BITMAGNET_SEARCH_LIMIT,
        sort_field=config.get("bitmagnetSortField") or settings.BITMAGNET_SORT_FIELD,
        sort_descending=(
            config["bitmagnetSortDescending"]
            if config.get("bitmagnetSortDescending") is not None
            else settings.BITMAGNET_SORT_DESCENDING
        ),
    )

    tmdb_api_key = config.get("tmdbApiKey") or settings.TMDB_API_KEY
    metadata_lookup = (
        TMDBApi(session, tmdb_api_key, timeout=settings.METADATA_TIMEOUT)
        if tmdb_api_key
        else None
    )

    premiumize_api_key = config.get("premiumizeApiKey") or settings.PREMIUMIZE_API_KEY
    debrid = (
        Premiumize(session, premiumize_api_key, timeout=settings.DEBRID_TIMEOUT)
        if premiumize_api_key
        else None
    )

    return StreamResolver(
        search_backend,
        metadata_lookup=metadata_lookup,
        cache_checker=debrid,
        link_resolver=debrid,
        tracker_source=tracker_list,
    )
