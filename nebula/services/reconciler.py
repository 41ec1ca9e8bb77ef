import asyncio
from dataclasses import dataclass, field
from typing import List, Optional

from nebula.core.logger import logger
from nebula.core.models import settings
from nebula.core.result import attempt
from nebula.debrid.base import CacheChecker, CacheStatus, LinkResolver
from nebula.scrapers.models import TorrentCandidate
from nebula.services.models import DirectStream
from nebula.services.search import build_search_hint
from nebula.utils.formatting import format_details, format_title
from nebula.utils.parsing import MediaIdentifier
from nebula.utils.torrent import ParsedMagnet, parse_magnet_uri


@dataclass(frozen=True)
class ParsedCandidate:
    torrent: TorrentCandidate
    magnet: Optional[ParsedMagnet]

    @property
    def info_hash(self):
        return self.magnet.info_hash if self.magnet is not None else None


@dataclass
class Reconciliation:
    direct_streams: List[DirectStream] = field(default_factory=list)
    fallback: List[ParsedCandidate] = field(default_factory=list)


class CacheReconciler:
    def __init__(
        self,
        cache_checker: Optional[CacheChecker] = None,
        link_resolver: Optional[LinkResolver] = None,
        addon_name: str = None,
    ):
        self.cache_checker = cache_checker
        self.link_resolver = link_resolver
        self.stream_name = f"[PM] {addon_name or settings.ADDON_NAME}"

    @property
    def debrid_enabled(self):
        return self.cache_checker is not None and self.link_resolver is not None

    async def fetch_cache_statuses(self, parsed: List[ParsedCandidate]):
        info_hashes = list(
            dict.fromkeys(
                candidate.info_hash for candidate in parsed if candidate.info_hash
            )
        )
        if not self.debrid_enabled or not info_hashes:
            return {}

        outcome = await attempt(
            self.cache_checker.check_cache(info_hashes), "Debrid bulk cache check"
        )
        if not outcome.ok:
            return {}

        return outcome.value or {}

    async def resolve_direct_stream(
        self,
        candidate: ParsedCandidate,
        status: CacheStatus,
        identifier: MediaIdentifier,
        preferred_title: str = None,
    ):
        torrent = candidate.torrent
        search_hint = build_search_hint(identifier, preferred_title or torrent.title)

        outcome = await attempt(
            self.link_resolver.get_direct_link(torrent.magnet_uri, search_hint),
            f"Direct link for {candidate.info_hash}",
        )
        if not outcome.ok or not outcome.value:
            logger.warning(
                f"{candidate.info_hash} is cached but no direct link was returned, adding it to fallback"
            )
            return None

        logger.log("DEBRID", f"Using direct download link for {candidate.info_hash}")
        return DirectStream(
            name=self.stream_name,
            title=format_title(status.filename, format_details(torrent)),
            url=outcome.value,
            binge_group=f"premiumize-{candidate.info_hash}",
        )

    async def reconcile(
        self,
        candidates: List[TorrentCandidate],
        identifier: MediaIdentifier,
        preferred_title: str = None,
    ):
        parsed = [
            ParsedCandidate(torrent, parse_magnet_uri(torrent.magnet_uri))
            for torrent in candidates
        ]
        statuses = await self.fetch_cache_statuses(parsed)

        reconciliation = Reconciliation()
        cache_candidates = []
        for candidate in parsed:
            status = statuses.get(candidate.info_hash) if candidate.info_hash else None
            if status is not None and status.is_cached and status.filename:
                cache_candidates.append((candidate, status))
            else:
                reconciliation.fallback.append(candidate)

        if cache_candidates:
            logger.log(
                "DEBRID",
                f"Resolving {len(cache_candidates)} cached torrents for {identifier.log_name()}",
            )

        streams = await asyncio.gather(
            *[
                self.resolve_direct_stream(candidate, status, identifier, preferred_title)
                for candidate, status in cache_candidates
            ]
        )
        for (candidate, _), stream in zip(cache_candidates, streams):
            if stream is None:
                reconciliation.fallback.append(candidate)
            else:
                reconciliation.direct_streams.append(stream)

        return reconciliation
