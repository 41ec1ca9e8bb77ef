from dataclasses import dataclass, field
from typing import List, Optional

from nebula.core.logger import logger
from nebula.core.result import attempt
from nebula.metadata.base import MediaMetadata, MetadataLookup
from nebula.scrapers.base import SearchBackend
from nebula.scrapers.models import TorrentCandidate
from nebula.utils.parsing import MediaIdentifier


@dataclass
class SearchOutcome:
    candidates: List[TorrentCandidate] = field(default_factory=list)
    title: Optional[str] = None
    query: Optional[str] = None


def build_search_query(identifier: MediaIdentifier, metadata: MediaMetadata = None):
    if metadata is None:
        return identifier.media_id

    if identifier.is_episode:
        return f"{metadata.search_title} S{identifier.season:02d} E{identifier.episode:02d}"

    return metadata.search_title


def build_season_query(identifier: MediaIdentifier, metadata: MediaMetadata):
    return f"{metadata.search_title} S{identifier.season:02d}"


def build_search_hint(identifier: MediaIdentifier, title: str):
    if identifier.is_episode:
        return f"{title} S{identifier.season:02d}E{identifier.episode:02d}"
    return title


async def lookup_metadata(
    identifier: MediaIdentifier, metadata_lookup: Optional[MetadataLookup]
):
    if metadata_lookup is None:
        logger.warning(
            f"No metadata lookup configured, searching {identifier.media_id} by id"
        )
        return None

    outcome = await attempt(
        metadata_lookup.get_metadata(identifier.media_id, identifier.kind),
        f"Metadata lookup for {identifier.media_id}",
    )
    if not outcome.ok or outcome.value is None:
        logger.warning(
            f"Could not fetch metadata for {identifier.media_id}, searching by id"
        )
        return None

    return outcome.value


async def search_torrents(
    identifier: MediaIdentifier,
    search_backend: SearchBackend,
    metadata_lookup: Optional[MetadataLookup] = None,
):
    metadata = await lookup_metadata(identifier, metadata_lookup)

    query = build_search_query(identifier, metadata)
    candidates = await search_backend.search(query, identifier.kind)

    if not candidates and identifier.season is not None and metadata is not None:
        query = build_season_query(identifier, metadata)
        logger.log(
            "SCRAPER",
            f"Episode query yielded no results, falling back to season search: {query!r}",
        )
        candidates = await search_backend.search(query, identifier.kind)

    if not candidates:
        logger.log("SCRAPER", f"No torrents found for {identifier.log_name()}")

    return SearchOutcome(
        candidates=candidates,
        title=metadata.title if metadata is not None else None,
        query=query,
    )
