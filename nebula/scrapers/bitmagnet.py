import asyncio

import aiohttp
import orjson

from nebula.core.exceptions import SearchBackendError
from nebula.core.logger import logger
from nebula.core.models import BITMAGNET_SORT_FIELDS
from nebula.scrapers.base import SearchBackend
from nebula.scrapers.models import ContentCount, TorrentCandidate, TorrentFile
from nebula.utils.parsing import MediaKind

CONTENT_TYPES = {MediaKind.MOVIE: "movie", MediaKind.SERIES: "tv_show"}

SEARCH_QUERY = """
query TorrentContentSearch($input: TorrentContentSearchQueryInput!) {
    torrentContent {
        search(input: $input) {
            items {
                title
                torrent {
                    magnetUri
                    size
                    seeders
                    leechers
                    files {
                        path
                        size
                        index
                    }
                }
                videoResolution
                videoCodec
                videoSource
                languages {
                    name
                }
            }
        }
    }
}
"""

CONTENT_COUNTS_QUERY = """
query GetContentCounts($input: TorrentContentSearchQueryInput!) {
    torrentContent {
        search(input: $input) {
            aggregations {
                contentType {
                    value
                    label
                    count
                }
            }
        }
    }
}
"""


def _search_node(data: dict):
    return ((data.get("data") or {}).get("torrentContent") or {}).get("search") or {}


def parse_bitmagnet_items(data: dict):
    torrents = []
    for item in _search_node(data).get("items") or []:
        try:
            torrent = item.get("torrent") or {}
            seeders = torrent.get("seeders") or 0
            if seeders <= 0:
                continue

            resolution = item.get("videoResolution")
            if resolution and resolution.startswith("V"):
                resolution = resolution[1:]

            files = torrent.get("files")
            torrents.append(
                TorrentCandidate(
                    title=item["title"],
                    magnet_uri=torrent.get("magnetUri"),
                    size=torrent.get("size"),
                    resolution=resolution or "Unknown",
                    seeders=seeders,
                    peers=torrent.get("leechers") or 0,
                    video_codec=item.get("videoCodec"),
                    video_source=item.get("videoSource"),
                    languages=[
                        language["name"]
                        for language in item.get("languages") or []
                        if language.get("name")
                    ],
                    files=(
                        [
                            TorrentFile(
                                path=file["path"],
                                size=file.get("size") or 0,
                                index=file["index"],
                            )
                            for file in files
                        ]
                        if files is not None
                        else None
                    ),
                )
            )
        except Exception as e:
            logger.warning(f"Error parsing torrent item from Bitmagnet: {e}")
            continue

    return torrents


def parse_content_counts(data: dict):
    counts = {}
    aggregations = _search_node(data).get("aggregations") or {}
    for aggregation in aggregations.get("contentType") or []:
        value = aggregation.get("value")
        if not value:
            continue

        counts[value] = ContentCount(
            label=aggregation.get("label") or "Unknown Label",
            count=aggregation.get("count") or 0,
        )

    return counts


class BitMagnet(SearchBackend):
    def __init__(
        self,
        session: aiohttp.ClientSession,
        url: str,
        timeout: int = 30,
        search_limit: int = 30,
        sort_field: str = "seeders",
        sort_descending: bool = True,
    ):
        self.session = session
        self.url = url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.search_limit = search_limit
        self.sort_field = sort_field if sort_field in BITMAGNET_SORT_FIELDS else "seeders"
        self.sort_descending = sort_descending

    async def _graphql(self, query: str, variables: dict):
        try:
            async with self.session.post(
                f"{self.url}/graphql",
                data=orjson.dumps({"query": query, "variables": variables}),
                headers={
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
                timeout=self.timeout,
            ) as response:
                if response.status != 200:
                    body = await response.text()
                    raise SearchBackendError(
                        f"Bitmagnet GraphQL API responded with status {response.status}: {body}"
                    )

                data = orjson.loads(await response.read())
        except asyncio.TimeoutError:
            raise SearchBackendError("Bitmagnet GraphQL request timed out")
        except (aiohttp.ClientError, orjson.JSONDecodeError) as e:
            raise SearchBackendError(f"Failed to query Bitmagnet GraphQL API: {e}")

        if not isinstance(data, dict):
            raise SearchBackendError("Bitmagnet GraphQL API returned a malformed body")

        errors = data.get("errors")
        if errors:
            if not isinstance(errors, list):
                errors = [errors]
            messages = [
                str(error.get("message") if isinstance(error, dict) else error)
                for error in errors
            ]
            raise SearchBackendError(
                f"Bitmagnet GraphQL query errors: {', '.join(messages)}"
            )

        return data

    async def search(self, query: str, kind: MediaKind):
        logger.log(
            "SCRAPER",
            f"🔍 Searching Bitmagnet for {kind.value} with query: {query!r} (sort: {self.sort_field}, descending: {self.sort_descending}, limit: {self.search_limit})",
        )

        variables = {
            "input": {
                "queryString": query,
                "limit": self.search_limit,
                "offset": 0,
                "cached": True,
                "facets": {"contentType": {"filter": [CONTENT_TYPES[kind]]}},
                "orderBy": [
                    {"field": self.sort_field, "descending": self.sort_descending}
                ],
            }
        }

        data = await self._graphql(SEARCH_QUERY, variables)
        try:
            torrents = parse_bitmagnet_items(data)
        except (AttributeError, TypeError) as e:
            raise SearchBackendError(f"Malformed Bitmagnet search response: {e}")

        logger.log("SCRAPER", f"Found {len(torrents)} torrents for query: {query!r}")
        return torrents

    async def get_content_counts(self):
        variables = {
            "input": {
                "limit": 0,
                "facets": {"contentType": {"aggregate": True}},
            }
        }

        data = await self._graphql(CONTENT_COUNTS_QUERY, variables)
        return parse_content_counts(data)
