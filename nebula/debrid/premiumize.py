import asyncio
import re

import aiohttp

from nebula.core.exceptions import DebridError
from nebula.core.logger import logger
from nebula.debrid.base import CacheChecker, CacheStatus, LinkResolver
from nebula.utils.torrent import build_episode_patterns

episode_hint_pattern = re.compile(r"S(\d{1,3})E(\d{1,4})", re.IGNORECASE)


def parse_cache_check(data: dict, info_hashes: list):
    if (
        not isinstance(data, dict)
        or data.get("status") != "success"
        or not isinstance(data.get("response"), list)
        or len(data["response"]) != len(info_hashes)
    ):
        raise DebridError(
            "Premiumize", f"Unexpected cache check response: {data}"
        )

    filenames = data.get("filename")
    if not isinstance(filenames, list):
        filenames = []

    results = {}
    for i, info_hash in enumerate(info_hashes):
        filename = filenames[i] if i < len(filenames) and filenames[i] else None
        results[info_hash] = CacheStatus(
            is_cached=data["response"][i] is True, filename=filename
        )

    return results


def select_direct_link(content: list, search_hint: str = None):
    candidates = [
        item for item in content if isinstance(item, dict) and item.get("stream_link")
    ]
    if not candidates:
        return None

    if search_hint:
        match = episode_hint_pattern.search(search_hint)
        if match:
            patterns = build_episode_patterns(int(match.group(1)), int(match.group(2)))
            episode_files = [
                item
                for item in candidates
                if item.get("path")
                and any(pattern.search(item["path"]) for pattern in patterns)
            ]
            if episode_files:
                best = max(episode_files, key=lambda item: item.get("size") or 0)
                logger.log("DEBRID", f"Premiumize: Found episode match {best['path']}")
                return best["stream_link"]

    best = max(candidates, key=lambda item: item.get("size") or 0)
    logger.log(
        "DEBRID", f"Premiumize: Using largest file with a stream link {best.get('path')}"
    )
    return best["stream_link"]


class Premiumize(CacheChecker, LinkResolver):
    def __init__(
        self, session: aiohttp.ClientSession, debrid_api_key: str, timeout: int = 15
    ):
        self.session = session
        self.api_url = "https://www.premiumize.me/api"
        self.debrid_api_key = debrid_api_key
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    async def check_cache(self, info_hashes: list):
        if len(info_hashes) == 0:
            return {}

        logger.log(
            "DEBRID", f"Premiumize: Bulk checking cache for {len(info_hashes)} hashes"
        )

        params = [("apikey", self.debrid_api_key)]
        params.extend(("items[]", info_hash) for info_hash in info_hashes)

        try:
            async with self.session.get(
                f"{self.api_url}/cache/check", params=params, timeout=self.timeout
            ) as response:
                if response.status != 200:
                    raise DebridError(
                        "Premiumize",
                        f"Cache check failed with status {response.status}: {await response.text()}",
                    )

                data = await response.json(content_type=None)
        except asyncio.TimeoutError:
            raise DebridError("Premiumize", "Cache check timed out")

        results = parse_cache_check(data, info_hashes)
        cached = sum(1 for status in results.values() if status.is_cached)
        logger.log(
            "DEBRID", f"Premiumize: {cached}/{len(info_hashes)} hashes cached"
        )
        return results

    async def get_direct_link(self, magnet_uri: str, search_hint: str = None):
        try:
            async with self.session.post(
                f"{self.api_url}/transfer/directdl",
                params={"apikey": self.debrid_api_key},
                data={"src": magnet_uri},
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            ) as response:
                data = await response.json(content_type=None)
        except asyncio.TimeoutError:
            raise DebridError("Premiumize", "Direct download request timed out")

        if (
            not isinstance(data, dict)
            or data.get("status") != "success"
            or not isinstance(data.get("content"), list)
            or len(data["content"]) == 0
        ):
            logger.log(
                "DEBRID",
                f"Premiumize: No direct download content (status: {data.get('status') if isinstance(data, dict) else None})",
            )
            return None

        return select_direct_link(data["content"], search_hint)
