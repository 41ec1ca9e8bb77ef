import asyncio
from abc import ABC, abstractmethod
from typing import List, Optional

import aiohttp

from nebula.core.logger import logger
from nebula.core.models import settings
from nebula.core.result import attempt

TRACKER_PREFIXES = ("udp://", "http://", "https://")


class TrackerSource(ABC):
    @abstractmethod
    async def get_trackers(self) -> List[str]:
        """Supplementary announce URLs added to every torrent stream."""


def parse_tracker_list(text: str):
    trackers = []
    for line in text.split("\n"):
        tracker = line.strip()
        if tracker.startswith(TRACKER_PREFIXES) and tracker not in trackers:
            trackers.append(tracker)

    return trackers


class RemoteTrackerList(TrackerSource):
    """
    Process-wide tracker list, downloaded once and kept for the process lifetime.

    Concurrent callers during a miss all await the same in-flight download.
    A failed or empty download is not memoised, the next caller retries.
    """

    def __init__(self, url: str = None, timeout: int = None):
        self.url = url or settings.TRACKERS_URL
        self.timeout = aiohttp.ClientTimeout(total=timeout or settings.TRACKERS_TIMEOUT)
        self._trackers: Optional[List[str]] = None
        self._pending: Optional[asyncio.Task] = None

    async def download(self):
        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.get(self.url) as response:
                response.raise_for_status()
                return parse_tracker_list(await response.text())

    async def _fetch(self):
        logger.log("TRACKERS", f"Downloading tracker list from {self.url}")
        outcome = await attempt(self.download(), "Tracker list download")

        if not outcome.ok:
            return []

        if not outcome.value:
            logger.warning("Tracker list download returned no valid trackers")
            return []

        if asyncio.current_task() is not self._pending:
            logger.log("TRACKERS", "Tracker list was reset during download, not caching it")
            return outcome.value

        self._trackers = outcome.value
        logger.log("TRACKERS", f"Cached {len(self._trackers)} trackers")
        return self._trackers

    def _clear_pending(self, task: asyncio.Task):
        if self._pending is task:
            self._pending = None

    async def get_trackers(self):
        if self._trackers is not None:
            return list(self._trackers)

        if self._pending is None:
            self._pending = asyncio.create_task(self._fetch())
            self._pending.add_done_callback(self._clear_pending)

        return list(await asyncio.shield(self._pending))

    async def initialize(self):
        await self.get_trackers()

    def reset(self):
        self._trackers = None
        self._pending = None

    @property
    def is_loaded(self):
        return self._trackers is not None


tracker_list = RemoteTrackerList()
