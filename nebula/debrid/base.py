from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from pydantic import BaseModel


class CacheStatus(BaseModel):
    is_cached: bool = False
    filename: Optional[str] = None


class CacheChecker(ABC):
    @abstractmethod
    async def check_cache(self, info_hashes: List[str]) -> Dict[str, CacheStatus]:
        """Bulk cache lookup, one call for every hash."""


class LinkResolver(ABC):
    @abstractmethod
    async def get_direct_link(
        self, magnet_uri: str, search_hint: Optional[str] = None
    ) -> Optional[str]:
        """Direct download link of the best file in a cached torrent, if any."""
