from abc import ABC, abstractmethod
from typing import List

from nebula.scrapers.models import TorrentCandidate
from nebula.utils.parsing import MediaKind


class SearchBackend(ABC):
    @abstractmethod
    async def search(self, query: str, kind: MediaKind) -> List[TorrentCandidate]:
        """Return candidates with at least one seeder, or raise SearchBackendError."""
