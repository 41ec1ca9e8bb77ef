from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel

from nebula.utils.parsing import MediaKind


class MediaMetadata(BaseModel):
    title: str
    year: Optional[int] = None

    @property
    def search_title(self):
        return f"{self.title} {self.year}" if self.year else self.title


class MetadataLookup(ABC):
    @abstractmethod
    async def get_metadata(
        self, media_id: str, kind: MediaKind
    ) -> Optional[MediaMetadata]:
        """Return the title and year of a tt id, None when nothing matches."""
