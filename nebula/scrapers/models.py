from typing import List, Optional

from pydantic import BaseModel, Field


class TorrentFile(BaseModel):
    path: str
    size: int = Field(default=0, ge=0)
    index: int = Field(ge=0)


class TorrentCandidate(BaseModel):
    title: str
    magnet_uri: Optional[str] = None
    size: Optional[int] = Field(default=None, ge=0)
    resolution: str = "Unknown"
    seeders: int = Field(default=0, ge=0)
    peers: int = Field(default=0, ge=0)
    video_codec: Optional[str] = None
    video_source: Optional[str] = None
    languages: List[str] = []
    files: Optional[List[TorrentFile]] = None


class ContentCount(BaseModel):
    label: str
    count: int = 0
