from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class DirectStream(BaseModel):
    kind: Literal["direct"] = "direct"
    name: str
    title: str
    url: str
    binge_group: str

    def is_valid(self):
        return bool(self.url)

    def to_stremio(self):
        return {
            "name": self.name,
            "title": self.title,
            "url": self.url,
            "behaviorHints": {"bingeGroup": self.binge_group},
        }


class TorrentStream(BaseModel):
    kind: Literal["torrent"] = "torrent"
    name: str
    title: str
    info_hash: str
    file_index: Optional[int] = None
    trackers: Optional[List[str]] = None

    def is_valid(self):
        return bool(self.info_hash) and bool(self.title)

    def to_stremio(self):
        stream = {"name": self.name, "title": self.title, "infoHash": self.info_hash}
        if self.file_index is not None:
            stream["fileIdx"] = self.file_index
        if self.trackers:
            stream["sources"] = self.trackers
        return stream


StreamDescriptor = Annotated[
    Union[DirectStream, TorrentStream], Field(discriminator="kind")
]
