from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from nebula.core.exceptions import MalformedIdentifier, UnsupportedKind

VIDEO_EXTENSIONS = (".mkv", ".mp4", ".avi", ".mov", ".wmv", ".flv")


class MediaKind(str, Enum):
    MOVIE = "movie"
    SERIES = "series"


class MediaIdentifier(BaseModel):
    model_config = ConfigDict(frozen=True)

    media_id: str
    season: Optional[int] = None
    episode: Optional[int] = None
    kind: MediaKind

    @property
    def is_episode(self):
        return self.season is not None and self.episode is not None

    def log_name(self):
        return f"{self.kind.value} {self.media_id} (S{self.season if self.season is not None else '-'}E{self.episode if self.episode is not None else '-'})"


def is_video(title: str):
    return title.lower().endswith(VIDEO_EXTENSIONS)


def _parse_episode_number(value: str, media_id: str):
    if not (value.isascii() and value.isdigit()):
        raise MalformedIdentifier(media_id, f"{value!r} is not a non-negative integer")
    return int(value)


def parse_media_id(media_type: str, media_id: str):
    try:
        kind = MediaKind(media_type)
    except ValueError:
        raise UnsupportedKind(media_type)

    if not media_id.startswith("tt"):
        raise MalformedIdentifier(media_id, "id must start with 'tt'")

    if kind == MediaKind.SERIES and ":" in media_id:
        info = media_id.split(":")
        if len(info) != 3:
            raise MalformedIdentifier(
                media_id, "expected <id>:<season>:<episode>"
            )

        return MediaIdentifier(
            media_id=info[0],
            season=_parse_episode_number(info[1], media_id),
            episode=_parse_episode_number(info[2], media_id),
            kind=kind,
        )

    return MediaIdentifier(media_id=media_id, kind=kind)
