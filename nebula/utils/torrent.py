import re
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import parse_qsl

from nebula.core.logger import logger
from nebula.utils.parsing import is_video

MAGNET_PREFIX = "magnet:?"
info_hash_pattern = re.compile(r"urn:btih:([a-fA-F0-9]{40})")

# a match must be delimited by a separator (or path separator) or the string edges
SEPARATOR_BEFORE = r"(?<![^\s._\-/\\])"
SEPARATOR_AFTER = r"(?![^\s._\-/\\])"


@dataclass(frozen=True)
class ParsedMagnet:
    info_hash: str
    trackers: tuple = field(default_factory=tuple)


def parse_magnet_uri(magnet_uri: Optional[str]):
    if not magnet_uri or not magnet_uri.startswith(MAGNET_PREFIX):
        return None

    params = parse_qsl(magnet_uri[len(MAGNET_PREFIX) :], keep_blank_values=True)

    info_hash = None
    trackers = []
    for key, value in params:
        if key == "xt" and info_hash is None:
            match = info_hash_pattern.fullmatch(value)
            if match:
                info_hash = match.group(1).lower()
        elif key == "tr" and value and value not in trackers:
            trackers.append(value)

    if info_hash is None:
        logger.debug(f"Could not extract info hash from magnet URI: {magnet_uri}")
        return None

    return ParsedMagnet(info_hash=info_hash, trackers=tuple(trackers))


def build_episode_patterns(season: int, episode: int):
    variants = dict.fromkeys(
        (
            f"S{season:02d}E{episode:02d}",
            f"S{season}E{episode:02d}",
            f"S{season:02d}E{episode}",
            f"S{season}E{episode}",
            f"{season}x{episode:02d}",
            f"{season}x{episode}",
        )
    )
    return [
        re.compile(f"{SEPARATOR_BEFORE}{variant}{SEPARATOR_AFTER}", re.IGNORECASE)
        for variant in variants
    ]


def find_best_file_index(files, season: Optional[int], episode: Optional[int]):
    if not files:
        return None

    patterns = None
    if season is not None and episode is not None:
        patterns = build_episode_patterns(season, episode)

    largest_video = None
    episode_match = None
    for file in files:
        if not is_video(file.path):
            continue

        if patterns and any(pattern.search(file.path) for pattern in patterns):
            if episode_match is None or file.size > episode_match.size:
                episode_match = file

        if largest_video is None or file.size > largest_video.size:
            largest_video = file

    if episode_match is not None:
        logger.debug(
            f"Found specific file for S{season}E{episode}: index {episode_match.index} ({episode_match.path})"
        )
        return episode_match.index

    if largest_video is not None:
        if patterns:
            logger.debug(
                f"No file matched S{season}E{episode}, falling back to largest video file"
            )
        return largest_video.index

    if len(files) == 1:
        return files[0].index

    return None
