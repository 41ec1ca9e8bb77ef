from typing import List, Optional

from nebula.core.logger import logger
from nebula.core.models import settings
from nebula.services.models import DirectStream, StreamDescriptor, TorrentStream
from nebula.services.reconciler import ParsedCandidate
from nebula.utils.formatting import format_details, format_title
from nebula.utils.parsing import MediaIdentifier
from nebula.utils.torrent import find_best_file_index


def merge_trackers(magnet_trackers, extra_trackers):
    trackers = [f"tracker:{tracker}" for tracker in magnet_trackers]
    trackers.extend(f"tracker:{tracker}" for tracker in extra_trackers)
    return list(dict.fromkeys(trackers))


def build_torrent_stream(
    candidate: ParsedCandidate,
    identifier: MediaIdentifier,
    extra_trackers: List[str],
    stream_name: str,
) -> Optional[TorrentStream]:
    torrent = candidate.torrent

    if torrent.magnet_uri and candidate.magnet is None:
        logger.warning(
            f"Skipping torrent with unparseable magnet: {torrent.title or torrent.magnet_uri}"
        )
        return None

    info_hash = candidate.info_hash
    heading = torrent.title or info_hash
    if not info_hash or not heading:
        logger.debug(f"Skipping torrent without info hash: {torrent.title}")
        return None

    file_index = find_best_file_index(
        torrent.files, identifier.season, identifier.episode
    )
    if file_index is None and identifier.is_episode and torrent.files:
        logger.warning(
            f"Could not find a file for S{identifier.season:02d}E{identifier.episode:02d} in {info_hash}, fileIdx omitted"
        )

    trackers = merge_trackers(
        candidate.magnet.trackers if candidate.magnet is not None else (),
        extra_trackers,
    )

    return TorrentStream(
        name=stream_name,
        title=format_title(heading, format_details(torrent)),
        info_hash=info_hash,
        file_index=file_index,
        trackers=trackers or None,
    )


def build_torrent_streams(
    fallback: List[ParsedCandidate],
    identifier: MediaIdentifier,
    extra_trackers: List[str],
    addon_name: str = None,
):
    stream_name = f"[P2P] {addon_name or settings.ADDON_NAME}"

    streams = []
    for candidate in fallback:
        stream = build_torrent_stream(candidate, identifier, extra_trackers, stream_name)
        if stream is not None:
            streams.append(stream)

    return streams


def deduplicate_streams(streams: List[TorrentStream]):
    unique = {}
    for stream in streams:
        if stream.info_hash not in unique:
            unique[stream.info_hash] = stream

    return list(unique.values())


def assemble_streams(
    direct_streams: List[DirectStream], torrent_streams: List[TorrentStream]
) -> List[StreamDescriptor]:
    streams = []
    for stream in [*direct_streams, *deduplicate_streams(torrent_streams)]:
        if isinstance(stream, (DirectStream, TorrentStream)) and stream.is_valid():
            streams.append(stream)
        else:
            logger.warning(f"Filtering out invalid stream: {stream}")

    return streams
