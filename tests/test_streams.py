import pytest
from pydantic import TypeAdapter

from nebula.scrapers.models import TorrentCandidate, TorrentFile
from nebula.services.models import DirectStream, StreamDescriptor, TorrentStream
from nebula.services.reconciler import ParsedCandidate
from nebula.services.streams import (assemble_streams, build_torrent_streams,
                                     deduplicate_streams, merge_trackers)
from nebula.utils.parsing import parse_media_id
from nebula.utils.torrent import parse_magnet_uri

HASH_A = "a" * 40
HASH_B = "b" * 40


def parsed(info_hash=HASH_A, title="Movie.2020.1080p", trackers=(), **kwargs):
    magnet_uri = f"magnet:?xt=urn:btih:{info_hash}"
    for tracker in trackers:
        magnet_uri += f"&tr={tracker}"
    torrent = TorrentCandidate(title=title, magnet_uri=magnet_uri, **kwargs)
    return ParsedCandidate(torrent, parse_magnet_uri(magnet_uri))


def test_merge_trackers_prefixes_and_deduplicates():
    assert merge_trackers(
        ("udp://a:80", "udp://b:80"), ["udp://b:80", "https://c/announce"]
    ) == ["tracker:udp://a:80", "tracker:udp://b:80", "tracker:https://c/announce"]


def test_torrent_stream_fields():
    identifier = parse_media_id("series", "tt0111161:1:5")
    candidate = parsed(
        title="Show.S01.1080p",
        trackers=["udp://a:80"],
        seeders=10,
        files=[
            TorrentFile(path="Show.S01E04.mkv", size=900, index=0),
            TorrentFile(path="Show.S01E05.mkv", size=800, index=1),
        ],
    )

    (stream,) = build_torrent_streams([candidate], identifier, ["udp://x:1"], "Test")

    assert stream.name == "[P2P] Test"
    assert stream.info_hash == HASH_A
    assert stream.file_index == 1
    assert stream.trackers == ["tracker:udp://a:80", "tracker:udp://x:1"]
    assert stream.title == "Show.S01.1080p\n👤 10 | 📺 Unknown"


def test_torrent_stream_omits_optional_keys():
    identifier = parse_media_id("movie", "tt0111161")

    (stream,) = build_torrent_streams([parsed()], identifier, [], "Test")

    assert stream.to_stremio() == {
        "name": "[P2P] Test",
        "title": "Movie.2020.1080p\n👤 0 | 📺 Unknown",
        "infoHash": HASH_A,
    }


def test_unparseable_magnet_is_dropped():
    torrent = TorrentCandidate(title="Broken", magnet_uri="magnet:?xt=urn:btih:nothex")
    candidate = ParsedCandidate(torrent, parse_magnet_uri(torrent.magnet_uri))

    streams = build_torrent_streams(
        [candidate, parsed()], parse_media_id("movie", "tt0111161"), [], "Test"
    )

    assert [s.info_hash for s in streams] == [HASH_A]


def test_missing_magnet_is_dropped():
    candidate = ParsedCandidate(TorrentCandidate(title="No magnet"), None)

    assert build_torrent_streams(
        [candidate], parse_media_id("movie", "tt0111161"), [], "Test"
    ) == []


def test_deduplication_keeps_first_occurrence():
    first = TorrentStream(name="n", title="first", info_hash=HASH_A)
    other = TorrentStream(name="n", title="other", info_hash=HASH_B)
    second = TorrentStream(name="n", title="second", info_hash=HASH_A)

    assert [s.title for s in deduplicate_streams([first, other, second])] == [
        "first",
        "other",
    ]


def test_assemble_puts_direct_streams_first():
    direct = DirectStream(
        name="[PM] Test", title="file.mkv", url="https://cdn/f", binge_group="premiumize-x"
    )
    torrents = [
        TorrentStream(name="n", title="t", info_hash=HASH_A),
        TorrentStream(name="n", title="t", info_hash=HASH_A),
    ]

    streams = assemble_streams([direct], torrents)

    assert streams == [direct, torrents[0]]


def test_assemble_filters_invalid_variants():
    empty_link = DirectStream(name="n", title="t", url="", binge_group="g")
    no_hash = TorrentStream(name="n", title="t", info_hash="")

    assert assemble_streams([empty_link], [no_hash]) == []


def test_stremio_shape_of_direct_stream():
    stream = DirectStream(
        name="[PM] Test", title="file.mkv", url="https://cdn/f", binge_group="premiumize-x"
    )

    assert stream.to_stremio() == {
        "name": "[PM] Test",
        "title": "file.mkv",
        "url": "https://cdn/f",
        "behaviorHints": {"bingeGroup": "premiumize-x"},
    }


@pytest.mark.parametrize(
    "payload,expected",
    [
        ({"kind": "direct", "name": "n", "title": "t", "url": "u", "binge_group": "g"}, DirectStream),
        ({"kind": "torrent", "name": "n", "title": "t", "info_hash": HASH_A}, TorrentStream),
    ],
)
def test_stream_descriptor_is_discriminated(payload, expected):
    assert isinstance(TypeAdapter(StreamDescriptor).validate_python(payload), expected)
