import asyncio

import orjson
import pytest

from nebula.core.exceptions import SearchBackendError
from nebula.scrapers.bitmagnet import (BitMagnet, parse_bitmagnet_items,
                                       parse_content_counts)
from nebula.utils.parsing import MediaKind

HASH = "0123456789abcdef0123456789abcdef01234567"


def search_payload(*items):
    return {"data": {"torrentContent": {"search": {"items": list(items)}}}}


def item(title="Movie.2020.1080p", seeders=12, **overrides):
    data = {
        "title": title,
        "torrent": {
            "magnetUri": f"magnet:?xt=urn:btih:{HASH}",
            "size": 4096,
            "seeders": seeders,
            "leechers": 3,
            "files": [{"path": "Movie.2020.1080p.mkv", "size": 4000, "index": 0}],
        },
        "videoResolution": "V1080p",
        "videoCodec": "x264",
        "videoSource": "BluRay",
        "languages": [{"name": "English"}, {"name": "German"}],
    }
    data.update(overrides)
    return data


def test_items_are_mapped_to_candidates():
    (candidate,) = parse_bitmagnet_items(search_payload(item()))

    assert candidate.title == "Movie.2020.1080p"
    assert candidate.resolution == "1080p"
    assert candidate.seeders == 12
    assert candidate.peers == 3
    assert candidate.size == 4096
    assert candidate.languages == ["English", "German"]
    assert candidate.files[0].path == "Movie.2020.1080p.mkv"


def test_unseeded_and_malformed_items_are_skipped():
    payload = search_payload(
        item(title="Dead", seeders=0),
        {"torrent": {"seeders": 4}},
        item(title="Alive", videoResolution=None, files=None),
    )

    candidates = parse_bitmagnet_items(payload)

    assert [c.title for c in candidates] == ["Alive"]
    assert candidates[0].resolution == "Unknown"


def test_missing_search_node():
    assert parse_bitmagnet_items({"data": None}) == []


def test_content_counts():
    payload = {
        "data": {
            "torrentContent": {
                "search": {
                    "aggregations": {
                        "contentType": [
                            {"value": "movie", "label": "Movie", "count": 120},
                            {"value": "tv_show", "label": None, "count": 40},
                            {"value": None, "label": "Unknown", "count": 3},
                        ]
                    }
                }
            }
        }
    }

    counts = parse_content_counts(payload)

    assert set(counts) == {"movie", "tv_show"}
    assert counts["movie"].count == 120
    assert counts["tv_show"].label == "Unknown Label"


@pytest.mark.asyncio
async def test_search_request(fake_session, fake_response):
    session = fake_session(fake_response(payload=search_payload(item())))
    bitmagnet = BitMagnet(session, "http://bitmagnet:3333/", search_limit=50, sort_field="size")

    candidates = await bitmagnet.search("X 2020 S01 E05", MediaKind.SERIES)

    assert len(candidates) == 1
    method, url, kwargs = session.requests[0]
    assert (method, url) == ("POST", "http://bitmagnet:3333/graphql")
    variables = orjson.loads(kwargs["data"])["variables"]["input"]
    assert variables["queryString"] == "X 2020 S01 E05"
    assert variables["limit"] == 50
    assert variables["offset"] == 0
    assert variables["cached"] is True
    assert variables["facets"] == {"contentType": {"filter": ["tv_show"]}}
    assert variables["orderBy"] == [{"field": "size", "descending": True}]


def test_invalid_sort_field_falls_back_to_seeders(fake_session):
    bitmagnet = BitMagnet(fake_session(), "http://bitmagnet:3333", sort_field="popularity")
    assert bitmagnet.sort_field == "seeders"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        {"status": 500, "text": "internal error"},
        {"payload": {"errors": [{"message": "bad query"}]}},
        {"payload": {"errors": ["boom"]}},
        {"payload": {"errors": "boom"}},
        {"payload": {"errors": [None]}},
        {"payload": ["not", "a", "dict"]},
        {"text": "<html>not json</html>"},
    ],
)
async def test_search_failures_raise(fake_session, fake_response, response):
    bitmagnet = BitMagnet(fake_session(fake_response(**response)), "http://bitmagnet:3333")

    with pytest.raises(SearchBackendError):
        await bitmagnet.search("tt0111161", MediaKind.MOVIE)


@pytest.mark.asyncio
async def test_search_timeout_raises(fake_session):
    bitmagnet = BitMagnet(fake_session(asyncio.TimeoutError()), "http://bitmagnet:3333")

    with pytest.raises(SearchBackendError):
        await bitmagnet.search("tt0111161", MediaKind.MOVIE)
