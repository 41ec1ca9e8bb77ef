import pytest

from nebula.core.exceptions import MetadataError
from nebula.metadata.tmdb import TMDBApi
from nebula.utils.parsing import MediaKind


@pytest.mark.asyncio
async def test_movie_lookup(fake_session, fake_response):
    session = fake_session(
        fake_response(
            payload={
                "movie_results": [
                    {"title": "The Shawshank Redemption", "release_date": "1994-09-23"}
                ],
                "tv_results": [],
            }
        )
    )

    metadata = await TMDBApi(session, "key").get_metadata("tt0111161", MediaKind.MOVIE)

    method, url, kwargs = session.requests[0]
    assert url == "https://api.themoviedb.org/3/find/tt0111161"
    assert kwargs["params"]["external_source"] == "imdb_id"
    assert metadata.title == "The Shawshank Redemption"
    assert metadata.year == 1994
    assert metadata.search_title == "The Shawshank Redemption 1994"


@pytest.mark.asyncio
async def test_series_lookup_without_air_date(fake_session, fake_response):
    session = fake_session(
        fake_response(payload={"movie_results": [], "tv_results": [{"name": "X", "first_air_date": ""}]})
    )

    metadata = await TMDBApi(session, "key").get_metadata("tt0903747", MediaKind.SERIES)

    assert metadata.title == "X"
    assert metadata.year is None
    assert metadata.search_title == "X"


@pytest.mark.asyncio
async def test_no_results(fake_session, fake_response):
    session = fake_session(fake_response(payload={"movie_results": [], "tv_results": []}))
    assert await TMDBApi(session, "key").get_metadata("tt0000001", MediaKind.MOVIE) is None


@pytest.mark.asyncio
async def test_bad_status_raises(fake_session, fake_response):
    session = fake_session(fake_response(status=401, text="Invalid API key"))

    with pytest.raises(MetadataError):
        await TMDBApi(session, "bad").get_metadata("tt0111161", MediaKind.MOVIE)
