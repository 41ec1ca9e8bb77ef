import aiohttp

from nebula.core.exceptions import MetadataError
from nebula.core.logger import logger
from nebula.metadata.base import MediaMetadata, MetadataLookup
from nebula.utils.parsing import MediaKind


def _parse_year(date: str):
    if not date or len(date) < 4 or not date[:4].isdigit():
        return None
    return int(date[:4])


class TMDBApi(MetadataLookup):
    def __init__(self, session: aiohttp.ClientSession, api_key: str, timeout: int = 10):
        self.session = session
        self.api_key = api_key
        self.base_url = "https://api.themoviedb.org/3"
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    async def get_metadata(self, media_id: str, kind: MediaKind):
        url = f"{self.base_url}/find/{media_id}"
        params = {"api_key": self.api_key, "external_source": "imdb_id"}

        async with self.session.get(url, params=params, timeout=self.timeout) as response:
            if response.status != 200:
                text = await response.text()
                raise MetadataError(
                    f"TMDB responded with status {response.status} for {media_id}: {text}"
                )

            data = await response.json()

        results = data.get("movie_results" if kind == MediaKind.MOVIE else "tv_results")
        if not results:
            logger.warning(f"TMDB: No {kind.value} results found for {media_id}")
            return None

        first_result = results[0]
        title = first_result.get("title") or first_result.get("name")
        if not title:
            return None

        year = _parse_year(
            first_result.get("release_date") or first_result.get("first_air_date")
        )
        logger.log("SCRAPER", f"TMDB: {media_id} is {title} ({year})")
        return MediaMetadata(title=title, year=year)
