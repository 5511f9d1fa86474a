from typing import Any, Dict, Optional

import httpx
from injector import inject
from structlog.stdlib import BoundLogger

from core.settings import Settings
from domain.exceptions import PosterLookupError
from domain.interfaces import IMovieApiService

POSTER_BASE_URL = "https://image.tmdb.org/t/p/w500"


class TMDBApiService(IMovieApiService):
    @inject
    def __init__(self, settings: Settings, logger: BoundLogger):
        self.api_key = settings.tmdb_api_key
        self.base_url = "https://api.themoviedb.org/3"
        self.timeout = settings.request_timeout_seconds
        self.transport: Optional[httpx.AsyncBaseTransport] = None
        self.logger = logger

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={"accept": "application/json", "Authorization": f"Bearer {self.api_key}"},
            timeout=self.timeout,
            transport=self.transport,
        )

    async def resolve_poster(self, title: str) -> Optional[str]:
        """
        Look up a poster URL for a movie title.

        The first search result is taken without disambiguating by year or genre.
        Any lookup failure degrades to None.
        """
        try:
            match = await self._search_first_result(title)
        except PosterLookupError as e:
            self.logger.warning("Poster lookup failed", title=title, error=str(e))
            return None
        except Exception:
            self.logger.exception("Unexpected poster lookup error", title=title)
            return None

        if not match:
            self.logger.info("No catalog match for title", title=title)
            return None

        poster_path = match.get("poster_path")
        if not poster_path:
            self.logger.info("Catalog match has no poster", title=title, tmdb_id=match.get("id"))
            return None
        return f"{POSTER_BASE_URL}/{str(poster_path).lstrip('/')}"

    async def _search_first_result(self, title: str) -> Optional[Dict[str, Any]]:
        params = {"query": title, "include_adult": "false", "language": "en-US", "page": 1}
        try:
            async with self._client() as client:
                response = await client.get("/search/movie", params=params)
                response.raise_for_status()
                results = response.json().get("results", [])
        except httpx.HTTPStatusError as e:
            raise PosterLookupError(f"TMDB search returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise PosterLookupError(f"TMDB search request failed: {e}") from e
        except (ValueError, AttributeError) as e:
            raise PosterLookupError(f"TMDB search returned a malformed body: {e}") from e

        if not isinstance(results, list) or not results or not isinstance(results[0], dict):
            return None
        return results[0]
