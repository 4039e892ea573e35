"""Named queries: list, by id, by name, films, and the starship → film fan-out.

Each query builds its key, resolves it through the FetchThroughResolver and
normalizes the result, carrying the degraded tag onto every entity.
"""

import asyncio
import logging

from starcache.schemas import Film, Starship, StarshipConnection, StarshipEdge
from starcache.services.normalizer import first_result, normalize_film, normalize_starship
from starcache.services.resolver import (
    FetchThroughResolver,
    film_url,
    films_url,
    starship_search_url,
    starship_url,
    starships_page_url,
)

logger = logging.getLogger(__name__)


class SwapiQueries:
    """The query surface exposed to the HTTP layer."""

    def __init__(self, resolver: FetchThroughResolver, base_url: str):
        self.resolver = resolver
        self.base_url = base_url.rstrip("/")

    async def all_starships(self, page: int = 1) -> StarshipConnection:
        result = await self.resolver.resolve(starships_page_url(self.base_url, page))
        payload = result.payload if isinstance(result.payload, dict) else {}

        edges = []
        for record in payload.get("results") or []:
            node = normalize_starship(record, result.degraded)
            if node is not None:
                edges.append(StarshipEdge(node=node))

        count = payload.get("count")
        return StarshipConnection(
            edges=edges,
            count=count if isinstance(count, int) and count else len(edges),
            degraded=result.degraded,
        )

    async def starship_by_id(self, starship_id: str | int) -> Starship | None:
        result = await self.resolver.resolve(starship_url(self.base_url, starship_id))
        return normalize_starship(first_result(result.payload), result.degraded)

    async def starship_by_name(self, name: str) -> Starship | None:
        """None when the upstream confirms there is no such starship."""
        result = await self.resolver.resolve(starship_search_url(self.base_url, name))
        record = first_result(result.payload)
        if record is None:
            logger.info("Starship not found | name=%s", name)
            return None
        return normalize_starship(record, result.degraded)

    async def film_by_id(self, film_id: str | int) -> Film | None:
        result = await self.resolver.resolve(film_url(self.base_url, film_id))
        return normalize_film(first_result(result.payload), result.degraded)

    async def all_films(self) -> list[Film]:
        result = await self.resolver.resolve(films_url(self.base_url))
        payload = result.payload if isinstance(result.payload, dict) else {}
        films = []
        for record in payload.get("results") or []:
            film = normalize_film(record, result.degraded)
            if film is not None:
                films.append(film)
        return films

    async def film_names(self, starship: Starship) -> list[Film]:
        """Resolve a starship's film references independently; broken ones are dropped."""
        if not starship.films:
            return []

        results = await asyncio.gather(
            *(self._film_reference(url) for url in starship.films),
            return_exceptions=True,
        )

        films = []
        for url, result in zip(starship.films, results):
            if isinstance(result, BaseException):
                logger.warning("Film fetch failed | url=%s | %s", url, str(result)[:200])
                continue
            if result is not None:
                films.append(result)
        return films

    async def _film_reference(self, url: str) -> Film | None:
        result = await self.resolver.resolve(url)
        return normalize_film(first_result(result.payload), result.degraded)
