"""starcache — FastAPI application entry point.

Exposes the SWAPI starship/film queries over HTTP, backed by the
fetch-through cache and the static fallback snapshot.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from starcache import __version__
from starcache.config import settings
from starcache.errors import FallbackExhausted
from starcache.integrations.swapi import SwapiClient
from starcache.schemas import Film, HealthResponse, Starship, StarshipConnection
from starcache.services.cache import ResolutionCache
from starcache.services.queries import SwapiQueries
from starcache.services.resolver import FetchThroughResolver
from starcache.services.snapshot import load_snapshot

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
)
logger = logging.getLogger("starcache")


def build_queries() -> SwapiQueries:
    """Wire cache, snapshot and transport into one query context."""
    store = load_snapshot(settings.fallback_path, base_urls=[settings.base_url])
    cache = ResolutionCache(
        max_entries=settings.cache_max_entries,
        ttl=settings.cache_ttl_seconds,
    )
    transport = SwapiClient(timeout=settings.upstream_timeout_seconds)
    resolver = FetchThroughResolver(cache, store, transport)
    return SwapiQueries(resolver, settings.base_url)


# ═══════════════ LIFESPAN ═══════════════

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("starcache starting | upstream=%s", settings.base_url)
    app.state.queries = build_queries()
    yield
    logger.info("starcache shutting down")


def get_queries(request: Request) -> SwapiQueries:
    return request.app.state.queries


# ═══════════════ APP ═══════════════

app = FastAPI(
    title="starcache",
    description="Read-through SWAPI cache with static-snapshot fallback",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["Content-Type"],
)


@app.exception_handler(FallbackExhausted)
async def fallback_exhausted_handler(request: Request, exc: FallbackExhausted):
    logger.error("Request failed | path=%s | %s", request.url.path, str(exc)[:300])
    return JSONResponse(
        status_code=502,
        content={"error": "Upstream unavailable and no fallback data matched.", "url": exc.url},
    )


# ═══════════════ ENDPOINTS ═══════════════

@app.get("/health", response_model=HealthResponse)
async def health(queries: SwapiQueries = Depends(get_queries)):
    store = queries.resolver.store
    return HealthResponse(
        status="ok",
        upstream=queries.base_url,
        cache_entries=len(queries.resolver.cache),
        fallback_records={kind: store.count(kind) for kind in store.kinds},
    )


@app.get("/starships", response_model=StarshipConnection)
async def all_starships(
    page: int = Query(1, ge=1),
    queries: SwapiQueries = Depends(get_queries),
):
    return await queries.all_starships(page)


@app.get("/starships/search", response_model=Starship)
async def starship_by_name(
    name: str = Query(..., min_length=1),
    queries: SwapiQueries = Depends(get_queries),
):
    starship = await queries.starship_by_name(name)
    if starship is None:
        raise HTTPException(status_code=404, detail=f"No starship named {name!r}")
    return starship


@app.get("/starships/{starship_id:path}/films", response_model=list[Film])
async def starship_films(starship_id: str, queries: SwapiQueries = Depends(get_queries)):
    starship = await queries.starship_by_id(starship_id)
    if starship is None:
        raise HTTPException(status_code=404, detail="Starship not found")
    return await queries.film_names(starship)


@app.get("/starships/{starship_id:path}", response_model=Starship)
async def starship_by_id(starship_id: str, queries: SwapiQueries = Depends(get_queries)):
    starship = await queries.starship_by_id(starship_id)
    if starship is None:
        raise HTTPException(status_code=404, detail="Starship not found")
    return starship


@app.get("/films", response_model=list[Film])
async def all_films(queries: SwapiQueries = Depends(get_queries)):
    return await queries.all_films()


@app.get("/films/{film_id}", response_model=Film)
async def film_by_id(film_id: str, queries: SwapiQueries = Depends(get_queries)):
    film = await queries.film_by_id(film_id)
    if film is None:
        raise HTTPException(status_code=404, detail="Film not found")
    return film


def run() -> None:
    import uvicorn

    uvicorn.run("starcache.main:app", host=settings.host, port=settings.port)
