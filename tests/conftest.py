"""Shared test fixtures and configuration."""

import copy

import pytest

from starcache.errors import UpstreamError
from starcache.services.cache import ResolutionCache
from starcache.services.fallback_store import FallbackStore
from starcache.services.queries import SwapiQueries
from starcache.services.resolver import FetchThroughResolver
from starcache.services.snapshot import from_mapping

BASE = "https://swapi.py4e.com/api"


class FakeClock:
    """Manually advanced timer for TTL tests."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTransport:
    """In-memory upstream: URLs in `responses` succeed, everything else fails."""

    def __init__(self, responses: dict | None = None):
        self.responses = dict(responses or {})
        self.calls: list[str] = []

    async def fetch(self, url: str) -> dict:
        self.calls.append(url)
        response = self.responses.get(url)
        if isinstance(response, Exception):
            raise response
        if response is None:
            raise UpstreamError(url, "connection refused")
        return copy.deepcopy(response)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return ResolutionCache(max_entries=50, ttl=300, timer=clock)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def death_star():
    return {
        "name": "Death Star",
        "model": "DS-1 Orbital Battle Station",
        "manufacturer": "Imperial Department of Military Research, Sienar Fleet Systems",
        "cost_in_credits": "1000000000000",
        "length": "120000",
        "max_atmosphering_speed": "n/a",
        "crew": "342,953",
        "passengers": "843,342",
        "cargo_capacity": "1000000000000",
        "consumables": "3 years",
        "hyperdrive_rating": "4.0",
        "MGLT": "10",
        "starship_class": "Deep Space Mobile Battlestation",
        "films": [f"{BASE}/films/1/"],
        "url": f"{BASE}/starships/9/",
    }


@pytest.fixture
def snapshot_data(death_star):
    """Structured snapshot in the shape fallback.json is written."""
    return {
        "starships": [
            {
                "name": "CR90 corvette",
                "model": "CR90 corvette",
                "manufacturer": "Corellian Engineering Corporation",
                "manufacturers": ["Corellian Engineering Corporation"],
                "starship_class": "corvette",
                "films": [f"{BASE}/films/1/", f"{BASE}/films/3/"],
                "url": f"{BASE}/starships/2/",
            },
            dict(death_star, manufacturers=[
                "Imperial Department of Military Research", "Sienar Fleet Systems",
            ]),
            {
                "name": "Millennium Falcon",
                "model": "YT-1300 light freighter",
                "manufacturer": "Corellian Engineering Corporation",
                "manufacturers": ["Corellian Engineering Corporation"],
                "starship_class": "Light freighter",
                "films": [f"{BASE}/films/1/", f"{BASE}/films/2/"],
                "url": f"{BASE}/starships/10/",
            },
        ],
        "films": [
            {
                "title": "A New Hope",
                "episode_id": 4,
                "director": "George Lucas",
                "producer": "Gary Kurtz, Rick McCallum",
                "release_date": "1977-05-25",
                "url": f"{BASE}/films/1/",
            },
            {
                "title": "The Empire Strikes Back",
                "episode_id": 5,
                "director": "Irvin Kershner",
                "producer": "Gary Kurtz, Rick McCallum",
                "release_date": "1980-05-17",
                "url": f"{BASE}/films/2/",
            },
        ],
    }


@pytest.fixture
def store(snapshot_data):
    return from_mapping(snapshot_data, base_urls=[BASE])


@pytest.fixture
def empty_store():
    return FallbackStore(base_urls=[BASE])


@pytest.fixture
def resolver(cache, store, transport):
    return FetchThroughResolver(cache, store, transport)


@pytest.fixture
def queries(resolver):
    return SwapiQueries(resolver, BASE)
