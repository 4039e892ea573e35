"""Pydantic models for API output: the stable shape callers consume.

Every entity carries `degraded` / `dataWarning` so a response served from the
fallback snapshot is never indistinguishable from live data.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

FALLBACK_WARNING = "served-from-fallback-json"


# ═══════════════ RESOLVER RESULT ═══════════════

class ResolvedResult(BaseModel):
    """Raw payload plus its provenance, before normalization."""

    payload: Any = None
    degraded: bool = False

    @property
    def warning(self) -> str | None:
        return FALLBACK_WARNING if self.degraded else None


# ═══════════════ ENTITIES ═══════════════

class Film(BaseModel):
    title: str | None = None
    episode_id: int | None = None
    director: str | None = None
    producer: str | None = None
    release_date: str | None = None
    url: str | None = None
    degraded: bool = False
    dataWarning: str | None = None


class Starship(BaseModel):
    id: str | None = None
    name: str | None = None
    model: str | None = None
    starship_class: str | None = None
    manufacturers: list[str] | None = None
    manufacturer_raw: str | None = None

    length: str | None = None
    crew: str | None = None
    passengers: str | None = None
    cost_in_credits: str | None = None
    consumables: str | None = None

    max_atmosphering_speed: str | None = None
    cargo_capacity: str | None = None
    hyperdrive_rating: str | None = None
    MGLT: str | None = None

    films: list[str] = Field(default_factory=list)

    url: str | None = None
    degraded: bool = False
    dataWarning: str | None = None


class StarshipEdge(BaseModel):
    node: Starship


class StarshipConnection(BaseModel):
    edges: list[StarshipEdge] = Field(default_factory=list)
    count: int = 0
    degraded: bool = False


# ═══════════════ SERVICE ═══════════════

class HealthResponse(BaseModel):
    status: str = "ok"
    upstream: str = ""
    cache_entries: int = 0
    fallback_records: dict[str, int] = Field(default_factory=dict)
