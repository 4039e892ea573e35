"""Entity normalizer: upstream or snapshot record → stable output model.

Pure functions, never raise. Absent or empty fields become None (lists become
[]), with one exception: `manufacturers` stays None when the manufacturer is
unknown, so "unknown" is distinguishable from "known empty".
"""

from collections.abc import Mapping
from typing import Any

from starcache.schemas import FALLBACK_WARNING, Film, Starship

_STARSHIP_TEXT_FIELDS = (
    "name", "model", "starship_class",
    "length", "crew", "passengers", "cost_in_credits", "consumables",
    "max_atmosphering_speed", "cargo_capacity", "hyperdrive_rating", "MGLT",
)


def first_result(payload: Any) -> Any:
    """Unwrap a collection payload to its first result; pass single entities through."""
    if isinstance(payload, Mapping) and "results" in payload:
        results = payload.get("results")
        if isinstance(results, list) and results:
            return results[0]
        return None
    return payload


def split_manufacturers(raw: Any) -> list[str] | None:
    """'Honda, Kuat Drive Yards' -> ['Honda', 'Kuat Drive Yards']."""
    if not isinstance(raw, str) or not raw.strip():
        return None
    return [name.strip() for name in raw.split(",") if name.strip()]


def normalize_starship(record: Any, degraded: bool = False) -> Starship | None:
    if not isinstance(record, Mapping):
        return None

    fields = {name: _text(_field(record, name)) for name in _STARSHIP_TEXT_FIELDS}

    manufacturer_raw = _text(_field(record, "manufacturer"))
    manufacturers = split_manufacturers(manufacturer_raw)
    if manufacturers is None:
        # Snapshot records may only carry the pre-split list
        presplit = _field(record, "manufacturers")
        if isinstance(presplit, list) and presplit:
            manufacturers = [str(m).strip() for m in presplit if str(m).strip()]
            manufacturer_raw = ", ".join(manufacturers)

    url = _text(_field(record, "url"))
    return Starship(
        id=url,
        manufacturers=manufacturers,
        manufacturer_raw=manufacturer_raw,
        films=_url_list(_field(record, "films")),
        url=url,
        degraded=degraded,
        dataWarning=FALLBACK_WARNING if degraded else None,
        **fields,
    )


def normalize_film(record: Any, degraded: bool = False) -> Film | None:
    if not isinstance(record, Mapping):
        return None
    return Film(
        title=_text(_field(record, "title")),
        episode_id=_int(_field(record, "episode_id")),
        director=_text(_field(record, "director")),
        producer=_text(_field(record, "producer")),
        release_date=_text(_field(record, "release_date")),
        url=_text(_field(record, "url")),
        degraded=degraded,
        dataWarning=FALLBACK_WARNING if degraded else None,
    )


# ═══════════════ HELPERS ═══════════════

def _field(record: Mapping, name: str) -> Any:
    """Exact key first, then a case-insensitive match (MGLT vs mglt)."""
    if name in record:
        return record[name]
    folded = name.casefold()
    for key, value in record.items():
        if isinstance(key, str) and key.casefold() == folded:
            return value
    return None


def _text(value: Any) -> str | None:
    if value is None or isinstance(value, (Mapping, list)):
        return None
    if isinstance(value, bool):
        return str(value).lower()
    text = str(value)
    return text if text else None


def _int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def _url_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str) and item]
