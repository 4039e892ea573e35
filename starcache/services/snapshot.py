"""Snapshot loader — reads fallback.json into a FallbackStore.

Two snapshot shapes exist in the wild:
  - Structured: {"starships": [...], "films": [...]}
  - Legacy flat list: [...] holding a single kind (starships)

Both are normalized here, once, into {kind: [records]} so the store never
branches on the source shape. A missing or broken file yields an empty store:
the service still starts, it just cannot degrade gracefully.
"""

import json
import logging
from collections import Counter
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from starcache.integrations.swapi import KNOWN_BASE_URLS
from starcache.services.fallback_store import FallbackStore, identity_suffix

logger = logging.getLogger(__name__)

DEFAULT_LEGACY_KIND = "starships"


def from_mapping(data: Mapping[str, Any], base_urls: Iterable[str] = ()) -> FallbackStore:
    """Build a store from the structured {kind: [records]} shape."""
    collections = {}
    for kind, records in data.items():
        if not isinstance(records, list):
            logger.warning("Snapshot | skipping non-list collection | kind=%s", kind)
            continue
        collections[kind] = records
    return FallbackStore(collections, base_urls=base_urls)


def from_flat_list(records: list[Any], base_urls: Iterable[str] = ()) -> FallbackStore:
    """Build a store from the legacy flat list shape."""
    base_urls = tuple(base_urls)
    kind = infer_kind(records, base_urls)
    return FallbackStore({kind: records}, base_urls=base_urls)


def infer_kind(records: list[Any], base_urls: Iterable[str] = ()) -> str:
    """Most common leading path segment of the records' identity URLs."""
    base_urls = tuple(base_urls)
    kinds: Counter[str] = Counter()
    for record in records:
        url = record.get("url") if isinstance(record, Mapping) else None
        if isinstance(url, str) and url:
            segment = identity_suffix(url, (*base_urls, *KNOWN_BASE_URLS)).split("/")[0]
            if segment:
                kinds[segment] += 1
    if not kinds:
        return DEFAULT_LEGACY_KIND
    return kinds.most_common(1)[0][0]


def parse_snapshot(data: Any, base_urls: Iterable[str] = ()) -> FallbackStore:
    """Dispatch an already-parsed snapshot to the matching loader variant."""
    if isinstance(data, list):
        return from_flat_list(data, base_urls)
    if isinstance(data, Mapping):
        return from_mapping(data, base_urls)
    logger.warning("Snapshot | unsupported top-level type %s, using empty store", type(data).__name__)
    return FallbackStore(base_urls=base_urls)


def load_snapshot(path: str | Path, base_urls: Iterable[str] = ()) -> FallbackStore:
    """Load and index the snapshot file. Never raises."""
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.warning("Snapshot not found at %s, fallback disabled", path)
        return FallbackStore(base_urls=base_urls)
    except OSError as e:
        logger.warning("Could not read snapshot %s: %s", path, str(e)[:200])
        return FallbackStore(base_urls=base_urls)

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("Could not parse snapshot %s: %s", path, str(e)[:200])
        return FallbackStore(base_urls=base_urls)

    store = parse_snapshot(data, base_urls)
    logger.info(
        "Loaded snapshot %s | %d records | %s",
        path, len(store),
        ", ".join(f"{kind}={store.count(kind)}" for kind in store.kinds) or "empty",
    )
    return store
