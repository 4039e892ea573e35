"""Fallback store — read-only index over the static SWAPI snapshot.

Answers "which static record best matches this failed request?" and never
raises: every lookup returns a record or None. The store is built once at
startup and never mutated, so concurrent readers need no lock.
"""

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any
from urllib.parse import urlsplit

from starcache.integrations.swapi import KNOWN_BASE_URLS

Record = Mapping[str, Any]


def identity_suffix(url: str, base_urls: Iterable[str] = KNOWN_BASE_URLS) -> str:
    """Strip a known upstream host+path prefix, e.g. '.../api/starships/9/' -> 'starships/9'."""
    for base in base_urls:
        base = base.rstrip("/")
        if url.startswith(base + "/"):
            return url[len(base):].strip("/")
    # Unknown host: fall back to the path, minus the conventional /api prefix
    path = urlsplit(url).path.strip("/")
    if path.startswith("api/"):
        path = path[len("api/"):]
    return path


class _KindIndex:
    """Lookup tables for one kind of record (starships, films, ...)."""

    def __init__(self, records: tuple[Record, ...], base_urls: tuple[str, ...]):
        self.records = records
        self.by_url: dict[str, Record] = {}
        self.by_suffix: dict[str, Record] = {}
        self.by_name: dict[str, Record] = {}

        for record in records:
            url = record.get("url")
            if isinstance(url, str) and url:
                self.by_url.setdefault(url, record)
                self.by_suffix.setdefault(identity_suffix(url, base_urls), record)

            # Films have no name; their title plays that role
            name = record.get("name") or record.get("title")
            if isinstance(name, str) and name:
                self.by_name.setdefault(name.casefold(), record)


class FallbackStore:
    """Immutable, in-memory index of snapshot records keyed by kind."""

    def __init__(
        self,
        collections: Mapping[str, Iterable[Record]] | None = None,
        base_urls: Iterable[str] = (),
    ):
        # Configured base first, then the well-known mirrors
        self.base_urls = tuple(dict.fromkeys([*base_urls, *KNOWN_BASE_URLS]))
        self._kinds: dict[str, _KindIndex] = {}
        for kind, records in (collections or {}).items():
            frozen = tuple(MappingProxyType(dict(r)) for r in records if isinstance(r, Mapping))
            self._kinds[kind] = _KindIndex(frozen, self.base_urls)

    @property
    def kinds(self) -> tuple[str, ...]:
        return tuple(self._kinds)

    def count(self, kind: str) -> int:
        index = self._kinds.get(kind)
        return len(index.records) if index else 0

    def __len__(self) -> int:
        return sum(len(index.records) for index in self._kinds.values())

    def find_by_identity(self, url: str, kind: str | None = None) -> Record | None:
        """Exact URL match first, then a match on the prefix-stripped suffix."""
        indexes = self._indexes(kind)
        for index in indexes:
            if url in index.by_url:
                return index.by_url[url]

        suffix = identity_suffix(url, self.base_urls)
        if not suffix:
            return None
        for index in indexes:
            if suffix in index.by_suffix:
                return index.by_suffix[suffix]
        return None

    def find_by_name(self, name: str, kind: str | None = None) -> Record | None:
        """Case-insensitive exact match on name (title for films)."""
        if not name:
            return None
        key = name.casefold()
        if kind is None:
            indexes = list(self._kinds.values())
        else:
            indexes = [self._kinds[kind]] if kind in self._kinds else []
        for index in indexes:
            if key in index.by_name:
                return index.by_name[key]
        return None

    def any_record(self, kind: str) -> Record | None:
        """First record of the kind, the last-resort substitute."""
        index = self._kinds.get(kind)
        if index and index.records:
            return index.records[0]
        return None

    def all_records(self, kind: str) -> tuple[Record, ...]:
        index = self._kinds.get(kind)
        return index.records if index else ()

    def _indexes(self, kind: str | None) -> list[_KindIndex]:
        if kind is None:
            return list(self._kinds.values())
        # Requested kind first, then the rest: identity URLs are unique per kind
        ordered = [self._kinds[kind]] if kind in self._kinds else []
        ordered.extend(index for k, index in self._kinds.items() if k != kind)
        return ordered
