"""Conditional cache store for ETag / Last-Modified validators."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod

from core.models import CacheEntry, TargetReference
from fetcher.outcome import RetrievalOutcome
from fetcher.target import canonical_key


class ValidatorCache(ABC):
    """
    Keyed store of per-resource validators.

    Keys may be URI strings or TargetReferences; both normalize to the
    canonical rendering so the same logical resource always hits the same
    entry. Implementations must be safe for concurrent use.
    """

    @abstractmethod
    def lookup(self, key: str | TargetReference) -> CacheEntry | None:
        """Return validators for a resource, or None when nothing usable is stored."""

    @abstractmethod
    def upsert(self, key: str | TargetReference, entry: CacheEntry) -> None:
        """Insert or replace validators; an empty entry removes the key."""

    @abstractmethod
    def clear(self) -> None:
        """Drop all entries."""

    @property
    @abstractmethod
    def enabled(self) -> bool:
        """Whether retrieval sequences consult this store."""

    @abstractmethod
    def enable(self) -> None:
        """Turn consultation on."""

    @abstractmethod
    def disable(self) -> None:
        """Turn consultation off; stored entries are kept."""


class InMemoryValidatorCache(ValidatorCache):
    """Unbounded dict-backed store; no eviction, no TTL."""

    def __init__(self, enabled: bool = True) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._enabled = enabled

    def lookup(self, key: str | TargetReference) -> CacheEntry | None:
        normalized = canonical_key(key)
        with self._lock:
            entry = self._entries.get(normalized)
        if entry is None or entry.is_empty:
            return None
        return entry

    def upsert(self, key: str | TargetReference, entry: CacheEntry) -> None:
        normalized = canonical_key(key)
        with self._lock:
            if entry.is_empty:
                self._entries.pop(normalized, None)
            else:
                self._entries[normalized] = entry

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    @property
    def enabled(self) -> bool:
        return self._enabled

    def enable(self) -> None:
        self._enabled = True

    def disable(self) -> None:
        self._enabled = False

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def conditional_headers(entry: CacheEntry | None) -> dict[str, str]:
    """Build If-None-Match / If-Modified-Since headers from an entry."""
    headers: dict[str, str] = {}
    if entry is None:
        return headers
    if entry.etag is not None:
        headers["If-None-Match"] = entry.etag
    if entry.last_modified is not None:
        headers["If-Modified-Since"] = entry.last_modified
    return headers


def remember_validators(cache: ValidatorCache, outcome: RetrievalOutcome) -> bool:
    """
    Store the validators of a 200 outcome under its final URL.

    Returns True when something usable was stored.
    """
    if not outcome.is_success:
        return False
    entry = CacheEntry(etag=outcome.etag, last_modified=outcome.last_modified)
    if entry.is_empty:
        return False
    cache.upsert(outcome.final_url, entry)
    return True
