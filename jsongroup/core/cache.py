"""Thread-safe LRU cache of resolved field metadata.

WHY: Resolving a dataclass's field table means walking its fields and
parsing their metadata. Serialising many values of the same few types
repeats that work for nothing. A bounded, shared cache keeps the hot
types resolved while capping memory for processes that see many types.

HOW: An OrderedDict keyed by (type, tag key) holds CacheEntry objects
in recency order; the end is most recently used. Lookups and inserts
take a threading.Lock. Resolution itself runs outside the lock, so two
threads missing on the same type may both resolve it; the second
insert finds the first and collapses onto it.

RULES:
- Hits are promoted to most-recently-used before the lock is released
- The resident entry count never exceeds capacity once an operation
  returns
- Capacity 0 disables caching: every lookup is a miss and nothing is
  stored
- Shrinking the capacity evicts synchronously down to the new bound
- clear() drops all entries and resets the hit/miss/eviction counters
- An eviction that cannot find its victim raises CacheOverflowError
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Hashable, Tuple

from jsongroup import config
from jsongroup.core.fields import FieldInfo, resolve_fields
from jsongroup.errors import CacheOverflowError

logger = logging.getLogger(__name__)

_CACHE_NAME = "field metadata"


@dataclass(frozen=True)
class CacheStats:
    """Snapshot of cache usage.

    Attributes:
        size: Entries currently resident.
        capacity: Maximum entries, 0 when caching is disabled.
        hits: Lookups answered from the cache since the last clear().
        misses: Lookups that had to resolve since the last clear().
        hit_ratio: hits / (hits + misses), 0.0 before any lookup.
        evictions: Entries removed to honour the capacity.
    """

    size: int
    capacity: int
    hits: int
    misses: int
    hit_ratio: float
    evictions: int = 0


@dataclass
class CacheEntry:
    created_at: float
    fields: Tuple[FieldInfo, ...]


class FieldCache:
    """Bounded LRU cache mapping dataclass types to their field tables.

    Use one process-wide instance (``default_cache``) or pass a private
    instance to the marshal entry points for isolation in tests.
    """

    def __init__(self, capacity: int = config.DEFAULT_CACHE_CAPACITY) -> None:
        if capacity < 0:
            raise ValueError(f"cache capacity must be >= 0, got {capacity}")
        self._entries: "OrderedDict[Hashable, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()
        self._capacity = capacity
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: Any) -> bool:
        """True when ``key`` (a type, or a (type, tag_key) pair) is resident."""
        if not isinstance(key, tuple):
            key = (key, config.DEFAULT_TAG_KEY)
        with self._lock:
            return key in self._entries

    def get(self, cls: Any, tag_key: str) -> Tuple[FieldInfo, ...]:
        """Return the field table for ``cls``, resolving it on a miss.

        Raises:
            ReflectionError: If resolution fails. Nothing is cached then.
            CacheOverflowError: If eviction finds the cache inconsistent.
        """
        key = (cls, tag_key)
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                self._entries.move_to_end(key)
                self._hits += 1
                return entry.fields
            self._misses += 1

        fields = resolve_fields(cls, tag_key)

        with self._lock:
            if self._capacity == 0:
                return fields
            # Another thread may have inserted the same type meanwhile
            existing = self._entries.get(key)
            if existing is not None:
                self._entries.move_to_end(key)
                return existing.fields
            while len(self._entries) >= self._capacity:
                self._evict_oldest()
            self._entries[key] = CacheEntry(created_at=time.time(), fields=fields)
        return fields

    def set_capacity(self, capacity: int) -> None:
        """Change the capacity, evicting least-recently-used entries to fit."""
        if capacity < 0:
            raise ValueError(f"cache capacity must be >= 0, got {capacity}")
        with self._lock:
            self._capacity = capacity
            while len(self._entries) > capacity:
                self._evict_oldest()
            size = len(self._entries)
        logger.info("Field cache capacity set to %d (%d resident)", capacity, size)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0
            self._evictions = 0
        logger.info("Field cache cleared")

    def stats(self) -> CacheStats:
        with self._lock:
            total = self._hits + self._misses
            return CacheStats(
                size=len(self._entries),
                capacity=self._capacity,
                hits=self._hits,
                misses=self._misses,
                hit_ratio=self._hits / total if total else 0.0,
                evictions=self._evictions,
            )

    def _evict_oldest(self) -> None:
        """Remove the least-recently-used entry. Caller holds the lock."""
        try:
            key, entry = self._entries.popitem(last=False)
        except KeyError:
            logger.error(
                "Field cache eviction found no victim (capacity %d)", self._capacity
            )
            raise CacheOverflowError(_CACHE_NAME, self._capacity) from None
        if not isinstance(entry, CacheEntry):
            logger.error("Field cache held a malformed entry for %r", key)
            raise CacheOverflowError(_CACHE_NAME, self._capacity)
        self._evictions += 1
        logger.debug("Evicted field metadata for %r", key[0])


default_cache = FieldCache()
"""Process-wide cache used when no explicit cache is passed."""
