"""
Resolve Cache
Memory cache for point re-solves of an expression at fixed parameter values.
"""

import hashlib
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field
from datetime import datetime
import threading
import logging

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """Represents a cached re-solve result."""
    key: str
    value: Any
    created_at: datetime
    access_count: int = 0
    last_accessed: Optional[datetime] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def touch(self) -> None:
        """Update access statistics."""
        self.access_count += 1
        self.last_accessed = datetime.now()


class ResolveCache:
    """
    LRU memory cache for ``resolve_at`` results.

    Entries are keyed by a SHA-256 hash of the expression string and the
    parameter value, so repeated sweeps over the same grid (or the same
    expression loaded twice) do not hit the symbolic solver again.
    State lives only as long as the cache object.

    Attributes:
        max_entries: Maximum number of entries before eviction
    """

    def __init__(self, max_entries: int = 4096):
        """
        Initialize the cache.

        Args:
            max_entries: Maximum entries kept in memory
        """
        self.max_entries = max_entries

        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.RLock()

        self._stats = {
            'hits': 0,
            'misses': 0,
            'total_saves': 0,
            'evictions': 0
        }

    def get_hash(self, expression: str, param_values: Dict[str, float]) -> str:
        """
        Generate SHA-256 hash for unique identification.

        Args:
            expression: Expression string
            param_values: Parameter bindings, e.g. {'r': 0.5}

        Returns:
            Hexadecimal hash string
        """
        bindings = ",".join(f"{k}={float(v)!r}" for k, v in sorted(param_values.items()))
        content = f"{expression}|{bindings}"
        return hashlib.sha256(content.encode('utf-8')).hexdigest()

    def get(self, expression: str, param_values: Dict[str, float]) -> Optional[List[float]]:
        """
        Retrieve a cached solution list.

        Returns:
            Copy of the cached roots or None if not found
        """
        key = self.get_hash(expression, param_values)

        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._stats['misses'] += 1
                return None
            entry.touch()
            self._stats['hits'] += 1
            return list(entry.value)

    def save(
        self,
        expression: str,
        param_values: Dict[str, float],
        solutions: List[float],
        metadata: Optional[Dict[str, Any]] = None
    ) -> str:
        """
        Store a solution list.

        Returns:
            Cache key (hash) for the entry
        """
        key = self.get_hash(expression, param_values)

        with self._lock:
            if key not in self._entries and len(self._entries) >= self.max_entries:
                self._evict_lru()

            entry = CacheEntry(
                key=key,
                value=list(solutions),
                created_at=datetime.now(),
                metadata=metadata or {}
            )
            entry.touch()
            self._entries[key] = entry
            self._stats['total_saves'] += 1

        return key

    def _evict_lru(self) -> None:
        """Evict least recently used entry."""
        if not self._entries:
            return

        lru_key = min(
            self._entries.keys(),
            key=lambda k: (
                self._entries[k].last_accessed or
                self._entries[k].created_at
            )
        )
        del self._entries[lru_key]
        self._stats['evictions'] += 1

    def clear(self) -> int:
        """
        Clear all entries.

        Returns:
            Number of entries cleared
        """
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.debug(f"Resolve cache cleared ({count} entries)")
        return count

    def get_stats(self) -> Dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dictionary with cache statistics
        """
        with self._lock:
            size = len(self._entries)
            stats = dict(self._stats)

        total = stats['hits'] + stats['misses']
        hit_rate = stats['hits'] / total if total > 0 else 0

        return {
            'entries': size,
            'hit_rate': hit_rate,
            **stats
        }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __repr__(self) -> str:
        stats = self.get_stats()
        return (f"ResolveCache(entries={stats['entries']}, "
                f"hit_rate={stats['hit_rate']:.2%})")
