"""In-memory response cache with per-resource TTLs."""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from .config import Settings

# (provider, resource, id, sub-parameter)
CacheKey = tuple[str, str, str, str]


class ResourceClass(str, Enum):
    """Resource classes with distinct cache lifetimes."""

    leagues = "leagues"
    teams = "teams"
    players = "players"
    stats = "stats"


@dataclass(frozen=True)
class CacheTTL:
    """TTLs in milliseconds, one per resource class."""

    leagues: int = 5 * 60 * 1000
    teams: int = 2 * 60 * 1000
    players: int = 60 * 1000
    stats: int = 30 * 1000

    @classmethod
    def from_settings(cls, settings: Settings) -> "CacheTTL":
        return cls(
            leagues=settings.cache_ttl_leagues_ms,
            teams=settings.cache_ttl_teams_ms,
            players=settings.cache_ttl_players_ms,
            stats=settings.cache_ttl_stats_ms,
        )

    def for_resource(self, resource: ResourceClass | str) -> int:
        return getattr(self, ResourceClass(resource).value)


def make_key(provider: str, resource: str, entity_id: str = "", sub: str = "") -> CacheKey:
    """Build a cache key; every component is stringified."""
    return (str(provider), str(resource), str(entity_id), str(sub))


class ResponseCache:
    """
    Per-client in-memory cache with lazy expiry.

    An entry is served while ``now <= stored_at + ttl``. The first ``get``
    after that deletes it and reports a miss; nothing sweeps proactively.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        """
        Args:
            clock: Returns the current time in seconds (default: time.monotonic)
        """
        self._clock = clock or time.monotonic
        self._entries: dict[CacheKey, tuple[Any, float, float]] = {}

    def _now_ms(self) -> float:
        return self._clock() * 1000.0

    def _is_fresh(self, stored_at: float, ttl_ms: float, now_ms: float) -> bool:
        return now_ms <= stored_at + ttl_ms

    def get(self, key: CacheKey) -> Optional[Any]:
        """
        Get a cached value if not expired.

        Returns:
            Cached value, or None on a miss (absent or stale)
        """
        entry = self._entries.get(key)
        if entry is None:
            return None

        value, stored_at, ttl_ms = entry
        if not self._is_fresh(stored_at, ttl_ms, self._now_ms()):
            del self._entries[key]
            return None
        return value

    def set(self, key: CacheKey, value: Any, ttl_ms: float) -> None:
        """Store a value for ``ttl_ms`` milliseconds."""
        self._entries[key] = (value, self._now_ms(), float(ttl_ms))

    def clear(self) -> None:
        """Clear all cached values."""
        self._entries.clear()

    def purge_expired(self) -> int:
        """Remove all expired entries; returns how many were dropped."""
        now_ms = self._now_ms()
        expired = [
            key
            for key, (_, stored_at, ttl_ms) in self._entries.items()
            if not self._is_fresh(stored_at, ttl_ms, now_ms)
        ]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)
