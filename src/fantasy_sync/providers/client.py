"""
Provider client: one instance per (provider, credential) pair.

Every read goes cache -> rate limiter -> fetch -> normalize. A cache hit
returns before the rate limiter is touched, so it never delays.

Failure policy (uniform across providers):
- AuthenticationError (HTTP 401 or missing credential) propagates.
- Any other ExternalAPIError is logged and degrades: get_leagues returns a
  placeholder league (or [] in strict mode), get_league_info and
  get_player_stats return None, get_teams returns [].
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional

import httpx
from pydantic import BaseModel

from ..core.cache import CacheTTL, ResourceClass, ResponseCache, make_key
from ..core.cancellation import CancellationToken
from ..core.config import Settings, get_settings
from ..core.errors import AuthenticationError, ExternalAPIError
from ..core.http import BaseApiClient, RateLimiter
from ..core.models import ClientStats, League, LeagueSettings, Player, SyncResult, Team
from ..core.types import Provider, get_provider_config, to_provider
from ..store.base import FantasyStore
from ..store.memory import InMemoryStore
from ..sync.orchestrator import LeagueSyncer
from .base import ProviderAdapter
from .cbs import CbsAdapter
from .espn import EspnAdapter
from .sleeper import SleeperAdapter
from .yahoo import YahooAdapter

logger = logging.getLogger(__name__)


# =============================================================================
# ADAPTER REGISTRY
# =============================================================================

ADAPTERS: dict[Provider, type] = {
    Provider.yahoo: YahooAdapter,
    Provider.espn: EspnAdapter,
    Provider.cbs: CbsAdapter,
    Provider.sleeper: SleeperAdapter,
}


def _detached(value: Any) -> Any:
    """Deep copy of a cached model or list of models."""
    if isinstance(value, list):
        return [_detached(item) for item in value]
    if isinstance(value, BaseModel):
        return value.model_copy(deep=True)
    return value


class ProviderClient:
    """
    Async client for one fantasy provider.

    Owns its ResponseCache, RateLimiter and HTTP client; nothing is shared
    between instances, so keys and request pacing never leak across
    providers or credentials.

    Usage:
        client = ProviderClient("sleeper")
        leagues = await client.get_leagues("user_123")
        result = await client.sync_league_to_database(leagues[0].id, "user_123")
        await client.close()
    """

    def __init__(
        self,
        provider: str | Provider,
        *,
        access_token: Optional[str] = None,
        cookie_string: Optional[str] = None,
        store: Optional[FantasyStore] = None,
        settings: Optional[Settings] = None,
        cache: Optional[ResponseCache] = None,
        rate_limiter: Optional[RateLimiter] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.provider = to_provider(provider)
        self.config = get_provider_config(self.provider)
        self.settings = settings or get_settings()
        self.access_token = access_token
        self.cookie_string = cookie_string

        self.adapter: ProviderAdapter = ADAPTERS[self.provider](
            access_token=access_token,
            cookie_string=cookie_string,
            season=self.settings.current_season,
        )
        self.cache = cache or ResponseCache(clock=clock)
        self.ttl = CacheTTL.from_settings(self.settings)
        self.rate_limiter = rate_limiter or RateLimiter(
            self.settings.rate_limit_interval_ms, clock=clock
        )
        self.http = BaseApiClient(
            provider=self.provider.value,
            base_url=self.config.api_base_url,
            headers={
                "Accept": "application/json",
                "User-Agent": self.settings.user_agent,
                **self.adapter.auth_headers(),
            },
            params=self.adapter.default_params(),
            timeout=self.settings.request_timeout,
            max_retries=self.settings.max_retries,
            rate_limiter=self.rate_limiter,
            transport=transport,
        )
        self.store: FantasyStore = store if store is not None else InMemoryStore()

    def __repr__(self) -> str:
        return f"ProviderClient(provider={self.provider.value!r}, has_auth={self.has_auth})"

    @property
    def has_auth(self) -> bool:
        return self.adapter.has_auth

    # =========================================================================
    # Fetch pipeline
    # =========================================================================

    async def _cached(
        self,
        resource: str,
        entity_id: str,
        sub: str,
        ttl_ms: int,
        fetch: Callable[[], Awaitable[Any]],
    ) -> Any:
        """
        Return a cached value or run ``fetch`` and cache what it returns.

        ``fetch`` performs the rate-limited request(s) and normalization. A
        None result is not cached. Callers always get their own copy, so
        mutating a result never changes the cache.
        """
        key = make_key(self.provider.value, resource, entity_id, sub)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Cache hit: {key}")
            return _detached(cached)

        self.adapter.require_credentials()
        value = await fetch()
        if value is not None:
            self.cache.set(key, _detached(value), ttl_ms)
        return value

    # =========================================================================
    # Leagues
    # =========================================================================

    async def get_leagues(self, user_id: str) -> list[League]:
        """
        Get a user's leagues.

        Falls back to a single placeholder league on provider failure
        (unless ``strict_mode`` is set, in which case the result is empty).

        Raises:
            AuthenticationError: On HTTP 401 or a missing credential
        """

        async def fetch() -> list[League]:
            raw_leagues = await self.adapter.fetch_leagues(self.http, user_id)
            return [self.adapter.normalize_league(raw) for raw in raw_leagues]

        try:
            leagues = await self._cached(
                ResourceClass.leagues.value, user_id, "", self.ttl.leagues, fetch
            )
        except AuthenticationError:
            raise
        except ExternalAPIError as e:
            logger.error(f"Failed to fetch leagues from {self.provider.value}: {e}")
            if self.settings.strict_mode:
                return []
            return self._fallback_leagues(user_id)

        logger.info(f"Fetched {len(leagues)} leagues from {self.provider.value}")
        return leagues

    def _fallback_leagues(self, user_id: str) -> list[League]:
        logger.warning(f"Using fallback data for {self.provider.value} leagues")
        return [
            League(
                id=f"fallback_{self.provider.value}_{user_id}",
                provider=self.provider.value,
                name=f"Sample {self.provider.value.upper()} League",
                sport="nfl",
                season=self.settings.current_season,
                settings=LeagueSettings(scoring_type="ppr"),
                is_active=True,
                metadata={"fallback": True},
            )
        ]

    async def get_league_info(self, league_id: str) -> Optional[League]:
        """
        Get one league's details, or None if the provider could not supply it.

        Raises:
            AuthenticationError: On HTTP 401 or a missing credential
        """

        async def fetch() -> Optional[League]:
            raw = await self.adapter.fetch_league(self.http, league_id)
            if not raw:
                return None
            return self.adapter.normalize_league(raw)

        try:
            return await self._cached(
                ResourceClass.leagues.value, league_id, "info", self.ttl.leagues, fetch
            )
        except AuthenticationError:
            raise
        except ExternalAPIError as e:
            logger.error(f"Failed to fetch league info from {self.provider.value}: {e}")
            return None

    # =========================================================================
    # Teams
    # =========================================================================

    async def get_teams(self, league_id: str) -> list[Team]:
        """
        Get every team in a league with its roster merged in.

        Raises:
            AuthenticationError: On HTTP 401 or a missing credential
        """

        async def fetch() -> list[Team]:
            raw_teams = await self.adapter.fetch_teams(self.http, league_id)
            return [self.adapter.normalize_team(raw) for raw in raw_teams]

        try:
            teams = await self._cached(
                ResourceClass.teams.value, league_id, "", self.ttl.teams, fetch
            )
        except AuthenticationError:
            raise
        except ExternalAPIError as e:
            logger.error(f"Failed to fetch teams from {self.provider.value}: {e}")
            return []

        logger.info(f"Fetched {len(teams)} teams from {self.provider.value}")
        return teams

    # =========================================================================
    # Players
    # =========================================================================

    async def get_player_stats(self, player_id: str, week: Optional[int] = None) -> Optional[Player]:
        """
        Get a player's stats for a week, or the season when ``week`` is None.

        Week lines use the short ``stats`` TTL; season lines the ``players`` TTL.

        Raises:
            AuthenticationError: On HTTP 401 or a missing credential
        """

        async def fetch() -> Optional[Player]:
            raw = await self.adapter.fetch_player(self.http, player_id, week)
            if not raw:
                return None
            return self.adapter.normalize_player(raw, week)

        resource = ResourceClass.stats if week else ResourceClass.players
        try:
            return await self._cached(
                resource.value,
                player_id,
                str(week) if week else "season",
                self.ttl.for_resource(resource),
                fetch,
            )
        except AuthenticationError:
            raise
        except ExternalAPIError as e:
            logger.error(f"Failed to fetch player stats from {self.provider.value}: {e}")
            return None

    # =========================================================================
    # Sync
    # =========================================================================

    async def sync_league_to_database(
        self,
        league_id: str,
        user_id: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> SyncResult:
        """Sync one league into this client's store."""
        return await LeagueSyncer(self, self.store).sync_league(league_id, user_id, cancel_token)

    # =========================================================================
    # Diagnostics & lifecycle
    # =========================================================================

    def get_sync_stats(self) -> ClientStats:
        last = self.rate_limiter.last_request_at
        return ClientStats(
            provider=self.provider.value,
            request_count=self.rate_limiter.request_count,
            cache_size=len(self.cache),
            last_request_at=datetime.fromtimestamp(last, timezone.utc) if last is not None else None,
        )

    def clear_cache(self) -> None:
        self.cache.clear()
        logger.info(f"Cleared {self.provider.value} cache")

    async def close(self) -> None:
        await self.http.close()

    async def __aenter__(self) -> "ProviderClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
