"""
Provider adapter protocol.

An adapter knows one platform's endpoints, auth header convention and
response envelopes. It fetches raw payloads through a BaseApiClient and
hands them to that platform's normalizer module. It does not cache, rate
limit or decide failure policy; ProviderClient does that uniformly for
every adapter.
"""

from __future__ import annotations

from types import ModuleType
from typing import Any, Optional, Protocol

from ..core.errors import AuthenticationError
from ..core.http import BaseApiClient
from ..core.models import League, Player, Team
from ..core.types import Provider, ProviderConfig, get_provider_config


class ProviderAdapter(Protocol):
    """Interface every provider adapter implements."""

    provider: Provider
    config: ProviderConfig

    # ==========================================================================
    # Auth
    # ==========================================================================

    def auth_headers(self) -> dict[str, str]:
        """Headers carrying this provider's credential, if any."""
        ...

    def default_params(self) -> dict[str, str]:
        """Query parameters sent with every request."""
        ...

    def require_credentials(self) -> None:
        """Raise AuthenticationError when a mandatory credential is missing."""
        ...

    @property
    def has_auth(self) -> bool:
        ...

    # ==========================================================================
    # Raw fetchers
    # ==========================================================================

    async def fetch_leagues(self, http: BaseApiClient, user_id: str) -> list[Any]:
        ...

    async def fetch_league(self, http: BaseApiClient, league_id: str) -> Any:
        ...

    async def fetch_teams(self, http: BaseApiClient, league_id: str) -> list[Any]:
        ...

    async def fetch_player(
        self, http: BaseApiClient, player_id: str, week: Optional[int] = None
    ) -> Any:
        ...

    # ==========================================================================
    # Normalization hooks
    # ==========================================================================

    def normalize_league(self, raw: Any) -> League:
        ...

    def normalize_team(self, raw: Any) -> Team:
        ...

    def normalize_player(self, raw: Any, week: Optional[int] = None) -> Player:
        ...


class AdapterBase:
    """
    Shared plumbing for the concrete adapters.

    Subclasses set ``provider`` and ``normalizer`` (the normalize module for
    the platform) and implement the fetchers.
    """

    provider: Provider
    normalizer: ModuleType

    def __init__(
        self,
        *,
        access_token: Optional[str] = None,
        cookie_string: Optional[str] = None,
        season: str,
    ):
        self.access_token = access_token
        self.cookie_string = cookie_string
        self.season = season
        self.config = get_provider_config(self.provider)

    def auth_headers(self) -> dict[str, str]:
        return {}

    def default_params(self) -> dict[str, str]:
        return {}

    def require_credentials(self) -> None:
        return None

    @property
    def has_auth(self) -> bool:
        return bool(self.access_token or self.cookie_string)

    def _require_token(self) -> None:
        if not self.access_token:
            raise AuthenticationError(
                f"{self.config.display_name} requires OAuth access token",
                provider=self.provider.value,
            )

    def normalize_league(self, raw: Any) -> League:
        return self.normalizer.normalize_league(raw, default_season=self.season)

    def normalize_team(self, raw: Any) -> Team:
        return self.normalizer.normalize_team(raw)

    def normalize_player(self, raw: Any, week: Optional[int] = None) -> Player:
        return self.normalizer.normalize_player(raw, week=week)


def as_list(value: Any) -> list[Any]:
    """Coerce a response envelope member to a list (None and scalars become [])."""
    return value if isinstance(value, list) else []


def unwrap(payload: Any, key: str) -> Any:
    """Return ``payload[key]`` when the body wraps the entity, else the body."""
    if isinstance(payload, dict) and isinstance(payload.get(key), dict):
        return payload[key]
    return payload
