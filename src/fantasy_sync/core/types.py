"""
Provider registry for fantasy-sports platforms.

This module provides:
- Provider and AuthStyle enums
- ProviderConfig dataclass with connection metadata
- PROVIDER_REGISTRY, the single source of per-provider settings

The registry is immutable and loaded once at import. Everything above it
(OAuth exchange, provider clients, the manager) reads from here instead of
hard-coding URLs.
"""

from dataclasses import dataclass, field
from enum import Enum

from .errors import UnsupportedOperationError


class Provider(str, Enum):
    """Supported fantasy platforms."""

    yahoo = "yahoo"
    espn = "espn"
    cbs = "cbs"
    sleeper = "sleeper"


class AuthStyle(str, Enum):
    """How a provider authenticates API calls."""

    oauth2 = "oauth2"
    cookie = "cookie"
    none = "none"


@dataclass(frozen=True)
class ProviderConfig:
    """Connection metadata for a provider."""

    # Identifiers
    name: str
    display_name: str
    auth_style: AuthStyle

    # Endpoints
    api_base_url: str
    auth_url: str = ""
    token_url: str = ""
    scopes: tuple[str, ...] = field(default_factory=tuple)

    @property
    def supports_oauth(self) -> bool:
        return self.auth_style is AuthStyle.oauth2


# =============================================================================
# PROVIDER REGISTRY
# =============================================================================

PROVIDER_REGISTRY: dict[Provider, ProviderConfig] = {
    Provider.yahoo: ProviderConfig(
        name="yahoo",
        display_name="Yahoo Fantasy",
        auth_style=AuthStyle.oauth2,
        api_base_url="https://fantasysports.yahooapis.com/fantasy/v2",
        auth_url="https://api.login.yahoo.com/oauth2/request_auth",
        token_url="https://api.login.yahoo.com/oauth2/get_token",
        scopes=("fspt-r", "fspt-w"),
    ),
    Provider.espn: ProviderConfig(
        name="espn",
        display_name="ESPN Fantasy",
        # ESPN private leagues authenticate with the espn_s2/SWID cookies
        auth_style=AuthStyle.cookie,
        api_base_url="https://fantasy.espn.com/apis/v3/games/ffl",
        auth_url="https://ha.registerdisney.go.com/jgc/v6/client/ESPN-ESPNCOM-PROD/guest/login",
        token_url="https://ha.registerdisney.go.com/jgc/v6/client/ESPN-ESPNCOM-PROD/api-key/login",
    ),
    Provider.cbs: ProviderConfig(
        name="cbs",
        display_name="CBS Sports",
        auth_style=AuthStyle.oauth2,
        api_base_url="https://api.cbssports.com/fantasy",
        auth_url="https://www.cbssports.com/oauth/authorize",
        token_url="https://www.cbssports.com/oauth/token",
        scopes=("fantasy:read", "fantasy:write"),
    ),
    Provider.sleeper: ProviderConfig(
        name="sleeper",
        display_name="Sleeper",
        auth_style=AuthStyle.none,
        api_base_url="https://api.sleeper.app/v1",
    ),
}


def to_provider(provider: str | Provider) -> Provider:
    """Coerce a provider name to the Provider enum."""
    if isinstance(provider, Provider):
        return provider
    try:
        return Provider(str(provider).lower())
    except ValueError:
        raise UnsupportedOperationError(f"Unsupported provider: {provider}") from None


def get_provider_config(provider: str | Provider) -> ProviderConfig:
    """
    Get connection metadata for a provider.

    Args:
        provider: Provider enum or its string value

    Returns:
        ProviderConfig for the requested provider

    Raises:
        UnsupportedOperationError: If the provider is not in the registry
    """
    return PROVIDER_REGISTRY[to_provider(provider)]
