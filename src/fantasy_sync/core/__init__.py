"""
Core module for fantasy-sync.

This module provides the foundational components:
- Configuration management (config.py)
- Domain models (models.py)
- Provider registry (types.py)
- Error taxonomy (errors.py)
- Response cache (cache.py)
- Shared HTTP client infrastructure and rate limiting (http.py)
- Cooperative cancellation (cancellation.py)

Usage:
    from fantasy_sync.core import Settings, get_settings
    from fantasy_sync.core import Provider, get_provider_config
    from fantasy_sync.core import League, Team, Player
    from fantasy_sync.core.http import BaseApiClient, RateLimiter
"""

# Configuration
from .config import Settings, get_settings

# Types
from .types import (
    AuthStyle,
    Provider,
    ProviderConfig,
    PROVIDER_REGISTRY,
    get_provider_config,
    to_provider,
)

# Errors
from .errors import (
    AuthenticationError,
    ExternalAPIError,
    PayloadValidationError,
    ProviderError,
    RateLimitError,
    SyncCancelledError,
    TokenExchangeError,
    UnsupportedOperationError,
)

# Models
from .models import (
    AuthValidation,
    ClientStats,
    League,
    LeagueSettings,
    Player,
    PlayerStats,
    ProviderHealth,
    RosterSlot,
    SetupInstructions,
    SyncedCounts,
    SyncResult,
    SyncSummary,
    Team,
    TeamPoints,
    TeamRecord,
    TokenResponse,
)

from .cache import CacheTTL, ResourceClass, ResponseCache, make_key
from .cancellation import CancellationToken

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Types
    "AuthStyle",
    "Provider",
    "ProviderConfig",
    "PROVIDER_REGISTRY",
    "get_provider_config",
    "to_provider",
    # Errors
    "AuthenticationError",
    "ExternalAPIError",
    "PayloadValidationError",
    "ProviderError",
    "RateLimitError",
    "SyncCancelledError",
    "TokenExchangeError",
    "UnsupportedOperationError",
    # Models
    "AuthValidation",
    "ClientStats",
    "League",
    "LeagueSettings",
    "Player",
    "PlayerStats",
    "ProviderHealth",
    "RosterSlot",
    "SetupInstructions",
    "SyncedCounts",
    "SyncResult",
    "SyncSummary",
    "Team",
    "TeamPoints",
    "TeamRecord",
    "TokenResponse",
    # Cache
    "CacheTTL",
    "ResourceClass",
    "ResponseCache",
    "make_key",
    # Cancellation
    "CancellationToken",
]
