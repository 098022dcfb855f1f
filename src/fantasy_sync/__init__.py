"""
fantasy-sync

Async client library that pulls league, team, roster and player data from
Yahoo Fantasy, ESPN Fantasy, CBS Sports Fantasy and Sleeper, normalizes it
into one domain model and upserts it into a store.

Key Features:
- One ProviderClient per (provider, credential) with its own cache and rate limiter
- Graceful degradation on provider failures; HTTP 401 surfaced for re-auth
- Per-player failure isolation during league syncs
- Concurrent multi-provider sync with cooperative cancellation

Usage:
    from fantasy_sync import create_fantasy_provider_manager

    manager = create_fantasy_provider_manager()          # Sleeper ready
    manager.initialize_provider("yahoo", access_token=token)
    summary = await manager.sync_all_user_leagues("user_123")
    print(summary.total_leagues, summary.errors)
    await manager.close()
"""

from .core import (
    AuthenticationError,
    CancellationToken,
    ExternalAPIError,
    League,
    Player,
    Provider,
    ProviderError,
    Settings,
    SyncCancelledError,
    SyncResult,
    SyncSummary,
    Team,
    TokenExchangeError,
    UnsupportedOperationError,
    get_settings,
)
from .manager import FantasyProviderManager, create_fantasy_provider_manager
from .normalize import normalize_player_status
from .oauth import (
    build_authorization_url,
    exchange_code_for_token,
    generate_oauth_url,
    get_provider_setup_instructions,
    refresh_access_token,
    validate_provider_auth,
)
from .providers import ProviderClient
from .store import FantasyStore, InMemoryStore
from .sync import LeagueSyncer

__version__ = "1.0.0"

__all__ = [
    # Manager
    "FantasyProviderManager",
    "create_fantasy_provider_manager",
    # Client & sync
    "ProviderClient",
    "LeagueSyncer",
    # Store
    "FantasyStore",
    "InMemoryStore",
    # OAuth
    "build_authorization_url",
    "exchange_code_for_token",
    "generate_oauth_url",
    "get_provider_setup_instructions",
    "refresh_access_token",
    "validate_provider_auth",
    # Normalization
    "normalize_player_status",
    # Core
    "CancellationToken",
    "League",
    "Player",
    "Provider",
    "Settings",
    "SyncResult",
    "SyncSummary",
    "Team",
    "get_settings",
    # Errors
    "AuthenticationError",
    "ExternalAPIError",
    "ProviderError",
    "SyncCancelledError",
    "TokenExchangeError",
    "UnsupportedOperationError",
]
