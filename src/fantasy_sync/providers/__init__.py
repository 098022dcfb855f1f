"""
Fantasy provider clients.

ProviderClient gives every platform the same async interface; the
platform-specific endpoints, auth headers and response envelopes live in
one adapter per provider, selected through the ADAPTERS registry.

Usage:
    from fantasy_sync.providers import ProviderClient

    async with ProviderClient("sleeper") as client:
        leagues = await client.get_leagues("user_123")
        teams = await client.get_teams(leagues[0].id)
"""

from .base import AdapterBase, ProviderAdapter
from .cbs import CbsAdapter
from .client import ADAPTERS, ProviderClient
from .espn import EspnAdapter
from .sleeper import SleeperAdapter
from .yahoo import YahooAdapter

__all__ = [
    "ADAPTERS",
    "AdapterBase",
    "CbsAdapter",
    "EspnAdapter",
    "ProviderAdapter",
    "ProviderClient",
    "SleeperAdapter",
    "YahooAdapter",
]
