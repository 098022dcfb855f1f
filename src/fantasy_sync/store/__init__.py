"""
Store abstraction layer.

Provides a backend-agnostic persistence interface for synced leagues,
teams, players and roster entries.

Usage:
    from fantasy_sync.store import get_store

    store = await get_store()          # Postgres when DATABASE_URL is set
    await store.upsert_league(league, user_id="u1")
"""

from .base import (
    FantasyStore,
    make_league_key,
    make_player_key,
    make_roster_key,
    make_team_key,
)
from .memory import InMemoryStore

__all__ = [
    "FantasyStore",
    "InMemoryStore",
    "get_store",
    "make_league_key",
    "make_player_key",
    "make_roster_key",
    "make_team_key",
]


async def get_store(database_url: str | None = None) -> FantasyStore:
    """
    Get a ready-to-use store.

    Returns an opened PostgresStore (tables ensured) when a database URL is
    given or configured, otherwise an InMemoryStore.
    """
    from ..core.config import get_settings

    url = database_url or get_settings().database_url
    if not url:
        return InMemoryStore()

    from .postgres import PostgresStore

    store = PostgresStore(url)
    await store.open()
    await store.ensure_tables()
    return store
