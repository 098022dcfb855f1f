"""
PostgreSQL store.

Uses psycopg's native async support (AsyncConnectionPool) so store writes
never block the event loop that drives provider requests. Each upsert is
a single ``INSERT ... ON CONFLICT DO UPDATE`` keyed on the entity's
natural key; stat maps and provider metadata go to JSONB columns.

``ensure_tables()`` creates the four tables when absent. It is a
convenience for fresh databases, not a migration system.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import psycopg
from psycopg import sql
from psycopg.rows import dict_row
from psycopg.types.json import Json
from psycopg_pool import AsyncConnectionPool

from ..core.config import get_settings
from ..core.models import League, Player, Team
from .base import FantasyStore, make_league_key, make_player_key, make_roster_key, make_team_key

logger = logging.getLogger(__name__)

LEAGUES_TABLE = "fantasy_leagues"
TEAMS_TABLE = "fantasy_teams"
PLAYERS_TABLE = "fantasy_players"
ROSTER_TABLE = "fantasy_roster_entries"

SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {LEAGUES_TABLE} (
    key TEXT PRIMARY KEY,
    provider TEXT NOT NULL,
    external_id TEXT NOT NULL,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    sport TEXT NOT NULL,
    season TEXT NOT NULL,
    settings JSONB NOT NULL,
    is_active BOOLEAN NOT NULL DEFAULT TRUE,
    metadata JSONB,
    last_sync TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    UNIQUE (provider, external_id)
);

CREATE TABLE IF NOT EXISTS {TEAMS_TABLE} (
    key TEXT PRIMARY KEY,
    league_key TEXT NOT NULL REFERENCES {LEAGUES_TABLE}(key),
    external_id TEXT NOT NULL,
    name TEXT NOT NULL,
    abbrev TEXT,
    owner_id TEXT,
    owner_name TEXT,
    logo_url TEXT,
    wins INTEGER NOT NULL DEFAULT 0,
    losses INTEGER NOT NULL DEFAULT 0,
    ties INTEGER NOT NULL DEFAULT 0,
    points_total DOUBLE PRECISION NOT NULL DEFAULT 0,
    points_average DOUBLE PRECISION NOT NULL DEFAULT 0,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    UNIQUE (league_key, external_id)
);

CREATE TABLE IF NOT EXISTS {PLAYERS_TABLE} (
    key TEXT PRIMARY KEY,
    league_key TEXT NOT NULL REFERENCES {LEAGUES_TABLE}(key),
    external_id TEXT NOT NULL,
    name TEXT,
    position TEXT,
    team TEXT,
    status TEXT NOT NULL DEFAULT 'active',
    injury_status TEXT,
    stats JSONB,
    last_game_stats JSONB,
    projections JSONB,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    UNIQUE (external_id, league_key)
);

CREATE TABLE IF NOT EXISTS {ROSTER_TABLE} (
    key TEXT PRIMARY KEY,
    team_key TEXT NOT NULL REFERENCES {TEAMS_TABLE}(key),
    player_key TEXT NOT NULL REFERENCES {PLAYERS_TABLE}(key),
    slot TEXT NOT NULL,
    is_starter BOOLEAN NOT NULL,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    UNIQUE (team_key, player_key)
);
"""


async def _async_check_connection(conn: psycopg.AsyncConnection) -> None:
    """Validate that a pooled connection is still alive before handing it out."""
    await conn.execute(sql.SQL("SELECT 1"))


class PostgresStore(FantasyStore):
    """
    FantasyStore backed by PostgreSQL.

    The pool is created unopened; call ``open()`` (or use ``async with``)
    before the first write.
    """

    def __init__(
        self,
        connection_string: Optional[str] = None,
        min_pool_size: int = 1,
        max_pool_size: Optional[int] = None,
    ):
        settings = get_settings()
        self.connection_string = connection_string or settings.database_url
        if not self.connection_string:
            raise ValueError("DATABASE_URL environment variable required")

        self._min_pool_size = min_pool_size
        self._max_pool_size = max_pool_size or settings.database_pool_size
        self._pool = AsyncConnectionPool(
            self.connection_string,
            min_size=self._min_pool_size,
            max_size=max(self._min_pool_size, self._max_pool_size),
            kwargs={"row_factory": dict_row},
            check=_async_check_connection,
            open=False,
        )

    async def __aenter__(self) -> "PostgresStore":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def open(self) -> None:
        await self._pool.open()
        logger.info(
            f"Store pool opened (min={self._min_pool_size}, max={self._max_pool_size})"
        )

    async def close(self) -> None:
        await self._pool.close()
        logger.info("Store pool closed")

    async def _execute(self, query: str, params: Optional[tuple[Any, ...]] = None) -> None:
        async with self._pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(query, params)
            await conn.commit()

    async def ensure_tables(self) -> None:
        """Create the store tables if they do not exist."""
        await self._execute(SCHEMA)

    # =========================================================================
    # Upserts
    # =========================================================================

    async def upsert_league(self, league: League, user_id: str) -> str:
        key = make_league_key(league.provider, league.id)
        await self._execute(
            f"""
            INSERT INTO {LEAGUES_TABLE} (
                key, provider, external_id, user_id, name, sport, season,
                settings, is_active, metadata, last_sync
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, NOW())
            ON CONFLICT (provider, external_id) DO UPDATE SET
                name = excluded.name,
                season = excluded.season,
                settings = excluded.settings,
                is_active = excluded.is_active,
                metadata = excluded.metadata,
                last_sync = NOW()
            """,
            (
                key,
                league.provider,
                league.id,
                user_id,
                league.name,
                league.sport,
                league.season,
                Json(league.settings.model_dump()),
                league.is_active,
                Json(league.metadata),
            ),
        )
        return key

    async def upsert_team(self, team: Team, league_key: str) -> str:
        key = make_team_key(league_key, team.id)
        await self._execute(
            f"""
            INSERT INTO {TEAMS_TABLE} (
                key, league_key, external_id, name, abbrev, owner_id, owner_name,
                logo_url, wins, losses, ties, points_total, points_average, updated_at
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, NOW())
            ON CONFLICT (league_key, external_id) DO UPDATE SET
                name = excluded.name,
                abbrev = excluded.abbrev,
                owner_id = excluded.owner_id,
                owner_name = excluded.owner_name,
                logo_url = COALESCE(excluded.logo_url, {TEAMS_TABLE}.logo_url),
                wins = excluded.wins,
                losses = excluded.losses,
                ties = excluded.ties,
                points_total = excluded.points_total,
                points_average = excluded.points_average,
                updated_at = NOW()
            """,
            (
                key,
                league_key,
                team.id,
                team.name,
                team.abbrev,
                team.owner_id,
                team.owner_name,
                team.logo_url,
                team.record.wins,
                team.record.losses,
                team.record.ties,
                team.points.total,
                team.points.average,
            ),
        )
        return key

    async def upsert_player(self, player: Player, league_key: str) -> str:
        # Roster entries for some providers carry only an id; never
        # overwrite known details with blanks.
        key = make_player_key(league_key, player.id)
        await self._execute(
            f"""
            INSERT INTO {PLAYERS_TABLE} (
                key, league_key, external_id, name, position, team, status,
                injury_status, stats, last_game_stats, projections, updated_at
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, NOW())
            ON CONFLICT (external_id, league_key) DO UPDATE SET
                name = COALESCE(NULLIF(excluded.name, ''), {PLAYERS_TABLE}.name),
                position = COALESCE(NULLIF(excluded.position, ''), {PLAYERS_TABLE}.position),
                team = COALESCE(NULLIF(excluded.team, ''), {PLAYERS_TABLE}.team),
                status = excluded.status,
                injury_status = excluded.injury_status,
                stats = excluded.stats,
                last_game_stats = excluded.last_game_stats,
                projections = excluded.projections,
                updated_at = NOW()
            """,
            (
                key,
                league_key,
                player.id,
                player.name,
                player.position,
                player.team,
                player.status,
                player.injury_status,
                Json(player.stats.season),
                Json(player.stats.last_game),
                Json(player.stats.projections),
            ),
        )
        return key

    async def upsert_roster_entry(
        self,
        team_key: str,
        player_key: str,
        slot: str,
        is_starter: bool,
    ) -> str:
        key = make_roster_key(team_key, player_key)
        await self._execute(
            f"""
            INSERT INTO {ROSTER_TABLE} (key, team_key, player_key, slot, is_starter, updated_at)
            VALUES (%s, %s, %s, %s, %s, NOW())
            ON CONFLICT (team_key, player_key) DO UPDATE SET
                slot = excluded.slot,
                is_starter = excluded.is_starter,
                updated_at = NOW()
            """,
            (key, team_key, player_key, slot, is_starter),
        )
        return key
