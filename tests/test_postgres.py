"""
PostgreSQL store integration tests.

These tests verify the Postgres store against a real database:
- Table creation is repeatable
- UPSERT with ON CONFLICT keeps one row per natural key
- Known player details survive id-only roster upserts

Requirements:
    - DATABASE_URL must be set (tests are skipped otherwise)
"""

import uuid

import pytest

from fantasy_sync.core.models import League, Player, Team

pytestmark = pytest.mark.usefixtures("database_url")


@pytest.fixture
async def pg_store(database_url):
    from fantasy_sync.store.postgres import PostgresStore

    store = PostgresStore(database_url, max_pool_size=2)
    await store.open()
    await store.ensure_tables()
    yield store
    await store.close()


@pytest.fixture
def league_id():
    return f"pytest-{uuid.uuid4().hex[:12]}"


async def fetch_all(store, query, params):
    async with store._pool.connection() as conn:
        async with conn.cursor() as cur:
            await cur.execute(query, params)
            return await cur.fetchall()


async def cleanup(store, league_key):
    await store._execute(
        "DELETE FROM fantasy_roster_entries WHERE team_key LIKE %s", (f"{league_key}/%",)
    )
    await store._execute("DELETE FROM fantasy_players WHERE league_key = %s", (league_key,))
    await store._execute("DELETE FROM fantasy_teams WHERE league_key = %s", (league_key,))
    await store._execute("DELETE FROM fantasy_leagues WHERE key = %s", (league_key,))


class TestPostgresStore:

    async def test_ensure_tables_is_repeatable(self, pg_store):
        await pg_store.ensure_tables()

    async def test_upserts_keep_one_row(self, pg_store, league_id):
        league = League(id=league_id, provider="sleeper", name="PG League", season="2025")
        league_key = await pg_store.upsert_league(league, "user1")
        try:
            for name in ("First", "Second"):
                team_key = await pg_store.upsert_team(Team(id="1", name=name), league_key)
                player_key = await pg_store.upsert_player(
                    Player(id="p1", provider="sleeper", name="Runner"), league_key
                )
                await pg_store.upsert_roster_entry(team_key, player_key, "RB", True)
            await pg_store.upsert_league(league, "user1")

            teams = await fetch_all(
                pg_store, "SELECT name FROM fantasy_teams WHERE league_key = %s", (league_key,)
            )
            entries = await fetch_all(
                pg_store, "SELECT slot FROM fantasy_roster_entries WHERE team_key = %s", (team_key,)
            )
            assert [row["name"] for row in teams] == ["Second"]
            assert [row["slot"] for row in entries] == ["RB"]
        finally:
            await cleanup(pg_store, league_key)

    async def test_id_only_upsert_keeps_details(self, pg_store, league_id):
        league = League(id=league_id, provider="sleeper", season="2025")
        league_key = await pg_store.upsert_league(league, "user1")
        try:
            await pg_store.upsert_player(
                Player(id="4046", provider="sleeper", name="Known Name", position="QB"), league_key
            )
            await pg_store.upsert_player(Player(id="4046", provider="sleeper"), league_key)

            rows = await fetch_all(
                pg_store,
                "SELECT name, position FROM fantasy_players WHERE league_key = %s",
                (league_key,),
            )
            assert rows == [{"name": "Known Name", "position": "QB"}]
        finally:
            await cleanup(pg_store, league_key)
