"""Tests for the in-memory store and store key scheme."""

from fantasy_sync.core.config import get_settings
from fantasy_sync.core.models import League, Player, Team
from fantasy_sync.store import InMemoryStore, get_store
from fantasy_sync.store.base import make_league_key, make_player_key, make_roster_key, make_team_key


def make_league(provider: str = "sleeper", league_id: str = "L1", name: str = "League") -> League:
    return League(id=league_id, provider=provider, name=name, season="2025")


class TestKeys:

    def test_key_formats(self):
        league_key = make_league_key("espn", "42")
        team_key = make_team_key(league_key, "3")
        player_key = make_player_key(league_key, "100")

        assert league_key == "espn:42"
        assert team_key == "espn:42/team/3"
        assert player_key == "espn:42/player/100"
        assert make_roster_key(team_key, player_key) == "espn:42/team/3|espn:42/player/100"


class TestInMemoryStore:

    async def test_upserts_are_idempotent(self, store):
        league = make_league()
        team = Team(id="1", name="Team One")
        player = Player(id="p1", provider="sleeper", name="Runner")

        for _ in range(2):
            league_key = await store.upsert_league(league, "user1")
            team_key = await store.upsert_team(team, league_key)
            player_key = await store.upsert_player(player, league_key)
            await store.upsert_roster_entry(team_key, player_key, "RB", True)

        assert store.counts() == {"leagues": 1, "teams": 1, "players": 1, "rosters": 1}
        assert store.writes == 8

    async def test_latest_values_win(self, store):
        league_key = await store.upsert_league(make_league(name="Old Name"), "user1")
        await store.upsert_league(make_league(name="New Name"), "user1")
        await store.upsert_team(Team(id="1", name="Before"), league_key)
        await store.upsert_team(Team(id="1", name="After"), league_key)

        assert store.leagues[league_key]["league"].name == "New Name"
        assert store.teams[make_team_key(league_key, "1")].name == "After"

    async def test_same_player_id_under_two_providers(self, store):
        yahoo_key = await store.upsert_league(make_league("yahoo", "1"), "user1")
        espn_key = await store.upsert_league(make_league("espn", "1"), "user1")

        yahoo_player = await store.upsert_player(
            Player(id="123", provider="yahoo", name="Yahoo Name"), yahoo_key
        )
        espn_player = await store.upsert_player(
            Player(id="123", provider="espn", name="ESPN Name"), espn_key
        )

        assert yahoo_player != espn_player
        assert store.players[yahoo_player].name == "Yahoo Name"
        assert store.players[espn_player].name == "ESPN Name"
        assert store.counts()["players"] == 2

    async def test_same_player_in_two_leagues_of_one_provider(self, store):
        first = await store.upsert_league(make_league("sleeper", "A"), "user1")
        second = await store.upsert_league(make_league("sleeper", "B"), "user1")
        player = Player(id="4046", provider="sleeper")

        assert await store.upsert_player(player, first) != await store.upsert_player(player, second)

    async def test_stored_models_are_copies(self, store):
        team = Team(id="1", name="Original")
        key = await store.upsert_team(team, "sleeper:L1")
        team.name = "Mutated"

        assert store.teams[key].name == "Original"

    async def test_roster_entry(self, store):
        key = await store.upsert_roster_entry("t", "p", "bench", False)
        entry = store.roster[key]

        assert (entry.team_key, entry.player_key, entry.slot, entry.is_starter) == ("t", "p", "bench", False)

    async def test_user_recorded_with_league(self, store):
        key = await store.upsert_league(make_league(), "user9")
        assert store.leagues[key]["user_id"] == "user9"
        assert store.leagues[key]["last_sync"] is not None


class TestGetStore:

    async def test_without_database_url(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        get_settings.cache_clear()
        try:
            store = await get_store(None)
        finally:
            get_settings.cache_clear()
        assert isinstance(store, InMemoryStore)
        await store.close()
