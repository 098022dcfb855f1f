"""Dict-backed store for tests and database-less runs."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from ..core.models import League, Player, Team
from .base import FantasyStore, make_league_key, make_player_key, make_roster_key, make_team_key


@dataclass
class RosterEntry:
    team_key: str
    player_key: str
    slot: str
    is_starter: bool


class InMemoryStore(FantasyStore):
    """
    Keeps the latest version of every upserted entity in dicts.

    ``leagues``, ``teams``, ``players`` and ``roster`` map keys to the most
    recent value, and ``writes`` counts every upsert call (including ones
    that overwrote an existing record).
    """

    def __init__(self) -> None:
        self.leagues: dict[str, dict[str, Any]] = {}
        self.teams: dict[str, Team] = {}
        self.players: dict[str, Player] = {}
        self.roster: dict[str, RosterEntry] = {}
        self.writes = 0

    async def upsert_league(self, league: League, user_id: str) -> str:
        key = make_league_key(league.provider, league.id)
        self.leagues[key] = {
            "league": league.model_copy(deep=True),
            "user_id": user_id,
            "last_sync": datetime.now(timezone.utc),
        }
        self.writes += 1
        return key

    async def upsert_team(self, team: Team, league_key: str) -> str:
        key = make_team_key(league_key, team.id)
        self.teams[key] = team.model_copy(deep=True)
        self.writes += 1
        return key

    async def upsert_player(self, player: Player, league_key: str) -> str:
        key = make_player_key(league_key, player.id)
        self.players[key] = player.model_copy(deep=True)
        self.writes += 1
        return key

    async def upsert_roster_entry(
        self,
        team_key: str,
        player_key: str,
        slot: str,
        is_starter: bool,
    ) -> str:
        key = make_roster_key(team_key, player_key)
        self.roster[key] = RosterEntry(team_key, player_key, slot, is_starter)
        self.writes += 1
        return key

    def counts(self) -> dict[str, int]:
        """Number of distinct records per entity type."""
        return {
            "leagues": len(self.leagues),
            "teams": len(self.teams),
            "players": len(self.players),
            "rosters": len(self.roster),
        }
