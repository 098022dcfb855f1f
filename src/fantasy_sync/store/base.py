"""
Base store protocol.

Defines the persistence interface the sync orchestrator writes through,
so the same sync runs against Postgres or an in-memory store.

Keys are strings built from external ids, so identities never depend on
row ids handed out by a particular backend:

    league  "<provider>:<league id>"
    team    "<league key>/team/<team id>"
    player  "<league key>/player/<player id>"

A player key embeds the league key, which embeds the provider, so the same
external id under two providers or two leagues never collides.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..core.models import League, Player, Team


def make_league_key(provider: str, league_id: str) -> str:
    return f"{provider}:{league_id}"


def make_team_key(league_key: str, team_id: str) -> str:
    return f"{league_key}/team/{team_id}"


def make_player_key(league_key: str, player_id: str) -> str:
    return f"{league_key}/player/{player_id}"


def make_roster_key(team_key: str, player_key: str) -> str:
    return f"{team_key}|{player_key}"


class FantasyStore(ABC):
    """
    Abstract interface for persisting synced fantasy data.

    Every method is an idempotent upsert: writing the same entity twice
    leaves one record holding the latest values. Nothing here deletes;
    an entity missing from a later fetch is left in place.
    """

    @abstractmethod
    async def upsert_league(self, league: League, user_id: str) -> str:
        """
        Insert or update a league, unique on (provider, league id).

        Args:
            league: Normalized league
            user_id: User the league was synced for

        Returns:
            League key
        """
        ...

    @abstractmethod
    async def upsert_team(self, team: Team, league_key: str) -> str:
        """
        Insert or update a team, unique on (league key, team id).

        Returns:
            Team key
        """
        ...

    @abstractmethod
    async def upsert_player(self, player: Player, league_key: str) -> str:
        """
        Insert or update a player, unique on (player id, league key).

        Returns:
            Player key
        """
        ...

    @abstractmethod
    async def upsert_roster_entry(
        self,
        team_key: str,
        player_key: str,
        slot: str,
        is_starter: bool,
    ) -> str:
        """
        Insert or update a roster entry, unique on (team key, player key).

        Returns:
            Roster entry key
        """
        ...

    async def close(self) -> None:
        """Release backend resources (no-op by default)."""
        return None
