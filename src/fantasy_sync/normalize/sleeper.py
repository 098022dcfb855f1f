"""
Sleeper normalizer.

Sleeper is public and its payloads are flat, but teams do not exist as
such: a team is a roster (wins, points, player ids) joined with the league
user who owns it. The provider adapter performs that join and hands the
roster here with an ``owner`` key attached.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict

from ..core.models import League, LeagueSettings, Player, PlayerStats, RosterSlot, Team, TeamPoints, TeamRecord
from .common import average_points, numeric_map, playoff_weeks_from, to_float, to_int, to_str, validate_payload
from .status import normalize_player_status

PROVIDER = "sleeper"
AVATAR_URL = "https://sleepercdn.com/avatars/thumbs/{avatar}"

# Sleeper fills empty starter slots with "0"
EMPTY_SLOT = "0"

IdValue = Optional[Union[str, int]]
IdList = Optional[list[Union[str, int]]]


# =============================================================================
# Boundary payloads
# =============================================================================


class SleeperLeaguePayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    league_id: IdValue = None
    name: Optional[str] = None
    season: IdValue = None
    status: Optional[str] = None
    sport: Optional[str] = None
    total_rosters: Optional[int] = None
    roster_positions: Optional[list[str]] = None
    scoring_settings: Optional[dict[str, Any]] = None
    settings: Optional[dict[str, Any]] = None


class SleeperUserPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    user_id: IdValue = None
    display_name: Optional[str] = None
    avatar: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None


class SleeperRosterPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    roster_id: IdValue = None
    owner_id: IdValue = None
    players: IdList = None
    starters: IdList = None
    reserve: IdList = None
    taxi: IdList = None
    settings: Optional[dict[str, Any]] = None
    owner: Optional[SleeperUserPayload] = None


class SleeperPlayerPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    player_id: IdValue = None
    full_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    position: Optional[str] = None
    team: Optional[str] = None
    status: Optional[str] = None
    injury_status: Optional[str] = None
    injury_notes: Optional[str] = None
    stats: Optional[dict[str, Any]] = None
    projections: Optional[dict[str, Any]] = None
    roster: Optional[RosterSlot] = None


# =============================================================================
# Normalizers
# =============================================================================


def _scoring_type(scoring: dict[str, Any]) -> str:
    rec = to_float(scoring.get("rec"))
    if rec >= 1:
        return "ppr"
    if rec >= 0.5:
        return "half_ppr"
    return "standard"


def normalize_league(raw: Any, *, default_season: str) -> League:
    """Map a Sleeper ``/league/{id}`` payload onto League."""
    league = validate_payload(SleeperLeaguePayload, raw, PROVIDER)
    settings = league.settings or {}
    roster_positions = league.roster_positions or []

    return League(
        id=to_str(league.league_id),
        provider=PROVIDER,
        name=league.name or "Unknown League",
        sport=league.sport or "nfl",
        season=to_str(league.season, default_season),
        settings=LeagueSettings(
            team_count=league.total_rosters or 12,
            roster_size=len(roster_positions) or 16,
            playoff_weeks=playoff_weeks_from(settings.get("playoff_week_start")),
            scoring_type=_scoring_type(league.scoring_settings or {}),
        ),
        is_active=league.status == "in_season",
        metadata=raw if isinstance(raw, dict) else {},
    )


def _team_name(roster: SleeperRosterPayload) -> str:
    owner = roster.owner
    if owner is not None:
        team_name = (owner.metadata or {}).get("team_name")
        if team_name:
            return str(team_name)
        if owner.display_name:
            return owner.display_name
    return f"Team {roster.roster_id}"


def _ids(values: Optional[list[Union[str, int]]]) -> set[str]:
    return {str(value) for value in values or []}


def _roster_slot(player_id: str, roster: SleeperRosterPayload) -> RosterSlot:
    if player_id in _ids(roster.starters):
        return RosterSlot(slot="starter", is_starter=True)
    if player_id in _ids(roster.reserve):
        return RosterSlot(slot="reserve", is_starter=False)
    if player_id in _ids(roster.taxi):
        return RosterSlot(slot="taxi", is_starter=False)
    return RosterSlot(slot="bench", is_starter=False)


def normalize_team(raw: Any) -> Team:
    """Map a Sleeper roster (with its ``owner`` user attached) onto Team."""
    roster = validate_payload(SleeperRosterPayload, raw, PROVIDER)
    settings = roster.settings or {}
    owner = roster.owner

    wins = to_int(settings.get("wins"))
    losses = to_int(settings.get("losses"))
    # Sleeper splits fantasy points into an integer and a hundredths part
    total = to_int(settings.get("fpts")) + to_int(settings.get("fpts_decimal")) / 100

    players = [
        Player(id=str(player_id), provider=PROVIDER, roster=_roster_slot(str(player_id), roster))
        for player_id in (roster.players or [])
        if player_id and str(player_id) != EMPTY_SLOT
    ]

    return Team(
        id=to_str(roster.roster_id),
        name=_team_name(roster),
        abbrev=f"T{roster.roster_id}",
        owner_id=to_str(roster.owner_id),
        owner_name=(owner.display_name if owner else None) or "Unknown Owner",
        logo_url=AVATAR_URL.format(avatar=owner.avatar) if owner and owner.avatar else None,
        record=TeamRecord(wins=wins, losses=losses, ties=to_int(settings.get("ties"))),
        points=TeamPoints(total=total, average=average_points(total, wins, losses)),
        roster=players,
    )


def normalize_player(raw: Any, *, week: Optional[int] = None) -> Player:
    """
    Map a Sleeper player object, or a stats line from ``/stats``, onto Player.

    Stats lines are passed as ``{"player_id": ..., "stats": {...}}``; with a
    week they describe that game, otherwise the season.
    """
    player = validate_payload(SleeperPlayerPayload, raw, PROVIDER)
    name = player.full_name or " ".join(
        part for part in (player.first_name, player.last_name) if part
    )
    stat_line = numeric_map(player.stats)

    return Player(
        id=to_str(player.player_id),
        provider=PROVIDER,
        name=name,
        position=player.position or "",
        team=player.team or "",
        status=normalize_player_status(player.injury_status or player.status),
        injury_status=player.injury_notes or player.injury_status,
        stats=PlayerStats(
            season={} if week else stat_line,
            last_game=stat_line if week else {},
            projections=numeric_map(player.projections),
        ),
        roster=player.roster,
        metadata=raw if isinstance(raw, dict) else {},
    )
