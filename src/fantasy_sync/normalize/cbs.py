"""CBS Sports Fantasy normalizer."""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict

from ..core.models import League, LeagueSettings, Player, PlayerStats, RosterSlot, Team, TeamPoints, TeamRecord
from .common import average_points, first_present, numeric_map, to_float, to_int, to_str, validate_payload
from .status import normalize_player_status

PROVIDER = "cbs"

SCORING_TYPES = {
    "standard": "standard",
    "ppr": "ppr",
    "full_ppr": "ppr",
    "half_ppr": "half_ppr",
    "half-ppr": "half_ppr",
    "0.5ppr": "half_ppr",
}

BENCH_SLOTS = {"BN", "BENCH", "RES", "IR"}

IdValue = Optional[Union[str, int]]


# =============================================================================
# Boundary payloads
# =============================================================================


class CbsLeaguePayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: IdValue = None
    name: Optional[str] = None
    season: IdValue = None
    teamCount: Optional[int] = None
    rosterSize: Optional[int] = None
    playoffWeeks: Optional[list[int]] = None
    scoringType: Optional[str] = None
    isActive: Optional[bool] = None


class CbsPlayerPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: IdValue = None
    name: Optional[str] = None
    fullname: Optional[str] = None
    position: Optional[str] = None
    team: Optional[str] = None
    pro_team: Optional[str] = None
    status: Optional[str] = None
    injury_status: Optional[str] = None
    injury: Optional[str] = None
    stats: Optional[dict[str, Any]] = None
    last_game_stats: Optional[dict[str, Any]] = None
    projections: Optional[dict[str, Any]] = None
    roster_pos: Optional[str] = None
    roster_status: Optional[str] = None
    acquisition: Optional[str] = None


class CbsTeamPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: IdValue = None
    name: Optional[str] = None
    abbrev: Optional[str] = None
    ownerId: IdValue = None
    ownerName: Optional[str] = None
    logoUrl: Optional[str] = None
    wins: Optional[int] = None
    losses: Optional[int] = None
    ties: Optional[int] = None
    totalPoints: Optional[float] = None
    averagePoints: Optional[float] = None
    roster: Optional[list[dict[str, Any]]] = None


# =============================================================================
# Normalizers
# =============================================================================


def normalize_league(raw: Any, *, default_season: str) -> League:
    """Map a CBS league payload onto League."""
    league = validate_payload(CbsLeaguePayload, raw, PROVIDER)

    return League(
        id=to_str(league.id),
        provider=PROVIDER,
        name=league.name or "Unknown League",
        sport="nfl",
        season=to_str(league.season, default_season),
        settings=LeagueSettings(
            team_count=league.teamCount or 12,
            roster_size=league.rosterSize or 16,
            playoff_weeks=league.playoffWeeks or [14, 15, 16, 17],
            scoring_type=SCORING_TYPES.get((league.scoringType or "").lower(), "standard"),
        ),
        is_active=True if league.isActive is None else league.isActive,
        metadata=raw if isinstance(raw, dict) else {},
    )


def _roster_slot(player: CbsPlayerPayload) -> Optional[RosterSlot]:
    slot = player.roster_pos or player.roster_status
    if not slot:
        return None
    acquisition = (player.acquisition or "").lower().replace(" ", "_")
    return RosterSlot(
        slot=slot,
        is_starter=slot.upper() not in BENCH_SLOTS,
        acquisition_type=acquisition if acquisition in ("draft", "waiver", "trade", "free_agent") else None,
    )


def normalize_player(raw: Any, *, week: Optional[int] = None) -> Player:
    """Map a CBS player payload onto Player."""
    player = validate_payload(CbsPlayerPayload, raw, PROVIDER)
    injury = first_present(player.injury_status, player.injury)
    stat_line = numeric_map(player.stats)

    return Player(
        id=to_str(player.id),
        provider=PROVIDER,
        name=first_present(player.fullname, player.name) or "",
        position=player.position or "",
        team=first_present(player.pro_team, player.team) or "",
        status=normalize_player_status(first_present(injury, player.status)),
        injury_status=injury,
        stats=PlayerStats(
            season={} if week else stat_line,
            last_game=stat_line if week else numeric_map(player.last_game_stats),
            projections=numeric_map(player.projections),
        ),
        roster=_roster_slot(player),
        metadata=raw if isinstance(raw, dict) else {},
    )


def normalize_team(raw: Any) -> Team:
    """Map a CBS team (with its merged ``roster``) onto Team."""
    team = validate_payload(CbsTeamPayload, raw, PROVIDER)
    wins = team.wins or 0
    losses = team.losses or 0
    total = to_float(team.totalPoints)
    average = (
        to_float(team.averagePoints)
        if team.averagePoints is not None
        else average_points(total, wins, losses)
    )

    return Team(
        id=to_str(team.id),
        name=team.name or "Unknown Team",
        abbrev=team.abbrev or "",
        owner_id=to_str(team.ownerId),
        owner_name=team.ownerName or "Unknown Owner",
        logo_url=team.logoUrl,
        record=TeamRecord(wins=wins, losses=losses, ties=to_int(team.ties)),
        points=TeamPoints(total=total, average=average),
        roster=[normalize_player(player) for player in team.roster or []],
    )
