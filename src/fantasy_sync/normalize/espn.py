"""
ESPN Fantasy Football normalizer.

ESPN encodes positions, pro teams and lineup slots as integer ids, and
spreads player stats over a list keyed by (statSourceId, scoringPeriodId).
The maps below translate the ids; only mismatches against our canonical
values need entries.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict

from ..core.models import League, LeagueSettings, Player, PlayerStats, RosterSlot, Team, TeamPoints, TeamRecord
from .common import average_points, first_present, numeric_map, playoff_weeks_from, to_float, to_int, to_str, validate_payload
from .status import normalize_player_status

PROVIDER = "espn"

POSITIONS: dict[int, str] = {1: "QB", 2: "RB", 3: "WR", 4: "TE", 5: "K", 16: "D/ST"}

PRO_TEAMS: dict[int, str] = {
    0: "FA", 1: "ATL", 2: "BUF", 3: "CHI", 4: "CIN", 5: "CLE", 6: "DAL", 7: "DEN",
    8: "DET", 9: "GB", 10: "TEN", 11: "IND", 12: "KC", 13: "LV", 14: "LAR", 15: "MIA",
    16: "MIN", 17: "NE", 18: "NO", 19: "NYG", 20: "NYJ", 21: "PHI", 22: "ARI", 23: "PIT",
    24: "LAC", 25: "SF", 26: "SEA", 27: "TB", 28: "WSH", 29: "CAR", 30: "JAX",
    33: "BAL", 34: "HOU",
}

LINEUP_SLOTS: dict[int, str] = {
    0: "QB", 2: "RB", 4: "WR", 6: "TE", 16: "D/ST", 17: "K",
    20: "BE", 21: "IR", 23: "FLEX",
}
NON_STARTING_SLOTS = {20, 21}

ACQUISITION_TYPES = {
    "DRAFT": "draft",
    "ADD": "free_agent",
    "WAIVER": "waiver",
    "TRADE": "trade",
}

# statId 53 is receptions in ESPN scoring items
RECEPTION_STAT_ID = 53

# statSourceId values
ACTUAL = 0
PROJECTED = 1

IdValue = Optional[Union[str, int]]


# =============================================================================
# Boundary payloads
# =============================================================================


class EspnLeaguePayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: IdValue = None
    seasonId: IdValue = None
    settings: Optional[dict[str, Any]] = None
    status: Optional[dict[str, Any]] = None
    # leagueHistory returns the name/size at the top level
    name: Optional[str] = None
    size: Optional[int] = None


class EspnPlayerPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: IdValue = None
    fullName: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    defaultPositionId: Optional[int] = None
    proTeamId: Optional[int] = None
    injuryStatus: Optional[str] = None
    injured: Optional[bool] = None
    stats: Optional[list[dict[str, Any]]] = None


class EspnRosterEntryPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    playerId: IdValue = None
    lineupSlotId: Optional[int] = None
    acquisitionType: Optional[str] = None
    playerPoolEntry: Optional[dict[str, Any]] = None


class EspnTeamPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: IdValue = None
    name: Optional[str] = None
    location: Optional[str] = None
    nickname: Optional[str] = None
    abbrev: Optional[str] = None
    logo: Optional[str] = None
    primaryOwner: Optional[str] = None
    owners: Optional[list[Any]] = None
    record: Optional[dict[str, Any]] = None
    roster: Optional[dict[str, Any]] = None
    # Member record of the primary owner, attached by the adapter
    owner: Optional[dict[str, Any]] = None


# =============================================================================
# Normalizers
# =============================================================================


def _scoring_type(scoring: dict[str, Any]) -> str:
    for item in scoring.get("scoringItems") or []:
        if isinstance(item, dict) and item.get("statId") == RECEPTION_STAT_ID:
            points = to_float(item.get("points"))
            if points >= 1:
                return "ppr"
            if points >= 0.5:
                return "half_ppr"
            return "standard"
    return "ppr" if scoring.get("scoringType") == 1 else "standard"


def _roster_size(roster_settings: dict[str, Any]) -> int:
    counts = roster_settings.get("lineupSlotCounts")
    if isinstance(counts, dict):
        return sum(to_int(count) for count in counts.values()) or 16
    if isinstance(counts, list):
        return len(counts) or 16
    return 16


def normalize_league(raw: Any, *, default_season: str) -> League:
    """Map an ESPN league (``view=mSettings``) onto League."""
    league = validate_payload(EspnLeaguePayload, raw, PROVIDER)
    settings = league.settings or {}
    schedule = settings.get("scheduleSettings") or {}
    status = league.status or {}

    regular_season_weeks = to_int(schedule.get("matchupPeriodCount"))
    playoff_start = regular_season_weeks + 1 if regular_season_weeks else None

    return League(
        id=to_str(league.id),
        provider=PROVIDER,
        name=first_present(settings.get("name"), league.name) or "Unknown League",
        sport="nfl",
        season=to_str(league.seasonId, default_season),
        settings=LeagueSettings(
            team_count=to_int(first_present(settings.get("size"), league.size), 12) or 12,
            roster_size=_roster_size(settings.get("rosterSettings") or {}),
            playoff_weeks=playoff_weeks_from(playoff_start),
            scoring_type=_scoring_type(settings.get("scoringSettings") or {}),
        ),
        is_active=bool(status.get("isActive", True)),
        metadata=raw if isinstance(raw, dict) else {},
    )


def _stat_maps(stats: list[dict[str, Any]], week: Optional[int]) -> PlayerStats:
    season: dict[str, float] = {}
    projections: dict[str, float] = {}
    last_game: dict[str, float] = {}
    latest_period = -1

    for entry in stats:
        source = entry.get("statSourceId")
        period = to_int(entry.get("scoringPeriodId"))
        values = numeric_map(entry.get("stats"))
        if entry.get("appliedTotal") is not None:
            values["points"] = to_float(entry.get("appliedTotal"))

        if period == 0:
            if source == ACTUAL:
                season = values
            elif source == PROJECTED:
                projections = values
        elif source == ACTUAL:
            if week is not None and period == week:
                last_game, latest_period = values, period
            elif week is None and period > latest_period:
                last_game, latest_period = values, period

    return PlayerStats(season=season, last_game=last_game, projections=projections)


def normalize_player(raw: Any, *, week: Optional[int] = None) -> Player:
    """Map an ESPN player object onto Player."""
    player = validate_payload(EspnPlayerPayload, raw, PROVIDER)
    name = player.fullName or " ".join(part for part in (player.firstName, player.lastName) if part)
    injury = player.injuryStatus if player.injuryStatus not in (None, "ACTIVE", "NORMAL") else None

    return Player(
        id=to_str(player.id),
        provider=PROVIDER,
        name=name,
        position=POSITIONS.get(player.defaultPositionId or -1, ""),
        team=PRO_TEAMS.get(player.proTeamId, "") if player.proTeamId is not None else "",
        status=normalize_player_status(injury or ("injured" if player.injured else None)),
        injury_status=injury,
        stats=_stat_maps(player.stats or [], week),
        metadata=raw if isinstance(raw, dict) else {},
    )


def _normalize_entry(raw_entry: Any) -> Optional[Player]:
    entry = validate_payload(EspnRosterEntryPayload, raw_entry, PROVIDER)
    raw_player = (entry.playerPoolEntry or {}).get("player")
    if not isinstance(raw_player, dict):
        return None

    player = normalize_player(raw_player)
    if not player.id and entry.playerId is not None:
        player.id = to_str(entry.playerId)

    slot_id = entry.lineupSlotId if entry.lineupSlotId is not None else 20
    player.roster = RosterSlot(
        slot=LINEUP_SLOTS.get(slot_id, str(slot_id)),
        is_starter=slot_id not in NON_STARTING_SLOTS,
        acquisition_type=ACQUISITION_TYPES.get((entry.acquisitionType or "").upper()),
    )
    return player


def _owner_name(team: EspnTeamPayload) -> str:
    owner = team.owner
    if not owner and team.owners and isinstance(team.owners[0], dict):
        owner = team.owners[0]
    if not owner:
        return "Unknown Owner"
    full_name = " ".join(part for part in (owner.get("firstName"), owner.get("lastName")) if part)
    return full_name or owner.get("displayName") or "Unknown Owner"


def normalize_team(raw: Any) -> Team:
    """Map an ESPN team (``view=mTeam&view=mRoster``) onto Team."""
    team = validate_payload(EspnTeamPayload, raw, PROVIDER)
    overall = (team.record or {}).get("overall") or {}

    wins = to_int(overall.get("wins"))
    losses = to_int(overall.get("losses"))
    total = to_float(overall.get("pointsFor"))
    location_name = " ".join(part for part in (team.location, team.nickname) if part)

    owner_id = team.primaryOwner
    if not owner_id and team.owners:
        first_owner = team.owners[0]
        owner_id = first_owner.get("id") if isinstance(first_owner, dict) else first_owner

    roster = []
    for entry in (team.roster or {}).get("entries") or []:
        player = _normalize_entry(entry)
        if player is not None:
            roster.append(player)

    return Team(
        id=to_str(team.id),
        name=team.name or location_name or "Unknown Team",
        abbrev=team.abbrev or "",
        owner_id=to_str(owner_id),
        owner_name=_owner_name(team),
        logo_url=team.logo,
        record=TeamRecord(wins=wins, losses=losses, ties=to_int(overall.get("ties"))),
        points=TeamPoints(total=total, average=average_points(total, wins, losses)),
        roster=roster,
    )
