"""
Yahoo Fantasy Sports normalizer.

Yahoo's JSON format is a literal translation of its XML API: an entity is a
list of single-key fragments (``[{"league_key": ...}, {"name": ...}, ...]``)
and a collection is a dict keyed by "0", "1", ... plus a "count". Use
``flatten`` and ``iter_collection`` before reading anything.
"""

from __future__ import annotations

from typing import Any, Iterator, Optional, Union

from pydantic import BaseModel, ConfigDict

from ..core.models import League, LeagueSettings, Player, PlayerStats, RosterSlot, Team, TeamPoints, TeamRecord
from .common import average_points, first_present, playoff_weeks_from, to_float, to_int, to_str, validate_payload
from .status import normalize_player_status

PROVIDER = "yahoo"

# stat_id 11 is receptions in Yahoo's football stat categories
RECEPTION_STAT_ID = "11"

NON_STARTING_POSITIONS = {"BN", "IR", "IR+", "NA"}

IdValue = Optional[Union[str, int]]


# =============================================================================
# Fragment helpers
# =============================================================================


def flatten(fragments: Any) -> dict[str, Any]:
    """Merge a list of single-key fragments (nested lists included) into one dict."""
    if isinstance(fragments, dict):
        return dict(fragments)
    merged: dict[str, Any] = {}
    if isinstance(fragments, list):
        for fragment in fragments:
            if isinstance(fragment, dict):
                merged.update(fragment)
            elif isinstance(fragment, list):
                merged.update(flatten(fragment))
    return merged


def iter_collection(collection: Any, key: str) -> Iterator[Any]:
    """
    Yield ``item[key]`` for each member of a numeric-keyed collection.

    ``{"0": {"team": [...]}, "1": {"team": [...]}, "count": 2}`` yields the
    two team fragment lists in index order. Plain lists are accepted too.
    """
    if isinstance(collection, list):
        for item in collection:
            if isinstance(item, dict) and key in item:
                yield item[key]
            else:
                yield item
        return
    if not isinstance(collection, dict):
        return
    for index in sorted((k for k in collection if str(k).isdigit()), key=int):
        item = collection[index]
        if isinstance(item, dict) and key in item:
            yield item[key]


def _stat_map(raw_stats: Any) -> dict[str, float]:
    result: dict[str, float] = {}
    if not isinstance(raw_stats, dict):
        return result
    for entry in raw_stats.get("stats") or []:
        stat = entry.get("stat") if isinstance(entry, dict) else None
        if not isinstance(stat, dict) or stat.get("stat_id") is None:
            continue
        value = stat.get("value")
        if value in (None, "", "-"):
            continue
        result[str(stat["stat_id"])] = to_float(value)
    return result


# =============================================================================
# Boundary payloads (validated after flattening)
# =============================================================================


class YahooLeaguePayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    league_key: Optional[str] = None
    league_id: IdValue = None
    name: Optional[str] = None
    num_teams: IdValue = None
    season: IdValue = None
    end_week: IdValue = None
    is_finished: IdValue = None
    settings: Any = None


class YahooPlayerPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    player_key: Optional[str] = None
    player_id: IdValue = None
    name: Optional[dict[str, Any]] = None
    display_position: Optional[str] = None
    editorial_team_abbr: Optional[str] = None
    status: Optional[str] = None
    status_full: Optional[str] = None
    injury_note: Optional[str] = None
    selected_position: Any = None
    player_stats: Optional[dict[str, Any]] = None
    player_points: Optional[dict[str, Any]] = None
    player_projected_points: Optional[dict[str, Any]] = None


class YahooTeamPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    team_key: Optional[str] = None
    team_id: IdValue = None
    name: Optional[str] = None
    managers: Any = None
    team_logos: Any = None
    team_points: Optional[dict[str, Any]] = None
    team_standings: Optional[dict[str, Any]] = None
    roster: Any = None


# =============================================================================
# Normalizers
# =============================================================================


def _scoring_type(settings: dict[str, Any]) -> str:
    modifiers = settings.get("stat_modifiers")
    if not isinstance(modifiers, dict):
        return "standard"
    for entry in modifiers.get("stats") or []:
        stat = entry.get("stat") if isinstance(entry, dict) else None
        if isinstance(stat, dict) and str(stat.get("stat_id")) == RECEPTION_STAT_ID:
            points = to_float(stat.get("value"))
            if points >= 1:
                return "ppr"
            if points >= 0.5:
                return "half_ppr"
    return "standard"


def _roster_size(settings: dict[str, Any]) -> int:
    total = 0
    for position in iter_collection(settings.get("roster_positions"), "roster_position"):
        if isinstance(position, dict):
            total += to_int(position.get("count"), 1)
    return total or 16


def normalize_league(raw: Any, *, default_season: str) -> League:
    """
    Map a Yahoo league (fragment list or flattened dict) onto League.

    ``id`` is the numeric league id used in request paths; the
    game-qualified ``league_key`` is kept in metadata.
    """
    flat = flatten(raw)
    league = validate_payload(YahooLeaguePayload, flat, PROVIDER)
    settings = flatten(league.settings)

    league_id = league.league_id
    if league_id is None and league.league_key:
        league_id = league.league_key.rsplit(".", 1)[-1]

    return League(
        id=to_str(league_id),
        provider=PROVIDER,
        name=league.name or "Unknown League",
        sport="nfl",
        season=to_str(league.season, default_season),
        settings=LeagueSettings(
            team_count=to_int(league.num_teams, 12) or 12,
            roster_size=_roster_size(settings),
            playoff_weeks=playoff_weeks_from(settings.get("playoff_start_week"), league.end_week),
            scoring_type=_scoring_type(settings),
        ),
        is_active=to_int(league.is_finished) != 1,
        metadata=flat,
    )


def _roster_slot(selected_position: Any) -> Optional[RosterSlot]:
    position = flatten(selected_position).get("position")
    if not position:
        return None
    return RosterSlot(slot=position, is_starter=position not in NON_STARTING_POSITIONS)


def normalize_player(raw: Any, *, week: Optional[int] = None) -> Player:
    """Map a Yahoo player (fragments plus stats sub-resources) onto Player."""
    flat = flatten(raw)
    player = validate_payload(YahooPlayerPayload, flat, PROVIDER)

    player_id = player.player_id
    if player_id is None and player.player_key:
        player_id = player.player_key.rsplit(".", 1)[-1]

    stat_line = _stat_map(player.player_stats)
    if player.player_points and player.player_points.get("total") is not None:
        stat_line["points"] = to_float(player.player_points.get("total"))
    projections: dict[str, float] = {}
    if player.player_projected_points and player.player_projected_points.get("total") is not None:
        projections["points"] = to_float(player.player_projected_points.get("total"))

    injury = first_present(player.injury_note, player.status_full)

    return Player(
        id=to_str(player_id),
        provider=PROVIDER,
        name=to_str((player.name or {}).get("full")),
        position=player.display_position or "",
        team=(player.editorial_team_abbr or "").upper(),
        status=normalize_player_status(player.status),
        injury_status=injury,
        stats=PlayerStats(
            season={} if week else stat_line,
            last_game=stat_line if week else {},
            projections=projections,
        ),
        roster=_roster_slot(player.selected_position),
        metadata=flat,
    )


def _roster_players(roster: Any) -> list[Any]:
    if isinstance(roster, list):
        return list(iter_collection(roster, "player"))
    if not isinstance(roster, dict):
        return []
    players = roster.get("players")
    if players is None:
        # {"coverage_type": ..., "0": {"players": {...}}}
        players = (roster.get("0") or {}).get("players")
    return list(iter_collection(players, "player"))


def _manager(managers: Any) -> dict[str, Any]:
    for manager in iter_collection(managers, "manager"):
        if isinstance(manager, dict):
            return manager
    return {}


def _logo_url(logos: Any) -> Optional[str]:
    for logo in iter_collection(logos, "team_logo"):
        if isinstance(logo, dict) and logo.get("url"):
            return logo["url"]
    return None


def normalize_team(raw: Any) -> Team:
    """Map a Yahoo team (with its ``roster`` attached) onto Team."""
    flat = flatten(raw)
    team = validate_payload(YahooTeamPayload, flat, PROVIDER)
    outcomes = (team.team_standings or {}).get("outcome_totals") or {}
    manager = _manager(team.managers)

    wins = to_int(outcomes.get("wins"))
    losses = to_int(outcomes.get("losses"))
    total = to_float((team.team_points or {}).get("total"))
    team_key = team.team_key or ""

    return Team(
        id=to_str(first_present(team.team_id, team_key.rsplit(".", 1)[-1])),
        name=team.name or "Unknown Team",
        owner_id=to_str(first_present(manager.get("guid"), manager.get("manager_id"))),
        owner_name=manager.get("nickname") or "Unknown Owner",
        logo_url=_logo_url(team.team_logos),
        record=TeamRecord(wins=wins, losses=losses, ties=to_int(outcomes.get("ties"))),
        points=TeamPoints(total=total, average=average_points(total, wins, losses)),
        roster=[normalize_player(player) for player in _roster_players(team.roster)],
    )
