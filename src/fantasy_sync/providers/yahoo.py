"""
Yahoo Fantasy Sports adapter.

OAuth bearer token required for every call; ``format=json`` selects the
JSON rendition of Yahoo's XML resources. Everything of interest sits
under ``fantasy_content`` as fragment lists and numeric-keyed
collections (see normalize.yahoo).
"""

import logging
from typing import Any, Optional

from ..core.http import BaseApiClient
from ..core.types import Provider
from ..normalize import yahoo as yahoo_normalizer
from ..normalize.yahoo import flatten, iter_collection
from .base import AdapterBase

logger = logging.getLogger(__name__)

GAME_CODE = "nfl"


def _content(response: Any) -> dict[str, Any]:
    if isinstance(response, dict) and isinstance(response.get("fantasy_content"), dict):
        return response["fantasy_content"]
    return {}


def _league_teams(response: Any) -> list[dict[str, Any]]:
    league = flatten(_content(response).get("league"))
    return [flatten(team) for team in iter_collection(league.get("teams"), "team")]


class YahooAdapter(AdapterBase):
    """Yahoo Fantasy Sports v2 endpoints."""

    provider = Provider.yahoo
    normalizer = yahoo_normalizer

    def auth_headers(self) -> dict[str, str]:
        if self.access_token:
            return {"Authorization": f"Bearer {self.access_token}"}
        return {}

    def default_params(self) -> dict[str, str]:
        return {"format": "json"}

    def require_credentials(self) -> None:
        self._require_token()

    @property
    def has_auth(self) -> bool:
        return bool(self.access_token)

    # =========================================================================
    # Leagues
    # =========================================================================

    async def fetch_leagues(self, http: BaseApiClient, user_id: str) -> list[Any]:
        """
        Leagues of the token's owner. Yahoo resolves the user from the
        token (``use_login=1``), so ``user_id`` does not reach the API.
        """
        response = await http.get_json(f"/users;use_login=1/games;game_keys={GAME_CODE}/leagues")
        leagues: list[Any] = []
        for user in iter_collection(_content(response).get("users"), "user"):
            for game in iter_collection(flatten(user).get("games"), "game"):
                leagues.extend(iter_collection(flatten(game).get("leagues"), "league"))
        return leagues

    async def fetch_league(self, http: BaseApiClient, league_id: str) -> Any:
        response = await http.get_json(f"/league/{GAME_CODE}.l.{league_id}/settings")
        return _content(response).get("league")

    # =========================================================================
    # Teams
    # =========================================================================

    async def fetch_teams(self, http: BaseApiClient, league_id: str) -> list[Any]:
        league_path = f"/league/{GAME_CODE}.l.{league_id}"
        teams = _league_teams(await http.get_json(f"{league_path}/teams/standings"))
        rosters = _league_teams(await http.get_json(f"{league_path}/teams/roster"))

        rosters_by_key = {
            roster["team_key"]: roster.get("roster") for roster in rosters if roster.get("team_key")
        }
        merged = []
        for index, team in enumerate(teams):
            roster = rosters_by_key.get(team.get("team_key"))
            if roster is None and index < len(rosters):
                roster = rosters[index].get("roster")
            merged.append({**team, "roster": roster})
        return merged

    # =========================================================================
    # Players
    # =========================================================================

    async def fetch_player(
        self, http: BaseApiClient, player_id: str, week: Optional[int] = None
    ) -> Any:
        path = f"/player/{GAME_CODE}.p.{player_id}/stats"
        if week:
            path = f"{path};type=week;week={week}"
        return _content(await http.get_json(path)).get("player")
