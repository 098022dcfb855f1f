"""
CBS Sports Fantasy adapter.

OAuth bearer token required for every call. Team standings and rosters
come from separate endpoints and are merged on ``teamId``.
"""

import logging
from typing import Any, Optional

from ..core.http import BaseApiClient
from ..core.types import Provider
from ..normalize import cbs as cbs_normalizer
from .base import AdapterBase, as_list, unwrap

logger = logging.getLogger(__name__)


class CbsAdapter(AdapterBase):
    """CBS Sports endpoints."""

    provider = Provider.cbs
    normalizer = cbs_normalizer

    def auth_headers(self) -> dict[str, str]:
        if self.access_token:
            return {"Authorization": f"Bearer {self.access_token}"}
        return {}

    def require_credentials(self) -> None:
        self._require_token()

    @property
    def has_auth(self) -> bool:
        return bool(self.access_token)

    # =========================================================================
    # Leagues
    # =========================================================================

    async def fetch_leagues(self, http: BaseApiClient, user_id: str) -> list[Any]:
        response = await http.get_json(
            f"/users/{user_id}/leagues",
            params={"sport": "football", "season": self.season},
        )
        if isinstance(response, dict):
            return as_list(response.get("leagues"))
        return as_list(response)

    async def fetch_league(self, http: BaseApiClient, league_id: str) -> Any:
        return unwrap(await http.get_json(f"/leagues/{league_id}"), "league")

    # =========================================================================
    # Teams
    # =========================================================================

    async def fetch_teams(self, http: BaseApiClient, league_id: str) -> list[Any]:
        teams_response = await http.get_json(f"/leagues/{league_id}/teams")
        rosters_response = await http.get_json(f"/leagues/{league_id}/rosters")

        teams = as_list(teams_response.get("teams")) if isinstance(teams_response, dict) else []
        rosters = as_list(rosters_response.get("rosters")) if isinstance(rosters_response, dict) else []
        rosters_by_team = {
            str(roster.get("teamId")): as_list(roster.get("players"))
            for roster in rosters
            if isinstance(roster, dict)
        }
        return [
            {**team, "roster": rosters_by_team.get(str(team.get("id")), [])}
            for team in teams
            if isinstance(team, dict)
        ]

    # =========================================================================
    # Players
    # =========================================================================

    async def fetch_player(
        self, http: BaseApiClient, player_id: str, week: Optional[int] = None
    ) -> Any:
        params = {"period": week} if week else None
        response = await http.get_json(f"/players/{player_id}/stats", params=params)
        return unwrap(response, "player")
