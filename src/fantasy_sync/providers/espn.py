"""
ESPN Fantasy Football adapter.

Public leagues need no credential; private leagues need the ``espn_s2``
and ``SWID`` cookies, passed through verbatim as a Cookie header. The
response shape is selected with repeated ``view`` query parameters.
"""

import logging
from typing import Any, Optional

from ..core.http import BaseApiClient
from ..core.types import Provider
from ..normalize import espn as espn_normalizer
from .base import AdapterBase, as_list, unwrap

logger = logging.getLogger(__name__)


class EspnAdapter(AdapterBase):
    """ESPN endpoints under ``/seasons/{season}/segments/0``."""

    provider = Provider.espn
    normalizer = espn_normalizer

    @property
    def _segment(self) -> str:
        return f"/seasons/{self.season}/segments/0"

    def auth_headers(self) -> dict[str, str]:
        if self.cookie_string:
            return {"Cookie": self.cookie_string}
        return {}

    @property
    def has_auth(self) -> bool:
        return bool(self.cookie_string)

    # =========================================================================
    # Leagues
    # =========================================================================

    async def fetch_leagues(self, http: BaseApiClient, user_id: str) -> list[Any]:
        # ESPN has no per-user listing; league history covers the
        # leagues visible to the supplied cookies.
        response = await http.get_json(
            f"{self._segment}/leagueHistory/1", params=[("view", "mTeam")]
        )
        if isinstance(response, list):
            return response
        if isinstance(response, dict):
            return as_list(response.get("leagues"))
        return []

    async def fetch_league(self, http: BaseApiClient, league_id: str) -> Any:
        return await http.get_json(
            f"{self._segment}/leagues/{league_id}", params=[("view", "mSettings")]
        )

    # =========================================================================
    # Teams
    # =========================================================================

    async def fetch_teams(self, http: BaseApiClient, league_id: str) -> list[Any]:
        response = await http.get_json(
            f"{self._segment}/leagues/{league_id}",
            params=[("view", "mTeam"), ("view", "mRoster")],
        )
        if not isinstance(response, dict):
            return []

        members = {
            member.get("id"): member
            for member in as_list(response.get("members"))
            if isinstance(member, dict)
        }
        teams = []
        for team in as_list(response.get("teams")):
            if not isinstance(team, dict):
                continue
            teams.append({**team, "owner": members.get(team.get("primaryOwner"))})
        return teams

    # =========================================================================
    # Players
    # =========================================================================

    async def fetch_player(
        self, http: BaseApiClient, player_id: str, week: Optional[int] = None
    ) -> Any:
        params = {"scoringPeriodId": week} if week else None
        response = await http.get_json(f"{self._segment}/players/{player_id}", params=params)
        if isinstance(response, list):
            response = response[0] if response else None
        return unwrap(response, "player")
