"""
Sleeper adapter.

Public read-only API (https://api.sleeper.app/v1); no credential. Teams are
rosters joined with league users on ``owner_id``.
"""

import logging
from typing import Any, Optional

from ..core.http import BaseApiClient
from ..core.types import Provider
from ..normalize import sleeper as sleeper_normalizer
from .base import AdapterBase, as_list

logger = logging.getLogger(__name__)


class SleeperAdapter(AdapterBase):
    """Sleeper endpoints."""

    provider = Provider.sleeper
    normalizer = sleeper_normalizer

    @property
    def has_auth(self) -> bool:
        return True

    # =========================================================================
    # Leagues
    # =========================================================================

    async def fetch_leagues(self, http: BaseApiClient, user_id: str) -> list[Any]:
        return as_list(await http.get_json(f"/user/{user_id}/leagues/nfl/{self.season}"))

    async def fetch_league(self, http: BaseApiClient, league_id: str) -> Any:
        return await http.get_json(f"/league/{league_id}")

    # =========================================================================
    # Teams
    # =========================================================================

    async def fetch_teams(self, http: BaseApiClient, league_id: str) -> list[Any]:
        users = as_list(await http.get_json(f"/league/{league_id}/users"))
        rosters = as_list(await http.get_json(f"/league/{league_id}/rosters"))

        users_by_id = {
            str(user.get("user_id")): user for user in users if isinstance(user, dict)
        }
        teams = []
        for roster in rosters:
            if not isinstance(roster, dict):
                continue
            owner = users_by_id.get(str(roster.get("owner_id")))
            teams.append({**roster, "owner": owner})
        return teams

    # =========================================================================
    # Players
    # =========================================================================

    async def fetch_player(
        self, http: BaseApiClient, player_id: str, week: Optional[int] = None
    ) -> Any:
        """
        Sleeper only serves stats for every player at once, keyed by
        player id; pick this player's line out of it.
        """
        path = f"/stats/nfl/regular/{self.season}"
        if week:
            path = f"{path}/{week}"
        all_stats = await http.get_json(path)
        if not isinstance(all_stats, dict):
            return None
        line = all_stats.get(str(player_id))
        if line is None:
            logger.debug(f"No sleeper stats for player {player_id} (week={week})")
            return None
        return {"player_id": str(player_id), "stats": line}
