"""
League sync orchestrator.

Pulls one league from a provider client and writes it through a store:

  1. League info   - fetch, then upsert the league record
  2. Teams         - fetch teams with rosters, upsert each team
  3. Roster        - upsert each rostered player and its roster entry

Failures are isolated at the smallest unit that can fail: a bad team skips
that team, a bad player skips that player, and both leave an error string
on the SyncResult while the loop carries on.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from ..core.cancellation import CancellationToken, current_cancellation_token
from ..core.errors import AuthenticationError, SyncCancelledError
from ..core.models import SyncResult, Team
from ..store.base import FantasyStore

if TYPE_CHECKING:
    from ..providers.client import ProviderClient

logger = logging.getLogger(__name__)

# Slot recorded for rostered players whose provider gives no lineup position
DEFAULT_SLOT = "bench"


class LeagueSyncer:
    """Syncs leagues of one provider client into one store."""

    def __init__(self, client: "ProviderClient", store: FantasyStore):
        self.client = client
        self.store = store

    async def sync_league(
        self,
        league_id: str,
        user_id: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> SyncResult:
        """
        Sync one league.

        Args:
            league_id: Provider's league id
            user_id: User the league is synced for
            cancel_token: Checked between teams; also aborts rate-limit waits

        Returns:
            SyncResult; ``success`` is True only when no error was recorded

        Raises:
            SyncCancelledError: If ``cancel_token`` fires mid-sync
        """
        provider = self.client.provider.value
        result = SyncResult(provider=provider, league_id=str(league_id))
        context_token = current_cancellation_token.set(cancel_token) if cancel_token else None

        try:
            logger.info(f"Starting sync for {provider} league {league_id}")

            league = await self.client.get_league_info(league_id)
            if league is None:
                result.errors.append("Failed to fetch league information")
                return result

            league_key = await self.store.upsert_league(league, user_id)
            teams = await self.client.get_teams(league_id)

            for team in teams:
                if cancel_token is not None:
                    cancel_token.raise_if_cancelled()
                await self._sync_team(team, league_key, result)

            result.success = not result.errors
            logger.info(
                f"Sync completed for {provider} league {league_id}: "
                f"{result.synced_data.teams} teams, {result.synced_data.players} players, "
                f"{len(result.errors)} errors"
            )

        except SyncCancelledError:
            logger.warning(f"Sync cancelled for {provider} league {league_id}")
            raise
        except AuthenticationError as e:
            logger.error(f"Authentication failed for {provider} league {league_id}: {e}")
            result.errors.append(f"Authentication failed: {e.message}")
        except Exception as e:
            logger.error(f"League sync failed for {provider} league {league_id}: {e}", exc_info=True)
            result.errors.append(f"League sync failed: {e}")
        finally:
            result.last_sync = datetime.now(timezone.utc)
            if context_token is not None:
                current_cancellation_token.reset(context_token)

        return result

    async def _sync_team(self, team: Team, league_key: str, result: SyncResult) -> None:
        try:
            team_key = await self.store.upsert_team(team, league_key)
        except Exception as e:
            logger.error(f"Failed to sync team {team.id}: {e}")
            result.errors.append(f"Team sync failed: {team.name}: {e}")
            return

        result.synced_data.teams += 1

        for player in team.roster:
            # Sleeper rosters carry ids only, so a blank name is fine
            if not player.id:
                continue
            try:
                player_key = await self.store.upsert_player(player, league_key)
                result.synced_data.players += 1

                slot = player.roster
                await self.store.upsert_roster_entry(
                    team_key,
                    player_key,
                    slot.slot if slot else DEFAULT_SLOT,
                    slot.is_starter if slot else False,
                )
                result.synced_data.rosters += 1
            except Exception as e:
                logger.error(f"Failed to sync player {player.id} on team {team.id}: {e}")
                result.errors.append(f"Player sync failed: {player.display_name}: {e}")
