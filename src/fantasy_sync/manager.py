"""
Multi-provider manager.

Holds at most one ProviderClient per provider and is the only place that
aggregates across providers. ``sync_all_user_leagues`` runs each
provider's chain concurrently; within a provider, leagues sync one after
another so that provider's rate limiter sees a single caller.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

import httpx

from .core.cancellation import CancellationToken, current_cancellation_token
from .core.config import Settings, get_settings
from .core.errors import AuthenticationError, SyncCancelledError, UnsupportedOperationError
from .core.models import ClientStats, ProviderHealth, SyncResult, SyncSummary
from .core.types import Provider, to_provider
from .providers.client import ProviderClient
from .store.base import FantasyStore
from .store.memory import InMemoryStore

logger = logging.getLogger(__name__)

AUTH_FAILURE_PREFIX = "Authentication failed"


@dataclass
class _ProviderOutcome:
    """Everything one provider's sync chain contributes to the summary."""

    provider: Provider
    results: list[SyncResult] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    synced_leagues: int = 0
    reauth_required: bool = False


class FantasyProviderManager:
    """
    Coordinates provider clients for one user session.

    Usage:
        manager = FantasyProviderManager(store=store)
        manager.initialize_provider("yahoo", access_token=token)
        manager.initialize_provider("sleeper")
        summary = await manager.sync_all_user_leagues("user_123")
        await manager.close()
    """

    def __init__(
        self,
        store: Optional[FantasyStore] = None,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.store: FantasyStore = store if store is not None else InMemoryStore()
        self.settings = settings or get_settings()
        self._transport = transport
        self._providers: dict[Provider, ProviderClient] = {}
        # Replaced clients; their HTTP connections are released in close()
        self._retired: list[ProviderClient] = []

    # =========================================================================
    # Provider registry
    # =========================================================================

    def initialize_provider(
        self,
        provider: str | Provider,
        access_token: Optional[str] = None,
        cookie_string: Optional[str] = None,
    ) -> ProviderClient:
        """Create (or replace) the client for a provider."""
        key = to_provider(provider)
        previous = self._providers.get(key)
        if previous is not None:
            self._retired.append(previous)

        client = ProviderClient(
            key,
            access_token=access_token,
            cookie_string=cookie_string,
            store=self.store,
            settings=self.settings,
            transport=self._transport,
        )
        self._providers[key] = client
        logger.info(f"Initialized {key.value} provider")
        return client

    def get_provider(self, provider: str | Provider) -> Optional[ProviderClient]:
        try:
            return self._providers.get(to_provider(provider))
        except UnsupportedOperationError:
            return None

    @property
    def providers(self) -> list[Provider]:
        return list(self._providers)

    # =========================================================================
    # Sync
    # =========================================================================

    async def _sync_provider(
        self,
        provider: Provider,
        client: ProviderClient,
        user_id: str,
        cancel_token: Optional[CancellationToken],
    ) -> _ProviderOutcome:
        outcome = _ProviderOutcome(provider=provider)
        name = provider.value
        logger.info(f"Syncing {name} leagues...")

        try:
            leagues = await client.get_leagues(user_id)
        except SyncCancelledError:
            raise
        except AuthenticationError as e:
            outcome.errors.append(f"Failed to fetch {name} leagues: {e.message}")
            outcome.reauth_required = True
            return outcome
        except Exception as e:
            logger.error(f"Failed to fetch {name} leagues: {e}", exc_info=True)
            outcome.errors.append(f"Failed to fetch {name} leagues: {e}")
            return outcome

        for league in leagues:
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()

            if league.is_fallback:
                outcome.errors.append(
                    f"Failed to fetch {name} leagues: provider unavailable, "
                    f"skipped placeholder league {league.name}"
                )
                continue

            result = await client.sync_league_to_database(league.id, user_id, cancel_token)
            outcome.results.append(result)

            if result.success:
                outcome.synced_leagues += 1
                logger.info(f"Synced {name} league: {league.name}")
            else:
                outcome.errors.append(f"{name} league {league.name}: {', '.join(result.errors)}")
                if any(error.startswith(AUTH_FAILURE_PREFIX) for error in result.errors):
                    outcome.reauth_required = True

        return outcome

    async def sync_all_user_leagues(
        self,
        user_id: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> SyncSummary:
        """
        Sync every league of a user across all initialized providers.

        Provider chains run concurrently and are all joined; one provider
        failing never stops another.

        Raises:
            SyncCancelledError: If ``cancel_token`` fires; outstanding
                provider chains are cancelled first
        """
        results: dict[str, list[SyncResult]] = {provider.value: [] for provider in Provider}
        logger.info(f"Starting full sync for user {user_id}...")

        # Tasks copy the current context, so set the token before creating them
        context_token = current_cancellation_token.set(cancel_token)
        try:
            tasks = [
                asyncio.create_task(self._sync_provider(provider, client, user_id, cancel_token))
                for provider, client in self._providers.items()
            ]
        finally:
            current_cancellation_token.reset(context_token)

        outcomes = await self._join(tasks, cancel_token)

        errors: list[str] = []
        reauth_required: list[str] = []
        total_leagues = 0
        for outcome in outcomes:
            results[outcome.provider.value] = outcome.results
            errors.extend(outcome.errors)
            total_leagues += outcome.synced_leagues
            if outcome.reauth_required:
                reauth_required.append(outcome.provider.value)

        logger.info(f"Sync completed. {total_leagues} leagues synced, {len(errors)} errors")
        return SyncSummary(
            success=not errors,
            results=results,
            total_leagues=total_leagues,
            errors=errors,
            reauth_required=reauth_required,
        )

    async def _join(
        self,
        tasks: list[asyncio.Task],
        cancel_token: Optional[CancellationToken],
    ) -> list[_ProviderOutcome]:
        """Wait for every provider task, or abort them all on cancellation."""
        if not tasks:
            return []

        gathered = asyncio.gather(*tasks)
        watcher = asyncio.create_task(cancel_token.wait()) if cancel_token is not None else None
        try:
            if watcher is None:
                return await gathered
            await asyncio.wait({gathered, watcher}, return_when=asyncio.FIRST_COMPLETED)
            if not gathered.done():
                cancel_token.raise_if_cancelled()
            return gathered.result()
        except SyncCancelledError:
            for task in tasks:
                task.cancel()
            # Consume the gather outcome as well
            await asyncio.gather(gathered, *tasks, return_exceptions=True)
            logger.warning("Full sync cancelled")
            raise
        finally:
            if watcher is not None:
                watcher.cancel()
                await asyncio.gather(watcher, return_exceptions=True)

    # =========================================================================
    # Diagnostics
    # =========================================================================

    def get_all_sync_stats(self) -> dict[str, Optional[ClientStats]]:
        """Client stats per provider (None for providers not initialized)."""
        stats: dict[str, Optional[ClientStats]] = {provider.value: None for provider in Provider}
        for provider, client in self._providers.items():
            stats[provider.value] = client.get_sync_stats()
        return stats

    def clear_all_caches(self) -> None:
        for client in self._providers.values():
            client.clear_cache()
        logger.info("Cleared all provider caches")

    async def get_provider_health_status(
        self, probe_user_id: str = "test_user"
    ) -> dict[str, ProviderHealth]:
        """
        Health per provider, probing each initialized one with a league listing.

        A probe that raises, or that only yields the placeholder league,
        is reported in that provider's ``errors``.
        """
        status = {provider.value: ProviderHealth() for provider in Provider}

        for provider, client in self._providers.items():
            health = ProviderHealth(
                initialized=True,
                has_auth=client.has_auth,
                last_request_at=client.get_sync_stats().last_request_at,
            )
            try:
                leagues = await client.get_leagues(probe_user_id)
                if any(league.is_fallback for league in leagues):
                    health.errors.append("API test failed: provider returned placeholder data")
            except Exception as e:
                health.errors.append(f"API test failed: {e}")
            status[provider.value] = health

        return status

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def close(self) -> None:
        """Close every provider client's HTTP connections."""
        for client in [*self._retired, *self._providers.values()]:
            await client.close()
        self._retired.clear()

    async def __aenter__(self) -> "FantasyProviderManager":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


def create_fantasy_provider_manager(
    store: Optional[FantasyStore] = None,
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FantasyProviderManager:
    """Create a manager with Sleeper initialized (it needs no credential)."""
    manager = FantasyProviderManager(store=store, settings=settings, transport=transport)
    manager.initialize_provider(Provider.sleeper)
    return manager
