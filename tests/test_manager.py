"""Tests for the multi-provider manager."""

import asyncio
import gc

import httpx
import pytest

from conftest import MockApi, sleeper_routes

from fantasy_sync.core.cancellation import CancellationToken
from fantasy_sync.core.errors import SyncCancelledError
from fantasy_sync.manager import FantasyProviderManager, create_fantasy_provider_manager


def make_manager(api, settings, store) -> FantasyProviderManager:
    return create_fantasy_provider_manager(store=store, settings=settings, transport=api.transport)


class TestSyncAllUserLeagues:

    async def test_sleeper_end_to_end(self, settings, store):
        api = MockApi(sleeper_routes(user_id="user1", player_ids=["p1", "p2"]))
        async with make_manager(api, settings, store) as manager:
            summary = await manager.sync_all_user_leagues("user1")

        assert summary.success is True
        assert summary.total_leagues == 1
        assert set(summary.results) == {"yahoo", "espn", "cbs", "sleeper"}
        assert len(summary.results["sleeper"]) == 1
        assert summary.results["sleeper"][0].synced_data.teams == 1
        assert summary.results["yahoo"] == []
        assert store.counts()["players"] == 2
        assert summary.errors == []

        (stored,) = store.leagues.values()
        assert stored["league"].name == "Dynasty Masters"
        assert stored["league"].settings.team_count == 14

    async def test_missing_credential_does_not_stop_other_providers(self, settings, store):
        api = MockApi(sleeper_routes())
        async with make_manager(api, settings, store) as manager:
            manager.initialize_provider("yahoo")
            summary = await manager.sync_all_user_leagues("user1")

        assert summary.success is False
        assert summary.total_leagues == 1
        assert summary.reauth_required == ["yahoo"]
        assert summary.errors == ["Failed to fetch yahoo leagues: Yahoo Fantasy requires OAuth access token"]

    async def test_expired_token_marks_reauth(self, settings, store):
        api = MockApi({"/fantasy/users/user1/leagues": httpx.Response(401)})
        manager = FantasyProviderManager(store=store, settings=settings, transport=api.transport)
        manager.initialize_provider("cbs", access_token="expired")

        summary = await manager.sync_all_user_leagues("user1")
        await manager.close()

        assert summary.reauth_required == ["cbs"]
        assert summary.errors[0].startswith("Failed to fetch cbs leagues:")

    async def test_placeholder_league_not_synced(self, settings, store):
        api = MockApi({"/v1/user/user1/leagues/nfl/2025": httpx.Response(500)})
        async with make_manager(api, settings, store) as manager:
            summary = await manager.sync_all_user_leagues("user1")

        assert summary.total_leagues == 0
        assert summary.results["sleeper"] == []
        assert len(summary.errors) == 1
        assert "skipped placeholder league Sample SLEEPER League" in summary.errors[0]
        assert store.writes == 0

    async def test_failed_league_reported_by_name(self, settings, store):
        routes = sleeper_routes()
        del routes["/v1/league/L1"]
        api = MockApi(routes)
        async with make_manager(api, settings, store) as manager:
            summary = await manager.sync_all_user_leagues("user1")

        assert summary.total_leagues == 0
        assert len(summary.results["sleeper"]) == 1
        assert summary.errors == ["sleeper league Dynasty Masters: Failed to fetch league information"]

    async def test_no_providers(self, settings, store):
        manager = FantasyProviderManager(store=store, settings=settings)
        summary = await manager.sync_all_user_leagues("user1")

        assert summary.success is True
        assert summary.total_leagues == 0
        assert all(results == [] for results in summary.results.values())

    async def test_cancellation_aborts_outstanding_providers(self, settings, store):
        async def hang(request):
            await asyncio.sleep(30)
            return httpx.Response(200, json=[])

        api = MockApi({"/v1/user/user1/leagues/nfl/2025": hang})
        token = CancellationToken()

        async with make_manager(api, settings, store) as manager:
            task = asyncio.create_task(manager.sync_all_user_leagues("user1", token))
            await asyncio.sleep(0.05)
            token.cancel("user aborted")

            with pytest.raises(SyncCancelledError, match="user aborted"):
                await asyncio.wait_for(task, timeout=2)

    async def test_cancellation_leaves_no_unretrieved_exceptions(self, settings, store):
        async def hang(request):
            await asyncio.sleep(30)
            return httpx.Response(200, json=[])

        loop = asyncio.get_running_loop()
        reported = []
        loop.set_exception_handler(lambda loop, context: reported.append(context["message"]))
        try:
            api = MockApi({"/v1/user/user1/leagues/nfl/2025": hang})
            token = CancellationToken()
            async with make_manager(api, settings, store) as manager:
                loop.call_later(0.05, token.cancel)
                with pytest.raises(SyncCancelledError):
                    await manager.sync_all_user_leagues("user1", token)

            gc.collect()
            await asyncio.sleep(0)
        finally:
            loop.set_exception_handler(None)

        assert reported == []

    async def test_already_cancelled_token_raises(self, settings, store):
        api = MockApi(sleeper_routes())
        token = CancellationToken()
        token.cancel("user aborted")

        async with make_manager(api, settings, store) as manager:
            with pytest.raises(SyncCancelledError, match="user aborted"):
                await manager.sync_all_user_leagues("user1", token)

        assert api.requests == []
        assert store.writes == 0

    async def test_cancellation_during_league_listing_propagates(self, settings, store, monkeypatch):
        async with make_manager(MockApi({}), settings, store) as manager:
            async def cancelled_listing(user_id):
                raise SyncCancelledError("user aborted")

            monkeypatch.setattr(manager.get_provider("sleeper"), "get_leagues", cancelled_listing)

            with pytest.raises(SyncCancelledError, match="user aborted"):
                await manager.sync_all_user_leagues("user1")


class TestProviderRegistry:

    def test_factory_initializes_sleeper(self, settings):
        manager = create_fantasy_provider_manager(settings=settings)
        assert [provider.value for provider in manager.providers] == ["sleeper"]

    async def test_initialize_replaces_client(self, settings):
        manager = FantasyProviderManager(settings=settings)
        first = manager.initialize_provider("yahoo", access_token="old")
        second = manager.initialize_provider("yahoo", access_token="new")

        assert first is not second
        assert manager.get_provider("yahoo") is second
        assert second.access_token == "new"
        await manager.close()

    def test_get_provider_unknown_or_missing(self, settings):
        manager = FantasyProviderManager(settings=settings)
        assert manager.get_provider("espn") is None
        assert manager.get_provider("myspace") is None

    def test_clients_share_the_manager_store(self, settings, store):
        manager = FantasyProviderManager(store=store, settings=settings)
        client = manager.initialize_provider("sleeper")
        assert client.store is store


class TestDiagnostics:

    async def test_sync_stats_for_every_provider(self, settings, store):
        api = MockApi(sleeper_routes())
        async with make_manager(api, settings, store) as manager:
            await manager.get_provider("sleeper").get_leagues("user1")
            stats = manager.get_all_sync_stats()

        assert set(stats) == {"yahoo", "espn", "cbs", "sleeper"}
        assert stats["yahoo"] is None
        assert stats["sleeper"].request_count == 1

    async def test_clear_all_caches(self, settings, store):
        api = MockApi(sleeper_routes())
        async with make_manager(api, settings, store) as manager:
            client = manager.get_provider("sleeper")
            await client.get_leagues("user1")
            manager.clear_all_caches()
            assert client.get_sync_stats().cache_size == 0

    async def test_health_status(self, settings, store):
        api = MockApi(sleeper_routes(user_id="test_user"))
        async with make_manager(api, settings, store) as manager:
            manager.initialize_provider("yahoo")
            health = await manager.get_provider_health_status()

        assert health["sleeper"].initialized is True
        assert health["sleeper"].has_auth is True
        assert health["sleeper"].errors == []

        assert health["yahoo"].initialized is True
        assert health["yahoo"].has_auth is False
        assert health["yahoo"].errors == ["API test failed: Yahoo Fantasy requires OAuth access token"]

        assert health["espn"].initialized is False

    async def test_health_flags_placeholder_data(self, settings, store):
        api = MockApi({"/v1/user/test_user/leagues/nfl/2025": httpx.Response(500)})
        async with make_manager(api, settings, store) as manager:
            health = await manager.get_provider_health_status()

        assert health["sleeper"].errors == ["API test failed: provider returned placeholder data"]
