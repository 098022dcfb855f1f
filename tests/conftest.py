"""
Pytest configuration for fantasy-sync tests.

Provider APIs are replaced with httpx.MockTransport routers and the
database with InMemoryStore, so the suite runs offline. The Postgres
tests additionally need DATABASE_URL and are skipped without it.
"""

from __future__ import annotations

import os
from typing import Any, Callable, Union

import httpx
import pytest

from fantasy_sync.core.config import Settings
from fantasy_sync.store.memory import InMemoryStore

Route = Union[httpx.Response, Callable[[httpx.Request], Any], Any]


class MockApi:
    """
    Path-keyed fake provider API.

    Routes map a URL path (including the base URL's path prefix) to a JSON
    body, an httpx.Response, or a handler taking the request (sync or
    async). Unknown paths answer 404. Every request is recorded.
    """

    def __init__(self, routes: dict[str, Route] | None = None):
        self.routes: dict[str, Route] = dict(routes or {})
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> Any:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"error": f"no route for {request.url.path}"})
        if isinstance(route, httpx.Response):
            return route
        if callable(route):
            return route(request)
        return httpx.Response(200, json=route)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]


class FakeClock:
    """Manually advanced clock returning seconds, for cache and limiter tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def settings() -> Settings:
    """Settings with pacing and retries turned down for fast tests."""
    return Settings(
        current_season="2025",
        rate_limit_interval_ms=0,
        max_retries=1,
        request_timeout=5.0,
        strict_mode=False,
        database_url=None,
    )


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def mock_api() -> MockApi:
    return MockApi()


@pytest.fixture(scope="session")
def database_url():
    """Get the Postgres URL for store integration tests."""
    url = os.environ.get("DATABASE_URL")
    if not url:
        pytest.skip("DATABASE_URL not set")
    return url


# =========================================================================
# Sleeper payloads
# =========================================================================


def sleeper_league(league_id: str = "L1", **overrides: Any) -> dict[str, Any]:
    league = {
        "league_id": league_id,
        "name": "Dynasty Masters",
        "season": "2025",
        "status": "in_season",
        "sport": "nfl",
        "total_rosters": 14,
        "roster_positions": ["QB", "RB", "RB", "WR", "WR", "TE", "FLEX", "BN", "BN"],
        "scoring_settings": {"rec": 1.0},
        "settings": {"playoff_week_start": 15},
    }
    league.update(overrides)
    return league


def sleeper_routes(
    user_id: str = "user1",
    league_id: str = "L1",
    player_ids: list[str] | None = None,
) -> dict[str, Any]:
    """Routes for one Sleeper league with a single roster."""
    players = ["p1", "p2"] if player_ids is None else player_ids
    return {
        f"/v1/user/{user_id}/leagues/nfl/2025": [sleeper_league(league_id)],
        f"/v1/league/{league_id}": sleeper_league(league_id),
        f"/v1/league/{league_id}/users": [
            {"user_id": "u1", "display_name": "Alice", "avatar": "a1", "metadata": {"team_name": "Gridiron"}},
        ],
        f"/v1/league/{league_id}/rosters": [
            {
                "roster_id": 1,
                "owner_id": "u1",
                "players": players,
                "starters": players[:1],
                "settings": {"wins": 5, "losses": 3, "fpts": 1000, "fpts_decimal": 50},
            }
        ],
    }
