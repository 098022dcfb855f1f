"""Tests for BaseApiClient status handling and retries."""

import httpx
import pytest

from conftest import MockApi

from fantasy_sync.core.errors import AuthenticationError, ExternalAPIError, RateLimitError
from fantasy_sync.core.http import BaseApiClient


@pytest.fixture
def sleeps(monkeypatch):
    """Record backoff sleeps instead of waiting them out."""
    recorded = []

    async def fake_sleep(self, seconds):
        recorded.append(seconds)

    monkeypatch.setattr(BaseApiClient, "_sleep", fake_sleep)
    return recorded


def make_client(api: MockApi, max_retries: int = 3, **kwargs) -> BaseApiClient:
    return BaseApiClient(
        provider="sleeper",
        base_url="https://api.example.test/v1",
        min_interval_ms=0,
        max_retries=max_retries,
        transport=api.transport,
        **kwargs,
    )


class TestStatusHandling:

    async def test_success_decodes_json(self):
        api = MockApi({"/v1/league/1": {"league_id": "1"}})
        async with make_client(api) as http:
            assert await http.get_json("/league/1") == {"league_id": "1"}

    async def test_401_raises_authentication_error_without_retry(self, sleeps):
        api = MockApi({"/v1/league/1": httpx.Response(401)})
        async with make_client(api) as http:
            with pytest.raises(AuthenticationError) as exc_info:
                await http.get_json("/league/1")

        assert exc_info.value.status_code == 401
        assert len(api.requests) == 1
        assert sleeps == []

    async def test_other_4xx_not_retried(self, sleeps):
        api = MockApi()
        async with make_client(api) as http:
            with pytest.raises(ExternalAPIError) as exc_info:
                await http.get_json("/missing")

        assert exc_info.value.status_code == 404
        assert not isinstance(exc_info.value, AuthenticationError)
        assert len(api.requests) == 1

    async def test_5xx_retried_with_backoff(self, sleeps):
        responses = iter([httpx.Response(503), httpx.Response(502), httpx.Response(200, json=[1])])
        api = MockApi({"/v1/flaky": lambda request: next(responses)})

        async with make_client(api) as http:
            assert await http.get_json("/flaky") == [1]

        assert len(api.requests) == 3
        assert sleeps == [1, 2]

    async def test_5xx_exhausts_retries(self, sleeps):
        api = MockApi({"/v1/down": httpx.Response(500, text="boom")})
        async with make_client(api, max_retries=2) as http:
            with pytest.raises(ExternalAPIError, match="HTTP 500"):
                await http.get_json("/down")
        assert len(api.requests) == 2

    async def test_429_honours_retry_after_then_raises(self, sleeps):
        api = MockApi({"/v1/busy": httpx.Response(429, headers={"Retry-After": "90"})})
        async with make_client(api, max_retries=2) as http:
            with pytest.raises(RateLimitError) as exc_info:
                await http.get_json("/busy")

        assert exc_info.value.retry_after == 90
        # Waits are capped
        assert sleeps == [30]

    async def test_network_error_wrapped(self, sleeps):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        api = MockApi({"/v1/league/1": refuse})
        async with make_client(api, max_retries=1) as http:
            with pytest.raises(ExternalAPIError, match="request failed"):
                await http.get_json("/league/1")

    async def test_invalid_json_is_external_error(self):
        api = MockApi({"/v1/league/1": httpx.Response(200, text="<html>nope</html>")})
        async with make_client(api, max_retries=1) as http:
            with pytest.raises(ExternalAPIError, match="Invalid JSON"):
                await http.get_json("/league/1")

    async def test_empty_body_is_none(self):
        api = MockApi({"/v1/empty": httpx.Response(200)})
        async with make_client(api) as http:
            assert await http.get_json("/empty") is None


class TestRequestShape:

    async def test_default_params_and_headers_sent(self):
        api = MockApi({"/v1/leagues": []})
        async with make_client(
            api, headers={"Authorization": "Bearer t0k"}, params={"format": "json"}
        ) as http:
            await http.get_json("/leagues", params={"season": "2025"})

        request = api.requests[0]
        assert request.headers["Authorization"] == "Bearer t0k"
        assert request.url.params["format"] == "json"
        assert request.url.params["season"] == "2025"

    async def test_repeated_params_from_tuples(self):
        api = MockApi({"/v1/league": {}})
        async with make_client(api) as http:
            await http.get_json("/league", params=[("view", "mTeam"), ("view", "mRoster")])

        assert api.requests[0].url.params.get_list("view") == ["mTeam", "mRoster"]

    async def test_each_attempt_goes_through_rate_limiter(self, sleeps):
        responses = iter([httpx.Response(500), httpx.Response(200, json={})])
        api = MockApi({"/v1/x": lambda request: next(responses)})
        async with make_client(api) as http:
            await http.get_json("/x")
            assert http.rate_limiter.request_count == 2
