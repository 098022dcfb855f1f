"""Tests for the per-client rate limiter."""

import asyncio
import time

import pytest

from fantasy_sync.core.cancellation import CancellationToken, current_cancellation_token
from fantasy_sync.core.errors import SyncCancelledError
from fantasy_sync.core.http import RateLimiter

# asyncio may wake a sleeper within the loop's clock resolution
TOLERANCE = 0.001


class TestSpacing:

    async def test_consecutive_requests_are_spaced(self):
        limiter = RateLimiter(min_interval_ms=50)
        dispatched = []
        for _ in range(3):
            await limiter.acquire()
            dispatched.append(time.monotonic())

        gaps = [later - earlier for earlier, later in zip(dispatched, dispatched[1:])]
        assert all(gap >= 0.05 - TOLERANCE for gap in gaps)

    async def test_concurrent_callers_are_serialized(self):
        limiter = RateLimiter(min_interval_ms=30)
        dispatched = []

        async def call():
            await limiter.acquire()
            dispatched.append(time.monotonic())

        await asyncio.gather(*(call() for _ in range(3)))

        dispatched.sort()
        gaps = [later - earlier for earlier, later in zip(dispatched, dispatched[1:])]
        assert all(gap >= 0.03 - TOLERANCE for gap in gaps)

    async def test_first_request_not_delayed(self):
        limiter = RateLimiter(min_interval_ms=10_000)
        await asyncio.wait_for(limiter.acquire(), timeout=1)

    async def test_zero_interval_never_waits(self):
        limiter = RateLimiter(min_interval_ms=0)
        await asyncio.wait_for(
            asyncio.gather(*(limiter.acquire() for _ in range(20))), timeout=1
        )
        assert limiter.request_count == 20

    async def test_records_dispatches(self):
        limiter = RateLimiter(min_interval_ms=0)
        assert limiter.last_request_at is None

        await limiter.acquire()
        await limiter.acquire()

        assert limiter.request_count == 2
        assert limiter.last_request_at == pytest.approx(time.time(), abs=5)


class TestCancellation:

    async def test_cancel_aborts_pending_wait(self):
        limiter = RateLimiter(min_interval_ms=10_000)
        token = CancellationToken()
        await limiter.acquire(token)

        waiter = asyncio.create_task(limiter.acquire(token))
        await asyncio.sleep(0.02)
        token.cancel("user aborted")

        with pytest.raises(SyncCancelledError, match="user aborted"):
            await asyncio.wait_for(waiter, timeout=1)

    async def test_cancelled_token_fails_fast(self):
        limiter = RateLimiter(min_interval_ms=0)
        token = CancellationToken()
        token.cancel()

        with pytest.raises(SyncCancelledError):
            await limiter.acquire(token)
        assert limiter.request_count == 0

    async def test_token_taken_from_context(self):
        limiter = RateLimiter(min_interval_ms=0)
        token = CancellationToken()
        token.cancel()

        context_token = current_cancellation_token.set(token)
        try:
            with pytest.raises(SyncCancelledError):
                await limiter.acquire()
        finally:
            current_cancellation_token.reset(context_token)
