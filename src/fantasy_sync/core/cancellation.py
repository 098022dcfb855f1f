"""Cooperative cancellation for long multi-league syncs."""

import asyncio
from contextvars import ContextVar
from typing import Optional

from .errors import SyncCancelledError


class CancellationToken:
    """
    Signal shared between a caller and a running sync.

    The sync checks the token between leagues and teams, and the rate
    limiter races its enforced delay against it so an abort never leaves
    a sleeping waiter behind.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "Sync cancelled") -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise SyncCancelledError(self.reason or "Sync cancelled")

    async def wait(self) -> None:
        await self._event.wait()

    async def sleep(self, seconds: float) -> None:
        """Sleep for ``seconds`` unless cancelled first."""
        if seconds <= 0:
            self.raise_if_cancelled()
            return
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return
        self.raise_if_cancelled()


# Token of the sync running in the current task. Rate limiter waits and
# retry backoffs pick it up without threading it through every fetch.
current_cancellation_token: ContextVar[Optional[CancellationToken]] = ContextVar(
    "current_cancellation_token", default=None
)
