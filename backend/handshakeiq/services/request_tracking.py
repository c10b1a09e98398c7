# backend/handshakeiq/services/request_tracking.py
"""
Client-side request bookkeeping for the profile and search views.

Nothing here cancels network calls. Superseded calls are left to finish;
their results are recognised as stale by sequence number and dropped.
"""
from __future__ import annotations

import asyncio
import enum
import logging
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FetchStatus(str, enum.Enum):
    IDLE = "IDLE"
    LOADING = "LOADING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class LatestRequestGate:
    """Hands out increasing tickets; only the newest ticket is current."""

    def __init__(self) -> None:
        self._seq = 0

    @property
    def current(self) -> int:
        return self._seq

    def begin(self) -> int:
        self._seq += 1
        return self._seq

    def invalidate(self) -> None:
        """Make every outstanding ticket stale without issuing a new one."""
        self._seq += 1

    def is_current(self, ticket: int) -> bool:
        return ticket == self._seq


class ProfileFetch(Generic[T]):
    """
    Idle -> Loading -> Success(result) | Failed(error).

    `start` may be called from any state (a refresh supersedes whatever is in
    flight). `resolve`/`fail` with a stale ticket are ignored and return False.
    """

    def __init__(self) -> None:
        self._gate = LatestRequestGate()
        self.status: FetchStatus = FetchStatus.IDLE
        self.result: Optional[T] = None
        self.error: Optional[BaseException] = None

    def start(self) -> int:
        ticket = self._gate.begin()
        self.status = FetchStatus.LOADING
        self.error = None
        return ticket

    def resolve(self, ticket: int, result: T) -> bool:
        if not self._gate.is_current(ticket):
            logger.debug("Discarding stale result for ticket %d", ticket)
            return False
        self.status = FetchStatus.SUCCESS
        self.result = result
        self.error = None
        return True

    def fail(self, ticket: int, error: BaseException) -> bool:
        if not self._gate.is_current(ticket):
            logger.debug("Discarding stale failure for ticket %d", ticket)
            return False
        self.status = FetchStatus.FAILED
        self.error = error
        return True

    def detach(self) -> None:
        """The view went away: suppress whatever is still in flight."""
        self._gate.invalidate()
        self.status = FetchStatus.IDLE
        self.result = None
        self.error = None

    async def run(self, fetch: Callable[[], Awaitable[T]]) -> bool:
        """
        Start a fetch and apply its outcome if still current.

        Returns True when the outcome was applied.
        """
        ticket = self.start()
        try:
            result = await fetch()
        except Exception as e:
            return self.fail(ticket, e)
        return self.resolve(ticket, result)


class Debouncer:
    """
    Collapse calls made within `delay` seconds into one call of `func` with
    the latest arguments. Pending timers are cancelled; calls already
    running are not.
    """

    def __init__(self, delay: float, func: Callable[..., Awaitable[Any]]) -> None:
        self.delay = delay
        self._func = func
        self._pending: Optional[asyncio.Task] = None

    def submit(self, *args: Any, **kwargs: Any) -> asyncio.Task:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = asyncio.create_task(self._fire(args, kwargs))
        return self._pending

    async def _fire(self, args: tuple, kwargs: dict) -> Any:
        await asyncio.sleep(self.delay)
        # Past the delay the call is committed; shield it from later submits.
        return await asyncio.shield(self._func(*args, **kwargs))

    async def flush(self) -> Any:
        """Wait for the pending call, if any, and return its result."""
        if self._pending is None:
            return None
        try:
            return await self._pending
        except asyncio.CancelledError:
            return None
