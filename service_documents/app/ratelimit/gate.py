"""
Rate gate for outbound registry submissions.

Admits at most ``max_requests`` operations per rolling ``window_seconds``.
A log of recent admissions enforces the rolling window, so a full budget
of ``max_requests`` can pass at once and the next burst opens when the
oldest admission leaves the window. A fractional token count refilled
over time is tracked alongside and bounds the rate as well. Callers in
excess of the budget wait, in arrival order, until a permit is free.
State lives in memory and resets with the process.
"""

import asyncio
import math
import threading
import time
from collections import deque
from dataclasses import dataclass
from datetime import timedelta
from typing import Awaitable, Callable, Deque, Optional, Tuple

from shared.errors import InvalidArgument
from shared.logging import get_logger
from shared.metrics import SubmissionMetrics, get_metrics

# Float slack when comparing fractional permits
_EPSILON = 1e-9


@dataclass(frozen=True)
class RateLimitConfig:
    """Admission budget: ``max_requests`` per ``window_seconds``."""

    window_seconds: float
    max_requests: int

    def __post_init__(self):
        if isinstance(self.max_requests, bool) or not isinstance(self.max_requests, int):
            raise InvalidArgument(
                "max_requests must be an integer",
                details={"max_requests": repr(self.max_requests)}
            )
        if self.max_requests < 1:
            raise InvalidArgument(
                "max_requests must be at least 1",
                details={"max_requests": self.max_requests}
            )
        if not isinstance(self.window_seconds, (int, float)) or isinstance(self.window_seconds, bool):
            raise InvalidArgument(
                "window_seconds must be a number",
                details={"window_seconds": repr(self.window_seconds)}
            )
        if not math.isfinite(self.window_seconds) or self.window_seconds <= 0:
            raise InvalidArgument(
                "window_seconds must be a positive finite number",
                details={"window_seconds": self.window_seconds}
            )

    @classmethod
    def per(cls, window: timedelta, max_requests: int) -> "RateLimitConfig":
        """Build a config from a ``timedelta`` window."""
        if not isinstance(window, timedelta):
            raise InvalidArgument("window must be a timedelta", details={"window": repr(window)})
        return cls(window_seconds=window.total_seconds(), max_requests=max_requests)

    @property
    def permits_per_second(self) -> float:
        return self.max_requests / self.window_seconds


class TokenBucket:
    """Permit bookkeeping shared by the async and thread gates.

    ``reserve`` never sleeps: it either grants a permit or reports how long
    the caller has to wait, without debiting anything in the latter case.
    Besides the fractional token count, the instants of the last
    ``max_requests`` admissions are kept so that no rolling window ever
    sees more than ``max_requests`` admissions.
    """

    def __init__(self, config: RateLimitConfig, clock: Callable[[], float] = time.monotonic):
        self.config = config
        self._clock = clock
        self._rate = config.permits_per_second
        self._lock = threading.Lock()
        self._permits = float(config.max_requests)
        self._last_refill = clock()
        self._admissions: Deque[float] = deque(maxlen=config.max_requests)

    def _refill(self, now: float) -> None:
        elapsed = now - self._last_refill
        if elapsed <= 0:
            return
        self._permits = min(float(self.config.max_requests), self._permits + elapsed * self._rate)
        self._last_refill = now

    def _wait_needed(self, now: float) -> float:
        wait = 0.0
        if self._permits < 1.0 - _EPSILON:
            wait = (1.0 - self._permits) / self._rate
        if len(self._admissions) == self.config.max_requests:
            wait = max(wait, self._admissions[0] + self.config.window_seconds - now)
        return wait if wait > _EPSILON else 0.0

    def reserve(self) -> float:
        """Take one permit if available; otherwise return the seconds to wait."""
        with self._lock:
            now = self._clock()
            self._refill(now)
            wait = self._wait_needed(now)
            if wait > 0:
                return wait
            self._permits = max(0.0, self._permits - 1.0)
            self._admissions.append(now)
            return 0.0

    def snapshot(self) -> Tuple[float, int]:
        """Return (permits available now, admissions inside the current window)."""
        with self._lock:
            now = self._clock()
            self._refill(now)
            cutoff = now - self.config.window_seconds
            in_window = sum(1 for instant in self._admissions if instant > cutoff)
            return self._permits, in_window


class RateGate:
    """Async rate gate.

    ``acquire`` is a suspension point: callers queue on a FIFO turnstile and
    only the head of the queue sleeps for the computed wait. Cancelling a
    waiting task releases its place without consuming a permit.
    """

    def __init__(self,
                 config: RateLimitConfig,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
                 metrics: Optional[SubmissionMetrics] = None):
        self.config = config
        self._clock = clock
        self._sleep = sleep
        self._bucket = TokenBucket(config, clock=clock)
        self._turnstile = asyncio.Lock()
        self._metrics = metrics
        self.logger = get_logger("documents.rate_gate")

    @property
    def bucket(self) -> TokenBucket:
        return self._bucket

    async def acquire(self) -> float:
        """Wait for and consume one permit; return the seconds spent waiting."""
        started = self._clock()
        async with self._turnstile:
            while True:
                wait = self._bucket.reserve()
                if wait == 0:
                    break
                self.logger.debug("Waiting for rate gate permit", wait_seconds=round(wait, 6))
                await self._sleep(wait)

        waited = self._clock() - started
        (self._metrics or get_metrics()).record_gate_wait(waited)
        return waited

    def try_acquire(self) -> bool:
        """Take a permit only if one is free and nobody is queued ahead."""
        if self._turnstile.locked():
            return False
        return self._bucket.reserve() == 0


class BlockingRateGate:
    """Thread-based rate gate with the same admission rules as ``RateGate``."""

    def __init__(self, config: RateLimitConfig, clock: Callable[[], float] = time.monotonic):
        self.config = config
        self._clock = clock
        self._bucket = TokenBucket(config, clock=clock)
        self._cond = threading.Condition()
        self._waiters: Deque[object] = deque()

    @property
    def bucket(self) -> TokenBucket:
        return self._bucket

    def acquire(self, timeout: Optional[float] = None) -> bool:
        """Block until a permit is consumed.

        Returns False if ``timeout`` elapses first; in that case no permit
        was taken on behalf of the caller.
        """
        deadline = None if timeout is None else self._clock() + timeout
        ticket = object()
        with self._cond:
            self._waiters.append(ticket)
            try:
                while True:
                    wait = None
                    if self._waiters[0] is ticket:
                        wait = self._bucket.reserve()
                        if wait == 0:
                            return True
                    if deadline is not None:
                        remaining = deadline - self._clock()
                        if remaining <= 0:
                            return False
                        wait = remaining if wait is None else min(wait, remaining)
                    self._cond.wait(wait)
            finally:
                self._waiters.remove(ticket)
                self._cond.notify_all()
