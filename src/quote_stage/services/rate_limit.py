"""Sliding-window admission control keyed by network origin and actor.

Two keys are tracked per call:

- the origin alone, which caps abuse from many throwaway identities behind
  one address;
- the (origin, actor) pair, which caps a single identity.

Each key has its own window length and maximum count. The in-memory
implementation is per-process: several server instances sharing no common
store each enforce their own independent limits.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from abc import ABC, abstractmethod
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass

from quote_stage.core.errors import RateLimitedError
from quote_stage.core.settings import settings

logger = logging.getLogger(__name__)

UNKNOWN_ORIGIN = "unknown"


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of an admission check.

    Attributes:
        allowed: Whether the call may proceed.
        retry_after: Whole seconds until a retry can succeed; None when allowed.
    """

    allowed: bool
    retry_after: int | None = None

    def raise_for_limit(self) -> None:
        """Raise ``RateLimitedError`` when the call was rejected."""
        if not self.allowed:
            raise RateLimitedError(self.retry_after or 1)


@dataclass(frozen=True)
class WindowPolicy:
    """Maximum number of events allowed within a trailing window."""

    max_requests: int
    window_seconds: float

    def __post_init__(self) -> None:
        if self.max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if self.window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")


class RateLimiter(ABC):
    """Admission control capability injected into the mutation paths."""

    @abstractmethod
    def check(self, origin: str, actor: str) -> RateLimitResult:
        """Admit and record the call, or reject it with a retry-after."""

    @abstractmethod
    def record(self, origin: str, actor: str) -> None:
        """Record a call that was admitted without ``check``."""


def origin_key(origin: str) -> str:
    return f"ip:{origin or UNKNOWN_ORIGIN}"


def actor_key(origin: str, actor: str) -> str:
    return f"{origin or UNKNOWN_ORIGIN}:{actor}"


class SlidingWindowRateLimiter(RateLimiter):
    """Thread-safe in-memory sliding-window limiter."""

    def __init__(
        self,
        *,
        origin_policy: WindowPolicy,
        actor_policy: WindowPolicy | None = None,
        clock: Callable[[], float] = time.time,
        name: str = "default",
        sweep_interval: int = 256,
    ) -> None:
        self._origin_policy = origin_policy
        self._actor_policy = actor_policy or origin_policy
        self._clock = clock
        self._lock = threading.Lock()
        self._history: dict[str, deque[float]] = {}
        self._sweep_interval = max(1, sweep_interval)
        self._calls_since_sweep = 0
        self.name = name

    def _prune(self, key: str, now: float, window: float) -> deque[float]:
        history = self._history.get(key)
        if history is None:
            return deque()
        while history and now - history[0] >= window:
            history.popleft()
        if not history:
            del self._history[key]
            return deque()
        return history

    def _sweep(self, now: float) -> None:
        # Keys whose newest event left the longer window can never block again.
        horizon = max(self._origin_policy.window_seconds, self._actor_policy.window_seconds)
        stale = [key for key, history in self._history.items() if now - history[-1] >= horizon]
        for key in stale:
            del self._history[key]
        if stale:
            logger.debug("Rate limit %s swept %d idle keys", self.name, len(stale))

    @staticmethod
    def _retry_after(history: deque[float], now: float, window: float) -> int:
        return max(1, math.ceil(history[0] + window - now))

    def _append(self, key: str, now: float) -> None:
        self._history.setdefault(key, deque()).append(now)

    def check(self, origin: str, actor: str) -> RateLimitResult:
        now = self._clock()
        o_key = origin_key(origin)
        a_key = actor_key(origin, actor)

        with self._lock:
            self._calls_since_sweep += 1
            if self._calls_since_sweep >= self._sweep_interval:
                self._calls_since_sweep = 0
                self._sweep(now)

            origin_history = self._prune(o_key, now, self._origin_policy.window_seconds)
            actor_history = self._prune(a_key, now, self._actor_policy.window_seconds)

            if len(origin_history) >= self._origin_policy.max_requests:
                retry_after = self._retry_after(
                    origin_history, now, self._origin_policy.window_seconds
                )
                logger.info("Rate limit %s hit for %s; retry in %ss", self.name, o_key, retry_after)
                return RateLimitResult(allowed=False, retry_after=retry_after)

            if len(actor_history) >= self._actor_policy.max_requests:
                retry_after = self._retry_after(
                    actor_history, now, self._actor_policy.window_seconds
                )
                logger.info("Rate limit %s hit for %s; retry in %ss", self.name, a_key, retry_after)
                return RateLimitResult(allowed=False, retry_after=retry_after)

            self._append(o_key, now)
            self._append(a_key, now)

        return RateLimitResult(allowed=True)

    def record(self, origin: str, actor: str) -> None:
        now = self._clock()
        with self._lock:
            self._append(origin_key(origin), now)
            self._append(actor_key(origin, actor), now)

    @property
    def tracked_keys(self) -> int:
        """Number of origin and actor keys currently held in memory."""
        with self._lock:
            return len(self._history)

    def reset(self) -> None:
        """Forget every recorded event."""
        with self._lock:
            self._history.clear()


def build_quote_limiter() -> SlidingWindowRateLimiter:
    """Return the stricter limiter guarding quote creation."""
    policy = WindowPolicy(
        settings.rate_limit_quotes_max,
        settings.rate_limit_quotes_window_seconds,
    )
    return SlidingWindowRateLimiter(origin_policy=policy, name="quotes")


def build_vote_limiter() -> SlidingWindowRateLimiter:
    """Return the looser limiter guarding votes."""
    policy = WindowPolicy(
        settings.rate_limit_votes_max,
        settings.rate_limit_votes_window_seconds,
    )
    return SlidingWindowRateLimiter(origin_policy=policy, name="votes")


_QUOTE_LIMITER = build_quote_limiter()
_VOTE_LIMITER = build_vote_limiter()


def get_quote_limiter() -> RateLimiter:
    """Return the process-wide quote creation limiter."""
    return _QUOTE_LIMITER


def get_vote_limiter() -> RateLimiter:
    """Return the process-wide vote limiter."""
    return _VOTE_LIMITER
