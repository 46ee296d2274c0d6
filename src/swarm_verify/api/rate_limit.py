"""Per-client sliding-window request limits."""

from __future__ import annotations

import time
from collections import deque
from collections.abc import Callable, Mapping
from dataclasses import dataclass

WINDOW_SECONDS = 60.0
DEFAULT_LIMIT = 10


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    count: int
    limit: int
    retry_after: float = 0.0

    @property
    def reason(self) -> str:
        return f"Exceeded limit ({self.limit}/min)"


class RateLimiter:
    """Counts requests per ``(key, action)`` over a sliding one-minute window.

    Rejected requests are not recorded, so a client that keeps hammering
    regains access as soon as its oldest accepted request leaves the window.
    """

    def __init__(
        self,
        limits: Mapping[str, int] | None = None,
        *,
        default_limit: int = DEFAULT_LIMIT,
        window_seconds: float = WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limits = dict(limits or {})
        self.default_limit = default_limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._requests: dict[tuple[str, str], deque[float]] = {}

    def limit_for(self, action: str) -> int:
        return self.limits.get(action, self.default_limit)

    def check(self, key: str, action: str = "default") -> RateLimitDecision:
        now = self._clock()
        limit = self.limit_for(action)
        self._evict_expired(now)
        window = self._requests.setdefault((key, action), deque())

        if len(window) >= limit:
            oldest = window[0] if window else now
            return RateLimitDecision(
                allowed=False,
                count=len(window),
                limit=limit,
                retry_after=max(0.0, oldest + self.window_seconds - now),
            )

        window.append(now)
        return RateLimitDecision(allowed=True, count=len(window), limit=limit)

    def _evict_expired(self, now: float) -> None:
        cutoff = now - self.window_seconds
        for bucket in list(self._requests):
            window = self._requests[bucket]
            while window and window[0] <= cutoff:
                window.popleft()
            if not window:
                del self._requests[bucket]

    def tracked_keys(self) -> int:
        return len(self._requests)

    def reset(self) -> None:
        self._requests.clear()
