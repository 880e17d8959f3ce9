"""
In-memory fixed-window rate limiter keyed by client address.

State lives in the process; multiple workers each keep their own windows.
Expired windows are swept at most once per window length.
"""

from __future__ import annotations

import time
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_s: int

    def headers(self) -> dict[str, str]:
        return {
            "RateLimit-Limit": str(self.limit),
            "RateLimit-Remaining": str(self.remaining),
            "RateLimit-Reset": str(self.reset_s),
        }


class FixedWindowRateLimiter:
    def __init__(self, *, max_requests: int, window_s: int) -> None:
        self.max_requests = max_requests
        self.window_s = window_s
        # key -> (window_start_epoch_s, count)
        self._state: dict[str, tuple[int, int]] = {}
        self._last_sweep: int | None = None

    def __len__(self) -> int:
        return len(self._state)

    def _sweep(self, current: int) -> None:
        if self._last_sweep is None:
            self._last_sweep = current
            return
        if current - self._last_sweep < self.window_s:
            return
        expired = [key for key, (start, _) in self._state.items() if current - start >= self.window_s]
        for key in expired:
            del self._state[key]
        self._last_sweep = current

    def hit(self, key: str, *, now: float | None = None) -> RateLimitDecision:
        current = int(now if now is not None else time.time())
        self._sweep(current)

        window_start, count = self._state.get(key, (current, 0))
        if current - window_start >= self.window_s:
            window_start, count = current, 0

        count += 1
        self._state[key] = (window_start, count)

        reset_s = max(0, window_start + self.window_s - current)
        return RateLimitDecision(
            allowed=count <= self.max_requests,
            limit=self.max_requests,
            remaining=max(0, self.max_requests - count),
            reset_s=reset_s,
        )

    def reset(self) -> None:
        self._state.clear()
        self._last_sweep = None
