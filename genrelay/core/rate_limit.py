from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable


@dataclass
class _Window:
    count: int
    started_at: float


@dataclass
class RollingWindowLimiter:
    """Process-local hit counter keyed by caller identity.

    State lives in memory only: it resets on restart and is not shared
    between worker processes.
    """

    max_hits: int = 60
    window_seconds: float = 60.0
    clock: Callable[[], float] = time.monotonic
    _hits: dict[str, _Window] = field(default_factory=dict, repr=False)
    _last_prune: float | None = field(default=None, repr=False)

    @property
    def enabled(self) -> bool:
        return self.max_hits > 0 and self.window_seconds > 0

    def hit(self, key: str) -> bool:
        """Record one hit for ``key`` and return whether it is allowed."""
        if not self.enabled:
            return True

        now = self.clock()
        window = self._hits.get(key)
        if window is None or now - window.started_at > self.window_seconds:
            window = _Window(count=0, started_at=now)
            self._hits[key] = window

        window.count += 1
        if self._last_prune is None or now - self._last_prune >= self.window_seconds:
            self._prune(now)
        return window.count <= self.max_hits

    def _prune(self, now: float) -> None:
        self._last_prune = now
        stale = [
            key
            for key, window in self._hits.items()
            if now - window.started_at > self.window_seconds
        ]
        for key in stale:
            del self._hits[key]
