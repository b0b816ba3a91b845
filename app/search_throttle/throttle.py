"""
Sliding-window search throttle with a cooldown block.
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class ThrottleConfig:
    """Throttle limits."""
    max_requests: int = 10
    window_seconds: float = 24 * 60 * 60
    block_seconds: float = 60 * 60


@dataclass
class ThrottleResult:
    """Outcome of a throttle check."""
    allowed: bool
    message: Optional[str] = None
    warning: Optional[str] = None
    remaining: int = 0

    def to_dict(self) -> dict:
        return {
            "allowed": self.allowed,
            "message": self.message,
            "warning": self.warning,
            "remaining": self.remaining,
        }


class SearchThrottle:
    """
    Limits searches to ``max_requests`` per sliding window.

    Hitting the limit starts a block of ``block_seconds`` during which every
    search is refused. A warning is attached once two or fewer searches
    remain.
    """

    def __init__(self, config: Optional[ThrottleConfig] = None, clock: Callable[[], float] = time.time):
        self.config = config or ThrottleConfig()
        self.clock = clock
        self._timestamps: List[float] = []
        self._block_end: Optional[float] = None

    @property
    def is_blocked(self) -> bool:
        return self._block_end is not None and self.clock() < self._block_end

    @property
    def is_idle(self) -> bool:
        """No active block and no searches left in the window."""
        return not self.is_blocked and self.get_remaining_requests() == self.config.max_requests

    def check_throttle(self) -> ThrottleResult:
        """Record a search if allowed."""
        now = self.clock()

        if self._block_end is not None and now < self._block_end:
            wait = math.ceil(self._block_end - now)
            return ThrottleResult(
                allowed=False,
                message=f"Too many search requests. Please wait {wait} seconds before searching again.",
            )

        if self._block_end is not None:
            self._block_end = None

        self._prune(now)

        if len(self._timestamps) >= self.config.max_requests:
            self._block_end = now + self.config.block_seconds
            minutes = math.ceil(self.config.block_seconds / 60)
            logger.info(f"Search throttle engaged for {minutes} minutes")
            return ThrottleResult(
                allowed=False,
                message=f"Search limit exceeded. You can search again in {minutes} minutes.",
            )

        self._timestamps.append(now)
        remaining = self.config.max_requests - len(self._timestamps)

        warning = None
        if len(self._timestamps) >= self.config.max_requests - 2:
            warning = f"{remaining} searches remaining today."

        return ThrottleResult(allowed=True, warning=warning, remaining=remaining)

    def get_remaining_requests(self) -> int:
        now = self.clock()
        recent = [ts for ts in self._timestamps if now - ts < self.config.window_seconds]
        return max(0, self.config.max_requests - len(recent))

    def get_time_until_reset(self) -> float:
        """Seconds until the block ends, or until the oldest search leaves the window."""
        now = self.clock()
        if self._block_end is not None:
            return max(0.0, self._block_end - now)
        if self._timestamps:
            return max(0.0, self.config.window_seconds - (now - self._timestamps[0]))
        return 0.0

    def _prune(self, now: float) -> None:
        self._timestamps = [ts for ts in self._timestamps if now - ts < self.config.window_seconds]
