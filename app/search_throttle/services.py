"""
Keeps one search throttle per caller.
"""

import logging
import time
from threading import Lock
from typing import Callable, Dict, Optional

from flask import request

from .throttle import SearchThrottle, ThrottleConfig

logger = logging.getLogger(__name__)

SWEEP_INTERVAL_SECONDS = 60


class SearchThrottleService:
    """
    In-memory registry of per-caller throttles.

    Throttles with nothing left in their window and no active block are
    swept out, at most once per ``SWEEP_INTERVAL_SECONDS``.
    """

    def __init__(self, config: ThrottleConfig, clock: Callable[[], float] = time.time):
        self.config = config
        self.clock = clock
        self._throttles: Dict[str, SearchThrottle] = {}
        self._lock = Lock()
        self._last_sweep: Optional[float] = None

    def get_throttle(self, caller_key: str) -> SearchThrottle:
        with self._lock:
            self._sweep_idle()
            throttle = self._throttles.get(caller_key)
            if throttle is None:
                throttle = SearchThrottle(self.config, clock=self.clock)
                self._throttles[caller_key] = throttle
            return throttle

    def tracked_callers(self) -> int:
        with self._lock:
            return len(self._throttles)

    def get_client_ip(self) -> str:
        """Client IP as resolved by ProxyFix; raw forwarding headers are not trusted."""
        return request.remote_addr or "unknown"

    def get_caller_key(self) -> str:
        """Prefer the signed-in user, then the guest cookie, then the IP."""
        uid = request.cookies.get("uid")
        if uid:
            return f"user:{uid}"
        guest_id = request.cookies.get("guest_id")
        if guest_id:
            return f"guest:{guest_id}"
        return f"ip:{self.get_client_ip()}"

    def _sweep_idle(self) -> None:
        now = self.clock()
        if self._last_sweep is not None and now - self._last_sweep < SWEEP_INTERVAL_SECONDS:
            return
        self._last_sweep = now
        idle = [key for key, throttle in self._throttles.items() if throttle.is_idle]
        for key in idle:
            del self._throttles[key]
        if idle:
            logger.debug(f"Evicted {len(idle)} idle search throttles")
