"""
Shared-secret access gate and per-client rate limiting
"""

import hmac
import time
from typing import Dict, Optional, Tuple

from fastapi import Depends, Header

from config import Settings, get_settings
from errors import Unauthorized


def check_order_secret(configured: str, provided: Optional[str]) -> None:
    """Raise Unauthorized unless ``provided`` matches a configured secret.

    An empty configured secret leaves the gate open.
    """
    if not configured:
        return
    if not provided or not hmac.compare_digest(provided.encode(), configured.encode()):
        raise Unauthorized("unauthorized")


async def require_order_secret(
    x_order_secret: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
):
    """Route dependency guarding order submission and admin routes."""
    check_order_secret(settings.order_secret, x_order_secret)


class RateLimiter:
    """
    Fixed-window request counter per client key

    Counters are in memory and only cover this process.
    """

    def __init__(self, max_requests: int, window_seconds: float, clock=time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, Tuple[float, int]] = {}

    def hit(self, key: str) -> Optional[float]:
        """Count a request; returns seconds to wait when over the limit."""
        now = self._clock()

        # Clean expired entries
        for k in [k for k, (reset, _) in self._windows.items() if reset <= now]:
            del self._windows[k]

        reset_at, count = self._windows.get(key, (now + self.window_seconds, 0))
        if count >= self.max_requests:
            return reset_at - now
        self._windows[key] = (reset_at, count + 1)
        return None

    def reset(self) -> None:
        self._windows.clear()
