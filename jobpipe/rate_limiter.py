"""Fixed-window point budgets per named operation, backed by ``limits``."""
from __future__ import annotations

import math
import time

from limits import RateLimitItem, RateLimitItemPerSecond
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter

from jobpipe.errors import AppError, RateLimitError
from jobpipe.log import get_logger

log = get_logger(__name__)


class RateLimiter:
    """One window per (operation, identifier); the default identifier is a
    single quota shared by every caller of that operation."""

    def __init__(self, limits: dict[str, tuple[int, int]]) -> None:
        self.limits = dict(limits)
        self._items: dict[str, RateLimitItem] = {
            op: RateLimitItemPerSecond(points, duration)
            for op, (points, duration) in self.limits.items()
        }
        self._storage = MemoryStorage()
        self._strategy = FixedWindowRateLimiter(self._storage)

    def _item(self, operation: str) -> RateLimitItem:
        try:
            return self._items[operation]
        except KeyError:
            raise AppError(
                f"Rate limiter not configured for operation: {operation}",
                500,
                "RATE_LIMIT_CONFIG_ERROR",
            ) from None

    def check_limit(self, operation: str, identifier: str = "default") -> None:
        """Consume one point or raise RateLimitError with the seconds to wait."""
        item = self._item(operation)
        if self._strategy.hit(item, operation, identifier):
            return
        reset = self._strategy.get_window_stats(item, operation, identifier).reset_time
        retry_after = max(1, math.floor(reset - time.time()))
        log.warning(
            "Rate limit hit for %s/%s, retry in %ds", operation, identifier, retry_after
        )
        raise RateLimitError(retry_after)

    def remaining_points(self, operation: str, identifier: str = "default") -> int:
        item = self._items.get(operation)
        if item is None:
            return 0
        return self._strategy.get_window_stats(item, operation, identifier).remaining
