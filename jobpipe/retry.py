"""Bounded retries with a fixed or growing pause between attempts."""
from __future__ import annotations

import functools
import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Callable, Tuple, Type

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """*max_attempts* counts every call, the first one included.

    ``backoff_factor=1.0`` keeps the pause fixed at *base_delay*. Attempt
    counters live in each ``call`` frame, so one policy can be shared by
    concurrent callers.
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    backoff_factor: float = 1.0
    jitter: bool = False
    retryable: Tuple[Type[BaseException], ...] = (Exception,)
    sleep: Callable[[float], None] | None = None

    def delay_for(self, attempt: int) -> float:
        delay = min(self.base_delay * (self.backoff_factor ** (attempt - 1)), self.max_delay)
        if self.jitter:
            delay *= 0.5 + random.random()
        return delay

    def call(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        attempts = max(1, self.max_attempts)
        label = getattr(fn, "__qualname__", repr(fn))
        for attempt in range(1, attempts + 1):
            try:
                return fn(*args, **kwargs)
            except self.retryable as exc:
                if attempt == attempts:
                    logger.error("%s failed after %d attempt(s): %s", label, attempts, exc)
                    raise
                delay = self.delay_for(attempt)
                logger.warning(
                    "%s attempt %d/%d failed (%s), retrying in %.1fs",
                    label, attempt, attempts, exc, delay,
                )
                if delay > 0:
                    (self.sleep or time.sleep)(delay)
        raise AssertionError("unreachable")


def retry(**policy: Any) -> Callable:
    """Decorator form of :class:`RetryPolicy`; takes the same keyword fields."""
    rp = RetryPolicy(**policy)

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            return rp.call(fn, *args, **kwargs)

        return wrapper

    return decorator
