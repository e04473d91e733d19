"""Retry with exponential backoff for read queries."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, TypeVar

T = TypeVar("T")

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """How many times to retry a failed call and how long to wait between tries.

    ``retries`` counts retries, not attempts: ``retries=3`` allows four calls.
    """

    retries: int = 0
    base_delay: float = 1.0
    max_delay: float = 30.0

    def delay_for(self, retry_number: int) -> float:
        """Delay before the given 1-based retry."""
        return min(self.base_delay * 2 ** (retry_number - 1), self.max_delay)


NO_RETRY = RetryPolicy(retries=0)


def call_with_retry(
    fn: Callable[[], T],
    policy: RetryPolicy,
    *,
    label: str = "call",
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Run ``fn`` and retry it on ``Exception`` according to ``policy``.

    The last error is re-raised once the retries are used up.
    """
    attempts = policy.retries + 1
    for attempt in range(1, attempts + 1):
        try:
            return fn()
        except Exception as exc:
            if attempt >= attempts:
                raise
            delay = policy.delay_for(attempt)
            LOGGER.warning(
                "%s failed on attempt %s/%s, retrying in %.1fs: %s",
                label,
                attempt,
                attempts,
                delay,
                exc,
            )
            sleep(delay)

    raise AssertionError("unreachable")
