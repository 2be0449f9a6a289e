"""
Retry watchdog and health derivation for the relay engine.

Counts consecutive ffmpeg failures, hands out linearly growing backoff
delays while the retry budget lasts, and tells the engine when to give up.
"""

from __future__ import annotations

import time
from enum import Enum

from ..config import defaults


class Health(str, Enum):
    """Coarse health reported to control surfaces."""

    HEALTHY = "healthy"
    WARNING = "warning"
    ERROR = "error"


def derive_health(active: bool, retry_count: int) -> Health:
    """Error when inactive, warning after more than one consecutive failure, else healthy."""
    if not active:
        return Health.ERROR
    if retry_count > 1:
        return Health.WARNING
    return Health.HEALTHY


class RetryWatchdog:
    """
    Consecutive-failure tracker with backoff.

    Features:
    - Backoff of ``base_delay * retry_count`` seconds
    - Reset on the first success
    - Metrics tracking (failures, last_failure_at)
    """

    def __init__(
        self,
        max_retries: int = defaults.MAX_RETRY_ATTEMPTS,
        base_delay: float = defaults.RETRY_BASE_DELAY,
    ):
        """
        Initialize the watchdog.

        Args:
            max_retries: Consecutive failures tolerated before giving up
            base_delay: Seconds of backoff per consecutive failure
        """
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.retry_count = 0

        # Metrics
        self.failure_count = 0
        self.last_failure_at: float | None = None

    @property
    def exhausted(self) -> bool:
        return self.retry_count > self.max_retries

    def record_success(self) -> None:
        self.retry_count = 0

    def record_failure(self) -> float | None:
        """
        Register a failure.

        Returns:
            Seconds to wait before moving on, or None once the budget is spent
        """
        self.retry_count += 1
        self.failure_count += 1
        self.last_failure_at = time.time()
        if self.exhausted:
            return None
        return self.base_delay * self.retry_count

    def reset(self) -> None:
        self.retry_count = 0

    def get_metrics(self) -> dict:
        """
        Get current metrics.

        Returns:
            dict: retry_count, max_retries, failure_count, last_failure_at
        """
        return {
            "retry_count": self.retry_count,
            "max_retries": self.max_retries,
            "failure_count": self.failure_count,
            "last_failure_at": self.last_failure_at,
        }
