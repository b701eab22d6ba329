"""Circuit breaker guarding the SquashTM API.

Two states only. The circuit is open while the consecutive failure count
has reached the threshold and the last failure is younger than the
cooldown. The first evaluation after the cooldown closes it and resets the
count, so the very next request is live and a single failure there does
not reopen it until the threshold is reached again.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from squashlink.shared.constants import CircuitBreakerConfig

logger = logging.getLogger(__name__)


def _wall_clock_ms() -> float:
    return time.time() * 1000


@dataclass(frozen=True)
class CircuitStatus:
    """Diagnostic snapshot of the breaker."""

    is_open: bool
    failures: int
    threshold: int
    cooldown_remaining_ms: int
    last_failure_time: datetime | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_open": self.is_open,
            "failures": self.failures,
            "threshold": self.threshold,
            "cooldown_remaining_ms": self.cooldown_remaining_ms,
            "last_failure_time": (
                self.last_failure_time.isoformat() if self.last_failure_time else None
            ),
        }


class CircuitBreaker:
    """Consecutive-failure circuit breaker without a half-open state.

    Args:
        failure_threshold: Terminal failures that open the circuit (default: 5)
        cooldown_ms: How long the open circuit withholds traffic (default: 60000)
        clock: Returns the current time in milliseconds
    """

    def __init__(
        self,
        failure_threshold: int = CircuitBreakerConfig.DEFAULT_FAILURE_THRESHOLD,
        cooldown_ms: int = CircuitBreakerConfig.DEFAULT_COOLDOWN_MS,
        clock: Callable[[], float] = _wall_clock_ms,
    ) -> None:
        if failure_threshold < 1:
            msg = "failure_threshold must be at least 1"
            raise ValueError(msg)
        if cooldown_ms < 0:
            msg = "cooldown_ms must not be negative"
            raise ValueError(msg)

        self.failure_threshold = failure_threshold
        self.cooldown_ms = cooldown_ms
        self._clock = clock

        self._lock = threading.Lock()
        self._failures = 0
        self._last_failure_ms: float | None = None

    @property
    def failures(self) -> int:
        with self._lock:
            return self._failures

    def _evaluate(self, now_ms: float) -> bool:
        # Caller holds the lock
        if self._failures < self.failure_threshold or self._last_failure_ms is None:
            return False

        if now_ms - self._last_failure_ms < self.cooldown_ms:
            return True

        logger.info(
            "Circuit breaker cooldown elapsed; closing circuit",
            extra={"context": {"failures": self._failures}},
        )
        self._failures = 0
        return False

    def is_open(self) -> bool:
        """Return True while traffic must be withheld."""
        with self._lock:
            return self._evaluate(self._clock())

    def record_success(self) -> None:
        with self._lock:
            self._failures = 0

    def record_failure(self) -> None:
        """Count one terminal failure and stamp its time."""
        with self._lock:
            self._failures += 1
            self._last_failure_ms = self._clock()
            failures = self._failures

        if failures == self.failure_threshold:
            logger.warning(
                "Circuit breaker opened after %d consecutive failures",
                failures,
                extra={
                    "context": {
                        "failures": failures,
                        "cooldown_ms": self.cooldown_ms,
                    },
                },
            )

    def reset(self) -> None:
        with self._lock:
            self._failures = 0
            self._last_failure_ms = None

    def status(self) -> CircuitStatus:
        with self._lock:
            now_ms = self._clock()
            is_open = self._evaluate(now_ms)
            remaining = 0
            if is_open and self._last_failure_ms is not None:
                remaining = max(0, int(self.cooldown_ms - (now_ms - self._last_failure_ms)))

            last_failure_time = None
            if self._last_failure_ms is not None:
                last_failure_time = datetime.fromtimestamp(
                    self._last_failure_ms / 1000,
                    tz=timezone.utc,
                )

            return CircuitStatus(
                is_open=is_open,
                failures=self._failures,
                threshold=self.failure_threshold,
                cooldown_remaining_ms=remaining,
                last_failure_time=last_failure_time,
            )


__all__ = [
    "CircuitBreaker",
    "CircuitStatus",
]
