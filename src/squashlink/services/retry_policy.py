"""Retry configuration and exponential backoff."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from squashlink.shared.constants import NetworkConfig

if TYPE_CHECKING:
    from squashlink.config.models.api_settings import RetrySettings


@dataclass(frozen=True)
class RetryPolicy:
    """Immutable retry configuration for one logical request.

    Attributes:
        max_attempts: Total attempts, first try included
        base_delay_ms: Backoff before the second attempt
        max_delay_ms: Cap of the exponential part of the backoff
        jitter: Add a uniform random delay in [0, 1000) ms to each backoff
    """

    max_attempts: int = NetworkConfig.DEFAULT_MAX_ATTEMPTS
    base_delay_ms: int = NetworkConfig.DEFAULT_BASE_DELAY_MS
    max_delay_ms: int = NetworkConfig.DEFAULT_MAX_DELAY_MS
    jitter: bool = NetworkConfig.DEFAULT_JITTER

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            msg = "max_attempts must be at least 1"
            raise ValueError(msg)

    @classmethod
    def from_settings(cls, settings: RetrySettings) -> RetryPolicy:
        return cls(
            max_attempts=settings.max_attempts,
            base_delay_ms=settings.base_delay_ms,
            max_delay_ms=settings.max_delay_ms,
            jitter=settings.jitter,
        )

    def is_last_attempt(self, attempt: int) -> bool:
        return attempt >= self.max_attempts - 1

    def backoff_delay_ms(
        self,
        attempt: int,
        rng: Callable[[], float] = random.random,
    ) -> float:
        """Delay to wait after the failed attempt number ``attempt`` (0-based).

        ``min(base * 2**attempt, max)`` plus up to one second of jitter.
        """
        delay = float(min(self.base_delay_ms * (2**attempt), self.max_delay_ms))
        if self.jitter:
            delay += rng() * NetworkConfig.JITTER_SPAN_MS
        return delay


__all__ = ["RetryPolicy"]
