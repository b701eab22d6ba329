"""Tests for the consecutive-failure circuit breaker."""

from __future__ import annotations

import pytest

from squashlink.services.circuit_breaker import CircuitBreaker


class FakeClock:
    def __init__(self, now_ms: float = 1_000_000.0) -> None:
        self.now_ms = now_ms

    def __call__(self) -> float:
        return self.now_ms

    def advance(self, ms: float) -> None:
        self.now_ms += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def breaker(clock: FakeClock) -> CircuitBreaker:
    return CircuitBreaker(failure_threshold=5, cooldown_ms=60_000, clock=clock)


class TestCircuitBreakerThreshold:
    def test_starts_closed(self, breaker: CircuitBreaker) -> None:
        assert breaker.is_open() is False
        assert breaker.failures == 0

    def test_four_failures_keep_circuit_closed(self, breaker: CircuitBreaker) -> None:
        for _ in range(4):
            breaker.record_failure()
        assert breaker.is_open() is False

    def test_fifth_failure_opens_circuit(self, breaker: CircuitBreaker) -> None:
        for _ in range(5):
            breaker.record_failure()
        assert breaker.is_open() is True

    def test_success_resets_consecutive_count(self, breaker: CircuitBreaker) -> None:
        for _ in range(4):
            breaker.record_failure()
        breaker.record_success()
        breaker.record_failure()

        assert breaker.failures == 1
        assert breaker.is_open() is False

    def test_opening_is_logged_once(
        self,
        breaker: CircuitBreaker,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level("WARNING", logger="squashlink"):
            for _ in range(7):
                breaker.record_failure()

        opened = [r for r in caplog.records if "Circuit breaker opened" in r.getMessage()]
        assert len(opened) == 1


class TestCircuitBreakerCooldown:
    def test_still_open_one_ms_before_cooldown(
        self,
        breaker: CircuitBreaker,
        clock: FakeClock,
    ) -> None:
        for _ in range(5):
            breaker.record_failure()

        clock.advance(59_999)

        assert breaker.is_open() is True

    def test_closes_once_cooldown_elapsed(self, breaker: CircuitBreaker, clock: FakeClock) -> None:
        for _ in range(5):
            breaker.record_failure()

        clock.advance(60_000)

        assert breaker.is_open() is False
        assert breaker.failures == 0

    def test_cooldown_counts_from_most_recent_failure(
        self,
        breaker: CircuitBreaker,
        clock: FakeClock,
    ) -> None:
        for _ in range(5):
            breaker.record_failure()
        clock.advance(30_000)
        breaker.record_failure()
        clock.advance(30_000)

        assert breaker.is_open() is True

    def test_single_failure_after_cooldown_does_not_reopen(
        self,
        breaker: CircuitBreaker,
        clock: FakeClock,
    ) -> None:
        for _ in range(5):
            breaker.record_failure()
        clock.advance(60_000)
        assert breaker.is_open() is False

        breaker.record_failure()

        assert breaker.is_open() is False
        assert breaker.failures == 1


class TestCircuitBreakerStatus:
    def test_status_of_open_circuit(self, breaker: CircuitBreaker, clock: FakeClock) -> None:
        for _ in range(5):
            breaker.record_failure()
        clock.advance(20_000)

        status = breaker.status()

        assert status.is_open is True
        assert status.failures == 5
        assert status.threshold == 5
        assert status.cooldown_remaining_ms == 40_000
        assert status.last_failure_time is not None

    def test_status_of_fresh_breaker(self, breaker: CircuitBreaker) -> None:
        data = breaker.status().to_dict()

        assert data == {
            "is_open": False,
            "failures": 0,
            "threshold": 5,
            "cooldown_remaining_ms": 0,
            "last_failure_time": None,
        }

    def test_reset_closes_circuit(self, breaker: CircuitBreaker) -> None:
        for _ in range(5):
            breaker.record_failure()

        breaker.reset()

        assert breaker.is_open() is False
        assert breaker.status().last_failure_time is None


class TestCircuitBreakerValidation:
    @pytest.mark.parametrize(("threshold", "cooldown"), [(0, 1000), (3, -1)])
    def test_rejects_invalid_configuration(self, threshold: int, cooldown: int) -> None:
        with pytest.raises(ValueError):
            CircuitBreaker(failure_threshold=threshold, cooldown_ms=cooldown)
