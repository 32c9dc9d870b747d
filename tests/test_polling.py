"""Tests for the bounded polling loop and the cancellable clock."""

from __future__ import annotations

import pytest

from reset_manager.clock import Clock
from reset_manager.errors import OperationCancelled
from reset_manager.polling import attempts_for, poll


class TestAttemptsFor:
    """Tests for attempts_for."""

    @pytest.mark.parametrize(
        ("timeout", "interval", "expected"),
        [(60, 3, 21), (120, 2, 61), (300, 3, 101), (10, 3, 5)],
    )
    def test_last_check_is_not_before_timeout(self, timeout: float, interval: float, expected: int) -> None:
        attempts = attempts_for(timeout, interval)
        assert attempts == expected
        assert (attempts - 1) * interval >= timeout


class TestPoll:
    """Tests for poll."""

    def test_immediate_success_does_not_sleep(self, clock) -> None:
        outcome = poll(lambda: "ok", lambda value: value == "ok", timeout=10, interval=2, clock=clock)

        assert outcome.succeeded is True
        assert outcome.attempts == 1
        assert outcome.elapsed == 0
        assert clock.sleeps == []

    def test_succeeds_on_later_tick(self, clock) -> None:
        values = iter([1, 2, 3, 4])
        outcome = poll(lambda: next(values), lambda value: value == 3, timeout=30, interval=3, clock=clock)

        assert outcome.succeeded is True
        assert outcome.last_observed == 3
        assert outcome.attempts == 3
        assert outcome.elapsed == 6
        assert clock.sleeps == [3, 3]

    def test_timeout_returns_failed_outcome(self, clock) -> None:
        outcome = poll(lambda: "Pending", lambda value: value == "Bound", timeout=60, interval=3, clock=clock)

        assert outcome.succeeded is False
        assert outcome.last_observed == "Pending"
        assert outcome.elapsed >= 60
        assert outcome.attempts == 21

    def test_on_tick_sees_each_observation(self, clock) -> None:
        seen: list[tuple[int, float]] = []
        values = iter([0, 1])
        poll(lambda: next(values), bool, timeout=10, interval=2, clock=clock,
             on_tick=lambda value, elapsed: seen.append((value, elapsed)))

        assert seen == [(0, 0), (1, 2)]

    def test_observer_errors_propagate(self, clock) -> None:
        def _boom() -> None:
            raise ValueError("kubectl exploded")

        with pytest.raises(ValueError, match="exploded"):
            poll(_boom, bool, timeout=10, interval=2, clock=clock)

    def test_cancelled_clock_aborts_wait(self, clock) -> None:
        clock.cancel()
        with pytest.raises(OperationCancelled):
            poll(lambda: False, bool, timeout=10, interval=2, clock=clock)


class TestClock:
    """Tests for the real Clock."""

    def test_cancel_interrupts_sleep(self) -> None:
        clock = Clock()
        clock.cancel()

        assert clock.cancelled is True
        with pytest.raises(OperationCancelled):
            clock.sleep(30)

    def test_zero_sleep_returns(self) -> None:
        Clock().sleep(0)
